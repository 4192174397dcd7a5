import json
from unittest.mock import patch

from common.queue import RedisQueueManager


@patch("common.queue.redis.Redis")
def test_emit_pushes_json_record(mock_redis):
    queue = RedisQueueManager("records", host="redis", port=6380)

    queue.emit("cloudwatch.app", 1700000000, {"a": 1})

    mock_redis.assert_called_once_with(host="redis", port=6380, db=0, decode_responses=True)
    client = mock_redis.return_value
    name, payload = client.rpush.call_args[0]
    assert name == "records"
    assert json.loads(payload) == {
        "tag": "cloudwatch.app",
        "time": 1700000000,
        "record": {"a": 1},
    }


@patch("common.queue.redis.Redis")
def test_defaults_from_environment(mock_redis, monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "cache")
    monkeypatch.setenv("REDIS_PORT", "7000")

    RedisQueueManager()

    mock_redis.assert_called_once_with(host="cache", port=7000, db=0, decode_responses=True)
