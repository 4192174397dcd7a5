import json
import os

import redis


class RedisQueueManager:
    client: redis.Redis
    queue_name: str

    """Downstream sink: pushes emitted records onto a Redis list."""

    def __init__(self, queue_name: str = "records", host=None, port=None, db=0):
        # Use environment variables if not explicitly provided
        host = host or os.getenv("REDIS_HOST", "localhost")
        port = port or int(os.getenv("REDIS_PORT", "6379"))
        self.client = redis.Redis(host=host, port=port, db=db, decode_responses=True)
        self.queue_name = queue_name

    def emit(self, tag: str, time: int, record: dict):
        """Push one record as a JSON document."""
        payload = {"tag": tag, "time": time, "record": record}
        self.client.rpush(self.queue_name, json.dumps(payload, default=str))
