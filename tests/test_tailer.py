from unittest.mock import MagicMock, call

import pytest

from common.models import RawEvent
from logtailer.config import TailerConfig
from logtailer.tailer import LogTailer
from logtailer.worker import PollLoop


@pytest.fixture
def config(tmp_path):
    return TailerConfig(
        tag="cloudwatch.app",
        state_file=str(tmp_path / "state.yml"),
        log_group_name="group",
        log_stream_name="stream",
        fetch_interval=30,
    )


@pytest.fixture
def tailer(config, mock_client, store, mock_sink):
    return LogTailer(config, client=mock_client, store=store, sink=mock_sink)


def test_new_worker_shares_liveness_and_sink(tailer):
    worker = tailer.new_worker()

    assert isinstance(worker, PollLoop)
    assert worker.liveness is tailer.liveness
    assert worker.sink is tailer.sink
    assert worker.fetch_interval == 30
    assert tailer.watchdog.threshold == 60


def test_each_worker_has_its_own_cancel_flag(tailer):
    first, second = tailer.new_worker(), tailer.new_worker()

    first.cancel()

    assert not second.cancelled.is_set()


def test_one_cycle_end_to_end(tailer, mock_client, mock_sink, store):
    store.put_token("group", "stream", "f/0")
    mock_client.fetch_events.return_value = (
        [RawEvent(1700000000123, 'START {"level": "info"}'), RawEvent(1700000001000, "END")],
        "f/1",
    )

    tailer.new_worker().run_cycle()

    mock_client.fetch_events.assert_called_once_with("group", "stream", "f/0")
    assert store.get_token("group", "stream") == "f/1"
    assert mock_sink.emit.call_args_list == [
        call("cloudwatch.app", 1700000000, {"level": "info"}),
        call("cloudwatch.app", 1700000001, {"message": "END", "@log_name": "cloudwatch.app"}),
    ]


def test_unknown_format_fails_at_startup(config, mock_client, store, mock_sink):
    config.format = "bogus"

    with pytest.raises(ValueError):
        LogTailer(config, client=mock_client, store=store, sink=mock_sink)


def test_start_and_shutdown(tailer):
    tailer.start()
    worker = tailer.watchdog.worker

    tailer.shutdown()

    assert not tailer.watchdog.thread.is_alive()
    assert worker.stop_event.is_set()


def test_workers_count_events_separately(tailer, mock_client):
    mock_client.fetch_events.return_value = ([RawEvent(1000, "plain")], "f/1")
    first = tailer.new_worker()
    first.run_cycle()
    second = tailer.new_worker()
    second.run_cycle()
    second.run_cycle()

    assert first.extractor is not second.extractor
    assert (first.extractor.total, second.extractor.total) == (1, 2)
    assert tailer.event_counts() == (3, 0)
