import threading
import time
from unittest.mock import MagicMock

import pytest

from logtailer.watchdog import LivenessMarker, Watchdog


class FakeWorker:
    def __init__(self):
        self.cancelled = False
        self.stopped = False
        self.ran = threading.Event()

    def run(self):
        self.ran.set()

    def cancel(self):
        self.cancelled = True

    def stop(self):
        self.stopped = True


@pytest.fixture
def liveness():
    return LivenessMarker(updated=1000)


@pytest.fixture
def factory():
    return MagicMock(side_effect=lambda: FakeWorker())


@pytest.fixture
def watchdog(factory, liveness):
    dog = Watchdog(factory, liveness, fetch_interval=60, join_timeout=1)
    dog.start_worker()
    return dog


def test_thresholds_follow_fetch_interval(watchdog):
    assert watchdog.threshold == 120
    assert watchdog.check_interval == 30


def test_healthy_worker_is_never_restarted(watchdog, liveness, factory):
    for now in range(1030, 2000, 30):
        liveness.touch(now=now - 10)
        assert watchdog.check(now=now) is False

    assert factory.call_count == 1
    assert watchdog.restarts == 0


def test_slow_cycle_within_threshold_is_tolerated(watchdog):
    assert watchdog.check(now=1120) is False


def test_stalled_worker_is_restarted_once(watchdog, liveness, factory):
    stale = watchdog.worker

    assert watchdog.check(now=1121) is True
    assert watchdog.check(now=1150) is False

    assert factory.call_count == 2
    assert watchdog.restarts == 1
    assert stale.cancelled is True
    assert watchdog.worker is not stale
    assert liveness.last_update() == 1121


def test_new_worker_is_started(watchdog):
    watchdog.check(now=5000)

    assert watchdog.worker.ran.wait(1)


def test_cancelled_worker_cannot_touch_marker(liveness):
    cancelled = threading.Event()
    cancelled.set()

    assert liveness.touch(cancelled, now=2000) is False
    assert liveness.last_update() == 1000


def test_abandons_worker_that_does_not_exit(liveness):
    release = threading.Event()
    blocked = FakeWorker()
    blocked.run = lambda: release.wait(5)
    workers = iter([blocked, FakeWorker()])
    dog = Watchdog(lambda: next(workers), liveness, fetch_interval=60, join_timeout=0.05)
    dog.start_worker()
    stale_thread = dog.thread

    assert dog.check(now=5000) is True
    assert stale_thread.is_alive()
    assert dog.thread is not stale_thread

    release.set()
    stale_thread.join(1)


def test_shutdown_stops_current_worker(watchdog):
    worker = watchdog.worker

    watchdog.shutdown()

    assert worker.stopped is True
    assert not watchdog.thread.is_alive()


def test_run_loop_checks_until_finished(liveness, factory):
    dog = Watchdog(factory, liveness, fetch_interval=0.02, join_timeout=0.1)
    dog.start()

    assert dog.monitor_thread.is_alive()
    # marker at 1000 is far in the past, so the monitor restarts the worker
    for _ in range(200):
        if dog.restarts:
            break
        time.sleep(0.01)
    dog.shutdown()

    assert dog.restarts >= 1
    assert not dog.monitor_thread.is_alive()
