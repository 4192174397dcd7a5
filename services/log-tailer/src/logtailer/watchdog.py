import threading
import time
import traceback
from typing import Callable

from common.log import debug, log


class LivenessMarker:
    """Time of the worker's last completed fetch-and-emit step.

    The worker writes it; the watchdog reads it and resets it on restart.
    Both go through `lock`.
    """

    lock: threading.Lock
    updated: float

    def __init__(self, updated: float | None = None):
        self.lock = threading.Lock()
        self.updated = time.time() if updated is None else updated

    def touch(self, cancelled: threading.Event | None = None, now: float | None = None) -> bool:
        """Mark progress now, unless the caller has been cancelled."""
        with self.lock:
            if cancelled is not None and cancelled.is_set():
                return False
            self.updated = time.time() if now is None else now
            return True

    def last_update(self) -> float:
        with self.lock:
            return self.updated


class Watchdog:
    """Restarts the worker when it makes no progress for 2x the fetch interval.

    Checks run every half interval. A stalled worker is cancelled and a fresh
    one is started; the old thread gets `join_timeout` seconds to notice and
    is otherwise left behind as a daemon thread blocked in its remote call.
    """

    worker_factory: Callable
    liveness: LivenessMarker
    threshold: float
    check_interval: float
    join_timeout: float
    restarts: int

    def __init__(
        self,
        worker_factory: Callable,
        liveness: LivenessMarker,
        fetch_interval: float = 60,
        join_timeout: float = 5.0,
    ):
        self.worker_factory = worker_factory
        self.liveness = liveness
        self.threshold = fetch_interval * 2
        self.check_interval = fetch_interval / 2
        self.join_timeout = join_timeout
        self.restarts = 0
        self.worker = None
        self.thread = None
        self.monitor_thread = None
        self.finished = threading.Event()

    def start(self):
        self.start_worker()
        self.monitor_thread = threading.Thread(
            target=self.run, name="cwlogs-watchdog", daemon=True
        )
        self.monitor_thread.start()

    def start_worker(self):
        self.worker = self.worker_factory()
        self.thread = threading.Thread(
            target=self.worker.run, name="cwlogs-worker", daemon=True
        )
        self.thread.start()

    def run(self):
        debug("monitor thread starting")
        while not self.finished.wait(self.check_interval):
            try:
                self.check()
            except Exception as e:
                log(f"watchdog check failed: {type(e).__name__}: {e}")
                traceback.print_exc()

    def check(self, now: float | None = None) -> bool:
        """Restart the worker if it has stalled. Returns True on restart."""
        now = time.time() if now is None else now

        with self.liveness.lock:
            updated = self.liveness.updated
            debug(f"last update at {time.ctime(updated)}")
            if now - updated <= self.threshold:
                return False

            log(f"watcher thread is not working after {time.ctime(updated)}. Restarting")
            stale_worker, stale_thread = self.worker, self.thread
            if stale_worker is not None:
                stale_worker.cancel()
            self.start_worker()
            self.liveness.updated = now
            self.restarts += 1

        if stale_thread is not None:
            stale_thread.join(self.join_timeout)
            if stale_thread.is_alive():
                log("stalled worker did not exit, leaving it behind")
        return True

    def shutdown(self):
        """Stop monitoring, then let the current worker finish its iteration."""
        self.finished.set()
        if self.monitor_thread is not None:
            self.monitor_thread.join()

        with self.liveness.lock:
            worker, thread = self.worker, self.thread
        if worker is not None:
            worker.stop()
        if thread is not None:
            thread.join()
