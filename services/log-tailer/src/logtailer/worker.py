import threading
import time
import traceback

from common.log import debug, log
from common.models import RawEvent, WorkerState

from .extractor import RecordExtractor
from .fetcher import EventFetcher, WorkerCancelled
from .resolver import TargetResolver
from .watchdog import LivenessMarker


class PollLoop:
    """The worker: one poll cycle over every target per fetch interval.

    stop() is graceful: the loop exits at the next iteration boundary.
    cancel() is used by the watchdog: the loop also abandons the cycle it is
    in at the next target boundary, and never touches checkpoints or liveness
    again. A batch whose token has been stored is always emitted in full.
    """

    state: WorkerState
    next_fetch_time: float | None

    def __init__(
        self,
        resolver: TargetResolver,
        fetcher: EventFetcher,
        extractor: RecordExtractor,
        sink,
        liveness: LivenessMarker,
        tag: str,
        fetch_interval: float = 60,
        tick: float = 1.0,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.extractor = extractor
        self.sink = sink
        self.liveness = liveness
        self.tag = tag
        self.fetch_interval = fetch_interval
        self.tick = tick
        self.state = WorkerState.RUNNING
        self.stop_event = threading.Event()
        self.cancelled = threading.Event()
        self.next_fetch_time = None

    def stop(self):
        self.state = WorkerState.STOPPED
        self.stop_event.set()

    def cancel(self):
        self.cancelled.set()
        self.stop()

    def run(self):
        debug("watch thread starting")
        self.next_fetch_time = time.time()

        while self.state is WorkerState.RUNNING:
            try:
                self.poll(time.time())
            except WorkerCancelled as e:
                log(f"worker cancelled: {e}")
                break
            except Exception as e:
                # Aborts this cycle only; the next scheduled one retries
                log(f"poll cycle failed: {type(e).__name__}: {e}")
                traceback.print_exc()
            self.stop_event.wait(self.tick)

        debug("watch thread stopped")

    def poll(self, now: float) -> bool:
        """Run a cycle if one is due. Returns True if it ran."""
        if self.next_fetch_time is None:
            self.next_fetch_time = now
        if now < self.next_fetch_time:
            return False

        # Advance from the schedule, not from now, so overruns do not drift
        self.next_fetch_time += self.fetch_interval
        self.run_cycle()
        return True

    def run_cycle(self):
        targets = self.resolver.resolve()
        debug(f"{len(targets)} streams found")

        for target in targets:
            self.check_cancelled()
            events = self.fetcher.fetch(target, self.cancelled)
            self.output_events(events)
            self.liveness.touch(self.cancelled)

    def output_events(self, events: list[RawEvent]):
        debug(f"start to output {len(events)} events")
        skipped_before = self.extractor.skipped

        # The token for this batch is already stored: emit all of it
        for event in events:
            record = self.extractor.extract(event, self.tag)
            if record is not None:
                self.sink.emit(*record)

        if self.extractor.skipped > skipped_before:
            log(
                f"skipped {self.extractor.skipped - skipped_before} of {len(events)} events "
                f"({self.extractor.skipped}/{self.extractor.total} for this worker)"
            )

    def check_cancelled(self):
        if self.cancelled.is_set():
            raise WorkerCancelled("cancelled by watchdog")
