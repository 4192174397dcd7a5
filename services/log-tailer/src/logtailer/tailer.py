from common.checkpoint import CheckpointStore
from common.cloudwatch import CloudWatchLogsClient
from common.log import log
from common.parser import build_parser
from common.queue import RedisQueueManager

from .config import TailerConfig
from .extractor import RecordExtractor
from .fetcher import EventFetcher
from .resolver import TargetResolver
from .watchdog import LivenessMarker, Watchdog
from .worker import PollLoop


class LogTailer:
    config: TailerConfig
    client: CloudWatchLogsClient
    store: CheckpointStore
    sink: RedisQueueManager

    def __init__(self, config: TailerConfig, client=None, store=None, sink=None):
        self.config = config
        self.client = client or CloudWatchLogsClient(
            region=config.region,
            aws_key_id=config.aws_key_id,
            aws_sec_key=config.aws_sec_key,
            http_proxy=config.http_proxy,
        )
        self.store = store or CheckpointStore(config.state_file)
        self.sink = sink or RedisQueueManager(config.queue_name)

        # One extractor per worker; counters are summed in event_counts()
        self.parser = build_parser(config.format, config.time_key, config.time_format)
        self.workers = []
        self.resolver = TargetResolver(
            self.client, config.log_group_name, config.log_stream_name
        )
        self.fetcher = EventFetcher(self.client, self.store)
        self.liveness = LivenessMarker()
        self.watchdog = Watchdog(self.new_worker, self.liveness, config.fetch_interval)

    def new_worker(self) -> PollLoop:
        worker = PollLoop(
            self.resolver,
            self.fetcher,
            RecordExtractor(self.parser),
            self.sink,
            self.liveness,
            self.config.tag,
            fetch_interval=self.config.fetch_interval,
        )
        self.workers.append(worker)
        return worker

    def event_counts(self) -> tuple[int, int]:
        """(total, skipped) over every worker started so far."""
        total = sum(worker.extractor.total for worker in self.workers)
        skipped = sum(worker.extractor.skipped for worker in self.workers)
        return total, skipped

    def start(self):
        target = self.config.log_group_name or "all groups"
        if self.config.log_group_name and self.config.log_stream_name:
            target = f"{self.config.log_group_name}/{self.config.log_stream_name}"
        log(
            f"tailing {target} every {self.config.fetch_interval}s "
            f"as '{self.config.tag}', checkpoints in {self.config.state_file}"
        )
        self.watchdog.start()

    def shutdown(self):
        self.watchdog.shutdown()
        total, skipped = self.event_counts()
        log(
            f"stopped after {total} events "
            f"({skipped} skipped, {self.watchdog.restarts} restarts)"
        )
