import threading

from common.checkpoint import CheckpointStore
from common.cloudwatch import CloudWatchLogsClient
from common.log import debug
from common.models import RawEvent, Target


class WorkerCancelled(Exception):
    """The worker was cancelled by the watchdog; abandon the current cycle."""


class EventFetcher:
    client: CloudWatchLogsClient
    store: CheckpointStore

    def __init__(self, client: CloudWatchLogsClient, store: CheckpointStore):
        self.client = client
        self.store = store

    def fetch(self, target: Target, cancelled: threading.Event | None = None) -> list[RawEvent]:
        """Fetch new events for one target and advance its checkpoint.

        The returned forward token is stored even when no events came back.
        Remote errors propagate. If `cancelled` was set while the call was in
        flight, the token is not stored and WorkerCancelled is raised.
        """
        group_name, stream_name = target
        debug(f"start get_events {group_name}, {stream_name}")

        token = self.store.get_token(group_name, stream_name)
        events, next_token = self.client.fetch_events(group_name, stream_name, token)

        if cancelled is not None and cancelled.is_set():
            raise WorkerCancelled(f"cancelled while fetching {group_name}/{stream_name}")

        self.store.put_token(group_name, stream_name, next_token)
        return events
