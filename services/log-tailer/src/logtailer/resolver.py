from common.cloudwatch import CloudWatchLogsClient
from common.models import Target


class TargetResolver:
    client: CloudWatchLogsClient
    log_group_name: str | None
    log_stream_name: str | None

    def __init__(
        self,
        client: CloudWatchLogsClient,
        log_group_name: str | None = None,
        log_stream_name: str | None = None,
    ):
        self.client = client
        self.log_group_name = log_group_name
        self.log_stream_name = log_stream_name

    def resolve(self) -> list[Target]:
        """Targets for this cycle. Listing runs every time so new streams show up."""
        if not self.log_group_name:
            # A fixed stream without a fixed group is ignored
            return [
                Target(group_name, stream_name)
                for group_name in self.client.list_groups()
                for stream_name in self.client.list_streams(group_name)
            ]

        if not self.log_stream_name:
            return [
                Target(self.log_group_name, stream_name)
                for stream_name in self.client.list_streams(self.log_group_name)
            ]

        return [Target(self.log_group_name, self.log_stream_name)]
