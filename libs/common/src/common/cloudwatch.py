import boto3
from botocore.config import Config

from common.models import RawEvent


class CloudWatchLogsClient:
    """Thin wrapper over the boto3 CloudWatch Logs client.

    Retries, throttling and auth are left to boto3. Every call may raise
    botocore errors; nothing is caught here.
    """

    def __init__(
        self,
        region: str | None = None,
        aws_key_id: str | None = None,
        aws_sec_key: str | None = None,
        http_proxy: str | None = None,
        client=None,
    ):
        if client is None:
            options = {}
            if aws_key_id and aws_sec_key:
                options["aws_access_key_id"] = aws_key_id
                options["aws_secret_access_key"] = aws_sec_key
            if region:
                options["region_name"] = region
            if http_proxy:
                options["config"] = Config(
                    proxies={"http": http_proxy, "https": http_proxy}
                )
            client = boto3.client("logs", **options)
        self.client = client

    def list_groups(self) -> list[str]:
        paginator = self.client.get_paginator("describe_log_groups")
        return [
            group["logGroupName"]
            for page in paginator.paginate()
            for group in page.get("logGroups", [])
        ]

    def list_streams(self, group_name: str) -> list[str]:
        paginator = self.client.get_paginator("describe_log_streams")
        return [
            stream["logStreamName"]
            for page in paginator.paginate(logGroupName=group_name)
            for stream in page.get("logStreams", [])
        ]

    def fetch_events(
        self, group_name: str, stream_name: str, token: str | None = None
    ) -> tuple[list[RawEvent], str]:
        """One get_log_events call. Returns the events and the forward token."""
        request = {"logGroupName": group_name, "logStreamName": stream_name}
        if token:
            # A forward token is only honoured when reading from the head
            request["nextToken"] = token
            request["startFromHead"] = True

        response = self.client.get_log_events(**request)
        events = [
            RawEvent(timestamp=event["timestamp"], message=event["message"])
            for event in response.get("events", [])
        ]
        return events, response["nextForwardToken"]
