import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class TailerConfig:
    tag: str
    state_file: str
    log_group_name: str | None = None
    log_stream_name: str | None = None
    fetch_interval: float = 60.0
    region: str | None = None
    aws_key_id: str | None = None
    aws_sec_key: str | None = None
    http_proxy: str | None = None
    format: str | None = None
    time_key: str = "time"
    time_format: str | None = None
    queue_name: str = "records"

    @classmethod
    def from_env(cls) -> "TailerConfig":
        """Build the config from the environment (and .env, if present)."""
        load_dotenv()
        tag = os.getenv("CWLOGS_TAG")
        state_file = os.getenv("CWLOGS_STATE_FILE")

        if not tag:
            raise ValueError("CWLOGS_TAG not set in environment")
        if not state_file:
            raise ValueError("CWLOGS_STATE_FILE not set in environment")

        fetch_interval = float(os.getenv("CWLOGS_FETCH_INTERVAL", "60"))
        if fetch_interval <= 0:
            raise ValueError(f"CWLOGS_FETCH_INTERVAL must be positive, got {fetch_interval}")

        return cls(
            tag=tag,
            state_file=state_file,
            log_group_name=os.getenv("CWLOGS_LOG_GROUP_NAME") or None,
            log_stream_name=os.getenv("CWLOGS_LOG_STREAM_NAME") or None,
            fetch_interval=fetch_interval,
            region=os.getenv("AWS_REGION") or None,
            aws_key_id=os.getenv("AWS_ACCESS_KEY_ID") or None,
            aws_sec_key=os.getenv("AWS_SECRET_ACCESS_KEY") or None,
            http_proxy=os.getenv("CWLOGS_HTTP_PROXY") or None,
            format=os.getenv("CWLOGS_FORMAT") or None,
            time_key=os.getenv("CWLOGS_TIME_KEY", "time"),
            time_format=os.getenv("CWLOGS_TIME_FORMAT") or None,
            queue_name=os.getenv("CWLOGS_QUEUE", "records"),
        )
