import os
import tempfile
import threading

import yaml

from common.models import CheckpointTable


class CheckpointError(Exception):
    """The checkpoint file exists but cannot be read as a checkpoint table."""


class CheckpointStore:
    """Continuation tokens per (group, stream), kept in a YAML file.

    The whole table is rewritten on every update. Only one writer per file is
    supported; the lock only serializes writers inside this process.
    """

    path: str
    lock: threading.Lock

    def __init__(self, path: str):
        self.path = path
        self.lock = threading.Lock()

    def load(self) -> CheckpointTable:
        """Read the full table. A missing file is an empty table."""
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r") as f:
                table = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise CheckpointError(f"Cannot read checkpoint file {self.path}: {e}") from e

        if table is None:
            return {}
        if not isinstance(table, dict):
            raise CheckpointError(
                f"Checkpoint file {self.path} must hold a mapping, got {type(table).__name__}"
            )
        for group_name, streams in table.items():
            if not isinstance(streams, dict):
                raise CheckpointError(
                    f"Checkpoint entry for group {group_name!r} in {self.path} is not a mapping"
                )
        return table

    def get_token(self, group_name: str, stream_name: str) -> str | None:
        streams = self.load().get(group_name)
        if not streams:
            return None

        token = streams.get(stream_name)
        if token is None:
            return None
        return str(token).rstrip()

    def put_token(self, group_name: str, stream_name: str, token: str):
        """Set the token for one target, keeping every other entry."""
        with self.lock:
            table = self.load()
            table.setdefault(group_name, {})[stream_name] = token
            self._write(table)

    def _write(self, table: CheckpointTable):
        # Temp file in the same directory so os.replace stays on one filesystem
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".checkpoint-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(table, f, default_flow_style=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
