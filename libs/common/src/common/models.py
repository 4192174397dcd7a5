from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple


class WorkerState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Target(NamedTuple):
    group_name: str
    stream_name: str


@dataclass(frozen=True)
class RawEvent:
    timestamp: int  # milliseconds since epoch
    message: str


class Record(NamedTuple):
    tag: str
    time: int  # seconds since epoch
    fields: dict[str, Any]


# group name -> stream name -> continuation token
CheckpointTable = dict[str, dict[str, str]]
