from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

COMPRESSED_SUFFIX = ".gz"


class EventKind(enum.Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"


@dataclass(frozen=True, slots=True)
class LogEvent:
    player: str
    timestamp: datetime
    kind: EventKind


@dataclass(frozen=True, slots=True)
class OpenSession:
    player: str
    started_at: datetime


@dataclass(frozen=True, slots=True)
class LogSource:
    path: Path
    name: str
    is_current: bool

    @property
    def compressed(self) -> bool:
        return self.name.endswith(COMPRESSED_SUFFIX)


@dataclass(frozen=True, slots=True)
class ReportRow:
    player: str
    seconds: int
    duration: str
