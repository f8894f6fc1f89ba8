from __future__ import annotations

import logging
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping

from .clock import Clock
from .errors import PlayerLookupError
from .models import EventKind, LogEvent, OpenSession


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds from ``start`` to ``end``, never negative."""
    return max(0, int((end - start).total_seconds()))


class SessionTracker:
    """Pairs connect and disconnect events into per-player totals.

    Events must be applied in chronological order. Totals only ever grow.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._open: dict[str, OpenSession] = {}
        self._totals: dict[str, int] = {}

    def start_session(self, player: str, started_at: datetime) -> bool:
        if player in self._open:
            self.logger.debug("Ignoring duplicate connect for %s at %s", player, started_at)
            return False

        self._open[player] = OpenSession(player=player, started_at=started_at)
        return True

    def end_session(self, player: str, ended_at: datetime) -> int:
        session = self._open.pop(player, None)
        if session is None:
            self.logger.debug("Ignoring disconnect without connect for %s at %s", player, ended_at)
            return 0

        return self._add(player, elapsed_seconds(session.started_at, ended_at))

    def apply(self, event: LogEvent) -> None:
        if event.kind is EventKind.CONNECT:
            self.start_session(event.player, event.timestamp)
        else:
            self.end_session(event.player, event.timestamp)

    def open_sessions(self) -> list[OpenSession]:
        return list(self._open.values())

    def total_for(self, player: str) -> int:
        try:
            return self._totals[player]
        except KeyError:
            raise PlayerLookupError(f"No tracked time for player {player!r}") from None

    def finalize(self, now: datetime) -> Mapping[str, int]:
        """Count still-connected players up to ``now`` and return the totals."""
        for session in self.open_sessions():
            tracked = self._add(session.player, elapsed_seconds(session.started_at, now))
            self.logger.info("Player %s still online, counted %ss", session.player, tracked)
        self._open.clear()
        return MappingProxyType(dict(self._totals))

    def _add(self, player: str, seconds: int) -> int:
        self._totals[player] = self._totals.get(player, 0) + seconds
        return seconds


def aggregate_sessions(
    events: Iterable[LogEvent],
    clock: Clock,
    tracker: SessionTracker | None = None,
) -> Mapping[str, int]:
    tracker = tracker or SessionTracker()
    for event in events:
        tracker.apply(event)
    # The clock is read only once every event has been folded in.
    return tracker.finalize(clock())
