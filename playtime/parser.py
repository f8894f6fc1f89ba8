from __future__ import annotations

import enum
import logging
import re
from datetime import date, datetime, time
from typing import Iterator

from .errors import MalformedLogError
from .models import EventKind, LogEvent, LogSource

logger = logging.getLogger(__name__)

CONNECT_MARKER = "logged in with"
DISCONNECT_MARKER = "lost connection"
PROFILE_PREFIX = "com.mojang.authlib.GameProfile@"

# "[HH:MM:SS] [Server thread/INFO]: message" (vanilla) or "[HH:MM:SS INFO]: message" (Bukkit/Paper).
LINE_RE = re.compile(r"^\[(?P<time>[^\]\s]*)[^\]]*\](?: (?:\[[^\]]*\] ?)+)?:? (?P<message>.*)$")
TIME_RE = re.compile(r"^(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})")
# "<Alice> hello" or "[Not Secure] <Alice> hello"
CHAT_RE = re.compile(r"^(?:\[[^\]]*\] )?<[^>]*>")

# "Alice[/127.0.0.1:51234] logged in with entity id 42 at (...)"
CONNECT_RE = re.compile(r"^(?P<player>[^\[\s]+)(?:\[(?P<address>[^\]]*)\])? logged in with")
# "Alice lost connection: Disconnected" or "<GameProfile> (/1.2.3.4:5) lost connection: ..."
DISCONNECT_RE = re.compile(r"^(?P<player>\S+)\s.*?lost connection")
PROFILE_RE = re.compile(r"^" + re.escape(PROFILE_PREFIX) + r"[0-9A-Za-z]+\[(?P<fields>.*)\]$")


class MalformedLinePolicy(enum.Enum):
    ABORT = "abort"
    SKIP = "skip"


def resolve_log_date(source: LogSource, today: date) -> date:
    """Calendar date of every line in ``source``.

    The current log is dated today; rotated logs carry their date in the first
    ten characters of the file name (``YYYY-MM-DD-N.log.gz``).
    """
    if source.is_current:
        return today

    try:
        return datetime.strptime(source.name[:10], "%Y-%m-%d").date()
    except ValueError as exc:
        raise MalformedLogError(f"Couldn't read a date from log file name {source.name!r}") from exc


def _parse_time(raw: str, line: str) -> time:
    match = TIME_RE.match(raw)
    if match is None:
        raise MalformedLogError(f"Missing time of day in {raw!r}", line)
    try:
        return time(int(match["hour"]), int(match["minute"]), int(match["second"]))
    except ValueError as exc:
        raise MalformedLogError(f"Invalid time of day {raw!r}", line) from exc


def player_from_profile(token: str) -> str:
    """Pull the ``name`` field out of a serialized GameProfile token."""
    match = PROFILE_RE.match(token)
    if match is None:
        raise MalformedLogError(f"Unrecognised profile object {token!r}")

    for field in match["fields"].split(","):
        key, sep, value = field.partition("=")
        if sep and key.strip() == "name":
            value = value.strip()
            if value and value != "<null>":
                return value
            break
    raise MalformedLogError(f"Profile object has no name: {token!r}")


def parse_line(line: str, day: date) -> LogEvent | None:
    """Classify one log line.

    Returns a ``LogEvent`` for connect and disconnect lines and ``None`` for
    anything else. Raises ``MalformedLogError`` when a connect or disconnect
    line doesn't have the expected shape.
    """
    if CONNECT_MARKER in line:
        kind = EventKind.CONNECT
        pattern = CONNECT_RE
    elif DISCONNECT_MARKER in line:
        kind = EventKind.DISCONNECT
        pattern = DISCONNECT_RE
    else:
        return None

    header = LINE_RE.match(line)
    if header is None:
        raise MalformedLogError("Missing [HH:MM:SS] timestamp", line)
    if CHAT_RE.match(header["message"]):
        return None
    at = datetime.combine(day, _parse_time(header["time"], line))

    body = pattern.match(header["message"])
    if body is None:
        raise MalformedLogError(f"Couldn't find the player in {kind.value} line", line)

    player = body["player"]
    if kind is EventKind.DISCONNECT and player.startswith(PROFILE_PREFIX):
        try:
            player = player_from_profile(player)
        except MalformedLogError as exc:
            raise MalformedLogError(str(exc), line) from exc

    return LogEvent(player=player, timestamp=at, kind=kind)


def extract_events(
    text: str,
    day: date,
    *,
    policy: MalformedLinePolicy = MalformedLinePolicy.ABORT,
    source_name: str = "<log>",
) -> Iterator[LogEvent]:
    for lineno, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r")
        if not line:
            continue

        try:
            event = parse_line(line, day)
        except MalformedLogError as exc:
            if policy is MalformedLinePolicy.SKIP:
                logger.warning("Skipping malformed line %s:%d: %s", source_name, lineno, exc)
                continue
            raise MalformedLogError(f"{source_name}:{lineno}: {exc}", line) from exc

        if event is not None:
            yield event
