from __future__ import annotations

import gzip
import logging
import zlib
from pathlib import Path

from .errors import DirectoryError, ReadError
from .models import LogSource

logger = logging.getLogger(__name__)


def _is_dated(name: str) -> bool:
    year = name[:4]
    return len(year) == 4 and year.isascii() and year.isdigit()


def list_log_sources(directory: str | Path, current_log: str = "latest") -> list[LogSource]:
    """Return the dated logs in name order, followed by the current log."""
    root = Path(directory)
    try:
        entries = list(root.iterdir())
    except OSError as exc:
        raise DirectoryError(f"Couldn't open the log directory {root}: {exc}") from exc

    sources: list[LogSource] = []
    for entry in entries:
        name = entry.name
        is_current = name.startswith(current_log)
        if not (is_current or _is_dated(name)):
            continue
        if not entry.is_file():
            continue
        sources.append(LogSource(path=entry, name=name, is_current=is_current))

    sources.sort(key=lambda source: (source.is_current, source.name))
    logger.info("Found %d log files in %s", len(sources), root)
    return sources


def read_log_text(source: LogSource) -> str:
    try:
        raw = source.path.read_bytes()
    except OSError as exc:
        raise ReadError(f"Couldn't open log file {source.name}: {exc}") from exc

    if source.compressed:
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as exc:
            raise ReadError(f"Couldn't decompress log {source.name}: {exc}") from exc

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ReadError(f"Couldn't read log {source.name}: {exc}") from exc
