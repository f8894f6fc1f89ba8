from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from dotenv import load_dotenv

from .clock import Clock, system_clock
from .config import Config, ConfigError, load_config
from .errors import ArgumentError, PlaytimeError
from .models import LogEvent, LogSource
from .parser import extract_events, resolve_log_date
from .reporter import build_rows, render_table
from .sources import list_log_sources, read_log_text
from .tracker import SessionTracker, aggregate_sessions

logger = logging.getLogger("playtime")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ArgumentError(f"{self.format_usage().strip()}\n{self.prog}: error: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="playtime",
        add_help=False,
        description="Sum up how long each player has been connected, from a directory of server logs.",
    )
    parser.add_argument("log_dir", help="Directory holding YYYY-MM-DD-N.log[.gz] files and the current log")
    return parser


def iter_log_events(sources: Sequence[LogSource], config: Config, clock: Clock) -> Iterator[LogEvent]:
    # One file is decoded and parsed at a time, in enumeration order.
    today = clock().date()
    for source in sources:
        text = read_log_text(source)
        day = resolve_log_date(source, today)
        logger.info("Reading %s (dated %s)", source.name, day.isoformat())
        yield from extract_events(text, day, policy=config.malformed_lines, source_name=source.name)


def collect_totals(log_dir: str | Path, config: Config, clock: Clock) -> Mapping[str, int]:
    sources = list_log_sources(log_dir, config.current_log)
    tracker = SessionTracker()
    totals = aggregate_sessions(iter_log_events(sources, config, clock), clock, tracker)
    logger.info("Tracked %d players across %d log files", len(totals), len(sources))
    return totals


def use_bold(config: Config) -> bool:
    if config.color == "always":
        return True
    if config.color == "never":
        return False
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


def configure_logging(level: int = logging.WARNING) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main(argv: Sequence[str] | None = None, clock: Clock | None = None) -> None:
    load_dotenv()

    try:
        config = load_config()
    except ConfigError as exc:
        configure_logging()
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    configure_logging(config.log_level)

    try:
        args = build_parser().parse_args(argv)
    except ArgumentError as exc:
        print(exc, file=sys.stderr)
        raise SystemExit(2) from exc

    try:
        totals = collect_totals(args.log_dir, config, clock or system_clock(config.timezone))
    except PlaytimeError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    print(render_table(build_rows(totals), bold=use_bold(config)))


if __name__ == "__main__":
    main()
