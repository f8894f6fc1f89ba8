from __future__ import annotations

from typing import Mapping

from .models import ReportRow

HEADERS = ("Player", "Time DD:HH:MM:SS")
BOLD = "\x1b[1m"
RESET = "\x1b[0m"


def format_duration(total_seconds: int) -> str:
    """Render a duration as D:HH:MM:SS, e.g. 90061 -> 1:01:01:01."""
    safe_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(safe_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return f"{days}:{hours:02}:{minutes:02}:{seconds:02}"


def build_rows(totals: Mapping[str, int]) -> list[ReportRow]:
    rows = [
        ReportRow(player=player, seconds=seconds, duration=format_duration(seconds))
        for player, seconds in totals.items()
    ]
    rows.sort(key=lambda item: (-item.seconds, item.player.lower(), item.player))
    return rows


def render_table(rows: list[ReportRow], *, bold: bool = True) -> str:
    name_width = max([len(HEADERS[0]), *(len(row.player) for row in rows)])
    time_width = max([len(HEADERS[1]), *(len(row.duration) for row in rows)])
    border = f"+{'-' * (name_width + 2)}+{'-' * (time_width + 2)}+"

    def cell(text: str, width: int, *, right: bool = False, strong: bool = False) -> str:
        padded = text.rjust(width) if right else text.ljust(width)
        # Pad before styling so escape codes don't count towards the width.
        return f"{BOLD}{padded}{RESET}" if strong else padded

    lines = [
        border,
        f"| {cell(HEADERS[0], name_width, strong=bold)} | {cell(HEADERS[1], time_width, strong=bold)} |",
        border,
    ]
    for row in rows:
        lines.append(f"| {cell(row.player, name_width)} | {cell(row.duration, time_width, right=True)} |")
        lines.append(border)
    return "\n".join(lines)
