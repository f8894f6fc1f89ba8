from datetime import date, datetime
from pathlib import Path

import pytest

from playtime.errors import MalformedLogError
from playtime.models import EventKind, LogSource
from playtime.parser import (
    MalformedLinePolicy,
    extract_events,
    parse_line,
    player_from_profile,
    resolve_log_date,
)

DAY = date(2024, 1, 1)


def test_connect_line_with_logger_prefix_and_address() -> None:
    line = "[12:00:00] [Server thread/INFO]: Alice[/127.0.0.1:51234] logged in with entity id 42 at (1.5, 64.0, -3.2)"

    event = parse_line(line, DAY)

    assert event is not None
    assert event.player == "Alice"
    assert event.kind is EventKind.CONNECT
    assert event.timestamp == datetime(2024, 1, 1, 12, 0, 0)


def test_plain_connect_and_disconnect_lines() -> None:
    connect = parse_line("[12:00:00] Alice logged in with entity id 1", DAY)
    disconnect = parse_line("[13:30:05] Alice lost connection: disconnected", DAY)

    assert connect is not None and connect.player == "Alice"
    assert disconnect is not None
    assert disconnect.player == "Alice"
    assert disconnect.kind is EventKind.DISCONNECT
    assert disconnect.timestamp == datetime(2024, 1, 1, 13, 30, 5)


def test_disconnect_from_serialized_profile() -> None:
    line = (
        "[08:15:00] [Server thread/INFO]: com.mojang.authlib.GameProfile@6fb1e0c7"
        "[id=<null>,name=Steve,properties={},legacy=false] (/10.0.0.2:40000) lost connection: Disconnected"
    )

    event = parse_line(line, DAY)

    assert event is not None
    assert event.player == "Steve"
    assert event.kind is EventKind.DISCONNECT


def test_profile_without_name_is_malformed() -> None:
    with pytest.raises(MalformedLogError):
        player_from_profile("com.mojang.authlib.GameProfile@1a2b[id=<null>,name=<null>,properties={}]")


def test_paper_style_lines() -> None:
    connect = parse_line(
        "[12:00:00 INFO]: Alice[/127.0.0.1:51234] logged in with entity id 42 at ([world]1.5, 64.0, -3.2)", DAY
    )
    disconnect = parse_line("[13:30:05 INFO]: Alice lost connection: Disconnected", DAY)

    assert connect is not None
    assert (connect.player, connect.kind) == ("Alice", EventKind.CONNECT)
    assert connect.timestamp == datetime(2024, 1, 1, 12, 0, 0)
    assert disconnect is not None
    assert (disconnect.player, disconnect.kind) == ("Alice", EventKind.DISCONNECT)
    assert disconnect.timestamp == datetime(2024, 1, 1, 13, 30, 5)


def test_chat_lines_mentioning_markers_are_ignored() -> None:
    text = (
        "[12:00:00] [Server thread/INFO]: Bob[/10.0.0.2:5000] logged in with entity id 7 at (0.0, 64.0, 0.0)\n"
        "[12:10:00] [Server thread/INFO]: <Alice> Bob logged in with an alt lol\n"
        "[12:11:00] [Server thread/INFO]: [Not Secure] <Carol> I lost connection yesterday\n"
        "[12:12:00 INFO]: <Dave> lost connection again\n"
    )

    events = list(extract_events(text, DAY))

    assert [(e.player, e.kind) for e in events] == [("Bob", EventKind.CONNECT)]


def test_unrelated_lines_are_ignored() -> None:
    assert parse_line("[12:00:00] [Server thread/INFO]: Starting minecraft server version 1.20.1", DAY) is None
    assert parse_line("random noise", DAY) is None


def test_marker_line_without_timestamp_is_malformed() -> None:
    with pytest.raises(MalformedLogError):
        parse_line("Alice logged in with entity id 1", DAY)


def test_marker_line_with_bad_time_is_malformed() -> None:
    with pytest.raises(MalformedLogError):
        parse_line("[25:00:00] Alice lost connection: timeout", DAY)


def test_resolve_log_date_uses_name_or_today() -> None:
    rotated = LogSource(path=Path("2023-12-31-2.log.gz"), name="2023-12-31-2.log.gz", is_current=False)
    current = LogSource(path=Path("latest.log"), name="latest.log", is_current=True)

    assert resolve_log_date(rotated, DAY) == date(2023, 12, 31)
    assert resolve_log_date(current, DAY) == DAY


def test_resolve_log_date_rejects_invalid_date() -> None:
    bad = LogSource(path=Path("2023-13-45-1.log"), name="2023-13-45-1.log", is_current=False)

    with pytest.raises(MalformedLogError):
        resolve_log_date(bad, DAY)


def test_extract_events_keeps_line_order_and_skips_blanks() -> None:
    text = (
        "[10:00:00] Bob logged in with entity id 7\r\n"
        "\n"
        "[10:05:00] [Server thread/INFO]: Done (3.2s)!\n"
        "[11:00:00] Bob lost connection: Disconnected\n"
    )

    events = list(extract_events(text, DAY))

    assert [(e.player, e.kind) for e in events] == [
        ("Bob", EventKind.CONNECT),
        ("Bob", EventKind.DISCONNECT),
    ]


def test_extract_events_aborts_on_malformed_line_by_default() -> None:
    text = "[10:00:00] Bob logged in with entity id 7\n[xx:yy:zz] Bob lost connection: timeout\n"

    with pytest.raises(MalformedLogError, match="2023.log:2"):
        list(extract_events(text, DAY, source_name="2023.log"))


def test_extract_events_skip_policy_warns_and_continues(caplog: pytest.LogCaptureFixture) -> None:
    text = "[xx:yy:zz] Bob logged in with entity id 7\n[11:00:00] Bob lost connection: timeout\n"

    with caplog.at_level("WARNING"):
        events = list(extract_events(text, DAY, policy=MalformedLinePolicy.SKIP))

    assert [e.kind for e in events] == [EventKind.DISCONNECT]
    assert "Skipping malformed line" in caplog.text
