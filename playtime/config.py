from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .parser import MalformedLinePolicy

DEFAULT_CURRENT_LOG = "latest"
DEFAULT_TIMEZONE = "UTC"
COLOR_MODES = ("auto", "always", "never")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Config:
    current_log: str
    timezone: ZoneInfo
    malformed_lines: MalformedLinePolicy
    log_level: int
    color: str


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _timezone_from_env(name: str) -> ZoneInfo:
    tz_name = _env(name, DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Invalid timezone in {name}: {tz_name}") from exc


def _policy_from_env(name: str) -> MalformedLinePolicy:
    raw = _env(name, MalformedLinePolicy.ABORT.value).lower()
    try:
        return MalformedLinePolicy(raw)
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in MalformedLinePolicy)
        raise ConfigError(f"{name} must be one of: {choices}") from exc


def _log_level_from_env(name: str) -> int:
    raw = _env(name, "WARNING").upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level in {name}: {raw}")
    return level


def _color_from_env(name: str) -> str:
    raw = _env(name, "auto").lower()
    if raw not in COLOR_MODES:
        raise ConfigError(f"{name} must be one of: {', '.join(COLOR_MODES)}")
    return raw


def load_config() -> Config:
    current_log = _env("PLAYTIME_CURRENT_LOG", DEFAULT_CURRENT_LOG)
    if os.sep in current_log:
        raise ConfigError("PLAYTIME_CURRENT_LOG must be a file name, not a path")

    return Config(
        current_log=current_log,
        timezone=_timezone_from_env("PLAYTIME_TIMEZONE"),
        malformed_lines=_policy_from_env("PLAYTIME_MALFORMED_LINES"),
        log_level=_log_level_from_env("PLAYTIME_LOG_LEVEL"),
        color=_color_from_env("PLAYTIME_COLOR"),
    )
