from __future__ import annotations


class PlaytimeError(Exception):
    """Base class for every fatal error raised while building a report."""


class ArgumentError(PlaytimeError):
    pass


class DirectoryError(PlaytimeError):
    pass


class ReadError(PlaytimeError):
    pass


class MalformedLogError(PlaytimeError):
    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class PlayerLookupError(PlaytimeError, LookupError):
    pass
