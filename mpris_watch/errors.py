"""Custom errors and exceptions for mpris-watch."""

from __future__ import annotations


class MprisWatchError(Exception):
    """Custom Exception for all errors."""

    error_code = 0


class TitleUnavailable(MprisWatchError):
    """Error raised when metadata holds no usable artist or title."""

    error_code = 1


class PlayerUnreachable(MprisWatchError):
    """Error raised when a single player can not be read or subscribed to."""

    error_code = 2


class TransportUnavailable(MprisWatchError):
    """Error raised when the session bus itself can not be used."""

    error_code = 3


class InvalidConfigError(MprisWatchError):
    """Error raised when the settings file can not be parsed or validated."""

    error_code = 4


class MultiplexerClosed(MprisWatchError):
    """Error raised when events are requested from a closed multiplexer."""

    error_code = 5
