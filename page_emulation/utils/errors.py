"""
Error types and message extraction shared by the emulation tools.
"""

from __future__ import annotations


class EmulationError(Exception):
    """Base class for conditions that end an emulation request early."""


class NoActivePagesError(EmulationError):
    """Raised when the browser has no open page to emulate on."""

    def __init__(self, message: str = "No active pages found. Open a page before requesting emulation.") -> None:
        super().__init__(message)


class AllTargetsClosedError(EmulationError):
    """Raised when every targeted page closed before emulation could be applied."""

    def __init__(self, message: str = "All target pages were closed before emulation could be applied.") -> None:
        super().__init__(message)


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Falls back to the exception class name when the message is empty.
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"
