# src/rprelay/exceptions.py

"""
Custom exceptions for rprelay.
"""

from os import PathLike


class RprelayError(Exception):
    """Base class for all rprelay errors."""

    pass


class ConfigurationError(RprelayError):
    """Raised when configuration is missing, unreadable, or invalid."""

    pass


class LaunchIdError(ConfigurationError):
    """Raised when the persisted launch identifier cannot be read or written."""

    def __init__(
        self,
        message: str,
        path: str | PathLike | None = None,
        details: Exception | None = None,
    ):
        self.path = path
        self.details = details
        full_message = f"[LaunchId] {message}"
        if path is not None:
            full_message += f" (File: '{path}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConnectorError(RprelayError):
    """Raised by a connector when a remote call fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: Exception | None = None,
    ):
        self.operation = operation
        self.details = details
        full_message = f"[Connector] {message}"
        if operation:
            full_message += f" (Operation: '{operation}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


# 🔼⚙️
