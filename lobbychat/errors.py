"""Error taxonomy for the lobby chat core."""

from typing import Any, Optional


class LobbyChatError(Exception):
    """Base class for every error raised by the lobby chat core."""


class ValidationError(LobbyChatError):
    """Malformed or out-of-range request payload."""

    def __init__(self, message: str = "Invalid payload", details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.details = details


class NotFoundError(LobbyChatError):
    """Unknown lobby code."""

    def __init__(self, message: str = "Lobby not found") -> None:
        super().__init__(message)


class StorageError(LobbyChatError):
    """The durable message log could not be written or read."""


class ExternalProviderError(LobbyChatError):
    """The completion provider failed; never surfaced to clients."""
