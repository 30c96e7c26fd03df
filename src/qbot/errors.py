"""Exception hierarchy shared across qbot layers."""

from __future__ import annotations


class QBotError(Exception):
    """Base class for all qbot errors."""


class StorageError(QBotError):
    """A repository read or write failed."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {detail}")


class LLMError(QBotError):
    """The language model failed or returned no usable content."""


class TransportError(QBotError):
    """An outbound message could not be delivered."""
