"""
Domain errors - Exception hierarchy shared by the streaming pipeline.
"""

from __future__ import annotations
from typing import Optional


class RelayBotError(Exception):
    """Base class for all relaybot errors."""


class ClassificationError(RelayBotError):
    """A classifier call failed or returned a payload violating its schema."""

    def __init__(self, classifier: str, message: str):
        super().__init__(f"{classifier}: {message}")
        self.classifier = classifier


class StreamTransportError(RelayBotError):
    """The provider stream could not be opened or broke mid-flight."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeliveryError(RelayBotError):
    """A destination platform operation (send/edit/delete) was rejected."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
