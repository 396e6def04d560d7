"""Domain layer - Pure business logic with no external dependencies."""

from .errors import RelayBotError, ClassificationError, StreamTransportError, DeliveryError

__all__ = [
    "RelayBotError",
    "ClassificationError",
    "StreamTransportError",
    "DeliveryError",
]
