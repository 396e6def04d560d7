"""
Application layer - Services wiring domain logic to a delivery channel.
"""

from .chat_service import ChatService, ExchangeRequest, ExchangeResult
from .finalizer import Finalizer
from .interactions import CollapseResult, InteractionService
from .multiplexer import OutputMultiplexer, SentMessage

__all__ = [
    "ChatService",
    "ExchangeRequest",
    "ExchangeResult",
    "Finalizer",
    "CollapseResult",
    "InteractionService",
    "OutputMultiplexer",
    "SentMessage",
]
