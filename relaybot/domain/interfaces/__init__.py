"""Domain interfaces package - Protocols for ports."""

from .cache import MessageCache
from .llm_client import LLMClient, ReasoningOptions
from .platform import DestinationChannel, MessageHandle

__all__ = [
    "MessageCache",
    "LLMClient",
    "ReasoningOptions",
    "DestinationChannel",
    "MessageHandle",
]
