"""Cache infrastructure package."""

from .message_cache import TTLMessageCache

__all__ = ['TTLMessageCache']
