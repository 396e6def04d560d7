"""
relaybot - Discord bot relaying prompts to OpenRouter models with streamed, chunked replies.
"""

__version__ = "1.0.0"
__author__ = "relaybot Team"

__all__ = [
    "ChatService",
    "get_settings",
]


# Lazy exports; importing relaybot.domain pulls in no discord/openai modules.
def __getattr__(name: str):  # pragma: no cover - simple lazy loader
    if name == "ChatService":
        from .application.chat_service import ChatService as _C
        return _C
    if name == "get_settings":
        from .infrastructure.config.settings import get_settings as _g
        return _g
    raise AttributeError(f"module 'relaybot' has no attribute {name!r}")
