"""
Configuration infrastructure.
"""

from .settings import (
    AppSettings,
    CacheSettings,
    ConversationSettings,
    ProviderSettings,
    StreamingSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    'AppSettings',
    'CacheSettings',
    'ConversationSettings',
    'ProviderSettings',
    'StreamingSettings',
    'get_settings',
    'reload_settings',
]
