"""
Configuration settings - Infrastructure component for managing application configuration.
Uses pydantic-settings for validation and environment variable loading.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, List, Dict, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_CONFIG = SettingsConfigDict(
    env_file='.env',
    case_sensitive=False,
    extra='ignore',
    populate_by_name=True,
)


class ProviderSettings(BaseSettings):
    """OpenRouter provider configuration."""

    model_config = _ENV_CONFIG

    api_key: Optional[str] = Field(None, validation_alias='OPENROUTER_API_KEY')
    base_url: str = Field('https://openrouter.ai/api/v1', validation_alias='OPENROUTER_BASE_URL')

    # Model routing
    reasoning_model: str = Field('deepseek/deepseek-r1:free', validation_alias='OPENROUTER_MODEL')
    non_thinking_model: str = Field('deepseek/deepseek-chat', validation_alias='NON_THINKING_MODEL')
    classifier_model: str = Field('arcee-ai/trinity-mini:free', validation_alias='CLASSIFIER_MODEL')
    reasoning_effort: str = Field('medium', validation_alias='REASONING_EFFORT')
    online_suffix: str = Field(':online', validation_alias='ONLINE_SUFFIX')

    # Timeout settings
    connect_timeout_s: float = Field(10.0, validation_alias='PROVIDER_CONNECT_TIMEOUT_S')
    read_timeout_s: float = Field(300.0, validation_alias='PROVIDER_READ_TIMEOUT_S')
    classifier_timeout_s: float = Field(30.0, validation_alias='CLASSIFIER_TIMEOUT_S')

    @field_validator('reasoning_effort', mode='before')
    @classmethod
    def validate_reasoning_effort(cls, v):
        """Ensure reasoning effort is valid."""
        if str(v).lower() not in ['low', 'medium', 'high']:
            return 'medium'
        return str(v).lower()


class StreamingSettings(BaseSettings):
    """Render cycle and platform size limits."""

    model_config = _ENV_CONFIG

    throttle_ms: int = Field(2000, validation_alias='RENDER_THROTTLE_MS')
    prose_max_chars: int = Field(4096, validation_alias='PROSE_MAX_CHARS')
    code_inline_max_chars: int = Field(1800, validation_alias='CODE_INLINE_MAX_CHARS')
    code_send_delay_ms: int = Field(1000, validation_alias='CODE_SEND_DELAY_MS')
    reasoning_preview_chars: int = Field(3000, validation_alias='REASONING_PREVIEW_CHARS')

    @field_validator('prose_max_chars')
    @classmethod
    def validate_prose_max_chars(cls, v):
        """Embed descriptions cannot exceed 4096 characters."""
        return max(1, min(v, 4096))

    @field_validator('throttle_ms', 'code_send_delay_ms')
    @classmethod
    def validate_non_negative(cls, v):
        return max(0, v)


class ConversationSettings(BaseSettings):
    """Conversation management configuration."""

    model_config = _ENV_CONFIG

    max_history: int = Field(20, validation_alias='MAX_CONVERSATION_HISTORY')
    system_prompt_file: str = Field('system_prompt.txt', validation_alias='SYSTEM_PROMPT_FILE')
    system_prompt: str = Field('You are a helpful AI assistant.', validation_alias='SYSTEM_PROMPT')

    @field_validator('max_history')
    @classmethod
    def validate_max_history(cls, v):
        """Ensure max history is reasonable."""
        return max(2, min(v, 100))

    def load_system_prompt(self) -> str:
        """Read the prompt file when present, otherwise use the inline prompt."""
        path = Path(self.system_prompt_file)
        try:
            text = path.read_text(encoding='utf-8').strip()
        except OSError:
            return self.system_prompt
        return text or self.system_prompt


class CacheSettings(BaseSettings):
    """Interaction cache configuration."""

    model_config = _ENV_CONFIG

    max_items: int = Field(1024, validation_alias='MESSAGE_CACHE_MAX_ITEMS')
    ttl_seconds: float = Field(86400.0, validation_alias='MESSAGE_CACHE_TTL_SECONDS')


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = _ENV_CONFIG

    # Sub-configurations
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    streaming: StreamingSettings = Field(default_factory=StreamingSettings)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    discord_token: Optional[str] = Field(None, validation_alias='DISCORD_TOKEN')

    # Logging
    log_level: str = Field('INFO', validation_alias='LOG_LEVEL')
    log_format: str = Field(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        validation_alias='LOG_FORMAT'
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if str(v).upper() not in valid_levels:
            return 'INFO'
        return str(v).upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization, secrets excluded."""
        return {
            'provider': self.provider.model_dump(exclude={'api_key'}),
            'streaming': self.streaming.model_dump(),
            'conversation': self.conversation.model_dump(),
            'cache': self.cache.model_dump(),
            'log_level': self.log_level,
        }

    def validate_required_settings(self) -> List[str]:
        """Validate required settings and return list of missing ones."""
        missing = []

        if not self.discord_token:
            missing.append('DISCORD_TOKEN')
        if not self.provider.api_key:
            missing.append('OPENROUTER_API_KEY')

        return missing


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Reload settings from environment (for testing)."""
    global _settings
    _settings = AppSettings()
    return _settings
