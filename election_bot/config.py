"""Configuration management for Election Bot."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from .common.enums import ProviderName
from .models import ProviderConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Provider Credentials (an empty key disables the provider)
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Provider Defaults
    default_provider: str = ProviderName.OPENAI
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-sonnet-20240229"
    max_tokens: int = 2000
    temperature: float = 0.7
    request_timeout: float = 30.0

    # Chat Session
    history_window: int = 5
    max_sessions: int = 1000
    bot_title: str = "ElectionSathi"

    # Election Data
    data_dir: str = "public/data"
    config_path: str = "config/config.yaml"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def provider_config(self, provider: str) -> Optional[ProviderConfig]:
        """Build the upstream config for a provider, or None if it has no key."""
        if provider == ProviderName.OPENAI:
            api_key, model = self.openai_api_key, self.openai_model
        elif provider == ProviderName.ANTHROPIC:
            api_key, model = self.anthropic_api_key, self.anthropic_model
        else:
            return None

        if not api_key:
            return None

        return ProviderConfig(
            provider=ProviderName(provider),
            api_key=api_key,
            model=model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )


@lru_cache
def get_settings() -> Settings:
    """Get singleton settings instance."""
    return Settings()
