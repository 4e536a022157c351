"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Companion configuration. All values come from environment variables."""

    # Anthropic (conversation, proactive messages, journal)
    anthropic_api_key: str = Field(default="")
    claude_model: str = Field(default="claude-sonnet-4-5-20250929")
    max_context_messages: int = Field(default=30)

    # OpenAI (photos)
    openai_api_key: str = Field(default="")
    image_model: str = Field(default="gpt-image-1")

    # Database
    database_path: Path = Field(default=Path("data/companion.db"))
    session_key: str = Field(default="ai-companion-state")

    # Turso (hosted libSQL). When set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Proactive heartbeat
    heartbeat_interval_seconds: int = Field(default=30)
    proactive_fallback_interval_seconds: int = Field(default=3600)

    # Notifications
    notification_webhook_url: str = Field(default="")

    # Clock shown to the model
    timezone: str = Field(default="UTC")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)


settings = Settings()
