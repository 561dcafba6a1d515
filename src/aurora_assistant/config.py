"""centralized configuration management using pydantic settings.

configuration is loaded from environment variables and an optional .env file.
model and sampling overrides per agent can come from an optional config.yaml.
"""

from functools import lru_cache

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """main settings class for the assistant.

    attributes:
        telegram_bot_token: bot api token issued by botfather
        telegram_bot_username: bot username, used for the post-oauth redirect
        google_oauth_client_id: google oauth client id
        google_oauth_client_secret: google oauth client secret
        google_oauth_redirect_uri: callback url registered with google
        openai_api_key: api key for openai (models and whisper)
        router_model / executive_model / calendar_model / ideas_model: per-agent models
        database_path: sqlite database file
        history_limit: number of previous message turns replayed into a run
        max_iterations: router -> agent cycles allowed per run
        timezone: timezone label given to the calendar agent
        log_level: logging level (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore extra env vars
    )

    # telegram
    telegram_bot_token: str | None = None
    telegram_bot_username: str | None = None

    # google oauth
    google_oauth_client_id: str | None = None
    google_oauth_client_secret: str | None = None
    google_oauth_redirect_uri: str | None = None

    # llm configuration
    openai_api_key: str | None = None
    router_model: str = "gpt-4o"
    executive_model: str = "gpt-4-turbo"
    calendar_model: str = "gpt-4o-mini"
    ideas_model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"

    # network configuration
    database_path: str = "aurora.db"
    history_limit: int = Field(default=5, ge=0)
    max_iterations: int = Field(default=5, ge=0)
    timezone: str = "UTC+1 Europe/Berlin"

    log_level: str = Field(default="INFO", alias="AURORA_LOG_LEVEL")

    def require(self, *names: str) -> None:
        """raise ValueError when any of the named settings is unset."""
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            env_names = ", ".join(name.upper() for name in missing)
            raise ValueError(f"Missing required settings: {env_names}")


@lru_cache
def get_settings() -> Settings:
    """get the singleton settings instance.

    call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()


def load_yaml_config(path: str = "config.yaml") -> dict:
    """load optional overrides from config.yaml.

    supported layout::

        llm:             # client config applied to every agent
          temperature: 0.2
        agents:          # per-agent model and client config
          router:
            model: gpt-4o
            temperature: 0
    """
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
