"""Configuration management using Pydantic Settings.

Loads configuration from multiple sources with the following priority (highest first):
1. Environment variables (PLANTNAMER_* prefix, OPENAI_API_KEY, OPENAI_API_BASE_URL)
2. .env file
3. config.local.yaml (if exists)
4. config.yaml
5. Default values
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from plantnamer.utils.errors import ConfigurationError


class CorsSettings(BaseModel):
    """CORS configuration."""

    allowed_origins: list[str] = ["http://localhost:3000"]
    allowed_methods: list[str] = ["GET", "POST", "OPTIONS"]
    allowed_headers: list[str] = [
        "Content-Type",
        "X-Request-ID",
    ]


class ServerSettings(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    cors: CorsSettings = Field(default_factory=CorsSettings)


class OpenAISettings(BaseModel):
    """OpenAI provider configuration."""

    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: int = 60
    use_responses_api: bool = True
    responses_model: str = "gpt-5-mini"
    chat_model: str = "gpt-4o-mini"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class RateLimitSettings(BaseModel):
    """Per-client cooldown for the naming endpoint.

    A client may make ``requests_per_window`` accepted requests in any
    ``window_seconds`` span. Rejected requests do not count.
    """

    enabled: bool = True
    window_seconds: int = Field(default=3, ge=1, le=3600)
    requests_per_window: int = Field(default=1, ge=1)
    trust_forwarded_for: bool = Field(
        default=True,
        description="Key clients by the first X-Forwarded-For hop",
    )


class GenerationSettings(BaseModel):
    """Settings for the name generation pipeline."""

    upstream_failure_policy: Literal["raise", "fallback"] = Field(
        default="raise",
        description=(
            "What to do when the model call itself fails: 'raise' answers 500, "
            "'fallback' answers with the canned name"
        ),
    )
    name_max_length: int = Field(default=30, ge=1)
    why_max_words: int = Field(default=14, ge=1)


def _load_yaml_config(config_dir: Path) -> dict:
    """Load configuration from YAML files.

    Loads config.yaml and optionally overlays config.local.yaml.
    """
    config = {}

    config_file = config_dir / "config.yaml"
    if config_file.exists():
        with open(config_file) as f:
            config = yaml.safe_load(f) or {}

    local_config_file = config_dir / "config.local.yaml"
    if local_config_file.exists():
        with open(local_config_file) as f:
            local_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, local_config)

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment, .env, and config files."""

    model_config = SettingsConfigDict(
        env_prefix="PLANTNAMER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server: ServerSettings = Field(default_factory=ServerSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)

    # Plain variable names the OpenAI tooling already uses
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str | None = Field(default=None, validation_alias="OPENAI_API_BASE_URL")

    def __init__(self, config_dir: Path | None = None, **data):
        """Initialize settings, loading from YAML if config_dir provided."""
        if config_dir is not None:
            yaml_config = _load_yaml_config(config_dir)
            merged = _deep_merge(yaml_config, data)
            super().__init__(**merged)
        else:
            super().__init__(**data)

        if self.openai_api_key and not self.openai.api_key:
            self.openai.api_key = self.openai_api_key

        if self.openai_base_url:
            self.openai.base_url = self.openai_base_url

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai.api_key)

    def validate_required(self) -> None:
        """Validate that the model credential is present.

        Called per request rather than at startup, so a misconfigured
        process still boots and serves the health endpoints.

        Raises:
            ConfigurationError: If the OpenAI API key is missing.
        """
        if not self.has_api_key:
            raise ConfigurationError()


@lru_cache
def get_settings(config_dir: Path | None = None) -> Settings:
    """Get cached settings instance.

    Args:
        config_dir: Optional path to config directory. If None, the project's
                   ``config`` directory is used when it exists.

    Returns:
        Settings instance.
    """
    if config_dir is None:
        project_root = Path(__file__).parent.parent.parent
        default_config_dir = project_root / "config"
        if default_config_dir.exists():
            config_dir = default_config_dir

    return Settings(config_dir=config_dir)
