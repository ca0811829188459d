"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from contextvars import ContextVar
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from hookgate.utils.platform import get_config_dir

DEFAULT_WEBHOOK_PATH = "/api/github/webhooks"

# YAML file consulted by the next Settings() built through load_settings
_yaml_file: ContextVar[Path | None] = ContextVar("hookgate_yaml_file", default=None)


class WebhooksConfig(BaseModel):
    path: str = DEFAULT_WEBHOOK_PATH
    secret: str = ""
    # Accepted alongside ``secret`` while rotating to a new one
    additional_secrets: list[str] = Field(default_factory=list)


class ServerConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 8420


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKGATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    webhooks: WebhooksConfig = Field(default_factory=WebhooksConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    health_path: str = "/healthz"
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: env vars override the YAML file
        sources = [init_settings, env_settings, dotenv_settings]
        yaml_file = _yaml_file.get()
        if yaml_file is not None:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file))
        sources.append(file_secret_settings)
        return tuple(sources)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("HOOKGATE_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    path = Path(config_path) if config_path is not None else None
    if path is not None and not path.exists():
        path = None

    token = _yaml_file.set(path)
    try:
        return Settings()
    finally:
        _yaml_file.reset(token)
