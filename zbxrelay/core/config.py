"""Pydantic settings loaded from YAML configuration and environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr, ValidationError

from zbxrelay.core.exceptions import ConfigError

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Environment variable → (section, key). Non-empty values override the file.
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_token"),
    "TELEGRAM_CHAT_ID": ("telegram", "chat_id"),
    "SERVER_ADDR": ("server", "addr"),
    "SERVER_SECRET": ("server", "secret"),
    "REDIS_ADDR": ("redis", "addr"),
    "REDIS_PASSWORD": ("redis", "password"),
    "REDIS_DB": ("redis", "db"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
}


def split_addr(addr: str, default_host: str = "") -> tuple[str, int]:
    """Split a ``host:port`` address. An empty host yields *default_host*."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"address must be in host:port form, got {addr!r}")
    port_num = int(port)
    if not 1 <= port_num <= 65535:
        raise ConfigError(f"port must be between 1-65535, got {port_num}")
    return host.strip("[]") or default_host, port_num


class TelegramConfig(BaseModel):
    """Telegram Bot API configuration."""

    bot_token: SecretStr = SecretStr("")
    chat_id: int = 0
    api_url: str = "https://api.telegram.org"
    timeout_secs: float = 10.0


class ServerConfig(BaseModel):
    """Inbound webhook listener configuration."""

    addr: str = ":8080"
    secret: SecretStr = SecretStr("")
    path: str = "/zabbix/alert"

    @property
    def host(self) -> str:
        return split_addr(self.addr, default_host="0.0.0.0")[0]

    @property
    def port(self) -> int:
        return split_addr(self.addr)[1]


class RedisConfig(BaseModel):
    """Redis correlation store configuration. Empty addr selects the in-memory store."""

    addr: str = ""
    password: SecretStr = SecretStr("")
    db: int = 0
    op_timeout_secs: float = 5.0
    key_prefix: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.addr)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    telegram: TelegramConfig = TelegramConfig()
    server: ServerConfig = ServerConfig()
    redis: RedisConfig = RedisConfig()
    logging: LoggingConfig = LoggingConfig()


def _read_yaml(path: str | Path | None, environ: Mapping[str, str]) -> dict[str, Any]:
    explicit = path or environ.get("CONFIG_FILE")
    config_path = Path(explicit) if explicit else _DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"config file {str(config_path)!r} not found")
        return {}

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"reading config file {str(config_path)!r}: {exc}") from exc

    return raw if isinstance(raw, dict) else {}


def _apply_env(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(var, "")
        if not value:
            continue
        section_data = data.get(section)
        if not isinstance(section_data, dict):
            section_data = {}
            data[section] = section_data
        section_data[key] = value
    return data


def _validate(settings: Settings) -> None:
    if not settings.telegram.bot_token.get_secret_value():
        raise ConfigError("TELEGRAM_BOT_TOKEN is required (env var or config file)")
    if not settings.telegram.chat_id:
        raise ConfigError("TELEGRAM_CHAT_ID is required (env var or config file)")
    split_addr(settings.server.addr)
    if settings.redis.enabled:
        split_addr(settings.redis.addr)
    if settings.redis.op_timeout_secs <= 0:
        raise ConfigError("redis.op_timeout_secs must be positive")


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a YAML file plus environment overrides and cache globally.

    Args:
        path: Path to YAML config. Falls back to ``CONFIG_FILE``, then to
            config/settings.yaml (skipped silently when absent).
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Parsed Settings instance.

    Raises:
        ConfigError: An explicit config file is missing, a value fails
            validation, or the Telegram token/chat id is not set.
    """
    global _settings  # noqa: PLW0603

    env = os.environ if environ is None else environ
    data = _apply_env(_read_yaml(path, env), env)

    try:
        settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    _validate(settings)
    _settings = settings
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, or defaults if none have been loaded."""
    if _settings is None:
        return Settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
