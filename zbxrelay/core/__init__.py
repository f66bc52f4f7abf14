"""Core module — config, types, logging."""

from zbxrelay.core.config import (
    LoggingConfig,
    RedisConfig,
    ServerConfig,
    Settings,
    TelegramConfig,
    get_settings,
    load_settings,
    reset_settings,
)
from zbxrelay.core.exceptions import ConfigError
from zbxrelay.core.logging import alert_context, redact_secrets, setup_logging
from zbxrelay.core.types import AlertStatus, CorrelationEntry, MessageHandle, ZabbixAlert

__all__ = [
    "AlertStatus",
    "ConfigError",
    "CorrelationEntry",
    "LoggingConfig",
    "MessageHandle",
    "RedisConfig",
    "ServerConfig",
    "Settings",
    "TelegramConfig",
    "ZabbixAlert",
    "alert_context",
    "get_settings",
    "load_settings",
    "redact_secrets",
    "reset_settings",
    "setup_logging",
]
