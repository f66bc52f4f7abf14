"""Domain types for Zabbix alerts and their correlation records."""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Opaque handle returned by the messaging transport (Telegram message_id).
MessageHandle = int


class AlertStatus(StrEnum):
    """Statuses the correlator acts on. Any other string is informational."""

    PROBLEM = "PROBLEM"
    RESOLVED = "RESOLVED"


class ZabbixAlert(BaseModel):
    """JSON payload POSTed by the Zabbix webhook media type."""

    model_config = ConfigDict(extra="ignore")

    trigger_id: str = ""
    trigger_name: str = ""
    status: str = ""
    severity: str = ""
    host: str = ""
    event_id: str = ""
    message: str = ""
    secret: str = ""

    @property
    def is_problem(self) -> bool:
        return self.status == AlertStatus.PROBLEM

    @property
    def is_resolved(self) -> bool:
        return self.status == AlertStatus.RESOLVED


class CorrelationEntry(BaseModel):
    """Data retained for one open event between PROBLEM and RESOLVED.

    Serialised with camelCase keys so the Redis layout reads
    ``{"messageID", "startTime", "message", "severity"}``. Values written
    with PascalCase keys (``MessageID``, ``StartTime``, ...) by earlier
    relay versions are still accepted on read.
    """

    model_config = ConfigDict(populate_by_name=True)

    message_id: MessageHandle = Field(
        alias="messageID",
        validation_alias=AliasChoices("messageID", "MessageID", "message_id"),
    )
    start_time: str = Field(
        default="",
        alias="startTime",
        validation_alias=AliasChoices("startTime", "StartTime", "start_time"),
    )
    message: str = Field(default="", validation_alias=AliasChoices("message", "Message"))
    severity: str = Field(default="", validation_alias=AliasChoices("severity", "Severity"))
