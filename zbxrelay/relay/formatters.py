"""Pure function that renders a Zabbix alert as a Telegram HTML message."""

from __future__ import annotations

from datetime import datetime
from html import escape

from zbxrelay.core.types import AlertStatus, ZabbixAlert

TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z"

# ── Glyph mappings ──────────────────────────────────────────────

_STATUS_GLYPHS: dict[str, str] = {
    AlertStatus.PROBLEM: "🔴",
    AlertStatus.RESOLVED: "✅",
}
_STATUS_FALLBACK = "ℹ️"

# Keys are Zabbix severity names, upper-cased.
_SEVERITY_GLYPHS: dict[str, str] = {
    "DISASTER": "💀",
    "HIGH": "🔥",
    "AVERAGE": "⚡",
    "WARNING": "⚠️",
    "INFORMATION": "ℹ️",
    "NOT_CLASSIFIED": "❓",
}
_SEVERITY_FALLBACK = "❔"


def escape_html(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` for Telegram's HTML parse mode."""
    return escape(text, quote=False)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIME_FORMAT)


def status_glyph(status: str) -> str:
    return _STATUS_GLYPHS.get(status, _STATUS_FALLBACK)


def severity_glyph(severity: str) -> str:
    return _SEVERITY_GLYPHS.get(severity.upper(), _SEVERITY_FALLBACK)


def format_message(
    alert: ZabbixAlert,
    now: datetime,
    start_time: str = "",
    orig_message: str = "",
) -> str:
    """Build the message body for *alert*.

    Args:
        alert: The inbound alert.
        now: Start Time for PROBLEM/informational alerts, End Time for RESOLVED.
        start_time: Start Time preserved from the PROBLEM event, if known.
        orig_message: Details preserved from the PROBLEM event, used when a
            RESOLVED alert carries no message of its own.
    """
    lines = [f"{status_glyph(alert.status)} <b>{escape_html(alert.status)}</b>"]

    if alert.trigger_name:
        lines.append(f"🔔 <b>Trigger:</b> {escape_html(alert.trigger_name)}")
    if alert.host:
        lines.append(f"🖥 <b>Host:</b> {escape_html(alert.host)}")
    if alert.severity:
        lines.append(
            f"{severity_glyph(alert.severity)} <b>Severity:</b> {escape_html(alert.severity)}"
        )

    details = alert.message
    if alert.is_resolved and not details:
        details = orig_message
    if details:
        lines.append(f"📝 <b>Details:</b> {escape_html(details)}")

    if alert.event_id:
        lines.append(f"🆔 <b>Event ID:</b> {escape_html(alert.event_id)}")

    if alert.is_resolved:
        if start_time:
            lines.append(f"🕐 <b>Start Time:</b> {escape_html(start_time)}")
        lines.append(f"🕑 <b>End Time:</b> {format_timestamp(now)}")
    else:
        lines.append(f"🕐 <b>Start Time:</b> {format_timestamp(now)}")

    return "\n".join(lines)
