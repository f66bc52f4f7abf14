"""Alert relay — formatting, Telegram delivery, correlation, HTTP endpoint."""

from zbxrelay.relay.correlator import AlertCorrelator, Outcome
from zbxrelay.relay.exceptions import RelayError, TransportError
from zbxrelay.relay.factory import check_dependencies, create_relay_app
from zbxrelay.relay.formatters import escape_html, format_message
from zbxrelay.relay.server import create_app
from zbxrelay.relay.transport import MessageTransport, TelegramTransport

__all__ = [
    "AlertCorrelator",
    "MessageTransport",
    "Outcome",
    "RelayError",
    "TelegramTransport",
    "TransportError",
    "check_dependencies",
    "create_app",
    "create_relay_app",
    "escape_html",
    "format_message",
]
