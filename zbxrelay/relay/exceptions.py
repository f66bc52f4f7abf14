"""Exception hierarchy for the relay."""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for relay errors."""


class TransportError(RelayError):
    """Sending or editing a chat message failed."""
