"""Exception hierarchy for correlation stores."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for correlation store errors."""


class StoreUnavailableError(StoreError):
    """The store backend could not be reached."""
