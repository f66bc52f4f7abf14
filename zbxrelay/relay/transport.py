"""Messaging transport — Telegram Bot API delivery (HTML parse mode)."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import aiohttp
import structlog

from zbxrelay.core.config import TelegramConfig
from zbxrelay.core.types import MessageHandle
from zbxrelay.relay.exceptions import TransportError

logger = structlog.get_logger(__name__)


@runtime_checkable
class MessageTransport(Protocol):
    """Send and edit messages in one chat. Handles are opaque to callers."""

    async def send_message(self, text: str) -> MessageHandle:
        """Post *text* as a new message and return its handle.

        Raises:
            TransportError: The message could not be delivered.
        """

    async def edit_message(self, message_id: MessageHandle, text: str) -> None:
        """Replace the text of a previously sent message.

        Raises:
            TransportError: The message could not be edited.
        """

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class TelegramTransport:
    """Posts to a single Telegram chat via the Bot API."""

    def __init__(self, config: TelegramConfig) -> None:
        self._token = config.bot_token.get_secret_value()
        self._chat_id = config.chat_id
        self._api_url = config.api_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _call(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        """Invoke a Bot API method and return its ``result`` field."""
        url = f"{self._api_url}/bot{self._token}/{method}"
        try:
            session = self._get_session()
            async with session.post(url, json=payload or {}) as resp:
                status = resp.status
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TransportError(f"telegram {method} request failed: {exc!r}") from exc

        if not isinstance(body, dict) or not body.get("ok") or status != 200:
            description = body.get("description", "") if isinstance(body, dict) else ""
            logger.warning(
                "telegram_api_error",
                method=method,
                status=status,
                description=description[:200],
            )
            raise TransportError(
                f"telegram {method} failed with status {status}: {description}"
            )
        return body.get("result")

    async def verify(self) -> str:
        """Check the bot token with ``getMe`` and return the bot username."""
        result = await self._call("getMe")
        username = result.get("username", "") if isinstance(result, dict) else ""
        logger.info("telegram_bot_verified", username=username)
        return username

    async def send_message(self, text: str) -> MessageHandle:
        result = await self._call(
            "sendMessage",
            {"chat_id": self._chat_id, "text": text, "parse_mode": "HTML"},
        )
        try:
            return int(result["message_id"])
        except (TypeError, KeyError, ValueError) as exc:
            raise TransportError("telegram sendMessage returned no message_id") from exc

    async def edit_message(self, message_id: MessageHandle, text: str) -> None:
        await self._call(
            "editMessageText",
            {
                "chat_id": self._chat_id,
                "message_id": message_id,
                "text": text,
                "parse_mode": "HTML",
            },
        )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
