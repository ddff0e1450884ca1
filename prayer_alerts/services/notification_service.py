"""
Notification delivery through the Telegram Bot API.

Handles:
- Permission check (bot token + chat configured and reachable)
- Sending a prayer alert, optionally silent
"""
import logging
import os
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class DeliveryUnsupported(RuntimeError):
    """Raised when no alert channel is configured on this host."""


class TelegramDelivery:
    """Delivers alerts as Telegram messages."""

    def __init__(
        self,
        token: Optional[str] = None,
        chat_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.token = token if token is not None else os.getenv("TELEGRAM_BOT_TOKEN")
        self.chat_id = chat_id if chat_id is not None else os.getenv("TELEGRAM_CHAT_ID")
        self._client = client

    def _post(self, method: str, **kwargs) -> httpx.Response:
        url = f"{TELEGRAM_API_URL}/bot{self.token}/{method}"
        if self._client is not None:
            return self._client.post(url, timeout=15.0, **kwargs)
        with httpx.Client() as client:
            return client.post(url, timeout=15.0, **kwargs)

    def request_permission(self) -> bool:
        """True when the bot is reachable and a chat is configured."""
        if not self.token or not self.chat_id:
            return False
        try:
            resp = self._post("getMe")
        except httpx.HTTPError as e:
            logger.warning(f"Telegram getMe failed: {e}")
            return False
        return resp.status_code == 200

    def deliver(self, title: str, body: str, silent: bool = False) -> bool:
        """Send one alert. Returns False when it was not shown."""
        if not self.token:
            raise DeliveryUnsupported("TELEGRAM_BOT_TOKEN is not configured")
        if not self.chat_id:
            logger.info(f"Notification permission not granted, skipping: {title}")
            return False

        try:
            resp = self._post(
                "sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": f"{title}\n{body}"[:4000],
                    "disable_notification": silent,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Telegram message: {e}")
            return False

        if resp.status_code != 200:
            logger.warning(f"Telegram sendMessage failed: {resp.status_code} {resp.text}")
            return False
        return True
