from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class TelegramGateway:
    """
    Thin client for the Telegram Bot API calls the bot needs.

    Every call reports success or failure through its return value and logs
    the provider's answer on failure. Nothing is retried here; callers decide.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_root: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.token = token if token is not None else settings.TELEGRAM_BOT_TOKEN
        self.api_root = (api_root or settings.TELEGRAM_API_ROOT).rstrip("/")
        self.api_url = f"{self.api_root}/bot{self.token}"
        self.timeout = timeout or settings.TELEGRAM_HTTP_TIMEOUT
        self.http = session or requests.Session()

    def _call(self, method: str, payload: Dict[str, Any]) -> Optional[Any]:
        """POST a Bot API method; returns the `result` field or None on failure."""
        try:
            r = self.http.post(
                f"{self.api_url}/{method}", json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error(f"[gateway] {method} request failed: {exc}")
            return None

        if not r.ok:
            logger.error(f"[gateway] {method} failed {r.status_code}: {r.text}")
            return None
        try:
            body = r.json()
        except ValueError:
            logger.error(f"[gateway] {method} returned a non-JSON body")
            return None
        if not body.get("ok"):
            logger.error(f"[gateway] {method} rejected: {body.get('description')}")
            return None
        return body.get("result", True)

    def get_chat(self, chat_id: int) -> bool:
        """Liveness check: does the bot still reach this chat?"""
        return self._call("getChat", {"chat_id": chat_id}) is not None

    def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[dict] = None,
        parse_mode: str = "HTML",
    ) -> Optional[int]:
        """Returns the new message id, or None if the message was not sent."""
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode,
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        result = self._call("sendMessage", payload)
        if result is None:
            return None
        if isinstance(result, dict):
            return result.get("message_id")
        return None

    def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[dict] = None,
        parse_mode: str = "HTML",
    ) -> bool:
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "message_id": message_id,
            "text": text,
            "parse_mode": parse_mode,
        }
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._call("editMessageText", payload) is not None

    def answer_callback_query(
        self, callback_query_id: str, text: Optional[str] = None
    ) -> bool:
        """Stops the spinner on the tapped inline button."""
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return self._call("answerCallbackQuery", payload) is not None

    def get_file(self, file_id: str) -> Optional[str]:
        """Resolve a file_id to the provider-side file path."""
        result = self._call("getFile", {"file_id": file_id})
        if not isinstance(result, dict):
            return None
        return result.get("file_path")

    def download_file(self, file_path: str) -> Optional[bytes]:
        url = f"{self.api_root}/file/bot{self.token}/{file_path}"
        try:
            f = self.http.get(url, timeout=self.timeout * 2)
        except requests.RequestException as exc:
            logger.error(f"[gateway] Download of {file_path} failed: {exc}")
            return None
        if not f.ok:
            logger.error(f"[gateway] Download of {file_path} failed {f.status_code}")
            return None
        return f.content


def get_gateway() -> TelegramGateway:
    return TelegramGateway()
