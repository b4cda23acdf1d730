import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class TelegramUpdate:
    """Clean data structure for incoming updates."""

    chat_id: Optional[int]
    text: str = ""
    update_id: Optional[int] = None
    message_id: Optional[int] = None
    photo_file_id: Optional[str] = None
    callback_data: Optional[str] = None
    callback_query_id: Optional[str] = None
    command: Optional[str] = None

    def __post_init__(self) -> None:
        if self.text.startswith("/"):
            # "/cancel@SomeBot" in group chats addresses one bot
            head = self.text.split()[0][1:]
            self.command = head.split("@", 1)[0].lower()

    @property
    def is_callback(self) -> bool:
        return self.callback_query_id is not None or self.callback_data is not None


def _largest_photo(photo: Any) -> Optional[str]:
    # Telegram lists the size variants smallest first
    if not isinstance(photo, list) or not photo:
        return None
    last = photo[-1] or {}
    return last.get("file_id")


def parse_telegram_update(data: Any) -> Optional[TelegramUpdate]:
    if not isinstance(data, dict):
        logger.warning(f"[messages] Unsupported payload type: {type(data).__name__}")
        return None
    update_id = data.get("update_id")

    # --- Inline button clicks ---
    cq = data.get("callback_query")
    if cq:
        msg = cq.get("message") or {}
        chat = msg.get("chat") or {}
        return TelegramUpdate(
            chat_id=chat.get("id"),
            update_id=update_id,
            message_id=msg.get("message_id"),
            callback_data=cq.get("data") or "",
            callback_query_id=cq.get("id"),
        )

    # --- Normal messages ---
    message = data.get("message")
    if message:
        chat = message.get("chat", {}) or {}
        return TelegramUpdate(
            chat_id=chat.get("id"),
            text=(message.get("text") or "").strip(),
            update_id=update_id,
            message_id=message.get("message_id"),
            photo_file_id=_largest_photo(message.get("photo")),
        )

    logger.info(f"[messages] Unsupported update type: {list(data.keys())}")
    return None
