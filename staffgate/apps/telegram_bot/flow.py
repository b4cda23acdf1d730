from __future__ import annotations

from functools import partial

from django.db import transaction

from staffgate.apps.telegram_bot.tasks import send_telegram_message_task


# ---------- outbound helpers ----------

def reply(chat_id: int, text: str, reply_markup: dict | None = None) -> None:
    """Queue a message to the chat right away."""
    send_telegram_message_task.delay(chat_id, text, reply_markup)


def reply_on_commit(chat_id: int, text: str, reply_markup: dict | None = None) -> None:
    """Queue a message once the surrounding transaction commits; dropped on rollback."""
    transaction.on_commit(partial(reply, chat_id, text, reply_markup))
