from __future__ import annotations
from typing import Iterable, List

from staffgate.apps.telegram_bot.callbacks import CallbackToken, Decision, Subject

BTN_REGISTER = "Register"
BTN_LOGIN = "Login"
BTN_HOLDER = "Company holder"
BTN_EMPLOYEE = "Employee of company"


def kb_reply(
    rows: Iterable[Iterable[str]], *, resize: bool = True, one_time: bool = True
) -> dict:
    """Persistent reply keyboard from rows of button labels."""
    keyboard: List[List[dict]] = [[{"text": label} for label in row] for row in rows]
    return {
        "keyboard": keyboard,
        "resize_keyboard": resize,
        "one_time_keyboard": one_time,
    }


def kb_remove() -> dict:
    return {"remove_keyboard": True}


def kb_start_menu() -> dict:
    return kb_reply([[BTN_REGISTER, BTN_LOGIN]])


def kb_roles() -> dict:
    return kb_reply([[BTN_HOLDER, BTN_EMPLOYEE]])


def kb_decision(subject: Subject, account_id: int) -> dict:
    """Approve/Reject inline buttons for one pending registration."""
    approve = CallbackToken(Decision.APPROVE, subject, account_id)
    reject = CallbackToken(Decision.REJECT, subject, account_id)
    return {
        "inline_keyboard": [
            [
                {"text": "✅ Approve", "callback_data": approve.encode()},
                {"text": "❌ Reject", "callback_data": reject.encode()},
            ]
        ]
    }


def kb_empty_inline() -> dict:
    return {"inline_keyboard": []}
