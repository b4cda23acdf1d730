"""
Approval prompts sent to the people who decide on a registration:
the admin for a new company, the company holder for a new worker.
"""
from __future__ import annotations

import logging

from django.utils import timezone
from django.utils.html import escape

from staffgate.apps.accounts.models import Account
from staffgate.apps.telegram_bot.callbacks import Subject
from staffgate.apps.telegram_bot.gateway import get_gateway
from staffgate.apps.telegram_bot.keyboards import kb_decision

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_stamp() -> str:
    return timezone.localtime().strftime(DATE_FORMAT)


def company_request_text(account: Account) -> str:
    return (
        "🆕 <b>New Company Registration Request</b>\n\n"
        f"Company: <b>{escape(account.company)}</b>\n"
        f"Owner: {escape(account.name)}\n"
        f"Email: {escape(account.email)}\n"
        f"Date: {now_stamp()}"
    )


def worker_request_text(account: Account) -> str:
    return (
        "🆕 <b>New Worker Registration Request</b>\n\n"
        f"Name: {escape(account.name)}\n"
        f"Email: {escape(account.email)}\n"
        f"Company: <b>{escape(account.company)}</b>\n"
        f"Date: {now_stamp()}"
    )


def _dispatch(recipient: Account, label: str, text: str, reply_markup: dict) -> bool:
    # A recipient without a bound chat cannot be reached; not retryable
    if not recipient.chat_id:
        logger.warning(
            f"[notify] {label} skipped: account {recipient.id} has no chat bound"
        )
        return False

    gateway = get_gateway()
    if not gateway.get_chat(recipient.chat_id):
        logger.error(
            f"[notify] {label} dropped: chat {recipient.chat_id} of account {recipient.id} is unreachable"
        )
        return False

    message_id = gateway.send_message(recipient.chat_id, text, reply_markup=reply_markup)
    if message_id is None:
        logger.error(f"[notify] {label} to chat {recipient.chat_id} was not delivered")
        return False
    logger.info(f"[notify] {label} sent to chat {recipient.chat_id} (message {message_id})")
    return True


def request_company_approval(admin: Account, account: Account) -> bool:
    return _dispatch(
        admin,
        f"Company approval request for account {account.id}",
        company_request_text(account),
        kb_decision(Subject.COMPANY, account.id),
    )


def request_worker_approval(holder: Account, account: Account) -> bool:
    return _dispatch(
        holder,
        f"Worker approval request for account {account.id}",
        worker_request_text(account),
        kb_decision(Subject.WORKER, account.id),
    )
