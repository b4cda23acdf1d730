from __future__ import annotations

import logging

from celery import shared_task

from staffgate.apps.accounts.models import Account
from staffgate.apps.telegram_bot.gateway import get_gateway
from staffgate.apps.telegram_bot.notifications import (
    request_company_approval,
    request_worker_approval,
)

logger = logging.getLogger(__name__)


@shared_task(queue="telegram_bot")
def send_telegram_message_task(
    chat_id: int,
    text: str,
    reply_markup: dict | None = None,
    parse_mode: str = "HTML",
) -> bool:
    """Deliver one outbound chat message. Failures are logged, not retried."""
    message_id = get_gateway().send_message(
        chat_id, text, reply_markup=reply_markup, parse_mode=parse_mode
    )
    if message_id is None:
        logger.error(f"[task] Could not deliver message to chat {chat_id}")
        return False
    return True


@shared_task(queue="telegram_bot")
def notify_admin_of_company_task(admin_id: int, account_id: int) -> bool:
    admin = Account.objects.filter(id=admin_id).first()
    account = Account.objects.filter(id=account_id).first()
    if not admin or not account:
        logger.warning(
            f"[task] Company approval request dropped: admin={admin_id} account={account_id} missing"
        )
        return False
    return request_company_approval(admin, account)


@shared_task(queue="telegram_bot")
def notify_holder_of_worker_task(holder_id: int, account_id: int) -> bool:
    holder = Account.objects.filter(id=holder_id).first()
    account = Account.objects.filter(id=account_id).first()
    if not holder or not account:
        logger.warning(
            f"[task] Worker approval request dropped: holder={holder_id} account={account_id} missing"
        )
        return False
    return request_worker_approval(holder, account)
