"""
Approve/reject decisions arriving from the inline buttons of an approval request.

approve_* run as one transaction: the status flip, the Company row and the edit
of the original message land together or not at all. reject_* flip the status
first and treat the message edit and the notification as follow-ups.
"""
from __future__ import annotations

import logging
from functools import partial

from django.db import transaction
from django.utils.html import escape

from staffgate.apps.accounts import services as accounts
from staffgate.apps.accounts.models import (
    Account,
    AccountStatus,
    Company,
    CompanyStatus,
    Role,
    Worker,
)
from staffgate.apps.telegram_bot.callbacks import CallbackToken, Decision, Subject
from staffgate.apps.telegram_bot.exceptions import (
    AccountNotFound,
    AlreadyDecided,
    ApprovalError,
    ApprovalValidationError,
    GatewayError,
    InvalidCallbackToken,
    NotAllowedToDecide,
    WorkerNotFound,
)
from staffgate.apps.telegram_bot.flow import reply
from staffgate.apps.telegram_bot.gateway import get_gateway
from staffgate.apps.telegram_bot.keyboards import kb_empty_inline
from staffgate.apps.telegram_bot.messages import TelegramUpdate
from staffgate.apps.telegram_bot.notifications import now_stamp

logger = logging.getLogger(__name__)

MSG_FAILED = "Failed to process the request. Please try again."

SUBJECT_ROLE = {
    Subject.COMPANY: Role.HOLDER,
    Subject.WORKER: Role.EMPLOYEE,
}


# ---------- checks ----------

def _load_account(account_id: int, *, for_update: bool = False) -> Account:
    qs = Account.objects.select_for_update() if for_update else Account.objects
    account = qs.filter(id=account_id).first()
    if account is None:
        raise AccountNotFound(f"Account {account_id} not found")
    return account


def _require_subject(account: Account, subject: Subject) -> None:
    expected = SUBJECT_ROLE[subject]
    if account.role != expected:
        raise ApprovalValidationError(
            f"Account {account.id} has role {account.role!r}, expected {expected.value!r}"
        )


def _require_pending(account: Account) -> None:
    if not account.is_pending:
        raise AlreadyDecided(
            f"Account {account.id} is already {account.status}",
            user_message=f"This request has already been processed ({account.status}).",
        )


def _require_decider(subject: Subject, account: Account, decider_chat_id: int) -> None:
    """Admins decide on companies; admins or the company's approved owner decide on workers."""
    decider = accounts.find_by_chat(decider_chat_id)
    if decider is None:
        raise NotAllowedToDecide(f"Chat {decider_chat_id} is not bound to an account")
    if decider.role == Role.ADMIN:
        return
    if subject == Subject.WORKER and decider.status == AccountStatus.APPROVED:
        company = accounts.find_company(account.company)
        if company is not None and company.owner_id == decider.id:
            return
    raise NotAllowedToDecide(
        f"Account {decider.id} ({decider.role}) may not decide on {subject.value} {account.id}"
    )


def _check(subject: Subject, account: Account, decider_chat_id: int) -> None:
    _require_subject(account, subject)
    _require_decider(subject, account, decider_chat_id)
    _require_pending(account)


# ---------- side effects ----------

def _edit_decision(chat_id: int, message_id: int, text: str) -> None:
    """Replace the approval request in place and drop its buttons."""
    if not get_gateway().edit_message_text(
        chat_id, message_id, text, reply_markup=kb_empty_inline()
    ):
        raise GatewayError(f"Failed to edit message {message_id} in chat {chat_id}")


def _edit_decision_best_effort(chat_id: int, message_id: int, text: str) -> None:
    try:
        _edit_decision(chat_id, message_id, text)
    except GatewayError as exc:
        logger.error(f"[approvals] {exc}; the decision itself is kept")


def _notify(account: Account, text: str) -> None:
    if not account.chat_id:
        logger.warning(f"[approvals] Account {account.id} has no chat bound; not notified")
        return
    reply(account.chat_id, text)


def _decision_text(title: str, status: str, lines: list[str]) -> str:
    return (
        f"{title}\n\n"
        + "".join(f"{line}\n" for line in lines)
        + f"Status: {status}\n"
        + f"Date: {now_stamp()}"
    )


# ---------- company ----------

def approve_company(account_id: int, chat_id: int, message_id: int) -> Company:
    with transaction.atomic():
        account = _load_account(account_id, for_update=True)
        _check(Subject.COMPANY, account, chat_id)
        if not account.company:
            raise ApprovalValidationError(
                f"Account {account.id} has no company name",
                user_message="Company name is required for approval.",
            )

        logger.info(f"[approvals] Approving company {account.company!r} of account {account.id}")
        accounts.set_status(account, AccountStatus.APPROVED)
        company = Company.objects.create(
            name=account.company,
            email=account.email,
            owner=account,
            status=CompanyStatus.ACTIVE,
        )

        _edit_decision(
            chat_id,
            message_id,
            _decision_text(
                "✅ <b>Company Registration Approved</b>",
                "Approved",
                [f"Company: {escape(account.company)}", f"Owner: {escape(account.name)}"],
            ),
        )
        transaction.on_commit(
            partial(
                _notify,
                account,
                "🎉 <b>Congratulations!</b>\n\n"
                f"Your company registration for <b>{escape(account.company)}</b> has been approved.\n"
                "You can now start using the system.",
            )
        )
    logger.info(f"[approvals] Company {company.id} created for account {account.id}")
    return company


def reject_company(account_id: int, chat_id: int, message_id: int) -> Account:
    account = _load_account(account_id)
    _check(Subject.COMPANY, account, chat_id)

    accounts.set_status(account, AccountStatus.REJECTED)
    logger.info(f"[approvals] Company registration of account {account.id} rejected")

    _edit_decision_best_effort(
        chat_id,
        message_id,
        _decision_text(
            "❌ <b>Company Registration Rejected</b>",
            "Rejected",
            [f"Company: {escape(account.company)}", f"Owner: {escape(account.name)}"],
        ),
    )
    _notify(
        account,
        "❌ <b>Registration Update</b>\n\n"
        f"Your company registration for <b>{escape(account.company)}</b> has been rejected.\n"
        "Please contact support for more information.",
    )
    return account


# ---------- worker ----------

def approve_worker(account_id: int, chat_id: int, message_id: int) -> Worker:
    with transaction.atomic():
        account = _load_account(account_id, for_update=True)
        _check(Subject.WORKER, account, chat_id)
        worker = Worker.objects.select_for_update().filter(account=account).first()
        if worker is None:
            raise WorkerNotFound(f"Worker record for account {account.id} not found")

        accounts.set_status(account, AccountStatus.APPROVED)
        worker.status = AccountStatus.APPROVED
        worker.save(update_fields=["status", "updated_at"])

        _edit_decision(
            chat_id,
            message_id,
            _decision_text(
                "✅ <b>Worker Registration Approved</b>",
                "Approved",
                [f"Name: {escape(account.name)}", f"Company: {escape(account.company)}"],
            ),
        )
        transaction.on_commit(
            partial(
                _notify,
                account,
                "🎉 <b>Congratulations!</b>\n\n"
                f"Your registration as a worker at <b>{escape(account.company)}</b> has been approved.\n"
                "You can now start using the system.",
            )
        )
    logger.info(f"[approvals] Worker account {account.id} approved by chat {chat_id}")
    return worker


def reject_worker(account_id: int, chat_id: int, message_id: int) -> Account:
    account = _load_account(account_id)
    _check(Subject.WORKER, account, chat_id)

    # The Worker row keeps its status here; only the account is rejected
    accounts.set_status(account, AccountStatus.REJECTED)
    logger.info(f"[approvals] Worker account {account.id} rejected by chat {chat_id}")

    _edit_decision_best_effort(
        chat_id,
        message_id,
        _decision_text(
            "❌ <b>Worker Registration Rejected</b>",
            "Rejected",
            [f"Name: {escape(account.name)}", f"Company: {escape(account.company)}"],
        ),
    )
    _notify(
        account,
        "❌ <b>Registration Update</b>\n\n"
        f"Your registration as a worker at <b>{escape(account.company)}</b> has been rejected.\n"
        "Please contact the company for more information.",
    )
    return account


DECISIONS = {
    (Decision.APPROVE, Subject.COMPANY): approve_company,
    (Decision.REJECT, Subject.COMPANY): reject_company,
    (Decision.APPROVE, Subject.WORKER): approve_worker,
    (Decision.REJECT, Subject.WORKER): reject_worker,
}


def handle_callback(update: TelegramUpdate) -> None:
    """Entry point for inline-button presses on approval requests."""
    if update.callback_query_id:
        get_gateway().answer_callback_query(update.callback_query_id)

    try:
        token = CallbackToken.parse(update.callback_data)
    except InvalidCallbackToken as exc:
        logger.warning(f"[approvals] Ignoring callback from chat {update.chat_id}: {exc}")
        return
    if update.chat_id is None or update.message_id is None:
        logger.warning(f"[approvals] Callback {token.encode()} without a source message")
        return

    operation = DECISIONS[(token.decision, token.subject)]
    try:
        operation(token.account_id, update.chat_id, update.message_id)
    except ApprovalError as exc:
        logger.warning(f"[approvals] {token.encode()} refused: {exc}")
        reply(update.chat_id, exc.user_message)
    except Exception:
        logger.exception(f"[approvals] {token.encode()} failed")
        reply(update.chat_id, MSG_FAILED)
