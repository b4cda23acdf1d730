from __future__ import annotations

import logging
from functools import partial

from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction

from staffgate.apps.accounts import services as accounts
from staffgate.apps.accounts.models import Account, Role
from staffgate.apps.telegram_bot.exceptions import RegistrationError
from staffgate.apps.telegram_bot.flow import reply, reply_on_commit
from staffgate.apps.telegram_bot.fsm_store import ConversationStore
from staffgate.apps.telegram_bot.models import Step, StepName
from staffgate.apps.telegram_bot.tasks import (
    notify_admin_of_company_task,
    notify_holder_of_worker_task,
)

logger = logging.getLogger(__name__)

MSG_SUCCESS = "Registration successful! Please wait for approval."
MSG_FAILED = "Registration failed. Please try again."
MSG_EMAIL_TAKEN = (
    "This email was registered by someone else while you were signing up. "
    "Please enter a different email address:"
)


def _create_holder(step: Step, image_path: str) -> Account:
    account = accounts.create_account(
        name=step.name,
        email=step.email,
        password_hash=step.password,
        role=Role.HOLDER,
        company=step.company_name,
        chat_id=step.chat_id,
        image=image_path,
    )
    admin = accounts.find_admin()
    if admin:
        transaction.on_commit(
            partial(notify_admin_of_company_task.delay, admin.id, account.id)
        )
    else:
        logger.info(f"[registration] No admin to notify about account {account.id}")
    return account


def _create_employee(step: Step, image_path: str) -> Account:
    company = accounts.find_company(step.company_name)
    if company is None:
        raise RegistrationError(f"Company '{step.company_name}' does not exist")

    account = accounts.create_account(
        name=step.name,
        email=step.email,
        password_hash=step.password,
        role=Role.EMPLOYEE,
        company=step.company_name,
        chat_id=step.chat_id,
        image=image_path,
    )
    accounts.create_worker(account, company, image=image_path)

    holder = accounts.find_company_holder(step.company_name)
    if holder:
        transaction.on_commit(
            partial(notify_holder_of_worker_task.delay, holder.id, account.id)
        )
    else:
        logger.info(
            f"[registration] No holder of '{step.company_name}' to notify about account {account.id}"
        )
    return account


def complete_registration(
    store: ConversationStore, step: Step, image_path: str
) -> Account | None:
    """
    Turn a finished conversation into a pending account in one transaction.

    On success the conversation row is gone and the approver is notified after
    commit. On any failure nothing is written and the stored photo is removed.
    The conversation stays at its current step so the user can resend the photo,
    unless the email was taken in the meantime: then it goes back to the email step.
    """
    chat_id = step.chat_id
    logger.info(
        f"[registration] Completing chat {chat_id}: role={step.role} company={step.company_name!r}"
    )
    try:
        with transaction.atomic():
            if step.role == Role.HOLDER:
                account = _create_holder(step, image_path)
            elif step.role == Role.EMPLOYEE:
                account = _create_employee(step, image_path)
            else:
                raise RegistrationError(f"Unknown role {step.role!r}")
            store.clear(chat_id)
            reply_on_commit(chat_id, MSG_SUCCESS)
    except Exception as exc:
        logger.exception(
            f"[registration] Registration for chat {chat_id} failed (email={step.email!r})"
        )
        if image_path:
            default_storage.delete(image_path)
        if isinstance(exc, IntegrityError) and accounts.email_taken(step.email):
            # Lost the race for this email; collect a new one and go on from there
            store.advance(step, StepName.EMAIL, email="")
            reply(chat_id, MSG_EMAIL_TAKEN)
        else:
            reply(chat_id, MSG_FAILED)
        return None

    logger.info(f"[registration] Account {account.id} created as {account.role}, pending")
    return account
