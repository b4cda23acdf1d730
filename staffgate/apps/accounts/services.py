"""
Account store: the lookups and writes the bot needs against Account,
Company and Worker rows. Callers own the transaction boundaries.
"""
from __future__ import annotations

from typing import Optional

from django.contrib.auth.hashers import check_password
from django.utils import timezone

from staffgate.apps.accounts.models import (
    Account,
    AccountStatus,
    Company,
    Role,
    Worker,
)


def email_taken(email: str) -> bool:
    """Exact match against the stored value."""
    return Account.objects.filter(email=email).exists()


def find_by_email(email: str) -> Optional[Account]:
    return Account.objects.filter(email=email).first()


def find_by_chat(chat_id: int) -> Optional[Account]:
    return Account.objects.filter(chat_id=chat_id).order_by("id").first()


def find_admin() -> Optional[Account]:
    return Account.objects.filter(role=Role.ADMIN).order_by("id").first()


def find_company_holder(company_name: str) -> Optional[Account]:
    """The approved owner of the Company row; namesake holders never qualify."""
    company = (
        Company.objects.select_related("owner")
        .filter(name=company_name, owner__status=AccountStatus.APPROVED)
        .first()
    )
    return company.owner if company else None


def find_company(name: str) -> Optional[Company]:
    return Company.objects.filter(name=name).first()


def company_exists(name: str) -> bool:
    return Company.objects.filter(name=name).exists()


def create_account(
    *,
    name: str,
    email: str,
    password_hash: str,
    role: str,
    company: str = "",
    chat_id: Optional[int] = None,
    image: str = "",
) -> Account:
    """Create a pending account with a verified email."""
    return Account.objects.create(
        name=name,
        email=email,
        password=password_hash,
        role=role,
        company=company or "",
        chat_id=chat_id,
        image=image,
        status=AccountStatus.PENDING,
        email_verified_at=timezone.now(),
    )


def create_worker(account: Account, company: Company, image: str = "") -> Worker:
    return Worker.objects.create(
        account=account,
        company=company,
        status=AccountStatus.PENDING,
        image=image,
    )


def authenticate(email: str, raw_password: str) -> Optional[Account]:
    account = find_by_email(email)
    if account and check_password(raw_password, account.password):
        return account
    return None


def bind_chat(account: Account, chat_id: int) -> None:
    if account.chat_id != chat_id:
        account.chat_id = chat_id
        account.save(update_fields=["chat_id", "updated_at"])


def set_status(account: Account, status: str) -> None:
    account.status = status
    account.save(update_fields=["status", "updated_at"])
