import pytest
from django.contrib.auth.hashers import make_password

from staffgate.apps.accounts.models import (
    Account,
    AccountStatus,
    Company,
    CompanyStatus,
    Role,
    Worker,
)

ADMIN_CHAT_ID = 9000
HOLDER_CHAT_ID = 7000


@pytest.fixture
def admin_account(db) -> Account:
    return Account.objects.create(
        name="Root Admin",
        email="admin@example.com",
        password=make_password("admin-secret"),
        role=Role.ADMIN,
        status=AccountStatus.APPROVED,
        chat_id=ADMIN_CHAT_ID,
    )


@pytest.fixture
def approved_holder(db) -> Account:
    return Account.objects.create(
        name="Hank Holder",
        email="hank@acme.test",
        password=make_password("holder-secret"),
        role=Role.HOLDER,
        company="Acme",
        status=AccountStatus.APPROVED,
        chat_id=HOLDER_CHAT_ID,
    )


@pytest.fixture
def acme(approved_holder: Account) -> Company:
    return Company.objects.create(
        name="Acme",
        email=approved_holder.email,
        owner=approved_holder,
        status=CompanyStatus.ACTIVE,
    )


@pytest.fixture
def pending_holder(db) -> Account:
    return Account.objects.create(
        name="Jane Doe",
        email="jane@x.com",
        password=make_password("secret1"),
        role=Role.HOLDER,
        company="Globex",
        status=AccountStatus.PENDING,
        chat_id=1234,
    )


@pytest.fixture
def pending_employee(acme: Company) -> Account:
    account = Account.objects.create(
        name="Ed Employee",
        email="ed@acme.test",
        password=make_password("worker-secret"),
        role=Role.EMPLOYEE,
        company=acme.name,
        status=AccountStatus.PENDING,
        chat_id=5555,
    )
    Worker.objects.create(account=account, company=acme, image="uploads/ed.jpg")
    return account
