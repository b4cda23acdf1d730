"""Registration completion: the atomic hand-off from conversation to account."""

from unittest.mock import MagicMock

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import IntegrityError

from staffgate.apps.accounts.models import Account, AccountStatus, Role, Worker
from staffgate.apps.telegram_bot import registration
from staffgate.apps.telegram_bot.fsm_store import ConversationStore
from staffgate.apps.telegram_bot.models import Step, StepName
from tests.accounts.fixtures import ADMIN_CHAT_ID, HOLDER_CHAT_ID
from tests.telegram_bot.fixtures import last_sent, sent_texts

CHAT = 3131

pytestmark = pytest.mark.django_db


@pytest.fixture
def image_path() -> str:
    return default_storage.save("uploads/test-photo.jpg", ContentFile(b"jpeg"))


def _finished_step(role: str, company: str, email: str = "jane@x.com") -> Step:
    return Step.objects.create(
        chat_id=CHAT,
        step=StepName.IMAGE,
        role=role,
        company_name=company,
        name="Jane",
        email=email,
        password="md5$hash",
        confirmation_code="Ab12Cd",
    )


def test_holder_registration_creates_pending_account_and_notifies_admin(
    store: ConversationStore,
    admin_account: Account,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("holder", "Acme")

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    assert account is not None
    account.refresh_from_db()
    assert account.role == Role.HOLDER
    assert account.status == AccountStatus.PENDING
    assert account.company == "Acme"
    assert account.chat_id == CHAT
    assert account.image == image_path
    assert account.email_verified_at is not None
    assert not Step.objects.filter(chat_id=CHAT).exists()
    assert not Worker.objects.exists()

    assert last_sent(gateway_mock, CHAT) == registration.MSG_SUCCESS
    gateway_mock.get_chat.assert_called_once_with(ADMIN_CHAT_ID)
    admin_call = [
        c for c in gateway_mock.send_message.call_args_list if c.args[0] == ADMIN_CHAT_ID
    ][0]
    assert "New Company Registration Request" in admin_call.args[1]
    buttons = admin_call.kwargs["reply_markup"]["inline_keyboard"][0]
    assert [b["callback_data"] for b in buttons] == [
        f"approve_company_{account.id}",
        f"reject_company_{account.id}",
    ]


def test_holder_registration_without_admin_still_completes(
    store: ConversationStore,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("holder", "Acme")

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    assert account is not None
    assert Account.objects.count() == 1
    assert not Step.objects.filter(chat_id=CHAT).exists()
    gateway_mock.get_chat.assert_not_called()
    assert sent_texts(gateway_mock, CHAT) == [registration.MSG_SUCCESS]


def test_employee_registration_creates_worker_and_notifies_holder(
    store: ConversationStore,
    acme,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("employee", "Acme", email="ed@x.com")

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    worker = Worker.objects.get(account=account)
    assert worker.company == acme
    assert worker.status == AccountStatus.PENDING
    assert worker.image == image_path

    holder_texts = sent_texts(gateway_mock, HOLDER_CHAT_ID)
    assert len(holder_texts) == 1
    assert "New Worker Registration Request" in holder_texts[0]
    markup = gateway_mock.send_message.call_args_list[0].kwargs["reply_markup"]
    assert markup["inline_keyboard"][0][0]["callback_data"] == f"approve_worker_{account.id}"


def test_employee_registration_rolls_back_when_company_vanished(
    store: ConversationStore,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("employee", "Gone Corp")

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    assert account is None
    assert not Account.objects.exists()
    assert not Worker.objects.exists()
    assert Step.objects.get(chat_id=CHAT).step == StepName.IMAGE
    assert sent_texts(gateway_mock, CHAT) == [registration.MSG_FAILED]
    assert not default_storage.exists(image_path)


def test_failed_account_creation_leaves_nothing_behind(
    store: ConversationStore,
    admin_account: Account,
    mocker,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    mocker.patch(
        "staffgate.apps.accounts.services.create_account",
        side_effect=IntegrityError("duplicate email"),
    )
    step = _finished_step("holder", "Acme")

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    assert account is None
    assert Step.objects.filter(chat_id=CHAT).exists()
    gateway_mock.get_chat.assert_not_called()
    assert sent_texts(gateway_mock, ADMIN_CHAT_ID) == []
    assert sent_texts(gateway_mock, CHAT) == [registration.MSG_FAILED]


def test_email_taken_between_check_and_write_sends_chat_back_to_email(
    store: ConversationStore,
    pending_holder: Account,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("holder", "Acme", email=pending_holder.email)

    with django_capture_on_commit_callbacks(execute=True):
        account = registration.complete_registration(store, step, image_path)

    assert account is None
    assert Account.objects.filter(email=pending_holder.email).count() == 1
    step = Step.objects.get(chat_id=CHAT)
    assert step.step == StepName.EMAIL
    assert step.email == ""
    assert step.name == "Jane"
    assert sent_texts(gateway_mock, CHAT) == [registration.MSG_EMAIL_TAKEN]
    assert not default_storage.exists(image_path)


@pytest.fixture
def rejected_namesake(db) -> Account:
    """An earlier, rejected holder who typed the same company name."""
    return Account.objects.create(
        name="Mallory",
        email="mallory@evil.test",
        password="x",
        role=Role.HOLDER,
        company="Acme",
        status=AccountStatus.REJECTED,
        chat_id=6666,
    )


def test_worker_request_goes_to_the_company_owner_only(
    store: ConversationStore,
    rejected_namesake: Account,
    acme,
    gateway_mock: MagicMock,
    image_path: str,
    django_capture_on_commit_callbacks,
):
    step = _finished_step("employee", "Acme", email="ed@x.com")

    with django_capture_on_commit_callbacks(execute=True):
        registration.complete_registration(store, step, image_path)

    assert sent_texts(gateway_mock, rejected_namesake.chat_id) == []
    assert len(sent_texts(gateway_mock, HOLDER_CHAT_ID)) == 1
