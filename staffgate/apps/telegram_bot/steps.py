from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.validators import validate_email
from django.utils.crypto import get_random_string
from django.utils.html import escape

from staffgate.apps.accounts import services as accounts
from staffgate.apps.accounts.mail import send_confirmation_code
from staffgate.apps.accounts.models import Role
from staffgate.apps.telegram_bot.flow import reply
from staffgate.apps.telegram_bot.fsm_store import ConversationStore
from staffgate.apps.telegram_bot.gateway import get_gateway
from staffgate.apps.telegram_bot.keyboards import (
    BTN_EMPLOYEE,
    BTN_HOLDER,
    BTN_LOGIN,
    BTN_REGISTER,
    kb_remove,
    kb_roles,
    kb_start_menu,
)
from staffgate.apps.telegram_bot.messages import TelegramUpdate
from staffgate.apps.telegram_bot.models import Step, StepName
from staffgate.apps.telegram_bot.registration import complete_registration
from staffgate.apps.telegram_bot.registry import handles

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6
CONFIRMATION_CODE_LENGTH = 6

MSG_WELCOME = "Welcome! Please choose an option:"
MSG_CHOOSE_ROLE = "Choose your role:"
MSG_ENTER_COMPANY = "Please enter your company name:"
MSG_SELECT_COMPANY = "Please enter the company name you want to join:"
MSG_COMPANY_TOO_SHORT = "Company name must be at least 2 characters long."
MSG_COMPANY_NOT_FOUND = "Company not found. Please check the name and try again."
MSG_ENTER_NAME = "Please enter your full name:"
MSG_NAME_TOO_SHORT = "Name must be at least 2 characters long."
MSG_ENTER_EMAIL = "Please enter your email address:"
MSG_INVALID_EMAIL = "Invalid email format. Please try again."
MSG_EMAIL_TAKEN = "This email is already registered. Please use a different email."
MSG_ENTER_PASSWORD = "Please enter your password (minimum 6 characters):"
MSG_PASSWORD_TOO_SHORT = "Password must be at least 6 characters long."
MSG_CODE_SENT = "A confirmation code has been sent to your email. Please enter it here:"
MSG_CODE_FAILED = "Failed to send confirmation email. Please try again."
MSG_INVALID_CODE = "Invalid confirmation code. Please try again."
MSG_SEND_PHOTO = "Please send your profile photo:"
MSG_PHOTO_REQUIRED = "Please send a photo."
MSG_IMAGE_FETCH_FAILED = "Failed to process image. Please try again."
MSG_IMAGE_SAVE_FAILED = "Failed to save image. Please try again."
MSG_LOGIN_EMAIL = "Please enter your email:"
MSG_LOGIN_PASSWORD = "Please enter your password:"
MSG_LOGIN_FAILED = "Invalid email or password. Please try again."
MSG_UNKNOWN = "Sorry, I didn't understand that. Use /start to begin."


@dataclass
class StepContext:
    """One inbound message, the conversation it belongs to, and the store that owns it."""

    update: TelegramUpdate
    step: Step
    store: ConversationStore

    @property
    def chat_id(self) -> int:
        return self.step.chat_id

    @property
    def text(self) -> str:
        return self.update.text or ""

    def reply(self, text: str, reply_markup: dict | None = None) -> None:
        reply(self.chat_id, text, reply_markup)

    def advance(
        self,
        next_step: StepName,
        prompt: str,
        reply_markup: dict | None = None,
        **fields,
    ) -> None:
        self.store.advance(self.step, next_step, **fields)
        self.reply(prompt, reply_markup)


def _is_email(value: str) -> bool:
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True


# ---------- entry ----------

@handles(StepName.START, description="Register/Login menu")
def on_start(ctx: StepContext) -> None:
    if ctx.text == BTN_REGISTER:
        ctx.advance(StepName.CHOOSE_ROLE, MSG_CHOOSE_ROLE, kb_roles())
        return
    if ctx.text == BTN_LOGIN:
        ctx.advance(StepName.LOGIN_EMAIL, MSG_LOGIN_EMAIL, kb_remove())
        return
    # /start or anything else: (re)show the menu
    ctx.reply(MSG_WELCOME, kb_start_menu())


@handles(StepName.CHOOSE_ROLE, description="Holder or employee")
def on_choose_role(ctx: StepContext) -> None:
    if ctx.text == BTN_HOLDER:
        ctx.advance(
            StepName.COMPANY_NAME, MSG_ENTER_COMPANY, kb_remove(), role=Role.HOLDER
        )
        return
    if ctx.text == BTN_EMPLOYEE:
        ctx.advance(
            StepName.COMPANY_SELECTION,
            MSG_SELECT_COMPANY,
            kb_remove(),
            role=Role.EMPLOYEE,
        )
        return
    ctx.reply(MSG_CHOOSE_ROLE, kb_roles())


# ---------- registration ----------

@handles(StepName.COMPANY_NAME, description="Holder names a new company")
def on_company_name(ctx: StepContext) -> None:
    if len(ctx.text) < MIN_NAME_LENGTH:
        ctx.reply(MSG_COMPANY_TOO_SHORT)
        return
    ctx.advance(StepName.USER_NAME, MSG_ENTER_NAME, company_name=ctx.text)


@handles(StepName.COMPANY_SELECTION, description="Employee picks an existing company")
def on_company_selection(ctx: StepContext) -> None:
    if len(ctx.text) < MIN_NAME_LENGTH:
        ctx.reply(MSG_COMPANY_TOO_SHORT)
        return
    if not accounts.company_exists(ctx.text):
        ctx.reply(MSG_COMPANY_NOT_FOUND)
        return
    ctx.advance(StepName.USER_NAME, MSG_ENTER_NAME, company_name=ctx.text)


@handles(StepName.USER_NAME, description="Full name")
def on_user_name(ctx: StepContext) -> None:
    if len(ctx.text) < MIN_NAME_LENGTH:
        ctx.reply(MSG_NAME_TOO_SHORT)
        return
    ctx.advance(StepName.EMAIL, MSG_ENTER_EMAIL, name=ctx.text)


@handles(StepName.EMAIL, description="Unique email address")
def on_email(ctx: StepContext) -> None:
    email = ctx.text
    if not _is_email(email):
        ctx.reply(MSG_INVALID_EMAIL)
        return
    if accounts.email_taken(email):
        logger.info(f"[steps] Duplicate email registration attempt {email} from chat {ctx.chat_id}")
        ctx.reply(MSG_EMAIL_TAKEN)
        return
    ctx.advance(StepName.PASSWORD, MSG_ENTER_PASSWORD, email=email)


@handles(StepName.PASSWORD, description="Password + emailed confirmation code")
def on_password(ctx: StepContext) -> None:
    if len(ctx.text) < MIN_PASSWORD_LENGTH:
        ctx.reply(MSG_PASSWORD_TOO_SHORT)
        return

    code = get_random_string(CONFIRMATION_CODE_LENGTH)
    if not send_confirmation_code(ctx.step.email, code):
        # Stay on this step; the user re-enters the password to retry delivery
        ctx.reply(MSG_CODE_FAILED)
        return
    ctx.advance(
        StepName.CONFIRMATION,
        MSG_CODE_SENT,
        password=make_password(ctx.text),
        confirmation_code=code,
    )


@handles(StepName.CONFIRMATION, description="Emailed code check")
def on_confirmation(ctx: StepContext) -> None:
    if not ctx.step.confirmation_code or ctx.text != ctx.step.confirmation_code:
        ctx.reply(MSG_INVALID_CODE)
        return
    ctx.advance(StepName.IMAGE, MSG_SEND_PHOTO)


@handles(StepName.IMAGE, description="Profile photo, then account creation")
def on_image(ctx: StepContext) -> None:
    file_id = ctx.update.photo_file_id
    if not file_id:
        ctx.reply(MSG_PHOTO_REQUIRED)
        return

    gateway = get_gateway()
    file_path = gateway.get_file(file_id)
    blob = gateway.download_file(file_path) if file_path else None
    if blob is None:
        ctx.reply(MSG_IMAGE_FETCH_FAILED)
        return

    name = f"{settings.UPLOADS_DIR}/{uuid.uuid4().hex}.jpg"
    try:
        image_path = default_storage.save(name, ContentFile(blob))
    except OSError as exc:
        logger.error(f"[steps] Could not store photo for chat {ctx.chat_id}: {exc}")
        ctx.reply(MSG_IMAGE_SAVE_FAILED)
        return

    complete_registration(ctx.store, ctx.step, image_path)


# ---------- login ----------

@handles(StepName.LOGIN_EMAIL, description="Login email")
def on_login_email(ctx: StepContext) -> None:
    if not _is_email(ctx.text):
        ctx.reply(MSG_INVALID_EMAIL)
        return
    ctx.advance(StepName.LOGIN_PASSWORD, MSG_LOGIN_PASSWORD, email=ctx.text)


@handles(StepName.LOGIN_PASSWORD, description="Login password")
def on_login_password(ctx: StepContext) -> None:
    account = accounts.authenticate(ctx.step.email, ctx.text)
    if account is None:
        ctx.reply(MSG_LOGIN_FAILED)
        return
    accounts.bind_chat(account, ctx.chat_id)
    ctx.store.clear(ctx.chat_id)
    logger.info(f"[steps] Account {account.id} logged in from chat {ctx.chat_id}")
    ctx.reply(f"Welcome back, {escape(account.name)}!")
