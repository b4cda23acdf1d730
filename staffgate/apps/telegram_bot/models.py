# staffgate/telegram_bot/models.py
from django.db import models


class StepName(models.TextChoices):
    START = "start", "Start"
    CHOOSE_ROLE = "choose_role", "Choose role"
    COMPANY_NAME = "company_name", "Company name"
    COMPANY_SELECTION = "company_selection", "Company selection"
    USER_NAME = "user_name", "Full name"
    EMAIL = "email", "Email"
    PASSWORD = "password", "Password"
    CONFIRMATION = "confirmation", "Confirmation code"
    IMAGE = "image", "Profile photo"
    LOGIN_EMAIL = "login_email", "Login email"
    LOGIN_PASSWORD = "login_password", "Login password"


class Step(models.Model):
    """What the bot expects next from a chat, plus the answers collected so far."""

    chat_id = models.BigIntegerField(unique=True)
    step = models.CharField(max_length=32, choices=StepName.choices, default=StepName.START)
    role = models.CharField(max_length=16, blank=True, default="")
    company_name = models.CharField(max_length=255, blank=True, default="")
    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, blank=True, default="")
    password = models.CharField(max_length=255, blank=True, default="")  # hash
    confirmation_code = models.CharField(max_length=16, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"chat {self.chat_id} @ {self.step}"
