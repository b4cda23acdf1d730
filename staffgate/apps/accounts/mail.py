import logging
import smtplib

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Your confirmation code"


def send_confirmation_code(email: str, code: str) -> bool:
    """Email the registration confirmation code. Returns False if delivery failed."""
    body = (
        "Hello!\n\n"
        f"Your confirmation code is: {code}\n\n"
        "Enter it in the Telegram chat to continue your registration."
    )
    try:
        send_mail(
            CONFIRMATION_SUBJECT,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [email],
            fail_silently=False,
        )
    except (smtplib.SMTPException, OSError, ValueError) as exc:
        logger.error(f"[mail] Failed to send confirmation code to {email}: {exc}")
        return False
    logger.info(f"[mail] Confirmation code sent to {email}")
    return True
