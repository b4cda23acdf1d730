import smtplib

from staffgate.apps.accounts.mail import CONFIRMATION_SUBJECT, send_confirmation_code


def test_code_is_mailed(mailoutbox, settings):
    settings.DEFAULT_FROM_EMAIL = "bot@staffgate.test"

    assert send_confirmation_code("jane@x.com", "Ab12Cd") is True

    assert len(mailoutbox) == 1
    message = mailoutbox[0]
    assert message.subject == CONFIRMATION_SUBJECT
    assert message.to == ["jane@x.com"]
    assert message.from_email == "bot@staffgate.test"
    assert "Ab12Cd" in message.body


def test_smtp_failure_is_reported(mocker, mailoutbox):
    mocker.patch(
        "staffgate.apps.accounts.mail.send_mail",
        side_effect=smtplib.SMTPRecipientsRefused({"jane@x.com": (550, b"no such user")}),
    )

    assert send_confirmation_code("jane@x.com", "Ab12Cd") is False
    assert mailoutbox == []


def test_connection_failure_is_reported(mocker):
    mocker.patch(
        "staffgate.apps.accounts.mail.send_mail", side_effect=ConnectionRefusedError()
    )

    assert send_confirmation_code("jane@x.com", "Ab12Cd") is False
