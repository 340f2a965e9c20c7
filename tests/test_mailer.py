"""Tests for verification mail composition and delivery."""

from unittest.mock import MagicMock

import pytest

from app.core import mailer as mailer_module
from app.core.config import MailSettings
from app.core.mailer import Mailer, build_verification_message


LINK = "http://localhost:9000/auth/verify-email?token=abc"


def test_build_verification_message() -> None:
    message = build_verification_message(
        sender="no-reply@cardly.local", recipient="ada@example.com", name="Ada", link=LINK
    )

    assert message["Subject"] == "Verify Your Email Address"
    assert message["To"] == "ada@example.com"
    assert message["From"] == "no-reply@cardly.local"
    assert LINK in message.get_body(preferencelist=("plain",)).get_content()
    assert f'href="{LINK}"' in message.get_body(preferencelist=("html",)).get_content()


def test_send_skipped_when_not_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock()
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", smtp)

    Mailer(MailSettings(MAIL_ENABLED=False)).send_verification(
        email="ada@example.com", name="Ada", link=LINK
    )

    smtp.assert_not_called()


def test_send_uses_smtp(monkeypatch: pytest.MonkeyPatch) -> None:
    smtp = MagicMock()
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", smtp)
    config = MailSettings(
        MAIL_ENABLED=True,
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=2525,
        SMTP_USERNAME="user",
        SMTP_PASSWORD="secret",
    )

    Mailer(config).send_verification(email="ada@example.com", name="Ada", link=LINK)

    smtp.assert_called_once_with("smtp.example.com", 2525, timeout=config.timeout)
    conn = smtp.return_value.__enter__.return_value
    conn.starttls.assert_called_once()
    conn.login.assert_called_once_with("user", "secret")
    sent = conn.send_message.call_args.args[0]
    assert sent["To"] == "ada@example.com"
