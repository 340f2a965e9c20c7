"""SMTP delivery of account verification mail."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from app.core.config import MailSettings, settings
from app.core.logging import get_logger


logger = get_logger(__name__)


def build_verification_message(
    *, sender: str, recipient: str, name: str, link: str
) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = "Verify Your Email Address"
    message["From"] = sender
    message["To"] = recipient
    message.set_content(
        f"Hi {name},\n\n"
        "Thank you for registering! Open the following link to verify your "
        f"email address:\n\n{link}\n"
    )
    message.add_alternative(
        f"<p>Hi {name},</p>"
        "<p>Thank you for registering! Please click the following link to "
        "verify your email address:</p>"
        f'<p><a href="{link}">{link}</a></p>',
        subtype="html",
    )
    return message


class Mailer:
    def __init__(self, config: MailSettings) -> None:
        self.config = config

    def send(self, message: EmailMessage) -> None:
        """Deliver synchronously; callers run this off the event loop."""
        if not self.config.is_configured:
            logger.warning(
                f"Mail delivery disabled, dropping message to {message['To']}"
            )
            return

        with smtplib.SMTP(
            self.config.host, self.config.port, timeout=self.config.timeout
        ) as smtp:
            if self.config.starttls:
                smtp.starttls()
            if self.config.username and self.config.password:
                smtp.login(self.config.username, self.config.password)
            smtp.send_message(message)
        logger.info(f"Mail sent to {message['To']}: {message['Subject']}")

    def send_verification(self, *, email: str, name: str, link: str) -> None:
        self.send(
            build_verification_message(
                sender=self.config.sender, recipient=email, name=name, link=link
            )
        )


mailer = Mailer(settings.mail)
