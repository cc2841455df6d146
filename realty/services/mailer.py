"""
Account emails sent over SMTP.
When no SMTP host is configured the message is logged instead of sent.
"""

from email.message import EmailMessage
import smtplib
import logging

from realty.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Mailer:
    """Sends the account confirmation and password reset emails."""

    def __init__(self, settings: Settings = None):
        self.settings = settings or get_settings()

    def send_confirmation(self, name: str, email: str, token: str) -> bool:
        link = f"{self.settings.app_url}/auth/confirm/{token}"
        body = (
            f"Hello {name},\n\n"
            f"Your account on {self.settings.app_name} is almost ready.\n"
            f"Confirm it by opening the following link:\n\n{link}\n\n"
            "If you did not create this account you can ignore this message.\n"
        )
        return self.send(email, f"Confirm your {self.settings.app_name} account", body)

    def send_password_reset(self, name: str, email: str, token: str) -> bool:
        link = f"{self.settings.app_url}/auth/reset-password/{token}"
        body = (
            f"Hello {name},\n\n"
            f"A new password was requested for your {self.settings.app_name} account.\n"
            f"Choose it by opening the following link:\n\n{link}\n\n"
            "If you did not request a new password you can ignore this message.\n"
        )
        return self.send(email, f"Reset your {self.settings.app_name} password", body)

    def send(self, to_email: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Returns:
            True if the message was handed to the SMTP server
        """
        if not self.settings.mail_enabled:
            logger.info(f"Mail disabled, not sending to {to_email}: {subject}\n{body}")
            return False

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.settings.mail_from
        message["To"] = to_email
        message.set_content(body)

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
                if self.settings.smtp_use_tls:
                    smtp.starttls()
                if self.settings.smtp_username and self.settings.smtp_password:
                    smtp.login(self.settings.smtp_username, self.settings.smtp_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {to_email}: {e}", exc_info=True)
            return False

        logger.info(f"Sent '{subject}' to {to_email}")
        return True
