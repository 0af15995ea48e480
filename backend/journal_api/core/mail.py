import logging
import smtplib
from email.message import EmailMessage

from journal_api.core.config import settings


logger = logging.getLogger(__name__)


def smtp_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_from)


def deliver(message: EmailMessage) -> bool:
    """Send a prepared message through the configured SMTP relay.

    ``From`` is filled from settings. Returns False when nothing was sent.
    """
    if not smtp_configured():
        logger.warning(
            "SMTP is not configured; skipping email to %s with subject %s",
            message["To"],
            message["Subject"],
        )
        return False

    if "From" not in message:
        message["From"] = settings.smtp_from
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_user and settings.smtp_password:
                server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", message["To"], exc)
        return False
    return True
