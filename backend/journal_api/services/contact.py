from email.message import EmailMessage
import logging

from journal_api.core.mail import deliver
from journal_api.schemas.contact import ContactRead


logger = logging.getLogger(__name__)


def build_contact_copy(inbox: str, contact: ContactRead) -> EmailMessage:
    """Inbox copy of a contact-form message; replying goes straight to the sender."""
    message = EmailMessage()
    message["To"] = inbox
    message["Subject"] = f"[Contact #{contact.id}] {contact.subject}"
    message["Reply-To"] = contact.email
    message.set_content(
        f"New contact form message #{contact.id}\n"
        f"From: {contact.email}\n"
        f"Received: {contact.created_at.isoformat(sep=' ', timespec='minutes')}\n"
        f"Subject: {contact.subject}\n"
        "\n"
        f"{contact.body}\n"
    )
    return message


def forward_contact(inbox: str, contact: ContactRead) -> None:
    if deliver(build_contact_copy(inbox, contact)):
        logger.info("contact form forwarded", extra={"contact_id": contact.id})
