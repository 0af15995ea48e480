from typing import Annotated
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from journal_api.core.config import settings
from journal_api.db.session import get_db
from journal_api.models import Contact
from journal_api.schemas.contact import ContactCreate, ContactRead, ContactSubmitted
from journal_api.services.contact import forward_contact


router = APIRouter(prefix="/contact", tags=["contact"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=ContactSubmitted, status_code=status.HTTP_201_CREATED)
def submit_contact_form(
    payload: ContactCreate,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
) -> ContactSubmitted:
    contact = Contact(subject=payload.subject, email=payload.email, body=payload.body)
    db.add(contact)
    db.commit()
    db.refresh(contact)

    logger.info("contact form stored", extra={"contact_id": contact.id})

    stored = ContactRead.model_validate(contact)
    if settings.contact_inbox:
        background_tasks.add_task(forward_contact, settings.contact_inbox, stored)

    return ContactSubmitted(message="Contact form submitted successfully", contact=stored)
