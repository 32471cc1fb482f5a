"""Public write endpoints: contact form and newsletter sign-up."""

import logging

from fastapi import APIRouter, Depends, status

from inkwell.adapters.sqlite.repos import SQLiteMessageRepo, SQLiteSubscriberRepo
from inkwell.api.deps import get_message_repo, get_subscriber_repo
from inkwell.api.schemas import ContactRequest, SubscribeRequest
from inkwell.domain.entities import ContactMessage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/contact", status_code=status.HTTP_201_CREATED)
def submit_contact_message(
    req: ContactRequest,
    repo: SQLiteMessageRepo = Depends(get_message_repo),
) -> dict[str, str]:
    message = repo.create(
        ContactMessage(
            name=req.name.strip(),
            email=req.email.strip().lower(),
            subject=req.subject.strip(),
            message=req.message,
        )
    )
    logger.info("Contact message %s received", message.id)
    return {"status": "received"}


@router.post("/newsletter/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe_newsletter(
    req: SubscribeRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> dict[str, str]:
    """Subscribe an email. Re-subscribing an inactive address re-activates it."""
    repo.subscribe(req.email.strip().lower())
    return {"status": "subscribed"}
