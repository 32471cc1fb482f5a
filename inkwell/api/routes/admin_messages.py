from fastapi import APIRouter, Depends, HTTPException

from inkwell.adapters.sqlite.repos import SQLiteMessageRepo, SQLiteSubscriberRepo
from inkwell.api.deps import (
    authorize,
    get_current_actor,
    get_message_repo,
    get_policy,
    get_subscriber_repo,
)
from inkwell.api.schemas import ContactMessageResponse, SubscriberResponse
from inkwell.domain.policy import Action, Actor, MessageResource, PolicyEngine

router = APIRouter()


@router.get("/messages", response_model=list[ContactMessageResponse])
def list_messages(
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteMessageRepo = Depends(get_message_repo),
) -> list[ContactMessageResponse]:
    """Contact form inbox, newest first."""
    authorize(policy, actor, Action.READ, MessageResource())
    return repo.list_all()  # type: ignore[return-value]


@router.put("/messages/{message_id}/read")
def mark_message_read(
    message_id: int,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteMessageRepo = Depends(get_message_repo),
) -> dict[str, str]:
    # Marking as read is part of reading the inbox; updates on messages are denied.
    authorize(policy, actor, Action.READ, MessageResource(id=message_id))
    if not repo.mark_read(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"status": "success"}


@router.get("/subscribers", response_model=list[SubscriberResponse])
def list_subscribers(
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> list[SubscriberResponse]:
    authorize(policy, actor, Action.READ, MessageResource())
    return repo.list_all()  # type: ignore[return-value]
