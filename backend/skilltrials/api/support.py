from datetime import datetime
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db, transaction
from ..models.support_ticket import SupportTicket
from ..utils.dependencies import CurrentUser, get_current_user
from ..utils.error_handlers import ForbiddenError, get_error_message
from ..utils.validation import validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Support"])


class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    status: str | None = Field(default="open", max_length=32)


def _ticket_to_public(ticket: SupportTicket) -> dict:
    return {
        "id": ticket.id,
        "user_id": ticket.user_id,
        "user_type": ticket.user_type,
        "subject": ticket.subject,
        "description": ticket.description,
        "status": ticket.status,
        "created_at": ticket.created_at.isoformat()
        if isinstance(ticket.created_at, datetime)
        else ticket.created_at,
    }


@router.post("/support", status_code=201)
def create_ticket(
    payload: TicketCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    # Filed for the authenticated account; the role picks the user_type discriminator.
    ticket = SupportTicket(
        user_id=user.id,
        user_type=user.role.user_type,
        subject=validate_string_field(payload.subject, "Subject", max_length=255),
        description=validate_string_field(payload.description, "Description", max_length=5000, required=False),
        status=(payload.status or "open").strip() or "open",
    )
    with transaction(db, "Creating support ticket"):
        db.add(ticket)
    db.refresh(ticket)
    logger.info("Support ticket %s filed by %s %s", ticket.id, user.role.value, user.id)
    return {"success": True, "ticket": _ticket_to_public(ticket)}


@router.get("/getsupport/{user_id:int}")
def list_tickets(
    user_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if user_id != user.id:
        raise ForbiddenError(get_error_message("forbidden"))
    tickets = (
        db.query(SupportTicket)
        .filter(SupportTicket.user_id == user_id, SupportTicket.user_type == user.role.user_type)
        .order_by(SupportTicket.id.desc())
        .all()
    )
    return {"success": True, "tickets": [_ticket_to_public(t) for t in tickets]}
