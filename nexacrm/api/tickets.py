"""Support desk endpoints.

Regular users see the tickets they opened or were assigned; admins see all.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from nexacrm.core.errors import ForbiddenError, NotFoundError
from nexacrm.core.time import utc_now
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.models.ticket import Ticket, TicketMessage
from nexacrm.models.user import User
from nexacrm.schemas.ticket import (
    TicketCreate,
    TicketDetail,
    TicketMessageCreate,
    TicketMessageRead,
    TicketRead,
    TicketStats,
    TicketUpdate,
)

router = APIRouter(prefix="/tickets", tags=["tickets"])

TICKET_STATUSES = ("open", "in_progress", "resolved", "closed")


def visible_tickets(db: Session, user: User):
    query = db.query(Ticket).options(joinedload(Ticket.requester), joinedload(Ticket.assignee))
    if not user.is_admin:
        query = query.filter(or_(Ticket.user_id == user.id, Ticket.assigned_to == user.id))
    return query


def _get_visible_ticket(db: Session, ticket_id: int, user: User) -> Ticket:
    ticket = visible_tickets(db, user).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


@router.get("", response_model=list[TicketRead])
async def list_tickets(
    status: str | None = None,
    priority: str | None = None,
    category: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = visible_tickets(db, current_user)
    if status:
        query = query.filter(Ticket.status == status)
    if priority:
        query = query.filter(Ticket.priority == priority)
    if category:
        query = query.filter(Ticket.category == category)
    return query.order_by(Ticket.updated_at.desc(), Ticket.id.desc()).all()


@router.get("/stats", response_model=TicketStats)
async def ticket_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    statuses = [t.status for t in visible_tickets(db, current_user).all()]
    counts = {s: statuses.count(s) for s in TICKET_STATUSES}
    return {"total": len(statuses), **counts}


@router.get("/{ticket_id}", response_model=TicketDetail)
async def get_ticket(ticket_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_visible_ticket(db, ticket_id, current_user)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(ticket_in: TicketCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ticket = Ticket(
        user_id=current_user.id,
        title=ticket_in.title,
        description=ticket_in.description or None,
        priority=ticket_in.priority,
        category=ticket_in.category or "general",
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    if ticket.description:
        # The description opens the conversation thread
        db.add(TicketMessage(ticket_id=ticket.id, user_id=current_user.id, message=ticket.description))
        db.commit()
        db.refresh(ticket)
    return ticket


@router.put("/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: int,
    ticket_in: TicketUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ticket = _get_visible_ticket(db, ticket_id, current_user)
    updates = ticket_in.model_dump(exclude_unset=True)
    if "assigned_to" in updates:
        assignee_id = updates.pop("assigned_to")
        if assignee_id is not None and db.get(User, assignee_id) is None:
            raise NotFoundError("Assignee not found")
        ticket.assigned_to = assignee_id
    for field, value in updates.items():
        if value is not None:
            setattr(ticket, field, value)
    ticket.updated_at = utc_now()
    db.commit()
    db.refresh(ticket)
    return ticket


@router.delete("/{ticket_id}")
async def delete_ticket(ticket_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ticket = _get_visible_ticket(db, ticket_id, current_user)
    if ticket.user_id != current_user.id and not current_user.is_admin:
        raise ForbiddenError("Only the requester or an admin can delete a ticket")
    db.delete(ticket)
    db.commit()
    return {"success": True, "id": ticket_id}


@router.post("/{ticket_id}/messages", response_model=TicketMessageRead, status_code=status.HTTP_201_CREATED)
async def add_message(
    ticket_id: int,
    message_in: TicketMessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ticket = _get_visible_ticket(db, ticket_id, current_user)
    message = TicketMessage(
        ticket_id=ticket.id,
        user_id=current_user.id,
        message=message_in.message,
        is_internal=message_in.is_internal,
    )
    db.add(message)
    ticket.updated_at = utc_now()
    db.commit()
    db.refresh(message)
    return message
