"""
Ticket, comment and attachment repository functions.
"""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import TicketStatus


def create_ticket(
    db: Session,
    *,
    title: str,
    description: Optional[str],
    tenant_id: uuid.UUID,
    restaurant_id: uuid.UUID,
    created_by: uuid.UUID,
):
    db_ticket = models.Ticket(
        title=title,
        description=description,
        tenant_id=tenant_id,
        restaurant_id=restaurant_id,
        created_by=created_by,
    )
    db.add(db_ticket)
    db.commit()
    db.refresh(db_ticket)
    return db_ticket


def get_ticket(db: Session, ticket_id: uuid.UUID, include_deleted: bool = False):
    query = db.query(models.Ticket).filter(models.Ticket.id == ticket_id)
    if not include_deleted:
        query = query.filter(models.Ticket.status != TicketStatus.SUPPRIME.value)
    return query.first()


def get_tickets(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(models.Ticket).filter(models.Ticket.status != TicketStatus.SUPPRIME.value)
    if tenant_id:
        query = query.filter(models.Ticket.tenant_id == tenant_id)
    if restaurant_id:
        query = query.filter(models.Ticket.restaurant_id == restaurant_id)
    return query.order_by(models.Ticket.updated_at.desc()).offset(skip).limit(limit).all()


def update_ticket_status(db: Session, ticket, status: str):
    ticket.status = status
    db.commit()
    db.refresh(ticket)
    return ticket


def add_comment(db: Session, ticket, author_id: uuid.UUID, message: str):
    db_comment = models.Comment(ticket_id=ticket.id, author_id=author_id, message=message)
    db.add(db_comment)
    # Commenting counts as activity on the ticket
    ticket.updated_at = models.now_utc()
    db.commit()
    db.refresh(db_comment)
    return db_comment


def get_comment(db: Session, comment_id: uuid.UUID):
    return db.query(models.Comment).filter(models.Comment.id == comment_id).first()


def add_attachment(
    db: Session,
    *,
    filename: str,
    url: str,
    mime_type: str,
    file_size: int,
    uploaded_by: uuid.UUID,
    ticket_id: Optional[uuid.UUID] = None,
    comment_id: Optional[uuid.UUID] = None,
):
    db_attachment = models.TicketAttachment(
        filename=filename,
        url=url,
        mime_type=mime_type,
        file_size=file_size,
        ticket_id=ticket_id,
        comment_id=comment_id,
        uploaded_by=uploaded_by,
    )
    db.add(db_attachment)
    db.commit()
    db.refresh(db_attachment)
    return db_attachment


def soft_delete_ticket(db: Session, ticket):
    ticket.status = TicketStatus.SUPPRIME.value
    db.commit()
    return ticket


def soft_delete_tickets(db: Session, tenant_id: Optional[uuid.UUID] = None) -> int:
    """Mark every live ticket (of one tenant, or all) as deleted; return the count."""
    query = db.query(models.Ticket).filter(models.Ticket.status != TicketStatus.SUPPRIME.value)
    if tenant_id:
        query = query.filter(models.Ticket.tenant_id == tenant_id)
    count = query.update({models.Ticket.status: TicketStatus.SUPPRIME.value}, synchronize_session=False)
    db.commit()
    return count
