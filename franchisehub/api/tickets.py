"""
Ticket endpoints.

Viewers open tickets for their restaurant; managers triage them. Deletion is
a status change to ``supprime``.
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import can_access_tenant, ensure_tenant_access, is_admin, is_viewer
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import NotificationType
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.db.repositories import tickets as ticket_repo
from franchisehub.services.notification_service import NotificationService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/tickets", tags=["tickets"])
logger = logging.getLogger(__name__)


def _get_accessible_ticket(db: Session, ticket_id: uuid.UUID, user, current_user):
    ticket = ticket_repo.get_ticket(db, ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if is_admin(current_user):
        return ticket
    if not can_access_tenant(current_user, ticket.tenant_id):
        raise HTTPException(status_code=403, detail="Access to this ticket is forbidden")
    if is_viewer(current_user):
        own_restaurant = current_user["restaurant_id"] is not None and ticket.restaurant_id == current_user["restaurant_id"]
        if ticket.created_by != user.id and not own_restaurant:
            raise HTTPException(status_code=403, detail="Access to this ticket is forbidden")
    return ticket


@router.post("", response_model=schemas.Ticket, status_code=status.HTTP_201_CREATED)
def create_ticket_endpoint(
    ticket: schemas.TicketCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    if not is_viewer(current_user) or not current_user["restaurant_id"]:
        raise HTTPException(status_code=403, detail="Only restaurant users can open tickets")
    restaurant = tenant_repo.get_restaurant(db, current_user["restaurant_id"])
    if restaurant is None or restaurant.tenant_id != current_user["tenant_id"]:
        raise HTTPException(status_code=403, detail="Restaurant does not belong to your tenant")
    created = ticket_repo.create_ticket(
        db,
        title=ticket.title,
        description=ticket.description,
        tenant_id=restaurant.tenant_id,
        restaurant_id=restaurant.id,
        created_by=user.id,
    )
    try:
        NotificationService(db).notify_managers(
            restaurant.tenant_id,
            NotificationType.TICKET_CREATED,
            created.id,
            f"Nouveau ticket de {restaurant.name} : {created.title}",
        )
    except Exception:
        db.rollback()
        logger.warning("ticket_notify_failed ticket=%s", created.id, exc_info=True)
    db.refresh(created)
    return created


@router.get("", response_model=List[schemas.Ticket])
def list_tickets_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    if is_admin(current_user):
        return ticket_repo.get_tickets(db, tenant_id=tenant_id, skip=skip, limit=limit)
    if is_viewer(current_user):
        if not current_user["restaurant_id"]:
            return []
        return ticket_repo.get_tickets(
            db,
            tenant_id=current_user["tenant_id"],
            restaurant_id=current_user["restaurant_id"],
            skip=skip,
            limit=limit,
        )
    return ticket_repo.get_tickets(db, tenant_id=current_user["tenant_id"], skip=skip, limit=limit)


@router.delete("", response_model=schemas.DeletedCount)
def bulk_delete_tickets_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    scope = tenant_id if is_admin(current_user) else current_user["tenant_id"]
    deleted = ticket_repo.soft_delete_tickets(db, tenant_id=scope)
    activity.log(
        db,
        action=ActivityAction.TICKETS_BULK_DELETE,
        target_type="tenant" if scope else "system",
        target_id=scope,
        actor_user_id=user.id,
        tenant_id=scope,
        metadata={"deleted": deleted},
    )
    return {"deleted": deleted}


@router.get("/{ticket_id}", response_model=schemas.TicketDetail)
def get_ticket_endpoint(
    ticket_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    return _get_accessible_ticket(db, ticket_id, user, current_user)


@router.put("/{ticket_id}/status", response_model=schemas.Ticket)
def update_ticket_status_endpoint(
    ticket_id: uuid.UUID,
    payload: schemas.TicketStatusUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    ticket = ticket_repo.get_ticket(db, ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    ensure_tenant_access(current_user, ticket.tenant_id)
    updated = ticket_repo.update_ticket_status(db, ticket, payload.status.value)
    if updated.created_by and updated.created_by != user.id:
        try:
            NotificationService(db).notify_user(
                updated.created_by,
                updated.tenant_id,
                NotificationType.TICKET_STATUS_UPDATED,
                updated.id,
                f"Le statut du ticket « {updated.title} » est maintenant {updated.status}",
            )
        except Exception:
            db.rollback()
            logger.warning("ticket_status_notify_failed ticket=%s", updated.id, exc_info=True)
        db.refresh(updated)
    return updated


@router.post("/{ticket_id}/comments", response_model=schemas.Comment, status_code=status.HTTP_201_CREATED)
def add_comment_endpoint(
    ticket_id: uuid.UUID,
    payload: schemas.CommentCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    ticket = _get_accessible_ticket(db, ticket_id, user, current_user)
    comment = ticket_repo.add_comment(db, ticket, user.id, payload.message)
    message = f"Nouveau commentaire sur le ticket « {ticket.title} »"
    try:
        service = NotificationService(db)
        if is_viewer(current_user):
            service.notify_managers(ticket.tenant_id, NotificationType.TICKET_COMMENTED, ticket.id, message)
        elif ticket.created_by and ticket.created_by != user.id:
            service.notify_user(ticket.created_by, ticket.tenant_id, NotificationType.TICKET_COMMENTED, ticket.id, message)
    except Exception:
        db.rollback()
        logger.warning("ticket_comment_notify_failed ticket=%s", ticket.id, exc_info=True)
    db.refresh(comment)
    return comment


@router.post("/{ticket_id}/attachments", response_model=schemas.Attachment, status_code=status.HTTP_201_CREATED)
def add_attachment_endpoint(
    ticket_id: uuid.UUID,
    payload: schemas.AttachmentCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    ticket = _get_accessible_ticket(db, ticket_id, user, current_user)
    if payload.comment_id:
        comment = ticket_repo.get_comment(db, payload.comment_id)
        if comment is None or comment.ticket_id != ticket.id:
            raise HTTPException(status_code=404, detail="Comment not found")
        return ticket_repo.add_attachment(
            db,
            filename=payload.filename,
            url=payload.url,
            mime_type=payload.mime_type,
            file_size=payload.file_size,
            uploaded_by=user.id,
            comment_id=comment.id,
        )
    return ticket_repo.add_attachment(
        db,
        filename=payload.filename,
        url=payload.url,
        mime_type=payload.mime_type,
        file_size=payload.file_size,
        uploaded_by=user.id,
        ticket_id=ticket.id,
    )


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket_endpoint(
    ticket_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    ticket = ticket_repo.get_ticket(db, ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    ensure_tenant_access(current_user, ticket.tenant_id)
    ticket_repo.soft_delete_ticket(db, ticket)
    return None
