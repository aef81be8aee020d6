"""
Announcement endpoints.

An announcement with no restaurants is tenant-wide; otherwise only the
targeted restaurants' viewers see it.
"""
import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access, is_admin, is_viewer, resolve_tenant_id
from franchisehub.db import models, schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import NotificationType
from franchisehub.db.repositories import announcements as announcement_repo
from franchisehub.db.repositories import documents as document_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services.notification_service import CATEGORY_TYPES, NotificationService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/announcements", tags=["announcements"])
logger = logging.getLogger(__name__)


def _get_announcement(db: Session, announcement_id: uuid.UUID, current_user):
    announcement = announcement_repo.get_announcement(db, announcement_id)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")
    ensure_tenant_access(current_user, announcement.tenant_id)
    return announcement


@router.get("", response_model=List[schemas.Announcement])
def list_announcements_endpoint(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    if is_admin(current_user):
        return announcement_repo.get_announcements(db)
    if is_viewer(current_user):
        if not current_user["restaurant_id"]:
            raise HTTPException(status_code=403, detail="No restaurant attached to this account")
        return announcement_repo.get_announcements(
            db, tenant_id=current_user["tenant_id"], restaurant_id=current_user["restaurant_id"]
        )
    return announcement_repo.get_announcements(db, tenant_id=current_user["tenant_id"])


@router.post("", response_model=schemas.Announcement, status_code=status.HTTP_201_CREATED)
def create_announcement_endpoint(
    payload: schemas.AnnouncementCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, payload.tenant_id)

    restaurants = []
    for restaurant_id in dict.fromkeys(payload.restaurant_ids):
        restaurant = tenant_repo.get_restaurant(db, restaurant_id)
        if restaurant is None or restaurant.tenant_id != tenant_id:
            raise HTTPException(status_code=400, detail=f"Restaurant {restaurant_id} does not belong to this tenant")
        restaurants.append(restaurant)
    documents = []
    for document_id in dict.fromkeys(payload.document_ids):
        document = document_repo.get_document(db, document_id)
        if document is None or document.tenant_id != tenant_id:
            raise HTTPException(status_code=400, detail=f"Document {document_id} does not belong to this tenant")
        documents.append(document)

    created = announcement_repo.create_announcement(
        db,
        tenant_id=tenant_id,
        title=payload.title,
        content=payload.content,
        created_by=user.id,
        restaurants=restaurants,
        documents=documents,
    )
    try:
        NotificationService(db).notify_viewers(
            tenant_id,
            NotificationType.ANNOUNCEMENT_POSTED,
            created.id,
            f"Nouvelle annonce : {created.title}",
            restaurant_ids=[r.id for r in restaurants] or None,
        )
    except Exception:
        db.rollback()
        logger.warning("announcement_notify_failed announcement=%s", created.id, exc_info=True)
    db.refresh(created)
    return created


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement_endpoint(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    announcement = _get_announcement(db, announcement_id, current_user)
    announcement_repo.soft_delete_announcement(db, announcement)
    return None


@router.post("/{announcement_id}/mark-as-read", response_model=schemas.SuccessResponse)
def mark_announcement_read_endpoint(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    announcement = _get_announcement(db, announcement_id, current_user)
    announcement_repo.record_view(db, announcement, user.id, announcement.tenant_id)
    NotificationService(db).mark_types_read(user.id, CATEGORY_TYPES["announcements"], target_id=announcement.id)
    return {"success": True}


@router.get("/{announcement_id}/views", response_model=List[schemas.AnnouncementViewEntry])
def list_announcement_views_endpoint(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    announcement = _get_announcement(db, announcement_id, current_user)
    return [
        {"user_id": view.user_id, "email": view.user.email if view.user else None, "viewed_at": view.viewed_at}
        for view in announcement_repo.get_views(db, announcement.id)
    ]


@router.get("/{announcement_id}/view-stats", response_model=schemas.AnnouncementStats)
def announcement_view_stats_endpoint(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    announcement: models.Announcement = _get_announcement(db, announcement_id, current_user)
    restaurant_ids = [r.id for r in announcement.restaurants] or None
    audience = NotificationService(db).get_viewers(announcement.tenant_id, restaurant_ids)
    total_users = len(audience)
    # Managers reading the announcement are not part of its audience
    total_views = announcement_repo.count_views(db, announcement.id, [u.id for u in audience])
    percentage = round(total_views / total_users * 100) if total_users else 0
    return {"total_views": total_views, "total_users": total_users, "percentage": percentage}
