"""
In-app notification endpoints.
"""
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import ViewTargetType
from franchisehub.services.notification_service import NotificationService
from franchisehub.utils.roles import MANAGE_ROLES, ROLE_ADMIN

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=schemas.NotificationPage)
def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return NotificationService(db).get_user_notifications(user.id, page=page, limit=limit)


@router.get("/unread-counts", response_model=schemas.UnreadCounts)
def unread_counts(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    user, _ = user_context
    return NotificationService(db).get_unread_counts(user.id)


@router.post("/views", response_model=schemas.View)
def record_view(
    payload: schemas.ViewCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return NotificationService(db).record_view(user.id, payload.target_type, payload.target_id)


@router.post("/mark-all-read", response_model=schemas.SuccessResponse)
def mark_all_read(
    payload: schemas.MarkAllRead,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    NotificationService(db).mark_all_read(user.id, payload.notification_type)
    return {"success": True}


@router.post("/mark-category-read", response_model=schemas.SuccessResponse)
def mark_category_read(
    payload: schemas.MarkCategoryRead,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    NotificationService(db).mark_category_read(user.id, payload.category)
    return {"success": True}


@router.get("/views/{target_type}/{target_id}", response_model=schemas.ViewPage)
def list_target_views(
    target_type: ViewTargetType,
    target_id: uuid.UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    return NotificationService(db).get_views_for_target(target_type, target_id, page=page, limit=limit)


@router.post("/cleanup-manager-announcements")
def cleanup_manager_announcements(
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    return {"deleted": NotificationService(db).cleanup_manager_announcements()}
