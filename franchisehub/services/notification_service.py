"""
Notification service: in-app notifications and read tracking.

Centralizes fan-out (user, tenant, managers, viewers) so routers only decide
*who* should hear about an event, never *how* rows are written.
"""

import logging
import math
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import NotificationType, ViewTargetType
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.roles import ROLE_MANAGER, ROLE_VIEWER

logger = logging.getLogger(__name__)

# Unread-count buckets shown in the navigation badges
CATEGORY_TYPES: Dict[str, Tuple[str, ...]] = {
    "documents": (NotificationType.DOCUMENT_UPLOADED.value,),
    "announcements": (
        NotificationType.ANNOUNCEMENT_POSTED.value,
        NotificationType.RESTAURANT_JOINED.value,
    ),
    "tickets": (
        NotificationType.TICKET_CREATED.value,
        NotificationType.TICKET_COMMENTED.value,
        NotificationType.TICKET_STATUS_UPDATED.value,
    ),
}

# Notification types cleared when a target of that kind is viewed
VIEW_TARGET_TYPES: Dict[str, Tuple[str, ...]] = {
    ViewTargetType.DOCUMENT.value: CATEGORY_TYPES["documents"],
    ViewTargetType.ANNOUNCEMENT.value: CATEGORY_TYPES["announcements"],
    ViewTargetType.TICKET.value: CATEGORY_TYPES["tickets"],
}


class NotificationService:
    """Service class for in-app notification operations."""

    def __init__(self, db: Session):
        self.db = db

    # === Creation and fan-out ===

    def _add(self, user_id: uuid.UUID, tenant_id: Optional[uuid.UUID], notification_type: str,
             target_id: uuid.UUID, message: str) -> models.Notification:
        notification = models.Notification(
            user_id=user_id,
            tenant_id=tenant_id,
            type=getattr(notification_type, "value", notification_type),
            target_id=target_id,
            message=message,
        )
        self.db.add(notification)
        return notification

    def _fan_out(self, users: Iterable[models.User], tenant_id: Optional[uuid.UUID], notification_type: str,
                 target_id: uuid.UUID, message: str, exclude_user_id: Optional[uuid.UUID] = None) -> int:
        count = 0
        for user in users:
            if exclude_user_id is not None and user.id == exclude_user_id:
                continue
            self._add(user.id, tenant_id, notification_type, target_id, message)
            count += 1
        self.db.commit()
        logger.info(
            "notifications_created type=%s target=%s recipients=%d",
            getattr(notification_type, "value", notification_type), target_id, count,
        )
        return count

    def notify_user(self, user_id: uuid.UUID, tenant_id: Optional[uuid.UUID], notification_type: str,
                    target_id: uuid.UUID, message: str) -> models.Notification:
        notification = self._add(user_id, tenant_id, notification_type, target_id, message)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def notify_tenant(self, tenant_id: uuid.UUID, notification_type: str, target_id: uuid.UUID, message: str,
                      exclude_user_id: Optional[uuid.UUID] = None) -> int:
        """Notify every active user of the tenant, optionally skipping the author."""
        users = tenant_repo.get_tenant_users(self.db, tenant_id)
        return self._fan_out(users, tenant_id, notification_type, target_id, message, exclude_user_id)

    def notify_managers(self, tenant_id: uuid.UUID, notification_type: str, target_id: uuid.UUID, message: str,
                        exclude_user_id: Optional[uuid.UUID] = None) -> int:
        users = tenant_repo.get_tenant_users(self.db, tenant_id, role=ROLE_MANAGER)
        return self._fan_out(users, tenant_id, notification_type, target_id, message, exclude_user_id)

    def notify_viewers(self, tenant_id: uuid.UUID, notification_type: str, target_id: uuid.UUID, message: str,
                       restaurant_ids: Optional[List[uuid.UUID]] = None) -> int:
        """Notify the tenant's viewers, or only those of ``restaurant_ids`` when given."""
        return self._fan_out(
            self.get_viewers(tenant_id, restaurant_ids), tenant_id, notification_type, target_id, message
        )

    def get_viewers(self, tenant_id: uuid.UUID, restaurant_ids: Optional[List[uuid.UUID]] = None):
        return tenant_repo.get_tenant_users(self.db, tenant_id, role=ROLE_VIEWER, restaurant_ids=restaurant_ids)

    # === Reading ===

    def get_user_notifications(self, user_id: uuid.UUID, page: int = 1, limit: int = 50):
        query = self.db.query(models.Notification).filter(models.Notification.user_id == user_id)
        total = query.count()
        rows = (
            query.order_by(desc(models.Notification.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "notifications": rows,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }

    def get_unread_counts(self, user_id: uuid.UUID) -> Dict[str, int]:
        counts = {}
        for category, types in CATEGORY_TYPES.items():
            counts[category] = self.db.query(models.Notification).filter(
                models.Notification.user_id == user_id,
                models.Notification.is_read.is_(False),
                models.Notification.type.in_(types),
            ).count()
        return counts

    # === Read tracking ===

    def mark_types_read(self, user_id: uuid.UUID, types: Iterable[str],
                        target_id: Optional[uuid.UUID] = None) -> int:
        query = self.db.query(models.Notification).filter(
            models.Notification.user_id == user_id,
            models.Notification.is_read.is_(False),
            models.Notification.type.in_([getattr(t, "value", t) for t in types]),
        )
        if target_id is not None:
            query = query.filter(models.Notification.target_id == target_id)
        updated = query.update({models.Notification.is_read: True}, synchronize_session=False)
        self.db.commit()
        return updated

    def mark_all_read(self, user_id: uuid.UUID, notification_type: str) -> int:
        return self.mark_types_read(user_id, [notification_type])

    def mark_category_read(self, user_id: uuid.UUID, category: str) -> int:
        types = CATEGORY_TYPES.get(category)
        if types is None:
            raise ValueError(f"Unknown notification category: {category}")
        return self.mark_types_read(user_id, types)

    def record_view(self, user_id: uuid.UUID, target_type: str, target_id: uuid.UUID) -> models.View:
        """Insert the view once and clear the matching notifications."""
        target_type = getattr(target_type, "value", target_type)
        view = self._get_view(user_id, target_type, target_id)
        if view is None:
            view = models.View(user_id=user_id, target_type=target_type, target_id=target_id)
            self.db.add(view)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                view = self._get_view(user_id, target_type, target_id)
        self.mark_types_read(user_id, VIEW_TARGET_TYPES.get(target_type, ()), target_id=target_id)
        return view

    def _get_view(self, user_id, target_type, target_id):
        return self.db.query(models.View).filter(
            models.View.user_id == user_id,
            models.View.target_type == target_type,
            models.View.target_id == target_id,
        ).first()

    def get_views_for_target(self, target_type: str, target_id: uuid.UUID, page: int = 1, limit: int = 50):
        query = self.db.query(models.View).filter(
            models.View.target_type == getattr(target_type, "value", target_type),
            models.View.target_id == target_id,
        )
        total = query.count()
        rows = query.order_by(desc(models.View.viewed_at)).offset((page - 1) * limit).limit(limit).all()
        return {"views": rows, "total": total, "total_pages": math.ceil(total / limit) if limit else 0}

    # === Maintenance ===

    def cleanup_manager_announcements(self) -> int:
        """Delete announcement notifications held by managers; they author announcements, not read them."""
        manager_ids = select(models.User.id).where(models.User.role == ROLE_MANAGER)
        deleted = self.db.query(models.Notification).filter(
            models.Notification.type.in_(CATEGORY_TYPES["announcements"]),
            models.Notification.user_id.in_(manager_ids),
        ).delete(synchronize_session=False)
        self.db.commit()
        logger.info("manager_announcement_notifications_deleted count=%d", deleted)
        return deleted
