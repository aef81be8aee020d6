"""
Announcement repository functions.
"""
from __future__ import annotations

import uuid
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from franchisehub.db import models


def create_announcement(
    db: Session,
    *,
    tenant_id: uuid.UUID,
    title: str,
    content: str,
    created_by: Optional[uuid.UUID],
    restaurants: Optional[List[models.Restaurant]] = None,
    documents: Optional[List[models.Document]] = None,
):
    db_announcement = models.Announcement(
        tenant_id=tenant_id,
        title=title,
        content=content,
        created_by=created_by,
    )
    db_announcement.restaurants = list(restaurants or [])
    db_announcement.documents = list(documents or [])
    db.add(db_announcement)
    db.commit()
    db.refresh(db_announcement)
    return db_announcement


def get_announcement(db: Session, announcement_id: uuid.UUID):
    return (
        db.query(models.Announcement)
        .filter(models.Announcement.id == announcement_id, models.Announcement.is_deleted.is_(False))
        .first()
    )


def get_announcements(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
):
    """List live announcements; with ``restaurant_id`` keep tenant-wide ones and those targeting it."""
    query = db.query(models.Announcement).filter(models.Announcement.is_deleted.is_(False))
    if tenant_id:
        query = query.filter(models.Announcement.tenant_id == tenant_id)
    if restaurant_id:
        query = query.filter(
            or_(
                models.Announcement.restaurants.any(models.Restaurant.id == restaurant_id),
                ~models.Announcement.restaurants.any(),
            )
        )
    return query.order_by(models.Announcement.created_at.desc()).all()


def soft_delete_announcement(db: Session, announcement):
    announcement.is_deleted = True
    db.commit()
    return announcement


def record_view(db: Session, announcement, user_id: uuid.UUID, tenant_id: Optional[uuid.UUID]):
    existing = (
        db.query(models.AnnouncementView)
        .filter(
            models.AnnouncementView.announcement_id == announcement.id,
            models.AnnouncementView.user_id == user_id,
        )
        .first()
    )
    if existing:
        return existing
    view = models.AnnouncementView(announcement_id=announcement.id, user_id=user_id, tenant_id=tenant_id)
    db.add(view)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent mark-as-read from the same user
        db.rollback()
        return (
            db.query(models.AnnouncementView)
            .filter(
                models.AnnouncementView.announcement_id == announcement.id,
                models.AnnouncementView.user_id == user_id,
            )
            .first()
        )
    db.refresh(view)
    return view


def get_views(db: Session, announcement_id: uuid.UUID):
    return (
        db.query(models.AnnouncementView)
        .filter(models.AnnouncementView.announcement_id == announcement_id)
        .order_by(models.AnnouncementView.viewed_at.desc())
        .all()
    )


def count_views(db: Session, announcement_id: uuid.UUID, user_ids: Optional[Iterable[uuid.UUID]] = None) -> int:
    """Views of an announcement, optionally limited to ``user_ids`` (the audience)."""
    query = db.query(models.AnnouncementView).filter(models.AnnouncementView.announcement_id == announcement_id)
    if user_ids is not None:
        query = query.filter(models.AnnouncementView.user_id.in_(list(user_ids)))
    return query.count()
