"""
Audit archive repository functions.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import ArchiveStatus

SORTABLE_COLUMNS = {
    "archived_at": models.AuditArchive.archived_at,
    "completed_date": models.AuditArchive.completed_date,
    "total_score": models.AuditArchive.total_score,
    "restaurant_name": models.AuditArchive.restaurant_name,
    "template_name": models.AuditArchive.template_name,
}


def create_archive(db: Session, **fields):
    """Stage an archive row; the archive service commits with the execution delete."""
    db_archive = models.AuditArchive(**fields)
    db.add(db_archive)
    db.flush()
    return db_archive


def get_archive(db: Session, archive_id: uuid.UUID):
    return db.query(models.AuditArchive).filter(models.AuditArchive.id == archive_id).first()


def get_archive_by_execution(db: Session, execution_id: uuid.UUID):
    return (
        db.query(models.AuditArchive)
        .filter(models.AuditArchive.original_execution_id == execution_id)
        .first()
    )


def get_archived_execution_ids(db: Session, tenant_id: Optional[uuid.UUID] = None) -> List[uuid.UUID]:
    query = db.query(models.AuditArchive.original_execution_id)
    if tenant_id:
        query = query.filter(models.AuditArchive.tenant_id == tenant_id)
    return [row[0] for row in query.all()]


def search_archives(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
    category: Optional[str] = None,
    restaurant_name: Optional[str] = None,
    inspector_name: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_score: Optional[float] = None,
    max_score: Optional[float] = None,
    status: str = ArchiveStatus.ARCHIVED.value,
    sort_by: str = "archived_at",
    sort_order: str = "DESC",
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[models.AuditArchive], int]:
    query = db.query(models.AuditArchive).filter(models.AuditArchive.status == status)
    if tenant_id:
        query = query.filter(models.AuditArchive.tenant_id == tenant_id)
    if restaurant_id:
        query = query.filter(models.AuditArchive.restaurant_id == restaurant_id)
    if category:
        query = query.filter(models.AuditArchive.template_category == category)
    if restaurant_name:
        query = query.filter(models.AuditArchive.restaurant_name.ilike(f"%{restaurant_name}%"))
    if inspector_name:
        query = query.filter(models.AuditArchive.inspector_name.ilike(f"%{inspector_name}%"))
    if date_from is not None:
        query = query.filter(models.AuditArchive.completed_date >= date_from)
    if date_to is not None:
        query = query.filter(models.AuditArchive.completed_date <= date_to)
    if min_score is not None:
        query = query.filter(models.AuditArchive.total_score >= min_score)
    if max_score is not None:
        query = query.filter(models.AuditArchive.total_score <= max_score)

    total = query.count()
    column = SORTABLE_COLUMNS.get(sort_by, models.AuditArchive.archived_at)
    ordering = column.asc() if sort_order.upper() == "ASC" else column.desc()
    rows = query.order_by(ordering).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def get_archive_stats(db: Session, *, tenant_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
    base = db.query(models.AuditArchive).filter(models.AuditArchive.status == ArchiveStatus.ARCHIVED.value)
    if tenant_id:
        base = base.filter(models.AuditArchive.tenant_id == tenant_id)
    total = base.count()
    average = base.with_entities(func.avg(models.AuditArchive.total_score)).scalar()
    categories = (
        base.with_entities(models.AuditArchive.template_category, func.count(models.AuditArchive.id))
        .group_by(models.AuditArchive.template_category)
        .order_by(func.count(models.AuditArchive.id).desc())
        .all()
    )
    return {
        "total_archives": total,
        "average_score": round(float(average or 0), 2),
        "categories": [{"category": category, "count": count} for category, count in categories],
    }


def mark_archive_deleted(db: Session, archive):
    archive.status = ArchiveStatus.DELETED.value
    db.commit()
    return archive
