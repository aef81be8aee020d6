"""
Audit archive endpoints.
"""
import math
import uuid
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import can_access_tenant, is_admin, is_viewer, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import ArchiveStatus
from franchisehub.db.repositories import archives as archive_repo
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.services.archive_service import ArchiveService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/audit-archives", tags=["audit-archives"])

manage_roles = require_roles(*MANAGE_ROLES)

SortField = Literal["archived_at", "completed_date", "total_score", "restaurant_name", "template_name"]


@router.post("/archive/{execution_id}", response_model=schemas.AuditArchive)
def archive_execution_endpoint(
    execution_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    execution = audit_repo.get_execution(db, execution_id)
    if execution is not None and not can_access_tenant(current_user, execution.tenant_id):
        raise HTTPException(status_code=404, detail="Audit execution not found")
    return ArchiveService(db).archive_execution(execution_id, user)


@router.post("/auto-archive", response_model=schemas.AutoArchiveResult)
def auto_archive_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    older_than_days: Optional[int] = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    scope = resolve_tenant_id(current_user, tenant_id)
    return {"archived_count": ArchiveService(db).auto_archive(scope, older_than_days, user=user)}


@router.get("", response_model=schemas.AuditArchivePage)
def list_archives_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    category: Optional[str] = None,
    restaurant_name: Optional[str] = None,
    inspector_name: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_score: Optional[float] = None,
    max_score: Optional[float] = None,
    status_filter: ArchiveStatus = Query(default=ArchiveStatus.ARCHIVED, alias="status"),
    sort_by: SortField = "archived_at",
    sort_order: Literal["ASC", "DESC", "asc", "desc"] = "DESC",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    scope = tenant_id if is_admin(current_user) else resolve_tenant_id(current_user)
    restaurant_scope = None
    if is_viewer(current_user):
        if not current_user["restaurant_id"]:
            raise HTTPException(status_code=403, detail="No restaurant attached to this account")
        restaurant_scope = current_user["restaurant_id"]
    rows, total = archive_repo.search_archives(
        db,
        tenant_id=scope,
        restaurant_id=restaurant_scope,
        category=category,
        restaurant_name=restaurant_name,
        inspector_name=inspector_name,
        date_from=date_from,
        date_to=date_to,
        min_score=min_score,
        max_score=max_score,
        status=status_filter.value,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "data": rows,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("/stats", response_model=schemas.AuditArchiveStats)
def archive_stats_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    scope = tenant_id if is_admin(current_user) else resolve_tenant_id(current_user)
    return archive_repo.get_archive_stats(db, tenant_id=scope)


def _get_archive(db: Session, archive_id: uuid.UUID, current_user):
    archive = archive_repo.get_archive(db, archive_id)
    if archive is None or not can_access_tenant(current_user, archive.tenant_id):
        raise HTTPException(status_code=404, detail="Audit archive not found")
    if is_viewer(current_user) and archive.restaurant_id != current_user["restaurant_id"]:
        raise HTTPException(status_code=404, detail="Audit archive not found")
    return archive


@router.get("/{archive_id}", response_model=schemas.AuditArchive)
def get_archive_endpoint(
    archive_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    return _get_archive(db, archive_id, current_user)


@router.delete("/{archive_id}")
def delete_archive_endpoint(
    archive_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    ArchiveService(db).delete_archive(_get_archive(db, archive_id, current_user), user=user)
    return {"deleted": True}
