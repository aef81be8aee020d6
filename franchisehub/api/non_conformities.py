"""
Non-conformity endpoints.

Non-conformities carry no tenant column; tenancy comes from their execution.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import require_roles
from franchisehub.api.permissions import can_access_tenant, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import NonConformityStatus, Severity
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/non-conformities", tags=["non-conformities"])

manage_roles = require_roles(*MANAGE_ROLES)


def _get_nc(db: Session, nc_id: uuid.UUID, current_user):
    nc = audit_repo.get_non_conformity(db, nc_id)
    if nc is None or not can_access_tenant(current_user, nc.execution.tenant_id):
        raise HTTPException(status_code=404, detail="Non-conformity not found")
    return nc


def _check_references(db: Session, execution, data) -> None:
    if data.get("item_id") and data["item_id"] not in {item.id for item in execution.template.items}:
        raise HTTPException(status_code=400, detail="Item does not belong to the audited template")
    if data.get("responsible_user_id"):
        responsible = tenant_repo.get_user(db, data["responsible_user_id"])
        if responsible is None or responsible.tenant_id != execution.tenant_id:
            raise HTTPException(status_code=400, detail="Responsible user not found in this tenant")


@router.post("", response_model=schemas.NonConformity, status_code=status.HTTP_201_CREATED)
def create_non_conformity_endpoint(
    payload: schemas.NonConformityCreate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    execution = audit_repo.get_execution(db, payload.execution_id)
    if execution is None or not can_access_tenant(current_user, execution.tenant_id):
        raise HTTPException(status_code=400, detail="Audit execution not found in this tenant")
    data = payload.model_dump()
    _check_references(db, execution, data)
    return audit_repo.create_non_conformity(db, data)


@router.get("", response_model=List[schemas.NonConformity])
def list_non_conformities_endpoint(
    status_filter: Optional[NonConformityStatus] = Query(default=None, alias="status"),
    severity: Optional[Severity] = None,
    restaurant_id: Optional[uuid.UUID] = None,
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_non_conformities(
        db,
        tenant_id=resolve_tenant_id(current_user, tenant_id),
        status=status_filter.value if status_filter else None,
        severity=severity.value if severity else None,
        restaurant_id=restaurant_id,
    )


@router.get("/stats", response_model=schemas.NonConformityStats)
def non_conformity_stats_endpoint(
    restaurant_id: Optional[uuid.UUID] = None,
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_non_conformity_stats(
        db, tenant_id=resolve_tenant_id(current_user, tenant_id), restaurant_id=restaurant_id
    )


@router.get("/{nc_id}", response_model=schemas.NonConformity)
def get_non_conformity_endpoint(
    nc_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return _get_nc(db, nc_id, current_user)


@router.patch("/{nc_id}", response_model=schemas.NonConformity)
def update_non_conformity_endpoint(
    nc_id: uuid.UUID,
    payload: schemas.NonConformityUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    nc = _get_nc(db, nc_id, current_user)
    data = payload.model_dump(exclude_unset=True)
    _check_references(db, nc.execution, data)
    if data.get("status") == NonConformityStatus.RESOLVED and not data.get("resolution_date"):
        data["resolution_date"] = datetime.now(timezone.utc)
    return audit_repo.update_non_conformity(db, nc, data)


@router.delete("/{nc_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_non_conformity_endpoint(
    nc_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    audit_repo.delete_non_conformity(db, _get_nc(db, nc_id, current_user))
    return None
