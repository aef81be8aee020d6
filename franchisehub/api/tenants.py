"""
Tenant endpoints.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access, is_admin
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.roles import MANAGE_ROLES, ROLE_ADMIN

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.post("", response_model=schemas.Tenant, status_code=status.HTTP_201_CREATED)
def create_tenant_endpoint(
    tenant: schemas.TenantCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    user, _ = user_context
    created = tenant_repo.create_tenant(db, tenant)
    activity.log(
        db,
        action=ActivityAction.TENANT_CREATE,
        target_type="tenant",
        target_id=created.id,
        actor_user_id=user.id,
        tenant_id=created.id,
        metadata={"name": created.name},
    )
    return created


@router.get("", response_model=List[schemas.Tenant])
def list_tenants_endpoint(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    return tenant_repo.get_tenants(db, skip=skip, limit=limit)


@router.get("/{tenant_id}", response_model=schemas.Tenant)
def get_tenant_endpoint(
    tenant_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    ensure_tenant_access(current_user, tenant_id)
    tenant = tenant_repo.get_tenant(db, tenant_id)
    if tenant is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


@router.patch("/{tenant_id}", response_model=schemas.Tenant)
def update_tenant_endpoint(
    tenant_id: uuid.UUID,
    tenant: schemas.TenantUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    if not is_admin(current_user):
        ensure_tenant_access(current_user, tenant_id)
    updated = tenant_repo.update_tenant(db, tenant_id, tenant)
    if updated is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    activity.log(
        db,
        action=ActivityAction.TENANT_UPDATE,
        target_type="tenant",
        target_id=tenant_id,
        actor_user_id=user.id,
        tenant_id=tenant_id,
        metadata={"fields": sorted(tenant.model_dump(exclude_unset=True).keys())},
    )
    return updated
