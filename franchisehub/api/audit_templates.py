"""
Audit template endpoints.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import require_roles
from franchisehub.api.permissions import can_access_tenant, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import AuditCategory
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.services.audit_service import get_suggested_questions
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/audit-templates", tags=["audit-templates"])

manage_roles = require_roles(*MANAGE_ROLES)


def _get_template(db: Session, template_id: uuid.UUID, current_user):
    template = audit_repo.get_template(db, template_id)
    if template is None or not can_access_tenant(current_user, template.tenant_id):
        raise HTTPException(status_code=404, detail="Audit template not found")
    return template


@router.post("", response_model=schemas.AuditTemplate, status_code=status.HTTP_201_CREATED)
def create_template_endpoint(
    template: schemas.AuditTemplateCreate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, template.tenant_id)
    data = template.model_dump(exclude={"tenant_id"})
    return audit_repo.create_template(db, tenant_id=tenant_id, created_by=user.id, data=data)


@router.get("", response_model=List[schemas.AuditTemplate])
def list_templates_endpoint(
    category: Optional[AuditCategory] = None,
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_templates(
        db,
        tenant_id=resolve_tenant_id(current_user, tenant_id),
        category=category.value if category else None,
    )


@router.get("/suggestions/{category}", response_model=List[schemas.SuggestedQuestion])
def suggested_questions_endpoint(category: str, user_context=Depends(manage_roles)):
    return get_suggested_questions(category)


@router.get("/{template_id}", response_model=schemas.AuditTemplate)
def get_template_endpoint(
    template_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return _get_template(db, template_id, current_user)


@router.patch("/{template_id}", response_model=schemas.AuditTemplate)
def update_template_endpoint(
    template_id: uuid.UUID,
    template: schemas.AuditTemplateUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    db_template = _get_template(db, template_id, current_user)
    data = template.model_dump(exclude_unset=True)
    if data.get("items") is None:
        data.pop("items", None)
    return audit_repo.update_template(db, db_template, data)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template_endpoint(
    template_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    audit_repo.deactivate_template(db, _get_template(db, template_id, current_user))
    return None
