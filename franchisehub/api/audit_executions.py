"""
Audit execution endpoints: scheduling, running and completing audits.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import can_access_tenant, is_admin, is_viewer, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import ExecutionStatus
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.services.audit_service import AuditService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/audit-executions", tags=["audit-executions"])

manage_roles = require_roles(*MANAGE_ROLES)


def _get_execution(db: Session, execution_id: uuid.UUID, current_user):
    execution = audit_repo.get_execution(db, execution_id)
    if execution is None:
        raise HTTPException(status_code=404, detail="Audit execution not found")
    if not can_access_tenant(current_user, execution.tenant_id):
        raise HTTPException(status_code=403, detail="Access to this audit is forbidden")
    return execution


@router.post("", response_model=schemas.AuditExecution, status_code=status.HTTP_201_CREATED)
def create_execution_endpoint(
    payload: schemas.AuditExecutionCreate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, payload.tenant_id)
    return AuditService(db).create_execution(
        tenant_id=tenant_id, assigned_by=user.id, data=payload.model_dump(exclude={"tenant_id"})
    )


@router.get("", response_model=List[schemas.AuditExecution])
def list_executions_endpoint(
    status_filter: Optional[ExecutionStatus] = Query(default=None, alias="status"),
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_executions(
        db,
        tenant_id=resolve_tenant_id(current_user, tenant_id),
        status=status_filter.value if status_filter else None,
    )


@router.post("/check-overdue", response_model=schemas.UpdatedCount)
def check_overdue_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    scope = tenant_id if is_admin(current_user) else resolve_tenant_id(current_user)
    return {"updated": AuditService(db).check_overdue(scope)}


@router.get("/{execution_id}", response_model=schemas.AuditExecutionDetail)
def get_execution_endpoint(
    execution_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    execution = _get_execution(db, execution_id, current_user)
    if is_viewer(current_user) and execution.restaurant_id != current_user["restaurant_id"]:
        raise HTTPException(status_code=403, detail="Access to this audit is forbidden")
    return execution


@router.post("/{execution_id}/start", response_model=schemas.AuditExecution)
def start_execution_endpoint(
    execution_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return AuditService(db).start(_get_execution(db, execution_id, current_user))


@router.post("/{execution_id}/responses", response_model=List[schemas.AuditResponse])
def save_responses_endpoint(
    execution_id: uuid.UUID,
    payload: schemas.AuditResponsesPayload,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    execution = _get_execution(db, execution_id, current_user)
    return AuditService(db).save_responses(execution, [r.model_dump() for r in payload.responses])


@router.post("/{execution_id}/complete", response_model=schemas.AuditExecution)
def complete_execution_endpoint(
    execution_id: uuid.UUID,
    payload: Optional[schemas.AuditCompletePayload] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    execution = _get_execution(db, execution_id, current_user)
    return AuditService(db).complete(
        execution, summary=payload.summary if payload else None, actor_user_id=user.id
    )
