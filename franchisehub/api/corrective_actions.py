"""
Corrective-action endpoints.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import require_roles
from franchisehub.api.permissions import can_access_tenant, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import ActionStatus
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.services.corrective_action_service import CorrectiveActionService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/corrective-actions", tags=["corrective-actions"])

manage_roles = require_roles(*MANAGE_ROLES)


def _get_action(db: Session, action_id: uuid.UUID, current_user):
    action = audit_repo.get_corrective_action(db, action_id)
    if action is None or not can_access_tenant(current_user, action.tenant_id):
        raise HTTPException(status_code=404, detail="Corrective action not found")
    return action


@router.post("", response_model=schemas.CorrectiveAction, status_code=status.HTTP_201_CREATED)
def create_corrective_action_endpoint(
    payload: schemas.CorrectiveActionCreate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, payload.tenant_id)
    return CorrectiveActionService(db).create(tenant_id=tenant_id, created_by=user.id, data=payload.model_dump())


@router.get("", response_model=List[schemas.CorrectiveAction])
def list_corrective_actions_endpoint(
    status_filter: Optional[ActionStatus] = Query(default=None, alias="status"),
    restaurant_id: Optional[uuid.UUID] = None,
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_corrective_actions(
        db,
        tenant_id=resolve_tenant_id(current_user, tenant_id),
        status=status_filter.value if status_filter else None,
        restaurant_id=restaurant_id,
    )


@router.get("/archived", response_model=List[schemas.CorrectiveAction])
def list_archived_corrective_actions_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return audit_repo.get_corrective_actions(
        db, tenant_id=resolve_tenant_id(current_user, tenant_id), status=ActionStatus.ARCHIVED.value
    )


@router.get("/{action_id}", response_model=schemas.CorrectiveAction)
def get_corrective_action_endpoint(
    action_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return _get_action(db, action_id, current_user)


@router.patch("/{action_id}", response_model=schemas.CorrectiveAction)
def update_corrective_action_endpoint(
    action_id: uuid.UUID,
    payload: schemas.CorrectiveActionUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    action = _get_action(db, action_id, current_user)
    return CorrectiveActionService(db).update(action, payload.model_dump(exclude_unset=True))


@router.delete("/{action_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_corrective_action_endpoint(
    action_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    audit_repo.soft_delete_corrective_action(db, _get_action(db, action_id, current_user))
    return None


@router.put("/{action_id}/start", response_model=schemas.CorrectiveAction)
def start_corrective_action_endpoint(
    action_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return CorrectiveActionService(db).start(_get_action(db, action_id, current_user))


@router.post("/{action_id}/complete", response_model=schemas.CorrectiveAction)
def complete_corrective_action_endpoint(
    action_id: uuid.UUID,
    payload: Optional[schemas.CompletionNotes] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    action = _get_action(db, action_id, current_user)
    return CorrectiveActionService(db).complete(action, payload.completion_notes if payload else None)


@router.post("/{action_id}/validate", response_model=schemas.CorrectiveAction)
def validate_corrective_action_endpoint(
    action_id: uuid.UUID,
    payload: Optional[schemas.ValidationNotes] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    action = _get_action(db, action_id, current_user)
    return CorrectiveActionService(db).validate(
        action, payload.validation_notes if payload else None, actor_user_id=user.id
    )


@router.post("/{action_id}/archive", response_model=schemas.CorrectiveAction)
def archive_corrective_action_endpoint(
    action_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return CorrectiveActionService(db).archive(_get_action(db, action_id, current_user))


@router.post("/{action_id}/restore", response_model=schemas.CorrectiveAction)
def restore_corrective_action_endpoint(
    action_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return CorrectiveActionService(db).restore(_get_action(db, action_id, current_user))
