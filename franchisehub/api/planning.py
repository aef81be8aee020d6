"""
Planning endpoints: tasks and the monthly calendar.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import can_access_tenant, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import planning as planning_repo
from franchisehub.services.planning_service import PlanningService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/planning", tags=["planning"])

manage_roles = require_roles(*MANAGE_ROLES)


def _get_task(db: Session, task_id: uuid.UUID, current_user):
    task = planning_repo.get_task(db, task_id)
    if task is None or not can_access_tenant(current_user, task.tenant_id):
        raise HTTPException(status_code=404, detail="Planning task not found")
    return task


@router.post("/tasks", response_model=schemas.PlanningTask, status_code=status.HTTP_201_CREATED)
def create_task_endpoint(
    payload: schemas.PlanningTaskCreate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, payload.tenant_id)
    return PlanningService(db).create_task(tenant_id=tenant_id, created_by=user.id, data=payload.model_dump())


@router.get("/calendar/{year}/{month}", response_model=schemas.CalendarResponse)
def calendar_endpoint(
    year: int,
    month: int,
    restaurant_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return PlanningService(db).get_calendar(
        tenant_id=resolve_tenant_id(current_user, tenant_id),
        year=year,
        month=month,
        restaurant_id=restaurant_id,
        assigned_to=assigned_to,
    )


@router.get("/tasks/my", response_model=List[schemas.PlanningTask])
def my_tasks_endpoint(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    user, _ = user_context
    return planning_repo.get_tasks_for_user(db, user.id)


@router.get("/tasks/{task_id}", response_model=schemas.PlanningTask)
def get_task_endpoint(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    _, current_user = user_context
    return _get_task(db, task_id, current_user)


@router.patch("/tasks/{task_id}", response_model=schemas.PlanningTask)
def update_task_endpoint(
    task_id: uuid.UUID,
    payload: schemas.PlanningTaskUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    task = _get_task(db, task_id, current_user)
    return PlanningService(db).update_task(task, user.id, payload.model_dump(exclude_unset=True))


@router.delete("/tasks/{task_id}", response_model=schemas.MessageResponse)
def delete_task_endpoint(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    PlanningService(db).delete_task(_get_task(db, task_id, current_user), user.id)
    return {"message": "Task deleted"}


@router.patch("/tasks/{task_id}/complete", response_model=schemas.PlanningTask)
def complete_task_endpoint(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(manage_roles),
):
    user, current_user = user_context
    return PlanningService(db).complete_task(_get_task(db, task_id, current_user), user.id)
