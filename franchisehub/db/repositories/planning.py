"""
Planning task repository functions.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import PlanningTaskType


def create_task(db: Session, **fields):
    for key in ("type", "status"):
        if key in fields and fields[key] is not None:
            fields[key] = getattr(fields[key], "value", fields[key])
    db_task = models.PlanningTask(**fields)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task


def get_task(db: Session, task_id: uuid.UUID):
    return db.query(models.PlanningTask).filter(models.PlanningTask.id == task_id).first()


def get_tasks_in_range(
    db: Session,
    *,
    tenant_id: uuid.UUID,
    start: datetime,
    end: datetime,
    restaurant_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
):
    query = db.query(models.PlanningTask).filter(
        models.PlanningTask.tenant_id == tenant_id,
        models.PlanningTask.scheduled_date >= start,
        models.PlanningTask.scheduled_date <= end,
    )
    if restaurant_id:
        query = query.filter(models.PlanningTask.restaurant_id == restaurant_id)
    if assigned_to:
        query = query.filter(models.PlanningTask.assigned_to == assigned_to)
    return query.order_by(models.PlanningTask.scheduled_date.asc()).all()


def get_tasks_for_user(db: Session, user_id: uuid.UUID):
    return (
        db.query(models.PlanningTask)
        .filter(models.PlanningTask.assigned_to == user_id)
        .order_by(models.PlanningTask.scheduled_date.asc())
        .all()
    )


def get_verification_task(db: Session, corrective_action_id: uuid.UUID):
    return (
        db.query(models.PlanningTask)
        .filter(
            models.PlanningTask.corrective_action_id == corrective_action_id,
            models.PlanningTask.type == PlanningTaskType.CORRECTIVE_ACTION.value,
        )
        .first()
    )


def update_task(db: Session, task, data: Dict[str, Any]):
    for key, value in data.items():
        setattr(task, key, getattr(value, "value", value))
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task) -> bool:
    db.delete(task)
    db.commit()
    return True
