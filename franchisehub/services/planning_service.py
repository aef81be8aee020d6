"""
Planning: ad-hoc tasks plus the monthly calendar merging tasks and audits.
"""

import calendar
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import PlanningTaskStatus, PlanningTaskType
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.db.repositories import planning as planning_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services.errors import ForbiddenError, ServiceError

logger = logging.getLogger(__name__)

MIN_YEAR = 2020
MAX_YEAR = 2030
VERIFICATION_DURATION = 30


def month_bounds(year: int, month: int):
    """First day 00:00:00 through last day 23:59:59 (UTC) of a month."""
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ServiceError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")
    if not 1 <= month <= 12:
        raise ServiceError("Month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, 0, 0, 0, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)
    return start, end


class PlanningService:
    """Service class for planning tasks and the calendar view."""

    def __init__(self, db: Session):
        self.db = db

    def _check_references(self, tenant_id: uuid.UUID, data: Dict[str, Any]) -> None:
        if data.get("restaurant_id"):
            restaurant = tenant_repo.get_restaurant(self.db, data["restaurant_id"])
            if restaurant is None or restaurant.tenant_id != tenant_id:
                raise ServiceError("Restaurant not found in this tenant")
        if data.get("assigned_to"):
            user = tenant_repo.get_user(self.db, data["assigned_to"])
            if user is None or user.tenant_id != tenant_id:
                raise ServiceError("Assigned user not found in this tenant")
        if data.get("audit_execution_id"):
            execution = audit_repo.get_execution(self.db, data["audit_execution_id"])
            if execution is None or execution.tenant_id != tenant_id:
                raise ServiceError("Audit execution not found in this tenant")
        if data.get("corrective_action_id"):
            action = audit_repo.get_corrective_action(self.db, data["corrective_action_id"])
            if action is None or action.tenant_id != tenant_id:
                raise ServiceError("Corrective action not found in this tenant")

    def create_task(self, *, tenant_id: uuid.UUID, created_by: uuid.UUID, data: Dict[str, Any]):
        if models.as_utc(data["scheduled_date"]) < datetime.now(timezone.utc):
            raise ServiceError("Scheduled date cannot be in the past")
        self._check_references(tenant_id, data)
        data.pop("tenant_id", None)
        task = planning_repo.create_task(self.db, tenant_id=tenant_id, created_by=created_by, **data)
        logger.info("planning_task_created task=%s tenant=%s", task.id, tenant_id)
        return task

    def get_calendar(
        self,
        *,
        tenant_id: uuid.UUID,
        year: int,
        month: int,
        restaurant_id: Optional[uuid.UUID] = None,
        assigned_to: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        start, end = month_bounds(year, month)
        tasks = planning_repo.get_tasks_in_range(
            self.db, tenant_id=tenant_id, start=start, end=end,
            restaurant_id=restaurant_id, assigned_to=assigned_to,
        )
        audits = audit_repo.get_executions_in_range(
            self.db, tenant_id=tenant_id, start=start, end=end,
            restaurant_id=restaurant_id, auditor_id=assigned_to,
        )
        return {"tasks": tasks, "audits": audits}

    def update_task(self, task: models.PlanningTask, user_id: uuid.UUID, data: Dict[str, Any]):
        if task.created_by != user_id:
            raise ForbiddenError("Only the creator can modify this task")
        self._check_references(task.tenant_id, data)
        return planning_repo.update_task(self.db, task, data)

    def delete_task(self, task: models.PlanningTask, user_id: uuid.UUID) -> bool:
        if task.created_by != user_id:
            raise ForbiddenError("Only the creator can delete this task")
        return planning_repo.delete_task(self.db, task)

    def complete_task(self, task: models.PlanningTask, user_id: uuid.UUID):
        if user_id not in (task.created_by, task.assigned_to):
            raise ForbiddenError("Only the creator or the assignee can complete this task")
        return planning_repo.update_task(self.db, task, {"status": PlanningTaskStatus.COMPLETED.value})

    def create_verification_task(self, action: models.CorrectiveAction) -> models.PlanningTask:
        """Schedule the check of a corrective action, once per action.

        The check lands the day before the due date, or tomorrow when that
        is already past or the action has no due date.
        """
        existing = planning_repo.get_verification_task(self.db, action.id)
        if existing is not None:
            return existing
        now = datetime.now(timezone.utc)
        scheduled = None
        if action.due_date is not None:
            scheduled = models.as_utc(action.due_date) - timedelta(days=1)
        if scheduled is None or scheduled < now:
            scheduled = now + timedelta(days=1)
        task = planning_repo.create_task(
            self.db,
            title=f"Vérification: {action.title}",
            description=action.description,
            scheduled_date=scheduled,
            duration=VERIFICATION_DURATION,
            type=PlanningTaskType.CORRECTIVE_ACTION,
            tenant_id=action.tenant_id,
            restaurant_id=action.restaurant_id,
            assigned_to=action.assigned_to,
            created_by=action.created_by,
            corrective_action_id=action.id,
        )
        logger.info("verification_task_created task=%s action=%s", task.id, action.id)
        return task
