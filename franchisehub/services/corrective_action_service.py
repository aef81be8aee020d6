"""
Corrective-action workflow.

Allowed transitions:

    start     created | validated            -> in_progress
    complete  in_progress                    -> completed
    validate  created | validated | completed -> verified
    archive   verified                       -> archived
    restore   archived                       -> verified
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.db import models
from franchisehub.db.models import ActionStatus
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services.errors import InvalidTransitionError, ServiceError
from franchisehub.services.planning_service import PlanningService

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "start": ({ActionStatus.CREATED.value, ActionStatus.VALIDATED.value}, ActionStatus.IN_PROGRESS.value),
    "complete": ({ActionStatus.IN_PROGRESS.value}, ActionStatus.COMPLETED.value),
    "validate": (
        {ActionStatus.CREATED.value, ActionStatus.VALIDATED.value, ActionStatus.COMPLETED.value},
        ActionStatus.VERIFIED.value,
    ),
    "archive": ({ActionStatus.VERIFIED.value}, ActionStatus.ARCHIVED.value),
    "restore": ({ActionStatus.ARCHIVED.value}, ActionStatus.VERIFIED.value),
}


class CorrectiveActionService:
    """Service class for corrective actions and their status transitions."""

    def __init__(self, db: Session):
        self.db = db

    def _check_references(self, tenant_id: uuid.UUID, data: Dict[str, Any]) -> None:
        if data.get("restaurant_id"):
            restaurant = tenant_repo.get_restaurant(self.db, data["restaurant_id"])
            if restaurant is None or restaurant.tenant_id != tenant_id:
                raise ServiceError("Restaurant not found in this tenant")
        if data.get("assigned_to"):
            assignee = tenant_repo.get_user(self.db, data["assigned_to"])
            if assignee is None or assignee.tenant_id != tenant_id:
                raise ServiceError("Assigned user not found in this tenant")
        if data.get("audit_execution_id"):
            execution = audit_repo.get_execution(self.db, data["audit_execution_id"])
            if execution is None or execution.tenant_id != tenant_id:
                raise ServiceError("Audit execution not found in this tenant")
        if data.get("non_conformity_id"):
            nc = audit_repo.get_non_conformity(self.db, data["non_conformity_id"])
            if nc is None or nc.execution.tenant_id != tenant_id:
                raise ServiceError("Non-conformity not found in this tenant")

    def create(self, *, tenant_id: uuid.UUID, created_by: uuid.UUID, data: Dict[str, Any]) -> models.CorrectiveAction:
        data.pop("tenant_id", None)
        self._check_references(tenant_id, data)
        if not data.get("assigned_to"):
            data["assigned_to"] = created_by
        action = audit_repo.create_corrective_action(
            self.db, {**data, "tenant_id": tenant_id, "created_by": created_by}
        )
        logger.info("corrective_action_created action=%s tenant=%s", action.id, tenant_id)
        try:
            PlanningService(self.db).create_verification_task(action)
        except Exception:
            self.db.rollback()
            logger.warning("verification_task_failed action=%s", action.id, exc_info=True)
        return action

    def update(self, action: models.CorrectiveAction, data: Dict[str, Any]) -> models.CorrectiveAction:
        self._check_references(action.tenant_id, data)
        return audit_repo.update_corrective_action(self.db, action, data)

    def _transition(self, action: models.CorrectiveAction, name: str) -> None:
        allowed, target = TRANSITIONS[name]
        if action.status not in allowed:
            raise InvalidTransitionError(f"Cannot {name} a corrective action in status '{action.status}'")
        logger.info("corrective_action_transition action=%s %s->%s", action.id, action.status, target)
        action.status = target

    def start(self, action: models.CorrectiveAction) -> models.CorrectiveAction:
        self._transition(action, "start")
        self.db.commit()
        self.db.refresh(action)
        return action

    def complete(self, action: models.CorrectiveAction, notes: Optional[str] = None) -> models.CorrectiveAction:
        self._transition(action, "complete")
        action.completed_at = datetime.now(timezone.utc)
        action.completion_notes = notes
        self.db.commit()
        self.db.refresh(action)
        return action

    def validate(self, action: models.CorrectiveAction, notes: Optional[str] = None,
                 actor_user_id: Optional[uuid.UUID] = None) -> models.CorrectiveAction:
        self._transition(action, "validate")
        if action.completed_at is None:
            action.completed_at = datetime.now(timezone.utc)
        action.validation_notes = notes
        self.db.commit()
        self.db.refresh(action)
        activity.log(
            self.db,
            action=ActivityAction.CORRECTIVE_ACTION_VALIDATE,
            target_type="corrective_action",
            target_id=action.id,
            actor_user_id=actor_user_id,
            tenant_id=action.tenant_id,
        )
        return action

    def archive(self, action: models.CorrectiveAction) -> models.CorrectiveAction:
        self._transition(action, "archive")
        self.db.commit()
        self.db.refresh(action)
        return action

    def restore(self, action: models.CorrectiveAction) -> models.CorrectiveAction:
        self._transition(action, "restore")
        self.db.commit()
        self.db.refresh(action)
        return action
