"""
Audit archival and cleanup.

Archiving snapshots a completed execution (responses, non-conformities and
the corrective actions attached to it) into a denormalized ``AuditArchive``
row and then deletes the execution. Corrective actions outlive the audit;
they are only unlinked.
"""

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.db import models
from franchisehub.db.models import ExecutionStatus
from franchisehub.db.repositories import archives as archive_repo
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.services.errors import ConflictError, InvalidTransitionError, NotFoundError
from franchisehub.utils.config import get_settings

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _row_dict(row, fields: List[str]) -> Dict[str, Any]:
    return {name: _jsonable(getattr(row, name)) for name in fields}


RESPONSE_FIELDS = ["id", "template_item_id", "value", "numeric_value", "comment", "created_at"]
NON_CONFORMITY_FIELDS = [
    "id", "item_id", "severity", "description", "corrective_action", "responsible_user_id",
    "due_date", "status", "resolution_date", "resolution_notes", "created_at",
]
ACTION_FIELDS = [
    "id", "title", "description", "category", "status", "priority", "due_date", "completed_at",
    "completion_notes", "validation_notes", "restaurant_id", "assigned_to", "created_by",
    "non_conformity_id", "created_at",
]


class ArchiveService:
    """Service class for archiving and purging audit executions."""

    def __init__(self, db: Session):
        self.db = db

    # === Snapshots ===

    def _responses_snapshot(self, execution: models.AuditExecution) -> List[Dict[str, Any]]:
        snapshot = []
        for response in execution.responses:
            entry = _row_dict(response, RESPONSE_FIELDS)
            entry["metadata"] = response.metadata_json
            entry["question"] = response.item.question if response.item else None
            entry["question_type"] = response.item.type if response.item else None
            snapshot.append(entry)
        return snapshot

    def _non_conformities_snapshot(self, execution: models.AuditExecution) -> List[Dict[str, Any]]:
        return [_row_dict(nc, NON_CONFORMITY_FIELDS) for nc in execution.non_conformities]

    def _actions_snapshot(self, actions: List[models.CorrectiveAction]) -> List[Dict[str, Any]]:
        return [_row_dict(action, ACTION_FIELDS) for action in actions]

    # === Archival ===

    def archive_execution(self, execution_id: uuid.UUID, user: Optional[models.User]) -> models.AuditArchive:
        if archive_repo.get_archive_by_execution(self.db, execution_id) is not None:
            raise ConflictError("Audit already archived")
        execution = audit_repo.get_execution(self.db, execution_id)
        if execution is None:
            raise NotFoundError("Audit execution not found")
        if execution.status != ExecutionStatus.COMPLETED.value:
            raise InvalidTransitionError("Only completed audits can be archived")

        actions = audit_repo.get_actions_for_execution(self.db, execution)
        template = execution.template
        archive = archive_repo.create_archive(
            self.db,
            original_execution_id=execution.id,
            template_id=execution.template_id,
            restaurant_id=execution.restaurant_id,
            inspector_id=execution.auditor_id,
            tenant_id=execution.tenant_id,
            scheduled_date=execution.scheduled_date,
            completed_date=execution.completed_at,
            total_score=execution.total_score,
            max_possible_score=execution.max_possible_score,
            notes=execution.notes,
            archived_by=user.id if user else None,
            template_name=template.name if template else None,
            template_category=template.category if template else None,
            restaurant_name=execution.restaurant.name if execution.restaurant else None,
            inspector_name=execution.auditor.email if execution.auditor else None,
            responses_data=self._responses_snapshot(execution),
            non_conformities_data=self._non_conformities_snapshot(execution),
            corrective_actions_data=self._actions_snapshot(actions),
        )

        for action in actions:
            action.audit_execution_id = None
            action.non_conformity_id = None
        self.db.query(models.PlanningTask).filter(
            models.PlanningTask.audit_execution_id == execution.id
        ).update({models.PlanningTask.audit_execution_id: None}, synchronize_session=False)
        self.db.flush()
        # Responses and non-conformities go with it (delete-orphan cascade)
        self.db.delete(execution)
        self.db.commit()
        self.db.refresh(archive)

        activity.log(
            self.db,
            action=ActivityAction.AUDIT_ARCHIVE,
            target_type="audit_execution",
            target_id=execution_id,
            actor_user_id=user.id if user else None,
            tenant_id=archive.tenant_id,
            metadata={"archive_id": str(archive.id), "corrective_actions": len(actions)},
        )
        logger.info("audit_archived execution=%s archive=%s", execution_id, archive.id)
        return archive

    def auto_archive(self, tenant_id: uuid.UUID, older_than_days: Optional[int] = None,
                     user: Optional[models.User] = None) -> int:
        """Archive completed executions older than the threshold; 0 days archives all of them."""
        days = get_settings().archive_after_days if older_than_days is None else older_than_days
        cutoff = None if days <= 0 else datetime.now(timezone.utc) - timedelta(days=days)
        candidates = [e.id for e in audit_repo.get_completed_executions(self.db, tenant_id=tenant_id, completed_before=cutoff)]
        archived = 0
        for execution_id in candidates:
            try:
                self.archive_execution(execution_id, user)
                archived += 1
            except Exception:
                self.db.rollback()
                logger.warning("auto_archive_failed execution=%s", execution_id, exc_info=True)
        logger.info("auto_archive tenant=%s days=%s archived=%d", tenant_id, days, archived)
        return archived

    def delete_archive(self, archive: models.AuditArchive, user: Optional[models.User] = None) -> models.AuditArchive:
        archive = archive_repo.mark_archive_deleted(self.db, archive)
        activity.log(
            self.db,
            action=ActivityAction.AUDIT_ARCHIVE_DELETE,
            target_type="audit_archive",
            target_id=archive.id,
            actor_user_id=user.id if user else None,
            tenant_id=archive.tenant_id,
        )
        return archive

    # === Cleanup ===

    def _cleanup_scope(self, tenant_id: Optional[uuid.UUID]) -> Dict[str, Any]:
        archived_ids = archive_repo.get_archived_execution_ids(self.db, tenant_id)
        executions = self.db.query(models.AuditExecution.id)
        if tenant_id:
            executions = executions.filter(models.AuditExecution.tenant_id == tenant_id)
        if archived_ids:
            executions = executions.filter(models.AuditExecution.id.not_in(archived_ids))
        execution_ids = [row[0] for row in executions.all()]

        nc_ids: List[uuid.UUID] = []
        action_ids: List[uuid.UUID] = []
        task_ids: List[uuid.UUID] = []
        response_count = 0
        if execution_ids:
            nc_ids = [
                row[0] for row in self.db.query(models.NonConformity.id)
                .filter(models.NonConformity.execution_id.in_(execution_ids)).all()
            ]
            action_filter = models.CorrectiveAction.audit_execution_id.in_(execution_ids)
            if nc_ids:
                action_filter = action_filter | models.CorrectiveAction.non_conformity_id.in_(nc_ids)
            action_ids = [row[0] for row in self.db.query(models.CorrectiveAction.id).filter(action_filter).all()]
            task_filter = models.PlanningTask.audit_execution_id.in_(execution_ids)
            if action_ids:
                task_filter = task_filter | models.PlanningTask.corrective_action_id.in_(action_ids)
            task_ids = [row[0] for row in self.db.query(models.PlanningTask.id).filter(task_filter).all()]
            response_count = (
                self.db.query(models.AuditResponse)
                .filter(models.AuditResponse.execution_id.in_(execution_ids))
                .count()
            )
        return {
            "execution_ids": execution_ids,
            "nc_ids": nc_ids,
            "action_ids": action_ids,
            "task_ids": task_ids,
            "response_count": response_count,
            "archived_count": len(archived_ids),
        }

    @staticmethod
    def _result(scope: Dict[str, Any]) -> Dict[str, int]:
        return {
            "audits_deleted": len(scope["execution_ids"]),
            "responses_deleted": scope["response_count"],
            "non_conformities_deleted": len(scope["nc_ids"]),
            "corrective_actions_deleted": len(scope["action_ids"]),
            "planning_tasks_deleted": len(scope["task_ids"]),
            "archived_audits_count": scope["archived_count"],
        }

    def preview_cleanup(self, tenant_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
        return self._result(self._cleanup_scope(tenant_id))

    def cleanup(self, tenant_id: Optional[uuid.UUID] = None, user: Optional[models.User] = None) -> Dict[str, int]:
        """Hard-delete every non-archived execution and everything hanging off it."""
        scope = self._cleanup_scope(tenant_id)
        if scope["task_ids"]:
            self.db.query(models.PlanningTask).filter(
                models.PlanningTask.id.in_(scope["task_ids"])
            ).delete(synchronize_session=False)
        if scope["action_ids"]:
            self.db.query(models.CorrectiveAction).filter(
                models.CorrectiveAction.id.in_(scope["action_ids"])
            ).delete(synchronize_session=False)
        if scope["nc_ids"]:
            self.db.query(models.NonConformity).filter(
                models.NonConformity.id.in_(scope["nc_ids"])
            ).delete(synchronize_session=False)
        if scope["execution_ids"]:
            self.db.query(models.AuditResponse).filter(
                models.AuditResponse.execution_id.in_(scope["execution_ids"])
            ).delete(synchronize_session=False)
            self.db.query(models.AuditExecution).filter(
                models.AuditExecution.id.in_(scope["execution_ids"])
            ).delete(synchronize_session=False)
        self.db.commit()
        self.db.expire_all()

        result = self._result(scope)
        activity.log(
            self.db,
            action=ActivityAction.AUDIT_CLEANUP,
            target_type="tenant" if tenant_id else "system",
            target_id=tenant_id,
            actor_user_id=user.id if user else None,
            tenant_id=tenant_id,
            metadata=result,
        )
        logger.warning("audit_cleanup tenant=%s result=%s", tenant_id, result)
        return result
