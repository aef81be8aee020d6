"""
Audit execution workflow: scheduling, response capture, scoring and
completion.

Execution status moves scheduled -> in_progress -> completed; scheduled rows
past their date become overdue. Archival is handled by ``ArchiveService``.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.db import models
from franchisehub.db.models import ExecutionStatus, QuestionType
from franchisehub.db.repositories import audits as audit_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services.errors import InvalidTransitionError, ServiceError

logger = logging.getLogger(__name__)

SUGGESTED_QUESTIONS: Dict[str, List[Dict[str, Any]]] = {
    "hygiene_security": [
        {"question": "Les surfaces de préparation sont-elles propres et désinfectées ?", "type": "yes_no"},
        {
            "question": "Les équipements de refroidissement maintiennent-ils la température requise ?",
            "type": "temperature",
            "options": {"min": -18, "max": 4},
        },
        {"question": "Le personnel porte-t-il correctement les équipements de protection ?", "type": "score_1_5"},
    ],
    "customer_service": [
        {"question": "L'accueil client est-il chaleureux et professionnel ?", "type": "score_1_5"},
        {
            "question": "Le temps d'attente moyen est-il respecté ?",
            "type": "select",
            "options": ["< 5 min", "5-10 min", "10-15 min", "> 15 min"],
        },
        {"question": "La propreté de la salle est-elle satisfaisante ?", "type": "score_1_5"},
    ],
    "process_compliance": [
        {"question": "Les procédures de préparation sont-elles respectées ?", "type": "yes_no"},
        {"question": "Les standards de présentation des plats sont-ils appliqués ?", "type": "score_1_5"},
    ],
    "equipment_standards": [
        {"question": "L'état général des équipements est-il satisfaisant ?", "type": "score_1_5"},
        {"question": "La maintenance préventive est-elle à jour ?", "type": "yes_no"},
    ],
}

YES_VALUES = {"yes", "oui", "true"}
MAX_ITEM_SCORE = {QuestionType.SCORE_1_5.value: 5.0, QuestionType.YES_NO.value: 1.0}


def get_suggested_questions(category: str) -> List[Dict[str, Any]]:
    return SUGGESTED_QUESTIONS.get(category, [])


def score_response(item_type: str, response: Optional[models.AuditResponse]) -> float:
    """Points earned by one response; unscored question types earn nothing."""
    if response is None:
        return 0.0
    if item_type == QuestionType.SCORE_1_5.value:
        if response.numeric_value is None:
            return 0.0
        return float(min(max(response.numeric_value, 0.0), 5.0))
    if item_type == QuestionType.YES_NO.value:
        if response.numeric_value is not None and response.numeric_value >= 1:
            return 1.0
        if response.value and response.value.strip().lower() in YES_VALUES:
            return 1.0
        return 0.0
    return 0.0


def compute_score(items: List[models.AuditTemplateItem], responses: List[models.AuditResponse]) -> Dict[str, float]:
    """Aggregate scored items into ``{total, max, percentage}``.

    Answered scored items always count toward the maximum; unanswered ones
    only when they are required.
    """
    by_item = {response.template_item_id: response for response in responses}
    total = 0.0
    maximum = 0.0
    for item in items:
        item_max = MAX_ITEM_SCORE.get(item.type)
        if item_max is None:
            continue
        response = by_item.get(item.id)
        if response is None and not item.is_required:
            continue
        maximum += item_max
        total += score_response(item.type, response)
    percentage = round(total / maximum * 100, 2) if maximum else 0.0
    return {"total": total, "max": maximum, "percentage": percentage}


class AuditService:
    """Service class for the audit execution lifecycle."""

    def __init__(self, db: Session):
        self.db = db

    def create_execution(self, *, tenant_id: uuid.UUID, assigned_by: uuid.UUID, data: Dict[str, Any]):
        template = audit_repo.get_template(self.db, data["template_id"])
        if template is None or template.tenant_id != tenant_id:
            raise ServiceError("Template not found in this tenant")
        restaurant = tenant_repo.get_restaurant(self.db, data["restaurant_id"])
        if restaurant is None or restaurant.tenant_id != tenant_id:
            raise ServiceError("Restaurant not found in this tenant")
        auditor = tenant_repo.get_user(self.db, data["auditor_id"])
        if auditor is None or auditor.tenant_id != tenant_id:
            raise ServiceError("Auditor not found in this tenant")

        execution = audit_repo.create_execution(
            self.db,
            title=data.get("title") or template.name,
            notes=data.get("notes"),
            scheduled_date=data["scheduled_date"],
            tenant_id=tenant_id,
            template_id=template.id,
            restaurant_id=restaurant.id,
            auditor_id=auditor.id,
            assigned_by=assigned_by,
        )
        logger.info("audit_scheduled execution=%s template=%s restaurant=%s", execution.id, template.id, restaurant.id)
        return execution

    def start(self, execution: models.AuditExecution):
        if execution.status != ExecutionStatus.SCHEDULED.value:
            raise InvalidTransitionError(f"Cannot start an audit in status '{execution.status}'")
        execution.status = ExecutionStatus.IN_PROGRESS.value
        execution.started_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(execution)
        logger.info("audit_started execution=%s", execution.id)
        return execution

    def save_responses(self, execution: models.AuditExecution, responses: List[Dict[str, Any]]):
        if execution.status != ExecutionStatus.IN_PROGRESS.value:
            raise InvalidTransitionError("Responses can only be saved while the audit is in progress")
        item_ids = {item.id for item in execution.template.items}
        for response in responses:
            if response["template_item_id"] not in item_ids:
                raise ServiceError(f"Item {response['template_item_id']} does not belong to this audit's template")
        saved = [audit_repo.upsert_response(self.db, execution.id, response) for response in responses]
        self.db.commit()
        for row in saved:
            self.db.refresh(row)
        return saved

    def complete(self, execution: models.AuditExecution, *, summary: Optional[Dict[str, Any]] = None,
                 actor_user_id: Optional[uuid.UUID] = None):
        if execution.status != ExecutionStatus.IN_PROGRESS.value:
            raise InvalidTransitionError(f"Cannot complete an audit in status '{execution.status}'")
        score = compute_score(list(execution.template.items), list(execution.responses))
        merged = dict(summary or {})
        merged["score"] = score
        execution.summary = merged
        execution.total_score = score["total"]
        execution.max_possible_score = score["max"]
        execution.status = ExecutionStatus.COMPLETED.value
        execution.completed_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(execution)
        activity.log(
            self.db,
            action=ActivityAction.AUDIT_COMPLETE,
            target_type="audit_execution",
            target_id=execution.id,
            actor_user_id=actor_user_id,
            tenant_id=execution.tenant_id,
            metadata={"score": score},
        )
        return execution

    def check_overdue(self, tenant_id: Optional[uuid.UUID] = None) -> int:
        """Flag scheduled executions whose date has passed; returns the number updated."""
        now = datetime.now(timezone.utc)
        updated = 0
        for execution in audit_repo.get_overdue_candidates(self.db, now=now, tenant_id=tenant_id):
            try:
                execution.status = ExecutionStatus.OVERDUE.value
                self.db.commit()
                updated += 1
            except Exception:
                self.db.rollback()
                logger.warning("overdue_flag_failed execution=%s", execution.id, exc_info=True)
        logger.info("overdue_check tenant=%s updated=%d", tenant_id, updated)
        return updated
