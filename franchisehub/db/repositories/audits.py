"""
Audit template, execution, response, non-conformity and corrective-action
repository functions.

Workflow rules (status transitions, scoring) live in ``franchisehub.services``;
these helpers only read and write rows.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import ExecutionStatus, NonConformityStatus, Severity


# === Templates ===

def _build_items(items: List[Dict[str, Any]]) -> List[models.AuditTemplateItem]:
    built = []
    for position, item in enumerate(items):
        order_index = item.get("order_index")
        built.append(
            models.AuditTemplateItem(
                question=item["question"],
                type=getattr(item["type"], "value", item["type"]),
                options=item.get("options"),
                is_required=bool(item.get("is_required", False)),
                order_index=position if order_index is None else order_index,
                help_text=item.get("help_text"),
            )
        )
    return built


def create_template(
    db: Session,
    *,
    tenant_id: uuid.UUID,
    created_by: Optional[uuid.UUID],
    data: Dict[str, Any],
):
    items = data.pop("items", None) or []
    for key in ("category", "frequency"):
        if key in data and data[key] is not None:
            data[key] = getattr(data[key], "value", data[key])
    db_template = models.AuditTemplate(tenant_id=tenant_id, created_by=created_by, **data)
    db_template.items = _build_items(items)
    db.add(db_template)
    db.commit()
    db.refresh(db_template)
    return db_template


def get_template(db: Session, template_id: uuid.UUID, include_inactive: bool = False):
    query = db.query(models.AuditTemplate).filter(models.AuditTemplate.id == template_id)
    if not include_inactive:
        query = query.filter(models.AuditTemplate.is_active.is_(True))
    return query.first()


def get_templates(db: Session, *, tenant_id: uuid.UUID, category: Optional[str] = None):
    query = db.query(models.AuditTemplate).filter(
        models.AuditTemplate.tenant_id == tenant_id,
        models.AuditTemplate.is_active.is_(True),
    )
    if category:
        return query.filter(models.AuditTemplate.category == category).order_by(models.AuditTemplate.name).all()
    return query.order_by(models.AuditTemplate.created_at.desc()).all()


def update_template(db: Session, template, data: Dict[str, Any]):
    items = data.pop("items", None)
    for key, value in data.items():
        setattr(template, key, getattr(value, "value", value))
    if items is not None:
        # delete-orphan cascade removes the previous items
        template.items = _build_items(items)
    db.commit()
    db.refresh(template)
    return template


def deactivate_template(db: Session, template):
    template.is_active = False
    db.commit()
    return template


# === Executions ===

def create_execution(db: Session, **fields):
    db_execution = models.AuditExecution(**fields)
    db.add(db_execution)
    db.commit()
    db.refresh(db_execution)
    return db_execution


def get_execution(db: Session, execution_id: uuid.UUID):
    return db.query(models.AuditExecution).filter(models.AuditExecution.id == execution_id).first()


def get_executions(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    restaurant_id: Optional[uuid.UUID] = None,
):
    query = db.query(models.AuditExecution)
    if tenant_id:
        query = query.filter(models.AuditExecution.tenant_id == tenant_id)
    if status:
        query = query.filter(models.AuditExecution.status == status)
    if restaurant_id:
        query = query.filter(models.AuditExecution.restaurant_id == restaurant_id)
    return query.order_by(models.AuditExecution.scheduled_date.asc()).all()


def get_executions_in_range(
    db: Session,
    *,
    tenant_id: uuid.UUID,
    start: datetime,
    end: datetime,
    restaurant_id: Optional[uuid.UUID] = None,
    auditor_id: Optional[uuid.UUID] = None,
):
    query = db.query(models.AuditExecution).filter(
        models.AuditExecution.tenant_id == tenant_id,
        models.AuditExecution.scheduled_date >= start,
        models.AuditExecution.scheduled_date <= end,
    )
    if restaurant_id:
        query = query.filter(models.AuditExecution.restaurant_id == restaurant_id)
    if auditor_id:
        query = query.filter(models.AuditExecution.auditor_id == auditor_id)
    return query.order_by(models.AuditExecution.scheduled_date.asc()).all()


def get_overdue_candidates(db: Session, *, now: datetime, tenant_id: Optional[uuid.UUID] = None):
    query = db.query(models.AuditExecution).filter(
        models.AuditExecution.status == ExecutionStatus.SCHEDULED.value,
        models.AuditExecution.scheduled_date < now,
    )
    if tenant_id:
        query = query.filter(models.AuditExecution.tenant_id == tenant_id)
    return query.all()


def get_completed_executions(db: Session, *, tenant_id: uuid.UUID, completed_before: Optional[datetime] = None):
    query = db.query(models.AuditExecution).filter(
        models.AuditExecution.tenant_id == tenant_id,
        models.AuditExecution.status == ExecutionStatus.COMPLETED.value,
    )
    if completed_before is not None:
        query = query.filter(models.AuditExecution.completed_at < completed_before)
    return query.order_by(models.AuditExecution.completed_at.asc()).all()


# === Responses ===

def get_response(db: Session, execution_id: uuid.UUID, template_item_id: uuid.UUID):
    return (
        db.query(models.AuditResponse)
        .filter(
            models.AuditResponse.execution_id == execution_id,
            models.AuditResponse.template_item_id == template_item_id,
        )
        .first()
    )


def upsert_response(db: Session, execution_id: uuid.UUID, data: Dict[str, Any]):
    """Insert or overwrite the response for (execution, item). Caller commits."""
    response = get_response(db, execution_id, data["template_item_id"])
    if response is None:
        response = models.AuditResponse(execution_id=execution_id, template_item_id=data["template_item_id"])
        db.add(response)
    response.value = data.get("value")
    response.numeric_value = data.get("numeric_value")
    response.metadata_json = data.get("metadata")
    response.comment = data.get("comment")
    db.flush()
    return response


# === Non-conformities ===

def _nc_query(db: Session, tenant_id: Optional[uuid.UUID], restaurant_id: Optional[uuid.UUID]):
    query = db.query(models.NonConformity).join(
        models.AuditExecution, models.NonConformity.execution_id == models.AuditExecution.id
    )
    if tenant_id:
        query = query.filter(models.AuditExecution.tenant_id == tenant_id)
    if restaurant_id:
        query = query.filter(models.AuditExecution.restaurant_id == restaurant_id)
    return query


def create_non_conformity(db: Session, data: Dict[str, Any]):
    if "severity" in data:
        data["severity"] = getattr(data["severity"], "value", data["severity"])
    db_nc = models.NonConformity(**data)
    db.add(db_nc)
    db.commit()
    db.refresh(db_nc)
    return db_nc


def get_non_conformity(db: Session, nc_id: uuid.UUID):
    return db.query(models.NonConformity).filter(models.NonConformity.id == nc_id).first()


def get_non_conformities(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    restaurant_id: Optional[uuid.UUID] = None,
):
    query = _nc_query(db, tenant_id, restaurant_id)
    if status:
        query = query.filter(models.NonConformity.status == status)
    if severity:
        query = query.filter(models.NonConformity.severity == severity)
    return query.order_by(models.NonConformity.created_at.desc()).all()


def get_non_conformity_stats(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
) -> Dict[str, Any]:
    rows = (
        _nc_query(db, tenant_id, restaurant_id)
        .with_entities(models.NonConformity.status, func.count(models.NonConformity.id))
        .group_by(models.NonConformity.status)
        .all()
    )
    counts = {status: count for status, count in rows}
    critical = (
        _nc_query(db, tenant_id, restaurant_id)
        .filter(models.NonConformity.severity == Severity.CRITICAL.value)
        .count()
    )
    return {
        "total": sum(counts.values()),
        "by_status": {
            "open": counts.get(NonConformityStatus.OPEN.value, 0),
            "in_progress": counts.get(NonConformityStatus.IN_PROGRESS.value, 0),
            "resolved": counts.get(NonConformityStatus.RESOLVED.value, 0),
        },
        "critical": critical,
    }


def update_non_conformity(db: Session, nc, data: Dict[str, Any]):
    for key, value in data.items():
        setattr(nc, key, getattr(value, "value", value))
    db.commit()
    db.refresh(nc)
    return nc


def delete_non_conformity(db: Session, nc) -> bool:
    db.query(models.CorrectiveAction).filter(models.CorrectiveAction.non_conformity_id == nc.id).update(
        {models.CorrectiveAction.non_conformity_id: None}, synchronize_session=False
    )
    db.delete(nc)
    db.commit()
    return True


# === Corrective actions ===

def create_corrective_action(db: Session, data: Dict[str, Any]):
    for key in ("category", "priority"):
        if key in data:
            data[key] = getattr(data[key], "value", data[key])
    db_action = models.CorrectiveAction(**data)
    db.add(db_action)
    db.commit()
    db.refresh(db_action)
    return db_action


def get_corrective_action(db: Session, action_id: uuid.UUID, include_deleted: bool = False):
    query = db.query(models.CorrectiveAction).filter(models.CorrectiveAction.id == action_id)
    if not include_deleted:
        query = query.filter(models.CorrectiveAction.deleted_at.is_(None))
    return query.first()


def get_corrective_actions(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    restaurant_id: Optional[uuid.UUID] = None,
):
    query = db.query(models.CorrectiveAction).filter(models.CorrectiveAction.deleted_at.is_(None))
    if tenant_id:
        query = query.filter(models.CorrectiveAction.tenant_id == tenant_id)
    if status:
        query = query.filter(models.CorrectiveAction.status == status)
    if restaurant_id:
        query = query.filter(models.CorrectiveAction.restaurant_id == restaurant_id)
    return query.order_by(models.CorrectiveAction.created_at.desc()).all()


def update_corrective_action(db: Session, action, data: Dict[str, Any]):
    for key, value in data.items():
        setattr(action, key, getattr(value, "value", value))
    db.commit()
    db.refresh(action)
    return action


def soft_delete_corrective_action(db: Session, action):
    action.deleted_at = models.now_utc()
    db.commit()
    return action


def get_actions_for_execution(db: Session, execution) -> List[models.CorrectiveAction]:
    """Actions linked to the execution directly or through one of its non-conformities."""
    nc_ids = [nc.id for nc in execution.non_conformities]
    query = db.query(models.CorrectiveAction)
    if nc_ids:
        query = query.filter(
            (models.CorrectiveAction.audit_execution_id == execution.id)
            | (models.CorrectiveAction.non_conformity_id.in_(nc_ids))
        )
    else:
        query = query.filter(models.CorrectiveAction.audit_execution_id == execution.id)
    return query.order_by(models.CorrectiveAction.created_at.asc()).all()
