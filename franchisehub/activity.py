"""
Activity logging helpers and enums.

Centralized helper to persist normalized activity records (who did what to
which target, in which tenant) with a consistent schema.
"""
from __future__ import annotations
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from franchisehub.db import models

logger = logging.getLogger(__name__)


class ActivityAction(str, Enum):
    # Tenancy
    TENANT_CREATE = "tenant_create"
    TENANT_UPDATE = "tenant_update"
    USER_CREATE = "user_create"
    USER_ACTIVE_CHANGE = "user_active_change"
    # Invitations
    INVITE_CREATE = "invite_create"
    INVITE_REVOKE = "invite_revoke"
    INVITE_ACCEPT = "invite_accept"
    # Audit workflow
    AUDIT_COMPLETE = "audit_complete"
    AUDIT_ARCHIVE = "audit_archive"
    AUDIT_ARCHIVE_DELETE = "audit_archive_delete"
    AUDIT_CLEANUP = "audit_cleanup"
    CORRECTIVE_ACTION_VALIDATE = "corrective_action_validate"
    # Tickets
    TICKETS_BULK_DELETE = "tickets_bulk_delete"


class ActivityStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: ActivityAction | str,
    status: ActivityStatus | str = ActivityStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_user_id: Optional[uuid.UUID] = None,
    tenant_id: Optional[uuid.UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> models.ActivityLog:
    """Persist one activity record and commit it."""
    # Persist pure string values, not Enum reprs
    action_value = action.value if isinstance(action, ActivityAction) else str(action)
    status_value = status.value if isinstance(status, ActivityStatus) else str(status)
    entry = models.ActivityLog(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        actor_user_id=actor_user_id,
        tenant_id=tenant_id,
        metadata_json=metadata or {},
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("activity action=%s target=%s:%s tenant=%s", action_value, target_type, target_id, tenant_id)
    return entry


def list_logs(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(models.ActivityLog)
    if tenant_id:
        query = query.filter(models.ActivityLog.tenant_id == tenant_id)
    if action_type:
        query = query.filter(models.ActivityLog.action_type == action_type)
    return query.order_by(models.ActivityLog.created_at.desc()).offset(skip).limit(limit).all()


__all__ = ["ActivityAction", "ActivityStatus", "log", "list_logs"]
