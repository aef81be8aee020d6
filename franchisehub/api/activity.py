"""
Activity log endpoints.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.api.deps import require_roles
from franchisehub.api.permissions import scope_tenant_filter
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/activity-logs", tags=["activity"])


@router.get("", response_model=List[schemas.ActivityLog])
def list_activity_logs(
    tenant_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    return activity.list_logs(
        db,
        tenant_id=scope_tenant_filter(current_user, tenant_id),
        action_type=action_type,
        skip=offset,
        limit=limit,
    )
