"""
Destructive audit cleanup (admin only).
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from franchisehub.api.deps import require_roles
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.services.archive_service import ArchiveService
from franchisehub.utils.roles import ROLE_ADMIN

router = APIRouter(prefix="/audit-cleanup", tags=["audit-cleanup"])
logger = logging.getLogger(__name__)


@router.get("/preview", response_model=schemas.CleanupResult)
def preview_cleanup_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    return ArchiveService(db).preview_cleanup(tenant_id)


@router.delete("", response_model=schemas.CleanupResult)
def cleanup_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    user, _ = user_context
    logger.warning("audit_cleanup_requested by=%s tenant=%s", user.id, tenant_id)
    return ArchiveService(db).cleanup(tenant_id, user=user)
