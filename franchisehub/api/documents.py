"""
Document endpoints.

Files live in external storage; a document row records the URL, its category
and tags.
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access, is_admin, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.models import NotificationType
from franchisehub.db.repositories import categories as category_repo
from franchisehub.db.repositories import documents as document_repo
from franchisehub.services.notification_service import NotificationService
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/documents", tags=["documents"])
logger = logging.getLogger(__name__)


def _parse_uuid_list(raw: Optional[str]) -> List[uuid.UUID]:
    if not raw:
        return []
    try:
        return [uuid.UUID(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=422, detail="tag_ids must be a comma-separated list of UUIDs")


@router.post("", response_model=schemas.Document, status_code=status.HTTP_201_CREATED)
def create_document_endpoint(
    document: schemas.DocumentCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, document.tenant_id)
    if document.category_id and category_repo.get_category(db, document.category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found")
    tags = document_repo.get_tags_by_ids(db, document.tag_ids)
    if len(tags) != len(set(document.tag_ids)):
        raise HTTPException(status_code=404, detail="Tag not found")
    created = document_repo.create_document(
        db,
        name=document.name,
        url=document.url,
        tenant_id=tenant_id,
        created_by=user.id,
        category_id=document.category_id,
        tags=tags,
    )
    try:
        NotificationService(db).notify_tenant(
            tenant_id,
            NotificationType.DOCUMENT_UPLOADED,
            created.id,
            f"Nouveau document : {created.name}",
            exclude_user_id=user.id,
        )
    except Exception:
        db.rollback()
        logger.warning("document_notify_failed document=%s", created.id, exc_info=True)
    db.refresh(created)
    return created


@router.get("", response_model=List[schemas.Document])
def list_documents_endpoint(
    category_id: Optional[uuid.UUID] = None,
    q: Optional[str] = None,
    tag_ids: Optional[str] = Query(default=None, description="Comma-separated tag ids"),
    tenant_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    scope = tenant_id if is_admin(current_user) else current_user["tenant_id"]
    if not is_admin(current_user) and scope is None:
        return []
    return document_repo.get_documents(
        db,
        tenant_id=scope,
        category_id=category_id,
        q=q,
        tag_ids=_parse_uuid_list(tag_ids),
        skip=skip,
        limit=limit,
    )


@router.get("/{document_id}", response_model=schemas.Document)
def get_document_endpoint(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    document = document_repo.get_document(db, document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    ensure_tenant_access(current_user, document.tenant_id)
    return document


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document_endpoint(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    document = document_repo.get_document(db, document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    ensure_tenant_access(current_user, document.tenant_id)
    document_repo.soft_delete_document(db, document)
    return None
