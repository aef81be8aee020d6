"""
Tag endpoints, including tagging documents.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import documents as document_repo
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(tags=["tags"])


@router.post("/tags", response_model=schemas.Tag, status_code=status.HTTP_201_CREATED)
def create_tag_endpoint(
    tag: schemas.TagCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    if document_repo.get_tag_by_name(db, tag.name):
        raise HTTPException(status_code=409, detail="Tag already exists")
    created = document_repo.create_tag(db, tag.name)
    if created is None:
        raise HTTPException(status_code=409, detail="Tag already exists")
    return created


@router.get("/tags", response_model=List[schemas.Tag])
def list_tags_endpoint(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return document_repo.get_tags(db)


@router.get("/tags/{tag_id}", response_model=schemas.Tag)
def get_tag_endpoint(
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    tag = document_repo.get_tag(db, tag_id)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.delete("/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag_endpoint(
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    if not document_repo.delete_tag(db, tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return None


def _document_and_tag(db: Session, current_user, doc_id: uuid.UUID, tag_id: uuid.UUID):
    document = document_repo.get_document(db, doc_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    ensure_tenant_access(current_user, document.tenant_id)
    tag = document_repo.get_tag(db, tag_id)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return document, tag


@router.post("/documents/{doc_id}/tags/{tag_id}", response_model=schemas.Document)
def add_tag_to_document_endpoint(
    doc_id: uuid.UUID,
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    document, tag = _document_and_tag(db, current_user, doc_id, tag_id)
    return document_repo.add_tag_to_document(db, document, tag)


@router.delete("/documents/{doc_id}/tags/{tag_id}", response_model=schemas.Document)
def remove_tag_from_document_endpoint(
    doc_id: uuid.UUID,
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    document, tag = _document_and_tag(db, current_user, doc_id, tag_id)
    return document_repo.remove_tag_from_document(db, document, tag)
