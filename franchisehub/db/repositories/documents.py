"""
Document and tag repository functions.
"""
from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from franchisehub.db import models


# === Tags ===

def create_tag(db: Session, name: str):
    db_tag = models.Tag(name=name.strip())
    db.add(db_tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    db.refresh(db_tag)
    return db_tag


def get_tag(db: Session, tag_id: uuid.UUID):
    return db.query(models.Tag).filter(models.Tag.id == tag_id).first()


def get_tag_by_name(db: Session, name: str):
    return db.query(models.Tag).filter(models.Tag.name == name.strip()).first()


def get_tags(db: Session):
    return db.query(models.Tag).order_by(models.Tag.name).all()


def get_tags_by_ids(db: Session, tag_ids: List[uuid.UUID]):
    if not tag_ids:
        return []
    return db.query(models.Tag).filter(models.Tag.id.in_(tag_ids)).all()


def delete_tag(db: Session, tag_id: uuid.UUID) -> bool:
    db_tag = get_tag(db, tag_id)
    if db_tag:
        db.delete(db_tag)
        db.commit()
        return True
    return False


# === Documents ===

def create_document(
    db: Session,
    *,
    name: str,
    url: str,
    tenant_id: uuid.UUID,
    created_by: uuid.UUID,
    category_id: Optional[uuid.UUID] = None,
    tags: Optional[List[models.Tag]] = None,
):
    db_document = models.Document(
        name=name,
        url=url,
        tenant_id=tenant_id,
        created_by=created_by,
        category_id=category_id,
    )
    if tags:
        db_document.tags = list(tags)
    db.add(db_document)
    db.commit()
    db.refresh(db_document)
    return db_document


def get_document(db: Session, document_id: uuid.UUID, include_deleted: bool = False):
    query = db.query(models.Document).filter(models.Document.id == document_id)
    if not include_deleted:
        query = query.filter(models.Document.is_deleted.is_(False))
    return query.first()


def get_documents(
    db: Session,
    *,
    tenant_id: Optional[uuid.UUID] = None,
    category_id: Optional[uuid.UUID] = None,
    q: Optional[str] = None,
    tag_ids: Optional[List[uuid.UUID]] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(models.Document).filter(models.Document.is_deleted.is_(False))
    if tenant_id:
        query = query.filter(models.Document.tenant_id == tenant_id)
    if category_id:
        query = query.filter(models.Document.category_id == category_id)
    if q:
        query = query.filter(models.Document.name.ilike(f"%{q}%"))
    if tag_ids:
        query = query.filter(models.Document.tags.any(models.Tag.id.in_(tag_ids)))
    return query.order_by(models.Document.created_at.desc()).offset(skip).limit(limit).all()


def soft_delete_document(db: Session, document):
    document.is_deleted = True
    db.commit()
    return document


def add_tag_to_document(db: Session, document, tag):
    if tag not in document.tags:
        document.tags.append(tag)
        db.commit()
    db.refresh(document)
    return document


def remove_tag_from_document(db: Session, document, tag):
    if tag in document.tags:
        document.tags.remove(tag)
        db.commit()
    db.refresh(document)
    return document
