"""
Document category endpoints.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import categories as category_repo
from franchisehub.utils.roles import MANAGE_ROLES, ROLE_ADMIN

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
def create_category_endpoint(
    category: schemas.CategoryCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    if category.parent_id and category_repo.get_category(db, category.parent_id) is None:
        raise HTTPException(status_code=404, detail="Parent category not found")
    return category_repo.create_category(db, name=category.name, parent_id=category.parent_id)


@router.post("/seed")
def seed_categories_endpoint(
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    return {"created": category_repo.seed_restaurant_categories(db)}


@router.get("", response_model=List[schemas.CategoryTree])
def list_categories_endpoint(
    parent_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    if parent_id:
        return category_repo.get_children(db, parent_id)
    return category_repo.get_root_categories(db)


@router.get("/{category_id}", response_model=schemas.CategoryTree)
def get_category_endpoint(
    category_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    category = category_repo.get_category(db, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.patch("/{category_id}", response_model=schemas.Category)
def update_category_endpoint(
    category_id: uuid.UUID,
    category: schemas.CategoryUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    updated = category_repo.update_category(db, category_id, category.name)
    if updated is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category_endpoint(
    category_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    if not category_repo.delete_category(db, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return None
