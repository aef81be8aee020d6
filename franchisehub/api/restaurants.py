"""
Restaurant endpoints.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access, is_admin, is_viewer, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.post("", response_model=schemas.Restaurant, status_code=status.HTTP_201_CREATED)
def create_restaurant_endpoint(
    restaurant: schemas.RestaurantCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, restaurant.tenant_id)
    if tenant_repo.get_tenant(db, tenant_id) is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant_repo.create_restaurant(db, tenant_id=tenant_id, name=restaurant.name, city=restaurant.city)


@router.get("", response_model=List[schemas.Restaurant])
def list_restaurants_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    if is_admin(current_user):
        return tenant_repo.get_restaurants(db, tenant_id=tenant_id)
    if is_viewer(current_user):
        if not current_user["restaurant_id"]:
            return []
        return tenant_repo.get_restaurants(
            db, tenant_id=current_user["tenant_id"], restaurant_id=current_user["restaurant_id"]
        )
    return tenant_repo.get_restaurants(db, tenant_id=current_user["tenant_id"])


@router.get("/{restaurant_id}", response_model=schemas.Restaurant)
def get_restaurant_endpoint(
    restaurant_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    restaurant = tenant_repo.get_restaurant(db, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    ensure_tenant_access(current_user, restaurant.tenant_id)
    return restaurant
