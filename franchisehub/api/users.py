"""
User endpoints: creation, listing, self-service password change and
activation.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import ensure_tenant_access, is_admin
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.utils.passwords import hash_password, verify_password
from franchisehub.utils.roles import MANAGE_ROLES, ROLE_ADMIN

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    actor, _ = user_context
    if tenant_repo.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    if payload.tenant_id and tenant_repo.get_tenant(db, payload.tenant_id) is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    if payload.restaurant_id:
        restaurant = tenant_repo.get_restaurant(db, payload.restaurant_id)
        if restaurant is None or restaurant.tenant_id != payload.tenant_id:
            raise HTTPException(status_code=400, detail="Restaurant does not belong to this tenant")
    user = tenant_repo.create_user(
        db,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        tenant_id=payload.tenant_id,
        restaurant_id=payload.restaurant_id,
    )
    activity.log(
        db,
        action=ActivityAction.USER_CREATE,
        target_type="user",
        target_id=user.id,
        actor_user_id=actor.id,
        tenant_id=user.tenant_id,
        metadata={"role": user.role},
    )
    return user


@router.get("", response_model=List[schemas.User])
def list_users_endpoint(
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    if email:
        user = tenant_repo.get_user_by_email(db, email)
        if user is None or not (is_admin(current_user) or user.tenant_id == current_user["tenant_id"]):
            raise HTTPException(status_code=404, detail="User not found")
        return [user]
    tenant_id = None if is_admin(current_user) else current_user["tenant_id"]
    return tenant_repo.get_users(db, tenant_id=tenant_id)


@router.get("/me", response_model=schemas.User)
def get_me(user_context=Depends(get_current_user_context)):
    user, _ = user_context
    return user


@router.patch("/{user_id}/password", response_model=schemas.MessageResponse)
def change_password_endpoint(
    user_id: uuid.UUID,
    payload: schemas.PasswordChange,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    if user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only change your own password")
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    tenant_repo.update_password_hash(db, user, hash_password(payload.new_password))
    return {"message": "Password updated"}


@router.patch("/{user_id}/active", response_model=schemas.User)
def set_active_endpoint(
    user_id: uuid.UUID,
    payload: schemas.UserActiveUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    actor, current_user = user_context
    target = tenant_repo.get_user(db, user_id)
    if target is None:
        raise HTTPException(status_code=404, detail="User not found")
    ensure_tenant_access(current_user, target.tenant_id)
    updated = tenant_repo.set_user_active(db, target, payload.is_active)
    activity.log(
        db,
        action=ActivityAction.USER_ACTIVE_CHANGE,
        target_type="user",
        target_id=target.id,
        actor_user_id=actor.id,
        tenant_id=target.tenant_id,
        metadata={"is_active": payload.is_active},
    )
    return updated
