"""
Tenant, user, restaurant and invite repository functions.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from franchisehub.db import models, schemas


# === Tenants ===

def create_tenant(db: Session, tenant: schemas.TenantCreate):
    data = tenant.model_dump()
    data["restaurant_type"] = tenant.restaurant_type.value
    db_tenant = models.Tenant(**data)
    db.add(db_tenant)
    db.commit()
    db.refresh(db_tenant)
    return db_tenant


def get_tenant(db: Session, tenant_id: uuid.UUID):
    return db.query(models.Tenant).filter(models.Tenant.id == tenant_id).first()


def get_tenants(db: Session, skip: int = 0, limit: int = 100):
    return db.query(models.Tenant).order_by(models.Tenant.name).offset(skip).limit(limit).all()


def update_tenant(db: Session, tenant_id: uuid.UUID, tenant: schemas.TenantUpdate):
    db_tenant = get_tenant(db, tenant_id)
    if db_tenant:
        update_data = tenant.model_dump(exclude_unset=True)
        if update_data.get("restaurant_type") is not None:
            update_data["restaurant_type"] = update_data["restaurant_type"].value
        for key, value in update_data.items():
            setattr(db_tenant, key, value)
        db.commit()
        db.refresh(db_tenant)
    return db_tenant


# === Users ===

def create_user(
    db: Session,
    *,
    email: str,
    password_hash: str,
    role: str,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
):
    db_user = models.User(
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role,
        tenant_id=tenant_id,
        restaurant_id=restaurant_id,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def get_user(db: Session, user_id: uuid.UUID):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == (email or "").strip().lower()).first()


def get_users(db: Session, tenant_id: Optional[uuid.UUID] = None, skip: int = 0, limit: int = 100):
    query = db.query(models.User)
    if tenant_id:
        query = query.filter(models.User.tenant_id == tenant_id)
    return query.order_by(models.User.email).offset(skip).limit(limit).all()


def get_tenant_users(
    db: Session,
    tenant_id: uuid.UUID,
    *,
    role: Optional[str] = None,
    restaurant_ids: Optional[Iterable[uuid.UUID]] = None,
):
    """Active users of a tenant, optionally narrowed to a role and restaurants."""
    query = db.query(models.User).filter(
        models.User.tenant_id == tenant_id,
        models.User.is_active.is_(True),
    )
    if role:
        query = query.filter(models.User.role == role)
    if restaurant_ids:
        query = query.filter(models.User.restaurant_id.in_(list(restaurant_ids)))
    return query.all()


def update_password_hash(db: Session, user, password_hash: str):
    user.password_hash = password_hash
    db.commit()
    db.refresh(user)
    return user


def set_user_active(db: Session, user, is_active: bool):
    user.is_active = is_active
    db.commit()
    db.refresh(user)
    return user


# === Password resets ===

def create_password_reset(db: Session, user_id: uuid.UUID, code: str, ttl: timedelta):
    # Only the latest code stays usable
    (
        db.query(models.PasswordReset)
        .filter(models.PasswordReset.user_id == user_id, models.PasswordReset.is_used.is_(False))
        .update({models.PasswordReset.is_used: True}, synchronize_session=False)
    )
    reset = models.PasswordReset(
        user_id=user_id,
        code=code,
        expires_at=datetime.now(timezone.utc) + ttl,
    )
    db.add(reset)
    db.commit()
    db.refresh(reset)
    return reset


def get_valid_password_reset(db: Session, user_id: uuid.UUID, code: str):
    reset = (
        db.query(models.PasswordReset)
        .filter(
            models.PasswordReset.user_id == user_id,
            models.PasswordReset.code == code,
            models.PasswordReset.is_used.is_(False),
        )
        .order_by(models.PasswordReset.created_at.desc())
        .first()
    )
    if reset is None:
        return None
    if models.as_utc(reset.expires_at) < datetime.now(timezone.utc):
        return None
    return reset


# === Restaurants ===

def create_restaurant(db: Session, *, tenant_id: uuid.UUID, name: str, city: Optional[str] = None):
    db_restaurant = models.Restaurant(tenant_id=tenant_id, name=name, city=city)
    db.add(db_restaurant)
    db.commit()
    db.refresh(db_restaurant)
    return db_restaurant


def get_restaurant(db: Session, restaurant_id: uuid.UUID):
    return db.query(models.Restaurant).filter(models.Restaurant.id == restaurant_id).first()


def get_restaurants(
    db: Session,
    tenant_id: Optional[uuid.UUID] = None,
    restaurant_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(models.Restaurant)
    if tenant_id:
        query = query.filter(models.Restaurant.tenant_id == tenant_id)
    if restaurant_id:
        query = query.filter(models.Restaurant.id == restaurant_id)
    return query.order_by(models.Restaurant.name).offset(skip).limit(limit).all()


# === Invites ===

def create_invite(
    db: Session,
    *,
    tenant_id: uuid.UUID,
    invite_email: str,
    token: str,
    ttl: timedelta,
    restaurant_name: Optional[str] = None,
    restaurant_city: Optional[str] = None,
):
    db_invite = models.Invite(
        tenant_id=tenant_id,
        invite_email=invite_email.strip().lower(),
        token=token,
        expires_at=datetime.now(timezone.utc) + ttl,
        restaurant_name=restaurant_name,
        restaurant_city=restaurant_city,
    )
    db.add(db_invite)
    db.commit()
    db.refresh(db_invite)
    return db_invite


def get_invite(db: Session, invite_id: uuid.UUID):
    return db.query(models.Invite).filter(models.Invite.id == invite_id).first()


def get_invite_by_token(db: Session, token: str):
    return db.query(models.Invite).filter(models.Invite.token == token).first()


def get_invites(db: Session, tenant_id: Optional[uuid.UUID] = None):
    query = db.query(models.Invite)
    if tenant_id:
        query = query.filter(models.Invite.tenant_id == tenant_id)
    return query.order_by(models.Invite.created_at.desc()).all()


def delete_invite(db: Session, invite_id: uuid.UUID) -> bool:
    db_invite = get_invite(db, invite_id)
    if db_invite:
        db.delete(db_invite)
        db.commit()
        return True
    return False


def mark_invite_used(db: Session, invite):
    invite.used_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(invite)
    return invite
