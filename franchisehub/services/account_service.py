"""
Account workflows spanning several entities: invite validation, signup with
an invitation and password resets.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.db import models
from franchisehub.db.models import NotificationType
from franchisehub.db.repositories import announcements as announcement_repo
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services.errors import ConflictError, NotFoundError, ServiceError
from franchisehub.services.notification_service import NotificationService
from franchisehub.utils.config import get_settings
from franchisehub.utils.passwords import (
    create_access_token,
    generate_reset_code,
    hash_password,
)
from franchisehub.utils.roles import ROLE_VIEWER

logger = logging.getLogger(__name__)

GENERIC_RESET_MESSAGE = "If an account exists for this email, a reset code has been generated."


def check_invite(db: Session, token: str) -> models.Invite:
    """Return a usable invite or raise (404 unknown, 409 used or expired)."""
    invite = tenant_repo.get_invite_by_token(db, token)
    if invite is None:
        raise NotFoundError("Invite not found")
    if invite.used_at is not None:
        raise ConflictError("Token already used")
    if models.as_utc(invite.expires_at) < datetime.now(timezone.utc):
        raise ConflictError("Token expired")
    return invite


def signup_with_invite(
    db: Session,
    *,
    token: str,
    password: str,
    restaurant_name: Optional[str] = None,
    restaurant_city: Optional[str] = None,
) -> Tuple[models.User, str]:
    """Consume an invite and create the franchisee account.

    The restaurant named in the request (or, failing that, in the invite) is
    created first and announced to the tenant's viewers; the new user is a
    viewer bound to it. Returns ``(user, access_token)``.
    """
    invite = check_invite(db, token)
    if tenant_repo.get_user_by_email(db, invite.invite_email):
        raise ConflictError("Email already registered")

    name = restaurant_name or invite.restaurant_name
    city = restaurant_city or invite.restaurant_city

    tenant_repo.mark_invite_used(db, invite)

    restaurant = None
    if name:
        restaurant = tenant_repo.create_restaurant(db, tenant_id=invite.tenant_id, name=name, city=city)
        announcement = announcement_repo.create_announcement(
            db,
            tenant_id=invite.tenant_id,
            title=f"Nouveau restaurant : {name}",
            content=f"{name}{f' ({city})' if city else ''} a rejoint le réseau.",
            created_by=None,
        )
        try:
            NotificationService(db).notify_viewers(
                invite.tenant_id,
                NotificationType.RESTAURANT_JOINED,
                announcement.id,
                f"Le restaurant {name} a rejoint le réseau",
            )
        except Exception:
            db.rollback()
            logger.warning("restaurant_joined_notify_failed tenant=%s", invite.tenant_id, exc_info=True)

    user = tenant_repo.create_user(
        db,
        email=invite.invite_email,
        password_hash=hash_password(password),
        role=ROLE_VIEWER,
        tenant_id=invite.tenant_id,
        restaurant_id=restaurant.id if restaurant else None,
    )
    activity.log(
        db,
        action=ActivityAction.INVITE_ACCEPT,
        target_type="invite",
        target_id=invite.id,
        actor_user_id=user.id,
        tenant_id=invite.tenant_id,
        metadata={"restaurant_id": str(restaurant.id) if restaurant else None},
    )
    logger.info("invite_accepted invite=%s user=%s", invite.id, user.id)
    return user, create_access_token(user)


def request_password_reset(db: Session, email: str) -> str:
    """Store a fresh reset code when the account exists; always returns the same message."""
    user = tenant_repo.get_user_by_email(db, email)
    if user is not None:
        ttl = timedelta(minutes=get_settings().password_reset_minutes)
        reset = tenant_repo.create_password_reset(db, user.id, generate_reset_code(), ttl)
        # No mail delivery: the code is only available to operators
        logger.info("password_reset_requested user=%s code=%s", user.id, reset.code)
    return GENERIC_RESET_MESSAGE


def reset_password(db: Session, *, email: str, code: str, new_password: str) -> models.User:
    user = tenant_repo.get_user_by_email(db, email)
    reset = tenant_repo.get_valid_password_reset(db, user.id, code) if user else None
    if reset is None:
        raise ServiceError("Invalid or expired code")
    reset.is_used = True
    user = tenant_repo.update_password_hash(db, user, hash_password(new_password))
    logger.info("password_reset_completed user=%s", user.id)
    return user
