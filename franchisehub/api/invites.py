"""
Invitation endpoints.

Tokens are generated server-side and logged; delivery to the invitee happens
outside this service.
"""
import logging
import uuid
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub import activity
from franchisehub.activity import ActivityAction
from franchisehub.api.deps import require_roles
from franchisehub.api.permissions import ensure_tenant_access, resolve_tenant_id, scope_tenant_filter
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services import account_service
from franchisehub.utils.config import get_settings
from franchisehub.utils.passwords import generate_invite_token
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(prefix="/invites", tags=["invites"])
logger = logging.getLogger(__name__)


@router.post("", response_model=schemas.Invite, status_code=status.HTTP_201_CREATED)
def create_invite_endpoint(
    invite: schemas.InviteCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    tenant_id = resolve_tenant_id(current_user, invite.tenant_id)
    if tenant_repo.get_tenant(db, tenant_id) is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    created = tenant_repo.create_invite(
        db,
        tenant_id=tenant_id,
        invite_email=invite.invite_email,
        token=generate_invite_token(),
        ttl=timedelta(days=get_settings().invite_expiry_days),
        restaurant_name=invite.restaurant_name,
        restaurant_city=invite.restaurant_city,
    )
    logger.info("invite_created invite=%s email=%s token=%s", created.id, created.invite_email, created.token)
    activity.log(
        db,
        action=ActivityAction.INVITE_CREATE,
        target_type="invite",
        target_id=created.id,
        actor_user_id=user.id,
        tenant_id=tenant_id,
        metadata={"email": created.invite_email},
    )
    return created


@router.get("", response_model=List[schemas.Invite])
def list_invites_endpoint(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    return tenant_repo.get_invites(db, tenant_id=scope_tenant_filter(current_user, tenant_id))


@router.delete("/{invite_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_invite_endpoint(
    invite_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    user, current_user = user_context
    invite = tenant_repo.get_invite(db, invite_id)
    if invite is None:
        raise HTTPException(status_code=404, detail="Invite not found")
    ensure_tenant_access(current_user, invite.tenant_id)
    tenant_id = invite.tenant_id
    tenant_repo.delete_invite(db, invite_id)
    activity.log(
        db,
        action=ActivityAction.INVITE_REVOKE,
        target_type="invite",
        target_id=invite_id,
        actor_user_id=user.id,
        tenant_id=tenant_id,
    )
    return None


@router.get("/check/{token}", response_model=schemas.InvitePublic)
def check_invite_endpoint(token: str, db: Session = Depends(get_db)):
    return account_service.check_invite(db, token)
