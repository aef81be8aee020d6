"""
Dashboard and global search endpoints.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from franchisehub.api.deps import get_current_user_context, require_roles
from franchisehub.api.permissions import is_viewer, resolve_tenant_id
from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.services import dashboard_service, search_service
from franchisehub.utils.roles import MANAGE_ROLES

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=schemas.DashboardStats)
def get_dashboard(
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(*MANAGE_ROLES)),
):
    _, current_user = user_context
    return dashboard_service.get_dashboard_stats(db, resolve_tenant_id(current_user, tenant_id))


@router.get("/search", response_model=schemas.SearchResponse)
def search(
    q: str = Query(min_length=2),
    tenant_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _, current_user = user_context
    scope = resolve_tenant_id(current_user, tenant_id)
    restaurant_id = current_user["restaurant_id"] if is_viewer(current_user) else None
    return search_service.search(db, q=q, tenant_id=scope, restaurant_id=restaurant_id)
