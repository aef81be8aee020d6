import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class InviteBase(BaseModel):
    invite_email: str
    restaurant_name: Optional[str] = None
    restaurant_city: Optional[str] = None


class InviteCreate(InviteBase):
    tenant_id: Optional[uuid.UUID] = None


class InvitePublic(InviteBase):
    """Invite as shown to the invitee; never carries the token."""
    id: uuid.UUID
    tenant_id: uuid.UUID
    expires_at: datetime
    used_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class Invite(InvitePublic):
    token: str
    created_at: datetime
