import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .restaurants import Restaurant


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    restaurant_ids: List[uuid.UUID] = []
    document_ids: List[uuid.UUID] = []
    tenant_id: Optional[uuid.UUID] = None


class AnnouncementDocument(BaseModel):
    id: uuid.UUID
    name: str
    url: str
    model_config = ConfigDict(from_attributes=True)


class Announcement(BaseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    title: str
    content: str
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    restaurants: List[Restaurant] = []
    documents: List[AnnouncementDocument] = []
    model_config = ConfigDict(from_attributes=True)


class AnnouncementViewEntry(BaseModel):
    user_id: uuid.UUID
    email: Optional[str] = None
    viewed_at: datetime


class AnnouncementStats(BaseModel):
    total_views: int
    total_users: int
    percentage: int
