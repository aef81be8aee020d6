import uuid
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict

from franchisehub.db.models.notifications import NotificationType, ViewTargetType


class Notification(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    type: str
    target_id: uuid.UUID
    message: str
    is_read: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class NotificationPage(BaseModel):
    notifications: List[Notification]
    total: int
    total_pages: int


class UnreadCounts(BaseModel):
    documents: int = 0
    announcements: int = 0
    tickets: int = 0


class ViewCreate(BaseModel):
    target_type: ViewTargetType
    target_id: uuid.UUID


class View(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    target_type: str
    target_id: uuid.UUID
    viewed_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ViewPage(BaseModel):
    views: List[View]
    total: int
    total_pages: int


class MarkAllRead(BaseModel):
    notification_type: NotificationType


class MarkCategoryRead(BaseModel):
    category: Literal["documents", "announcements", "tickets"]


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
