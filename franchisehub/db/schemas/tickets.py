import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from franchisehub.db.models.tickets import TicketStatus


class TicketCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class CommentCreate(BaseModel):
    message: str = Field(min_length=1)


class AttachmentCreate(BaseModel):
    filename: str
    url: str
    mime_type: str
    file_size: int = Field(ge=0)
    comment_id: Optional[uuid.UUID] = None


class Attachment(BaseModel):
    id: uuid.UUID
    filename: str
    url: str
    mime_type: str
    file_size: int
    ticket_id: Optional[uuid.UUID] = None
    comment_id: Optional[uuid.UUID] = None
    uploaded_by: Optional[uuid.UUID] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class Comment(BaseModel):
    id: uuid.UUID
    ticket_id: uuid.UUID
    author_id: Optional[uuid.UUID] = None
    message: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class Ticket(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: str
    tenant_id: uuid.UUID
    restaurant_id: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TicketDetail(Ticket):
    comments: List[Comment] = []
    attachments: List[Attachment] = []


class DeletedCount(BaseModel):
    deleted: int
