import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class Tag(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class DocumentCreate(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    category_id: Optional[uuid.UUID] = None
    tag_ids: List[uuid.UUID] = []
    tenant_id: Optional[uuid.UUID] = None


class Document(BaseModel):
    id: uuid.UUID
    name: str
    url: str
    tenant_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    tags: List[Tag] = []
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
