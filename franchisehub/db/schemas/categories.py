from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    parent_id: Optional[uuid.UUID] = None


class CategoryUpdate(BaseModel):
    name: str = Field(min_length=1)


class Category(BaseModel):
    id: uuid.UUID
    name: str
    parent_id: Optional[uuid.UUID] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CategoryTree(Category):
    children: List[CategoryTree] = []
