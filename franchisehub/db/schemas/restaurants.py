import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class RestaurantBase(BaseModel):
    name: str = Field(min_length=1)
    city: Optional[str] = None


class RestaurantCreate(RestaurantBase):
    tenant_id: Optional[uuid.UUID] = None


class Restaurant(RestaurantBase):
    id: uuid.UUID
    tenant_id: uuid.UUID
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
