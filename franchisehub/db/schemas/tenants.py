import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from franchisehub.db.models.tenants import RestaurantType

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class TenantBase(BaseModel):
    name: str = Field(min_length=1)
    restaurant_type: RestaurantType = RestaurantType.TRADITIONNEL
    primary_color: str = Field(default="#4F46E5", pattern=HEX_COLOR)
    secondary_color: str = Field(default="#10B981", pattern=HEX_COLOR)
    background_color: str = Field(default="#FFFFFF", pattern=HEX_COLOR)
    text_color: str = Field(default="#1F2937", pattern=HEX_COLOR)
    logo_url: Optional[str] = None


class TenantCreate(TenantBase):
    pass


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    restaurant_type: Optional[RestaurantType] = None
    primary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    secondary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    text_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    logo_url: Optional[str] = None

    @field_validator(
        "name", "restaurant_type", "primary_color", "secondary_color", "background_color", "text_color"
    )
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class Tenant(TenantBase):
    id: uuid.UUID
    restaurant_type: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
