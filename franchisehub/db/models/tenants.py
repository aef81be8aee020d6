import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base, now_utc


class RestaurantType(str, Enum):
    PIZZERIA = "pizzeria"
    FAST_FOOD = "fast_food"
    ASIATIQUE = "asiatique"
    BOULANGERIE = "boulangerie"
    CAFE = "cafe"
    PATISSERIE = "patisserie"
    GRILL = "grill"
    HEALTHY = "healthy"
    TRADITIONNEL = "traditionnel"
    AUTRE = "autre"


class Tenant(Base):
    __tablename__ = 'tenants'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    restaurant_type = Column(String(32), nullable=False, default=RestaurantType.TRADITIONNEL.value)
    # Theme palette used by the frontend
    primary_color = Column(String(7), nullable=False, default='#4F46E5')
    secondary_color = Column(String(7), nullable=False, default='#10B981')
    background_color = Column(String(7), nullable=False, default='#FFFFFF')
    text_color = Column(String(7), nullable=False, default='#1F2937')
    logo_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    restaurants = relationship("Restaurant", back_populates="tenant")
    users = relationship("User", back_populates="tenant")
