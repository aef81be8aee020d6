import uuid
from sqlalchemy import Column, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base, now_utc


class Restaurant(Base):
    __tablename__ = 'restaurants'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    city = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    tenant = relationship("Tenant", back_populates="restaurants")
