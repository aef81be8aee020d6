import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base, now_utc


class NotificationType(str, Enum):
    DOCUMENT_UPLOADED = "document_uploaded"
    ANNOUNCEMENT_POSTED = "announcement_posted"
    TICKET_CREATED = "ticket_created"
    TICKET_COMMENTED = "ticket_commented"
    TICKET_STATUS_UPDATED = "ticket_status_updated"
    RESTAURANT_JOINED = "restaurant_joined"


class ViewTargetType(str, Enum):
    DOCUMENT = "document"
    ANNOUNCEMENT = "announcement"
    TICKET = "ticket"


class Notification(Base):
    __tablename__ = 'notifications'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=True)
    type = Column(String(50), nullable=False)
    target_id = Column(UUID(as_uuid=True), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_notifications_user_id_created_at', 'user_id', 'created_at'),
        Index('idx_notifications_user_id_is_read', 'user_id', 'is_read'),
        Index('idx_notifications_type', 'type'),
    )


class View(Base):
    __tablename__ = 'views'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    target_type = Column(String(20), nullable=False)
    target_id = Column(UUID(as_uuid=True), nullable=False)
    viewed_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    user = relationship("User")

    __table_args__ = (
        Index('idx_views_unique', 'user_id', 'target_type', 'target_id', unique=True),
        Index('idx_views_target', 'target_type', 'target_id'),
    )
