import uuid
from sqlalchemy import Column, Text, DateTime, Boolean, ForeignKey, Table, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base, now_utc


announcement_restaurants = Table(
    'announcement_restaurants',
    Base.metadata,
    Column('announcement_id', UUID(as_uuid=True), ForeignKey('announcements.id', ondelete='CASCADE'), primary_key=True),
    Column('restaurant_id', UUID(as_uuid=True), ForeignKey('restaurants.id', ondelete='CASCADE'), primary_key=True),
)

announcement_documents = Table(
    'announcement_documents',
    Base.metadata,
    Column('announcement_id', UUID(as_uuid=True), ForeignKey('announcements.id', ondelete='CASCADE'), primary_key=True),
    Column('document_id', UUID(as_uuid=True), ForeignKey('documents.id', ondelete='CASCADE'), primary_key=True),
)


class Announcement(Base):
    __tablename__ = 'announcements'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    # NULL for system announcements (e.g. a restaurant joining)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    restaurants = relationship("Restaurant", secondary=announcement_restaurants)
    documents = relationship("Document", secondary=announcement_documents)


class AnnouncementView(Base):
    __tablename__ = 'announcement_views'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    announcement_id = Column(UUID(as_uuid=True), ForeignKey('announcements.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=True)
    viewed_at = Column(DateTime(timezone=True), default=now_utc)

    user = relationship("User")

    __table_args__ = (
        Index('idx_announcement_views_unique', 'announcement_id', 'user_id', unique=True),
    )
