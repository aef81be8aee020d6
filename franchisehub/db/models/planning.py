import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID

from .base import Base, now_utc


class PlanningTaskType(str, Enum):
    AUDIT = "audit"
    CUSTOM = "custom"
    CORRECTIVE_ACTION = "corrective_action"


class PlanningTaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PlanningTask(Base):
    __tablename__ = 'planning_tasks'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    # Minutes
    duration = Column(Integer, nullable=False, default=60)
    type = Column(String(32), nullable=False, default=PlanningTaskType.CUSTOM.value)
    status = Column(String(16), nullable=False, default=PlanningTaskStatus.PENDING.value)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey('restaurants.id', ondelete='SET NULL'), nullable=True)
    assigned_to = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    audit_execution_id = Column(UUID(as_uuid=True), ForeignKey('audit_executions.id', ondelete='SET NULL'), nullable=True)
    corrective_action_id = Column(UUID(as_uuid=True), ForeignKey('corrective_actions.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_planning_tasks_tenant_id_scheduled_date', 'tenant_id', 'scheduled_date'),
    )
