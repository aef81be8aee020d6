import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, Float, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from .base import Base, now_utc


class AuditCategory(str, Enum):
    HYGIENE_SECURITY = "hygiene_security"
    CUSTOMER_SERVICE = "customer_service"
    PROCESS_COMPLIANCE = "process_compliance"
    EQUIPMENT_STANDARDS = "equipment_standards"
    STAFF_TRAINING = "staff_training"
    INVENTORY_MANAGEMENT = "inventory_management"
    OTHER = "other"


class AuditFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ON_DEMAND = "on_demand"


class QuestionType(str, Enum):
    SCORE_1_5 = "score_1_5"
    SELECT = "select"
    TEXT = "text"
    PHOTO = "photo"
    YES_NO = "yes_no"
    TEMPERATURE = "temperature"


class ExecutionStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    ARCHIVED = "archived"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NonConformityStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ActionCategory(str, Enum):
    EQUIPMENT_REPAIR = "equipment_repair"
    STAFF_TRAINING = "staff_training"
    CLEANING_DISINFECTION = "cleaning_disinfection"
    PROCESS_IMPROVEMENT = "process_improvement"
    COMPLIANCE_ISSUE = "compliance_issue"
    OTHER = "other"


class ActionStatus(str, Enum):
    CREATED = "created"
    VALIDATED = "validated"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VERIFIED = "verified"
    ARCHIVED = "archived"


class ActionPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ArchiveStatus(str, Enum):
    ARCHIVED = "archived"
    DELETED = "deleted"


class AuditTemplate(Base):
    __tablename__ = 'audit_templates'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False, default=AuditCategory.OTHER.value)
    frequency = Column(String(16), nullable=False, default=AuditFrequency.ON_DEMAND.value)
    # Minutes
    estimated_duration = Column(Integer, nullable=True)
    is_mandatory = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    items = relationship(
        "AuditTemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="AuditTemplateItem.order_index",
    )


class AuditTemplateItem(Base):
    __tablename__ = 'audit_template_items'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    template_id = Column(UUID(as_uuid=True), ForeignKey('audit_templates.id', ondelete='CASCADE'), nullable=False, index=True)
    question = Column(String(500), nullable=False)
    type = Column(String(16), nullable=False)
    options = Column(JSONB, nullable=True)
    is_required = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)
    help_text = Column(String(255), nullable=True)

    template = relationship("AuditTemplate", back_populates="items")


class AuditExecution(Base):
    __tablename__ = 'audit_executions'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=ExecutionStatus.SCHEDULED.value)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    summary = Column(JSONB, nullable=True)
    total_score = Column(Float, nullable=True)
    max_possible_score = Column(Float, nullable=True)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)
    template_id = Column(UUID(as_uuid=True), ForeignKey('audit_templates.id'), nullable=False)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey('restaurants.id'), nullable=False)
    auditor_id = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False)
    assigned_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    template = relationship("AuditTemplate")
    restaurant = relationship("Restaurant")
    auditor = relationship("User", foreign_keys=[auditor_id])
    responses = relationship(
        "AuditResponse",
        back_populates="execution",
        cascade="all, delete-orphan",
        order_by="AuditResponse.created_at",
    )
    non_conformities = relationship(
        "NonConformity",
        back_populates="execution",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index('idx_audit_executions_tenant_id_scheduled_date', 'tenant_id', 'scheduled_date'),
        Index('idx_audit_executions_status', 'status'),
    )


class AuditResponse(Base):
    __tablename__ = 'audit_responses'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    execution_id = Column(UUID(as_uuid=True), ForeignKey('audit_executions.id', ondelete='CASCADE'), nullable=False)
    template_item_id = Column(UUID(as_uuid=True), ForeignKey('audit_template_items.id', ondelete='CASCADE'), nullable=False)
    value = Column(Text, nullable=True)
    numeric_value = Column(Float, nullable=True)
    # Use a non-reserved Python attribute name while keeping DB column name 'metadata'
    metadata_json = Column('metadata', JSONB, nullable=True)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    execution = relationship("AuditExecution", back_populates="responses")
    item = relationship("AuditTemplateItem")

    __table_args__ = (
        Index('idx_audit_responses_execution_item', 'execution_id', 'template_item_id', unique=True),
    )


class NonConformity(Base):
    __tablename__ = 'non_conformities'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    execution_id = Column(UUID(as_uuid=True), ForeignKey('audit_executions.id', ondelete='CASCADE'), nullable=False, index=True)
    item_id = Column(UUID(as_uuid=True), ForeignKey('audit_template_items.id', ondelete='SET NULL'), nullable=True)
    severity = Column(String(16), nullable=False, default=Severity.MEDIUM.value)
    description = Column(Text, nullable=False)
    corrective_action = Column(Text, nullable=True)
    responsible_user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(16), nullable=False, default=NonConformityStatus.OPEN.value)
    resolution_date = Column(DateTime(timezone=True), nullable=True)
    resolution_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    execution = relationship("AuditExecution", back_populates="non_conformities")
    actions = relationship("CorrectiveAction", back_populates="non_conformity")


class CorrectiveAction(Base):
    __tablename__ = 'corrective_actions'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False, default=ActionCategory.OTHER.value)
    status = Column(String(16), nullable=False, default=ActionStatus.CREATED.value)
    priority = Column(String(16), nullable=False, default=ActionPriority.MEDIUM.value)
    due_date = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completion_notes = Column(Text, nullable=True)
    validation_notes = Column(Text, nullable=True)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey('restaurants.id'), nullable=False)
    assigned_to = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    audit_execution_id = Column(UUID(as_uuid=True), ForeignKey('audit_executions.id', ondelete='SET NULL'), nullable=True)
    non_conformity_id = Column(UUID(as_uuid=True), ForeignKey('non_conformities.id', ondelete='SET NULL'), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    restaurant = relationship("Restaurant")
    assignee = relationship("User", foreign_keys=[assigned_to])
    non_conformity = relationship("NonConformity", back_populates="actions")


class AuditArchive(Base):
    __tablename__ = 'audit_archives'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    original_execution_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    template_id = Column(UUID(as_uuid=True), nullable=True)
    restaurant_id = Column(UUID(as_uuid=True), nullable=True)
    inspector_id = Column(UUID(as_uuid=True), nullable=True)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)
    scheduled_date = Column(DateTime(timezone=True), nullable=True)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    total_score = Column(Float, nullable=True)
    max_possible_score = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=ArchiveStatus.ARCHIVED.value)
    archived_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    archived_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    # Denormalized so archives survive deletion of their sources
    template_name = Column(String(200), nullable=True)
    template_category = Column(String(32), nullable=True)
    restaurant_name = Column(Text, nullable=True)
    inspector_name = Column(Text, nullable=True)

    responses_data = Column(JSONB, nullable=True)
    non_conformities_data = Column(JSONB, nullable=True)
    corrective_actions_data = Column(JSONB, nullable=True)

    __table_args__ = (
        Index('idx_audit_archives_tenant_id_archived_at', 'tenant_id', 'archived_at'),
    )
