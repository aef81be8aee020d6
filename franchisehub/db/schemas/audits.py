import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from franchisehub.db.models.audits import (
    AuditCategory,
    AuditFrequency,
    QuestionType,
    ExecutionStatus,
    Severity,
    NonConformityStatus,
    ActionCategory,
    ActionStatus,
    ActionPriority,
)


# === Templates ===

class AuditTemplateItemBase(BaseModel):
    question: str = Field(min_length=1, max_length=500)
    type: QuestionType
    options: Optional[Any] = None
    is_required: bool = False
    order_index: Optional[int] = None
    help_text: Optional[str] = Field(default=None, max_length=255)


class AuditTemplateItemCreate(AuditTemplateItemBase):
    pass


class AuditTemplateItem(AuditTemplateItemBase):
    id: uuid.UUID
    type: str
    order_index: int
    model_config = ConfigDict(from_attributes=True)


class AuditTemplateBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category: AuditCategory = AuditCategory.OTHER
    frequency: AuditFrequency = AuditFrequency.ON_DEMAND
    estimated_duration: Optional[int] = Field(default=None, ge=0)
    is_mandatory: bool = False


class AuditTemplateCreate(AuditTemplateBase):
    items: List[AuditTemplateItemCreate] = []
    tenant_id: Optional[uuid.UUID] = None


class AuditTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[AuditCategory] = None
    frequency: Optional[AuditFrequency] = None
    estimated_duration: Optional[int] = Field(default=None, ge=0)
    is_mandatory: Optional[bool] = None
    items: Optional[List[AuditTemplateItemCreate]] = None

    @field_validator("name", "category", "frequency", "is_mandatory")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class AuditTemplate(AuditTemplateBase):
    id: uuid.UUID
    category: str
    frequency: str
    is_active: bool
    tenant_id: uuid.UUID
    created_by: Optional[uuid.UUID] = None
    items: List[AuditTemplateItem] = []
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SuggestedQuestion(BaseModel):
    question: str
    type: str
    options: Optional[Any] = None


# === Executions ===

class AuditExecutionCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    template_id: uuid.UUID
    restaurant_id: uuid.UUID
    auditor_id: uuid.UUID
    scheduled_date: datetime
    notes: Optional[str] = None
    tenant_id: Optional[uuid.UUID] = None


class AuditResponseInput(BaseModel):
    template_item_id: uuid.UUID
    value: Optional[str] = None
    numeric_value: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = None
    comment: Optional[str] = None


class AuditResponsesPayload(BaseModel):
    responses: List[AuditResponseInput] = Field(min_length=1)


class AuditCompletePayload(BaseModel):
    summary: Optional[Dict[str, Any]] = None


class AuditResponse(BaseModel):
    id: uuid.UUID
    execution_id: uuid.UUID
    template_item_id: uuid.UUID
    value: Optional[str] = None
    numeric_value: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("metadata_json", "metadata")
    )
    comment: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuditExecution(BaseModel):
    id: uuid.UUID
    title: str
    notes: Optional[str] = None
    status: str
    scheduled_date: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    summary: Optional[Dict[str, Any]] = None
    total_score: Optional[float] = None
    max_possible_score: Optional[float] = None
    tenant_id: uuid.UUID
    template_id: uuid.UUID
    restaurant_id: uuid.UUID
    auditor_id: uuid.UUID
    assigned_by: Optional[uuid.UUID] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuditExecutionDetail(AuditExecution):
    responses: List[AuditResponse] = []


class UpdatedCount(BaseModel):
    updated: int


# === Non-conformities ===

class NonConformityCreate(BaseModel):
    execution_id: uuid.UUID
    item_id: Optional[uuid.UUID] = None
    severity: Severity = Severity.MEDIUM
    description: str = Field(min_length=1)
    corrective_action: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None


class NonConformityUpdate(BaseModel):
    severity: Optional[Severity] = None
    description: Optional[str] = Field(default=None, min_length=1)
    corrective_action: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None
    status: Optional[NonConformityStatus] = None
    resolution_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None

    @field_validator("severity", "description", "status")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class NonConformity(BaseModel):
    id: uuid.UUID
    execution_id: uuid.UUID
    item_id: Optional[uuid.UUID] = None
    severity: str
    description: str
    corrective_action: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None
    status: str
    resolution_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class NonConformityStatusCounts(BaseModel):
    open: int = 0
    in_progress: int = 0
    resolved: int = 0


class NonConformityStats(BaseModel):
    total: int
    by_status: NonConformityStatusCounts
    critical: int


# === Corrective actions ===

class CorrectiveActionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category: ActionCategory = ActionCategory.OTHER
    priority: ActionPriority = ActionPriority.MEDIUM
    due_date: Optional[datetime] = None
    restaurant_id: uuid.UUID
    assigned_to: Optional[uuid.UUID] = None
    audit_execution_id: Optional[uuid.UUID] = None
    non_conformity_id: Optional[uuid.UUID] = None
    tenant_id: Optional[uuid.UUID] = None


class CorrectiveActionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[ActionCategory] = None
    priority: Optional[ActionPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[uuid.UUID] = None

    @field_validator("title", "category", "priority")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class CompletionNotes(BaseModel):
    completion_notes: Optional[str] = None


class ValidationNotes(BaseModel):
    validation_notes: Optional[str] = None


class CorrectiveAction(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    category: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completion_notes: Optional[str] = None
    validation_notes: Optional[str] = None
    tenant_id: uuid.UUID
    restaurant_id: uuid.UUID
    assigned_to: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    audit_execution_id: Optional[uuid.UUID] = None
    non_conformity_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# === Archives ===

class AuditArchive(BaseModel):
    id: uuid.UUID
    original_execution_id: uuid.UUID
    template_id: Optional[uuid.UUID] = None
    restaurant_id: Optional[uuid.UUID] = None
    inspector_id: Optional[uuid.UUID] = None
    tenant_id: uuid.UUID
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    total_score: Optional[float] = None
    max_possible_score: Optional[float] = None
    notes: Optional[str] = None
    status: str
    archived_by: Optional[uuid.UUID] = None
    archived_at: datetime
    template_name: Optional[str] = None
    template_category: Optional[str] = None
    restaurant_name: Optional[str] = None
    inspector_name: Optional[str] = None
    responses_data: Optional[List[Dict[str, Any]]] = None
    non_conformities_data: Optional[List[Dict[str, Any]]] = None
    corrective_actions_data: Optional[List[Dict[str, Any]]] = None
    model_config = ConfigDict(from_attributes=True)


class AuditArchivePage(BaseModel):
    data: List[AuditArchive]
    total: int
    page: int
    limit: int
    total_pages: int


class CategoryCount(BaseModel):
    category: Optional[str] = None
    count: int


class AuditArchiveStats(BaseModel):
    total_archives: int
    average_score: float
    categories: List[CategoryCount]


class AutoArchiveResult(BaseModel):
    archived_count: int


class CleanupResult(BaseModel):
    audits_deleted: int = 0
    responses_deleted: int = 0
    non_conformities_deleted: int = 0
    corrective_actions_deleted: int = 0
    planning_tasks_deleted: int = 0
    archived_audits_count: int = 0
