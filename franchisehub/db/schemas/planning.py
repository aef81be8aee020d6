import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from franchisehub.db.models.planning import PlanningTaskType, PlanningTaskStatus
from .audits import AuditExecution


class PlanningTaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    scheduled_date: datetime
    duration: int = Field(default=60, ge=1)
    type: PlanningTaskType = PlanningTaskType.CUSTOM
    restaurant_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None
    audit_execution_id: Optional[uuid.UUID] = None
    corrective_action_id: Optional[uuid.UUID] = None
    tenant_id: Optional[uuid.UUID] = None


class PlanningTaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=1)
    status: Optional[PlanningTaskStatus] = None
    restaurant_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None

    @field_validator("title", "scheduled_date", "duration", "status")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class PlanningTask(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    scheduled_date: datetime
    duration: int
    type: str
    status: str
    tenant_id: uuid.UUID
    restaurant_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    audit_execution_id: Optional[uuid.UUID] = None
    corrective_action_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    tasks: List[PlanningTask]
    audits: List[AuditExecution]
