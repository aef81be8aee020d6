import uuid
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ActivityLog(BaseModel):
    id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    actor_user_id: Optional[uuid.UUID] = None
    action_type: str
    status: str
    target_type: Optional[str] = None
    target_id: Optional[uuid.UUID] = None
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("metadata_json", "metadata")
    )
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
