"""Pydantic models for cloud extraction sessions and runs."""
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CreateSessionRequest(BaseModel):
    """Request model for storing an automation session."""
    model_config = ConfigDict(populate_by_name=True)

    label: str = Field(..., description="Human readable session label")
    session_state_json: str = Field(..., alias="sessionStateJson", description="Browser storage state as JSON text")
    expires_at: datetime = Field(..., alias="expiresAt", description="When the portal session expires")


class CreateRunRequest(BaseModel):
    """Request model for creating an extraction run."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: int = Field(..., alias="sessionId", gt=0, description="Session the run uses")
    property_ids: List[int] = Field(..., alias="propertyIds", min_length=1, description="Properties to extract")
