"""
Pydantic models for service requests and their approval.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import RequestStatus


class ServiceRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, examples=["Mobile app"])
    description: str = Field("", examples=["iOS and Android client for our shop"])


class ServiceRequestRead(ServiceRequestCreate):
    id: str = Field(..., examples=["SERVICE01"])
    client_id: str
    project_id: Optional[str] = None
    status: RequestStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class ServiceRequestUpdate(BaseModel):
    """Title and description only; status changes go through approve/reject."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class ApproveRequest(BaseModel):
    employee_ids: List[str] = Field(default_factory=list, examples=[["USER02"]])
