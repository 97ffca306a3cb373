"""
Pydantic models for the service type catalog.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import ServiceTypeStatus


class ServiceTypeBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Web development"])
    description: str = Field("", examples=["Sites, shops and dashboards"])
    status: ServiceTypeStatus = ServiceTypeStatus.ACTIVE


class ServiceTypeCreate(ServiceTypeBase):
    pass


class ServiceTypeRead(ServiceTypeBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class ServiceTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[ServiceTypeStatus] = None
