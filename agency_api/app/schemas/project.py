"""
Pydantic models for projects.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import ProjectStatus


def _dedupe(ids: List[str]) -> List[str]:
    seen: dict[str, None] = {}
    for item in ids:
        seen.setdefault(item, None)
    return list(seen)


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Website redesign"])
    description: str = Field("", examples=["New landing page and blog"])


class ProjectCreate(ProjectBase):
    client_id: str = Field(..., min_length=1, examples=["USER03"])
    status: ProjectStatus = Field(ProjectStatus.PENDING, examples=["pending"])
    employee_ids: List[str] = Field(default_factory=list, examples=[["USER02"]])

    @field_validator("status")
    @classmethod
    def _creatable_status(cls, value: ProjectStatus) -> ProjectStatus:
        if value is ProjectStatus.REJECTED:
            raise ValueError("a project cannot be created as rejected")
        return value

    @field_validator("employee_ids")
    @classmethod
    def _unique_employees(cls, value: List[str]) -> List[str]:
        return _dedupe(value)


class ProjectRead(ProjectBase):
    id: str = Field(..., examples=["PROJECT01"])
    client_id: str
    status: ProjectStatus
    progress: int = Field(0, ge=0, le=100)
    employee_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class ProjectUpdate(BaseModel):
    """Partial update; only provided fields are applied."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class ProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100, examples=[40])


class AssignEmployees(BaseModel):
    """Replaces the project's employee set."""

    employee_ids: List[str] = Field(..., examples=[["USER02", "USER04"]])

    @field_validator("employee_ids")
    @classmethod
    def _unique_employees(cls, value: List[str]) -> List[str]:
        return _dedupe(value)
