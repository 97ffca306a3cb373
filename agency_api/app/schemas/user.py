"""
Pydantic models for users, authentication and the role-specific
employee/client views.

Passwords are accepted on input only; ``UserRead`` never carries one.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from ..core.policy import Role
from .common import UserStatus


PASSWORD_MIN_LENGTH = 6


class UserBase(BaseModel):
    email: str = Field(..., examples=["jane@example.com"])
    name: str = Field(..., min_length=1, examples=["Jane Doe"])
    phone: Optional[str] = Field(None, examples=["+1 555 0100"])


class UserRegister(UserBase):
    """Self-registration payload.

    The first account created in an empty store becomes the admin
    regardless of ``role``; afterwards only ``client`` is accepted.
    """

    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, examples=["s3cret"])
    role: Role = Field(Role.CLIENT, examples=["client"])


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1, examples=["jane@example.com"])
    password: str = Field(..., min_length=1, examples=["s3cret"])


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: str = Field(..., examples=["USER01"])
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    department: Optional[str] = None
    salary: Optional[int] = None
    company: Optional[str] = None
    address: Optional[str] = None
    hide: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class UserUpdate(BaseModel):
    """Partial update of a user profile.

    Only fields present in the payload are applied, so ``salary=0`` and
    ``hide=false`` are honoured.  ``null`` means "leave unchanged".
    """

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=PASSWORD_MIN_LENGTH)
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None
    department: Optional[str] = None
    salary: Optional[int] = Field(None, ge=0)
    company: Optional[str] = None
    address: Optional[str] = None
    hide: Optional[bool] = None


class EmployeeCreate(UserBase):
    email: EmailStr = Field(..., examples=["emp@example.com"])
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    department: Optional[str] = Field(None, examples=["Design"])
    salary: Optional[int] = Field(None, ge=0, examples=[50000])
    status: UserStatus = UserStatus.ACTIVE


class ClientCreate(UserBase):
    email: EmailStr = Field(..., examples=["client@example.com"])
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    company: Optional[str] = Field(None, examples=["Acme Ltd"])
    address: Optional[str] = Field(None, examples=["1 Main St"])
    status: UserStatus = UserStatus.ACTIVE


class DashboardStats(BaseModel):
    """Role-scoped counters for the dashboard.

    Keys that do not apply to the caller's role are omitted.
    """

    users_by_role: Optional[dict[str, int]] = None
    projects_by_status: dict[str, int] = Field(default_factory=dict)
    service_requests_by_status: Optional[dict[str, int]] = None
    service_types: Optional[int] = None
