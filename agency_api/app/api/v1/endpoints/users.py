"""
User endpoints.

Admins manage every account.  Employees and clients may read and
update only their own profile, without touching the fields that an
admin controls (role, and department/salary or company).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import Page
from ....schemas.user import DashboardStats, UserRead, UserUpdate
from ....services.user_service import UserService

router = APIRouter()


@router.get("/", response_model=Page[UserRead])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    role: Optional[Role] = Query(None),
    status: Optional[str] = Query(None),
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> dict:
    return await UserService.list_users(
        current_user, page=page, page_size=page_size, search=search, role=role, status=status
    )


@router.get("/dashboard/stats", response_model=DashboardStats, response_model_exclude_none=True)
async def dashboard_stats(current_user: dict = Depends(get_current_user)) -> DashboardStats:
    """Counts for the caller's dashboard, scoped to their role."""
    return await UserService.dashboard_stats(current_user)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    return await UserService.get_user(user_id, current_user)


@router.put("/{user_id}", response_model=UserRead)
@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    update: UserUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserRead:
    """Update the provided fields of a user."""
    return await UserService.update_user(user_id, update, current_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, current_user: dict = Depends(require_roles(Role.ADMIN))) -> None:
    await UserService.delete_user(user_id, current_user)
