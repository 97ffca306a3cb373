"""
Employee management endpoints (admin), plus self-view for employees.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import Page
from ....schemas.user import EmployeeCreate, UserRead, UserUpdate
from ....services.employee_service import EmployeeService

router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: EmployeeCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> UserRead:
    return await EmployeeService.create_employee(payload, current_user)


@router.get("/", response_model=Page[UserRead])
async def list_employees(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> dict:
    return await EmployeeService.list_employees(
        current_user, page=page, page_size=page_size, search=search, status=status
    )


@router.get("/{employee_id}", response_model=UserRead)
async def get_employee(employee_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    return await EmployeeService.get_employee(employee_id, current_user)


@router.put("/{employee_id}", response_model=UserRead)
@router.patch("/{employee_id}", response_model=UserRead)
async def update_employee(
    employee_id: str,
    update: UserUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> UserRead:
    return await EmployeeService.update_employee(employee_id, update, current_user)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee_id: str, current_user: dict = Depends(require_roles(Role.ADMIN))) -> None:
    await EmployeeService.delete_employee(employee_id, current_user)
