"""
Employee accounts: users with role ``employee`` managed by admins.
"""

from typing import Optional

from ..core.policy import Actor, Role, require_admin
from ..schemas.user import EmployeeCreate, UserRead, UserUpdate
from .user_service import UserService


class EmployeeService:
    @classmethod
    async def create_employee(cls, payload: EmployeeCreate, current_user: dict) -> UserRead:
        require_admin(Actor.from_user(current_user))
        fields = payload.model_dump(mode="json")
        fields["role"] = Role.EMPLOYEE.value
        return await UserService.create_user(fields)

    @classmethod
    async def list_employees(
        cls,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> dict:
        return await UserService.list_users(
            current_user, page=page, page_size=page_size, search=search, role=Role.EMPLOYEE, status=status
        )

    @classmethod
    async def get_employee(cls, employee_id: str, current_user: dict) -> UserRead:
        return await UserService.get_user(employee_id, current_user, role=Role.EMPLOYEE)

    @classmethod
    async def update_employee(cls, employee_id: str, update: UserUpdate, current_user: dict) -> UserRead:
        require_admin(Actor.from_user(current_user))
        return await UserService.update_user(employee_id, update, current_user, role=Role.EMPLOYEE)

    @classmethod
    async def delete_employee(cls, employee_id: str, current_user: dict) -> None:
        await UserService.delete_user(employee_id, current_user, role=Role.EMPLOYEE)
