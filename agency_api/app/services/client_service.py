"""
Client accounts.

Admins create and list clients; a client may read and update its own
record through the same profile rules as ``/users``.
"""

from typing import Optional

from ..core.policy import Actor, Role, require_admin
from ..schemas.user import ClientCreate, UserRead, UserUpdate
from .user_service import UserService


class ClientService:
    @classmethod
    async def create_client(cls, payload: ClientCreate, current_user: dict) -> UserRead:
        require_admin(Actor.from_user(current_user))
        fields = payload.model_dump(mode="json")
        fields["role"] = Role.CLIENT.value
        return await UserService.create_user(fields)

    @classmethod
    async def list_clients(
        cls,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> dict:
        return await UserService.list_users(
            current_user, page=page, page_size=page_size, search=search, role=Role.CLIENT, status=status
        )

    @classmethod
    async def get_client(cls, client_id: str, current_user: dict) -> UserRead:
        return await UserService.get_user(client_id, current_user, role=Role.CLIENT)

    @classmethod
    async def update_client(cls, client_id: str, update: UserUpdate, current_user: dict) -> UserRead:
        return await UserService.update_user(client_id, update, current_user, role=Role.CLIENT)

    @classmethod
    async def delete_client(cls, client_id: str, current_user: dict) -> None:
        await UserService.delete_user(client_id, current_user, role=Role.CLIENT)
