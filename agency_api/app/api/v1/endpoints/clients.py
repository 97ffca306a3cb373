"""
Client endpoints.

Admins create, list and delete clients.  A client may read and update
its own record.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import Page
from ....schemas.user import ClientCreate, UserRead, UserUpdate
from ....services.client_service import ClientService

router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> UserRead:
    return await ClientService.create_client(payload, current_user)


@router.get("/", response_model=Page[UserRead])
async def list_clients(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> dict:
    return await ClientService.list_clients(current_user, page=page, page_size=page_size, search=search, status=status)


@router.get("/{client_id}", response_model=UserRead)
async def get_client(client_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    return await ClientService.get_client(client_id, current_user)


@router.put("/{client_id}", response_model=UserRead)
async def update_client(
    client_id: str,
    update: UserUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserRead:
    return await ClientService.update_client(client_id, update, current_user)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, current_user: dict = Depends(require_roles(Role.ADMIN))) -> None:
    await ClientService.delete_client(client_id, current_user)
