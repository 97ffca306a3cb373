"""
Service type catalog endpoints.  The list is public; everything else
needs a login, and changes need an admin.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import ServiceTypeStatus
from ....schemas.service_type import ServiceTypeCreate, ServiceTypeRead, ServiceTypeUpdate
from ....services.service_type_service import ServiceTypeService

router = APIRouter()


@router.get("/", response_model=List[ServiceTypeRead])
async def list_service_types(status: Optional[ServiceTypeStatus] = Query(None)) -> List[ServiceTypeRead]:
    return await ServiceTypeService.list(status.value if status else None)


@router.post("/", response_model=ServiceTypeRead, status_code=status.HTTP_201_CREATED)
async def create_service_type(
    payload: ServiceTypeCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> ServiceTypeRead:
    return await ServiceTypeService.create(payload, current_user)


@router.get("/{service_type_id}", response_model=ServiceTypeRead)
async def get_service_type(service_type_id: str, current_user: dict = Depends(get_current_user)) -> ServiceTypeRead:
    return await ServiceTypeService.get(service_type_id)


@router.put("/{service_type_id}", response_model=ServiceTypeRead)
async def update_service_type(
    service_type_id: str,
    update: ServiceTypeUpdate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> ServiceTypeRead:
    return await ServiceTypeService.update(service_type_id, update, current_user)


@router.delete("/{service_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_type(
    service_type_id: str,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> None:
    await ServiceTypeService.delete(service_type_id, current_user)
