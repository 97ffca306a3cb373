"""
Service request endpoints, including approval and rejection.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import Page, RequestStatus
from ....schemas.project import ProjectRead
from ....schemas.service_request import (
    ApproveRequest,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestUpdate,
)
from ....services.service_request_service import ServiceRequestService

router = APIRouter()


@router.post("/", response_model=ServiceRequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: ServiceRequestCreate,
    current_user: dict = Depends(get_current_user),
) -> ServiceRequestRead:
    """File a new request.  Only clients may do this."""
    return await ServiceRequestService.create_request(payload, current_user)


@router.get("/", response_model=Page[ServiceRequestRead])
async def list_requests(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return await ServiceRequestService.list_requests(
        current_user,
        page=page,
        page_size=page_size,
        search=search,
        status=status.value if status else None,
    )


@router.get("/{request_id}", response_model=ServiceRequestRead)
async def get_request(request_id: str, current_user: dict = Depends(get_current_user)) -> ServiceRequestRead:
    return await ServiceRequestService.get_request(request_id, current_user)


@router.put("/{request_id}", response_model=ServiceRequestRead)
async def update_request(
    request_id: str,
    update: ServiceRequestUpdate,
    current_user: dict = Depends(get_current_user),
) -> ServiceRequestRead:
    return await ServiceRequestService.update_request(request_id, update, current_user)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request(request_id: str, current_user: dict = Depends(require_roles(Role.ADMIN))) -> None:
    await ServiceRequestService.delete_request(request_id, current_user)


@router.post("/{request_id}/approve", response_model=ProjectRead)
async def approve_request(
    request_id: str,
    payload: Optional[ApproveRequest] = None,
    current_user: dict = Depends(get_current_user),
) -> ProjectRead:
    """Approve a pending request and return the project created for it."""
    return await ServiceRequestService.approve(request_id, payload or ApproveRequest(), current_user)


@router.post("/{request_id}/reject", response_model=ServiceRequestRead)
async def reject_request(request_id: str, current_user: dict = Depends(get_current_user)) -> ServiceRequestRead:
    return await ServiceRequestService.reject(request_id, current_user)
