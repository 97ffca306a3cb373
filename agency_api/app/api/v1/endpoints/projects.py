"""
Project endpoints.

Listings are scoped by role: admins see every project, employees the
projects they are assigned to and clients the projects they own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.policy import Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import Page, ProjectStatus
from ....schemas.message import MessageRead
from ....schemas.project import AssignEmployees, ProgressUpdate, ProjectCreate, ProjectRead, ProjectUpdate
from ....services.message_service import MessageService
from ....services.project_service import ProjectService

router = APIRouter()


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    current_user: dict = Depends(require_roles(Role.ADMIN)),
) -> ProjectRead:
    return await ProjectService.create_project(payload, current_user)


@router.get("/", response_model=Page[ProjectRead])
async def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    status: Optional[ProjectStatus] = Query(None),
    client_id: Optional[str] = Query(None, description="Admin only; ignored for other roles"),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return await ProjectService.list_projects(
        current_user,
        page=page,
        page_size=page_size,
        search=search,
        status=status.value if status else None,
        client_id=client_id,
    )


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: str, current_user: dict = Depends(get_current_user)) -> ProjectRead:
    return await ProjectService.get_project(project_id, current_user)


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: str,
    update: ProjectUpdate,
    current_user: dict = Depends(get_current_user),
) -> ProjectRead:
    """Update provided fields.

    Employees may change only status and progress of assigned projects;
    clients only description and progress of their own.
    """
    return await ProjectService.update_project(project_id, update, current_user)


@router.patch("/{project_id}/progress", response_model=ProjectRead)
async def update_progress(
    project_id: str,
    update: ProgressUpdate,
    current_user: dict = Depends(get_current_user),
) -> ProjectRead:
    return await ProjectService.update_progress(project_id, update, current_user)


@router.post("/{project_id}/assign", response_model=ProjectRead)
async def assign_employees(
    project_id: str,
    payload: AssignEmployees,
    current_user: dict = Depends(get_current_user),
) -> ProjectRead:
    return await ProjectService.assign_employees(project_id, payload, current_user)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, current_user: dict = Depends(require_roles(Role.ADMIN))) -> None:
    await ProjectService.delete_project(project_id, current_user)


@router.get("/{project_id}/messages", response_model=Page[MessageRead])
async def list_project_messages(
    project_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Messages of a project, newest first."""
    return await MessageService.list_project_messages(project_id, current_user, page, page_size)
