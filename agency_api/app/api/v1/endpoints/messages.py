"""
Message endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.config import settings
from ....core.security import get_current_user
from ....schemas.common import Page
from ....schemas.message import MessageCreate, MessageRead
from ....services.message_service import MessageService

router = APIRouter()


@router.post("/", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def create_message(payload: MessageCreate, current_user: dict = Depends(get_current_user)) -> MessageRead:
    return await MessageService.create_message(payload, current_user)


@router.get("/", response_model=Page[MessageRead])
async def list_messages(
    project_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Messages of ``project_id``, or of every project the caller can read."""
    return await MessageService.list_messages(current_user, project_id=project_id, page=page, page_size=page_size)


@router.get("/{message_id}", response_model=MessageRead)
async def get_message(message_id: str, current_user: dict = Depends(get_current_user)) -> MessageRead:
    return await MessageService.get_message(message_id, current_user)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: str, current_user: dict = Depends(get_current_user)) -> None:
    await MessageService.delete_message(message_id, current_user)
