"""
Pydantic models for project messages.

Messages are immutable once posted, so there is no update schema.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    project_id: str = Field(..., min_length=1, examples=["PROJECT01"])
    content: str = Field(..., min_length=1, examples=["First draft is ready for review"])


class MessageRead(MessageCreate):
    id: str = Field(..., examples=["MESSAGE01"])
    sender_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }
