"""
Project messages.

Anyone who may read a project may post to it and read its messages.
Messages cannot be edited; non-admins may delete only the messages
they sent.  Listings are newest first.
"""

import logging
import sqlite3
from typing import Optional

from ..core.db import fetch_page, get_cursor, immediate_transaction, now_iso
from ..core.errors import NotFoundError
from ..core.policy import Actor, check_message_delete, check_project_access, project_scope
from ..schemas.common import build_page
from ..schemas.message import MessageCreate, MessageRead
from .counter_service import MESSAGE_COUNTER, MESSAGE_PREFIX, format_id, next_sequence_in
from .project_service import ProjectService, scope_conditions

logger = logging.getLogger(__name__)


def row_to_message(row: sqlite3.Row) -> MessageRead:
    return MessageRead.model_validate(dict(row))


class MessageService:
    @classmethod
    async def fetch_message(cls, message_id: str) -> MessageRead:
        with get_cursor("load message") as cursor:
            row = cursor.execute("SELECT * FROM messages WHERE id = ?", (message_id,)).fetchone()
        if not row:
            raise NotFoundError(f"message {message_id} not found")
        return row_to_message(row)

    @classmethod
    async def create_message(cls, payload: MessageCreate, current_user: dict) -> MessageRead:
        actor = Actor.from_user(current_user)
        project = await ProjectService.fetch_project(payload.project_id)
        check_project_access(actor, project)
        with immediate_transaction("create message") as cursor:
            message_id = format_id(MESSAGE_PREFIX, next_sequence_in(cursor, MESSAGE_COUNTER))
            timestamp = now_iso()
            cursor.execute(
                """
                INSERT INTO messages (id, content, sender_id, project_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (message_id, payload.content, actor.user_id, payload.project_id, timestamp, timestamp),
            )
            row = cursor.execute("SELECT * FROM messages WHERE id = ?", (message_id,)).fetchone()
        return row_to_message(row)

    @classmethod
    async def get_message(cls, message_id: str, current_user: dict) -> MessageRead:
        message = await cls.fetch_message(message_id)
        project = await ProjectService.fetch_project(message.project_id)
        check_project_access(Actor.from_user(current_user), project)
        return message

    @classmethod
    async def delete_message(cls, message_id: str, current_user: dict) -> None:
        actor = Actor.from_user(current_user)
        message = await cls.fetch_message(message_id)
        project = await ProjectService.fetch_project(message.project_id)
        check_message_delete(actor, message, project)
        with get_cursor("delete message") as cursor:
            cursor.execute("DELETE FROM messages WHERE id = ?", (message_id,))
        logger.info("Message %s deleted by %s", message_id, actor.user_id)

    @classmethod
    async def list_project_messages(
        cls,
        project_id: str,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
    ) -> dict:
        project = await ProjectService.fetch_project(project_id)
        check_project_access(Actor.from_user(current_user), project)
        with get_cursor("list project messages") as cursor:
            rows, total = fetch_page(
                cursor, "messages", ["project_id = ?"], [project_id], "created_at DESC, rowid DESC", page, page_size
            )
        return build_page([row_to_message(row) for row in rows], page, page_size, total)

    @classmethod
    async def list_messages(
        cls,
        current_user: dict,
        project_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> dict:
        """Messages of one project, or of every project the caller can read."""
        if project_id:
            return await cls.list_project_messages(project_id, current_user, page, page_size)
        conditions, params = scope_conditions(project_scope(Actor.from_user(current_user)))
        where: list[str] = []
        if conditions:
            where.append(
                f"project_id IN (SELECT projects.id FROM projects WHERE {' AND '.join(conditions)})"
            )
        with get_cursor("list messages") as cursor:
            rows, total = fetch_page(cursor, "messages", where, params, "created_at DESC, rowid DESC", page, page_size)
        return build_page([row_to_message(row) for row in rows], page, page_size, total)
