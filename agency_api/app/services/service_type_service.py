"""
Catalog of service types offered by the agency.

The list is public; single entries need a login and only admins
change the catalog.
"""

import logging
import sqlite3
import uuid
from typing import List, Optional

from ..core.db import get_cursor, now_iso
from ..core.errors import NotFoundError
from ..core.policy import Actor, require_admin
from ..schemas.common import changed_fields
from ..schemas.service_type import ServiceTypeCreate, ServiceTypeRead, ServiceTypeUpdate

logger = logging.getLogger(__name__)


def _load(cursor: sqlite3.Cursor, service_type_id: str) -> Optional[ServiceTypeRead]:
    row = cursor.execute("SELECT * FROM service_types WHERE id = ?", (service_type_id,)).fetchone()
    return ServiceTypeRead.model_validate(dict(row)) if row else None


class ServiceTypeService:
    @classmethod
    async def create(cls, payload: ServiceTypeCreate, current_user: dict) -> ServiceTypeRead:
        actor = Actor.from_user(current_user)
        require_admin(actor)
        service_type_id = uuid.uuid4().hex
        timestamp = now_iso()
        with get_cursor("create service type") as cursor:
            cursor.execute(
                """
                INSERT INTO service_types (id, name, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (service_type_id, payload.name, payload.description, payload.status.value, timestamp, timestamp),
            )
            created = _load(cursor, service_type_id)
        logger.info("Service type %s (%s) created by %s", service_type_id, payload.name, actor.user_id)
        return created

    @classmethod
    async def get(cls, service_type_id: str) -> ServiceTypeRead:
        with get_cursor("load service type") as cursor:
            service_type = _load(cursor, service_type_id)
        if service_type is None:
            raise NotFoundError(f"service type {service_type_id} not found")
        return service_type

    @classmethod
    async def list(cls, status: Optional[str] = None) -> List[ServiceTypeRead]:
        query = "SELECT * FROM service_types"
        params: list = []
        if status:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY name"
        with get_cursor("list service types") as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [ServiceTypeRead.model_validate(dict(row)) for row in rows]

    @classmethod
    async def update(cls, service_type_id: str, update: ServiceTypeUpdate, current_user: dict) -> ServiceTypeRead:
        require_admin(Actor.from_user(current_user))
        current = await cls.get(service_type_id)
        fields = changed_fields(update)
        if not fields:
            return current
        fields["updated_at"] = now_iso()
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with get_cursor("update service type") as cursor:
            cursor.execute(
                f"UPDATE service_types SET {assignments} WHERE id = ?",
                [*fields.values(), service_type_id],
            )
            updated = _load(cursor, service_type_id)
        if updated is None:
            raise NotFoundError(f"service type {service_type_id} not found")
        return updated

    @classmethod
    async def delete(cls, service_type_id: str, current_user: dict) -> None:
        actor = Actor.from_user(current_user)
        require_admin(actor)
        await cls.get(service_type_id)
        with get_cursor("delete service type") as cursor:
            cursor.execute("DELETE FROM service_types WHERE id = ?", (service_type_id,))
        logger.info("Service type %s deleted by %s", service_type_id, actor.user_id)
