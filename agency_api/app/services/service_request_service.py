"""
Service requests and their approval workflow.

A client files a request, which starts ``pending``.  An admin either
approves it, which creates a project and links it to the request, or
rejects it.  Both transitions are only legal from ``pending``:

    pending --approve--> active      (project created, project_id set)
    pending --reject---> rejected

Approval runs in a single ``BEGIN IMMEDIATE`` transaction covering the
project counter, the new project row and the request update, so either
all three are written or none is.
"""

import logging
import sqlite3
from typing import Optional

from ..core.db import fetch_page, get_cursor, immediate_transaction, like_pattern, now_iso
from ..core.errors import NotFoundError, ServiceError, ValidationFailed
from ..core.policy import (
    Actor,
    check_request_access,
    check_request_create,
    check_request_decision,
    check_request_update,
    request_scope,
    require_admin,
)
from ..schemas.common import ProjectStatus, RequestStatus, build_page, changed_fields
from ..schemas.project import ProjectRead
from ..schemas.service_request import (
    ApproveRequest,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestUpdate,
)
from .counter_service import SERVICE_REQUEST_COUNTER, SERVICE_REQUEST_PREFIX, format_id, next_sequence_in
from .project_service import insert_project, load_project
from .user_service import ensure_employees

logger = logging.getLogger(__name__)

NOT_PENDING = "service request is not pending"


def row_to_request(row: sqlite3.Row) -> ServiceRequestRead:
    return ServiceRequestRead.model_validate(dict(row))


def load_request(cursor: sqlite3.Cursor, request_id: str) -> Optional[ServiceRequestRead]:
    row = cursor.execute("SELECT * FROM service_requests WHERE id = ?", (request_id,)).fetchone()
    return row_to_request(row) if row else None


class ServiceRequestService:
    @classmethod
    async def fetch_request(cls, request_id: str) -> ServiceRequestRead:
        with get_cursor("load service request") as cursor:
            request = load_request(cursor, request_id)
        if request is None:
            raise NotFoundError(f"service request {request_id} not found")
        return request

    @classmethod
    async def create_request(cls, payload: ServiceRequestCreate, current_user: dict) -> ServiceRequestRead:
        actor = Actor.from_user(current_user)
        check_request_create(actor)
        with immediate_transaction("create service request") as cursor:
            request_id = format_id(SERVICE_REQUEST_PREFIX, next_sequence_in(cursor, SERVICE_REQUEST_COUNTER))
            timestamp = now_iso()
            cursor.execute(
                """
                INSERT INTO service_requests (id, title, description, client_id, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    request_id,
                    payload.title,
                    payload.description,
                    actor.user_id,
                    RequestStatus.PENDING.value,
                    timestamp,
                    timestamp,
                ),
            )
            request = load_request(cursor, request_id)
        logger.info("Service request %s filed by %s", request_id, actor.user_id)
        return request

    @classmethod
    async def get_request(cls, request_id: str, current_user: dict) -> ServiceRequestRead:
        request = await cls.fetch_request(request_id)
        check_request_access(Actor.from_user(current_user), request)
        return request

    @classmethod
    async def update_request(
        cls, request_id: str, update: ServiceRequestUpdate, current_user: dict
    ) -> ServiceRequestRead:
        actor = Actor.from_user(current_user)
        request = await cls.fetch_request(request_id)
        check_request_update(actor)
        fields = changed_fields(update)
        if not fields:
            return request
        fields["updated_at"] = now_iso()
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with get_cursor("update service request") as cursor:
            cursor.execute(
                f"UPDATE service_requests SET {assignments} WHERE id = ?",
                [*fields.values(), request_id],
            )
            updated = load_request(cursor, request_id)
        if updated is None:
            raise NotFoundError(f"service request {request_id} not found")
        return updated

    @classmethod
    async def delete_request(cls, request_id: str, current_user: dict) -> None:
        actor = Actor.from_user(current_user)
        require_admin(actor)
        await cls.fetch_request(request_id)
        with get_cursor("delete service request") as cursor:
            cursor.execute("DELETE FROM service_requests WHERE id = ?", (request_id,))
        logger.info("Service request %s deleted by %s", request_id, actor.user_id)

    @classmethod
    async def list_requests(
        cls,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> dict:
        """Clients see their own requests; admins and employees see all."""
        actor = Actor.from_user(current_user)
        where: list[str] = []
        params: list = []
        client_id = request_scope(actor)
        if client_id is not None:
            where.append("client_id = ?")
            params.append(client_id)
        if search:
            pattern = like_pattern(search)
            where.append("(id LIKE ? ESCAPE '\\' OR title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
            params.extend([pattern] * 3)
        if status:
            where.append("status = ?")
            params.append(status)
        with get_cursor("list service requests") as cursor:
            rows, total = fetch_page(
                cursor, "service_requests", where, params, "created_at DESC, rowid DESC", page, page_size
            )
        return build_page([row_to_request(row) for row in rows], page, page_size, total)

    @classmethod
    async def approve(cls, request_id: str, payload: ApproveRequest, current_user: dict) -> ProjectRead:
        """Approve a pending request and create its project.

        The new project copies the request's title, description and
        client, starts ``active`` at 0% progress and is assigned to
        ``payload.employee_ids``.  Returns the created project.
        """
        actor = Actor.from_user(current_user)
        check_request_decision(actor)
        try:
            with immediate_transaction(f"approve service request {request_id}") as cursor:
                request = load_request(cursor, request_id)
                if request is None:
                    raise NotFoundError(f"service request {request_id} not found")
                if request.status is not RequestStatus.PENDING:
                    raise ValidationFailed(NOT_PENDING)
                ensure_employees(cursor, payload.employee_ids)
                project_id = insert_project(
                    cursor,
                    name=request.title,
                    description=request.description,
                    client_id=request.client_id,
                    status=ProjectStatus.ACTIVE.value,
                    employee_ids=list(dict.fromkeys(payload.employee_ids)),
                )
                cursor.execute(
                    "UPDATE service_requests SET status = ?, project_id = ?, updated_at = ? WHERE id = ?",
                    (RequestStatus.ACTIVE.value, project_id, now_iso(), request_id),
                )
                project = load_project(cursor, project_id)
        except ServiceError as exc:
            logger.warning("Approval of %s rolled back: %s", request_id, exc.message)
            raise
        logger.info("Service request %s approved by %s as %s", request_id, actor.user_id, project_id)
        return project

    @classmethod
    async def reject(cls, request_id: str, current_user: dict) -> ServiceRequestRead:
        actor = Actor.from_user(current_user)
        check_request_decision(actor)
        with get_cursor(f"reject service request {request_id}") as cursor:
            cursor.execute(
                "UPDATE service_requests SET status = ?, updated_at = ? WHERE id = ? AND status = ?",
                (RequestStatus.REJECTED.value, now_iso(), request_id, RequestStatus.PENDING.value),
            )
            changed = cursor.rowcount
            request = load_request(cursor, request_id)
        if request is None:
            raise NotFoundError(f"service request {request_id} not found")
        if not changed:
            raise ValidationFailed(NOT_PENDING)
        logger.info("Service request %s rejected by %s", request_id, actor.user_id)
        return request
