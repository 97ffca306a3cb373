"""
Service functions for projects.

Projects are created by admins directly or by approving a service
request.  Employees work on the projects they are assigned to and
clients see the projects they own; ``core.policy`` decides which
operations each role may perform and which projects a listing shows.
"""

import json
import logging
import sqlite3
from typing import Optional

from ..core.db import fetch_page, get_cursor, immediate_transaction, like_pattern, now_iso
from ..core.errors import NotFoundError, ValidationFailed
from ..core.policy import (
    Actor,
    ProjectScope,
    Role,
    check_assign_employees,
    check_project_access,
    check_project_update,
    project_scope,
    require_admin,
)
from ..schemas.common import build_page, changed_fields
from ..schemas.project import AssignEmployees, ProgressUpdate, ProjectCreate, ProjectRead, ProjectUpdate
from .counter_service import PROJECT_COUNTER, PROJECT_PREFIX, format_id, next_sequence_in
from .user_service import ensure_employees

logger = logging.getLogger(__name__)


def row_to_project(row: sqlite3.Row) -> ProjectRead:
    data = dict(row)
    data["employee_ids"] = json.loads(data.get("employee_ids") or "[]")
    return ProjectRead.model_validate(data)


def load_project(cursor: sqlite3.Cursor, project_id: str) -> Optional[ProjectRead]:
    row = cursor.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
    return row_to_project(row) if row else None


def scope_conditions(scope: ProjectScope, table: str = "projects") -> tuple[list[str], list]:
    """SQL conditions restricting ``table`` rows to a project scope."""
    where: list[str] = []
    params: list = []
    if scope.client_id is not None:
        where.append(f"{table}.client_id = ?")
        params.append(scope.client_id)
    if scope.employee_id is not None:
        where.append(f"EXISTS (SELECT 1 FROM json_each({table}.employee_ids) WHERE value = ?)")
        params.append(scope.employee_id)
    return where, params


def insert_project(
    cursor: sqlite3.Cursor,
    *,
    name: str,
    description: str,
    client_id: str,
    status: str,
    employee_ids: list[str],
) -> str:
    """Mint a ``PROJECTnn`` id and insert the row in the caller's transaction."""
    project_id = format_id(PROJECT_PREFIX, next_sequence_in(cursor, PROJECT_COUNTER))
    timestamp = now_iso()
    cursor.execute(
        """
        INSERT INTO projects
            (id, name, description, client_id, status, progress, employee_ids, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?)
        """,
        (project_id, name, description, client_id, status, json.dumps(employee_ids), timestamp, timestamp),
    )
    return project_id


class ProjectService:
    @classmethod
    async def fetch_project(cls, project_id: str) -> ProjectRead:
        with get_cursor("load project") as cursor:
            project = load_project(cursor, project_id)
        if project is None:
            raise NotFoundError(f"project {project_id} not found")
        return project

    @classmethod
    async def create_project(cls, payload: ProjectCreate, current_user: dict) -> ProjectRead:
        actor = Actor.from_user(current_user)
        require_admin(actor)
        with immediate_transaction("create project") as cursor:
            client = cursor.execute("SELECT role FROM users WHERE id = ?", (payload.client_id,)).fetchone()
            if not client or client["role"] != Role.CLIENT.value:
                raise ValidationFailed(f"user {payload.client_id} is not a client")
            ensure_employees(cursor, payload.employee_ids)
            project_id = insert_project(
                cursor,
                name=payload.name,
                description=payload.description,
                client_id=payload.client_id,
                status=payload.status.value,
                employee_ids=payload.employee_ids,
            )
            project = load_project(cursor, project_id)
        logger.info("Project %s created by %s for client %s", project_id, actor.user_id, payload.client_id)
        return project

    @classmethod
    async def get_project(cls, project_id: str, current_user: dict) -> ProjectRead:
        project = await cls.fetch_project(project_id)
        check_project_access(Actor.from_user(current_user), project)
        return project

    @classmethod
    async def _apply(cls, project_id: str, actor: Actor, fields: dict, context: str) -> ProjectRead:
        """Check and write ``fields`` under the write lock.

        The policy sees the stored row, so an assignment change made
        by another request cannot slip in between check and write.
        """
        with immediate_transaction(context) as cursor:
            project = load_project(cursor, project_id)
            if project is None:
                raise NotFoundError(f"project {project_id} not found")
            check_project_update(actor, project, fields)
            if not fields:
                return project
            values = {**fields, "updated_at": now_iso()}
            assignments = ", ".join(f"{column} = ?" for column in values)
            cursor.execute(f"UPDATE projects SET {assignments} WHERE id = ?", [*values.values(), project_id])
            return load_project(cursor, project_id)

    @classmethod
    async def update_project(cls, project_id: str, update: ProjectUpdate, current_user: dict) -> ProjectRead:
        actor = Actor.from_user(current_user)
        fields = changed_fields(update)
        updated = await cls._apply(project_id, actor, fields, "update project")
        if fields:
            logger.info("Project %s updated by %s: %s", project_id, actor.user_id, sorted(fields))
        return updated

    @classmethod
    async def update_progress(cls, project_id: str, update: ProgressUpdate, current_user: dict) -> ProjectRead:
        actor = Actor.from_user(current_user)
        return await cls._apply(project_id, actor, {"progress": update.progress}, "update project progress")

    @classmethod
    async def assign_employees(cls, project_id: str, payload: AssignEmployees, current_user: dict) -> ProjectRead:
        """Replace the project's employee set (admin only)."""
        actor = Actor.from_user(current_user)
        await cls.fetch_project(project_id)
        check_assign_employees(actor)
        with immediate_transaction("assign employees") as cursor:
            ensure_employees(cursor, payload.employee_ids)
            cursor.execute(
                "UPDATE projects SET employee_ids = ?, updated_at = ? WHERE id = ?",
                (json.dumps(payload.employee_ids), now_iso(), project_id),
            )
            project = load_project(cursor, project_id)
        if project is None:
            raise NotFoundError(f"project {project_id} not found")
        logger.info("Project %s assigned to %s by %s", project_id, payload.employee_ids, actor.user_id)
        return project

    @classmethod
    async def delete_project(cls, project_id: str, current_user: dict) -> None:
        """Delete a project together with its messages."""
        actor = Actor.from_user(current_user)
        require_admin(actor)
        await cls.fetch_project(project_id)
        with immediate_transaction("delete project") as cursor:
            cursor.execute("DELETE FROM messages WHERE project_id = ?", (project_id,))
            cursor.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        logger.info("Project %s deleted by %s", project_id, actor.user_id)

    @classmethod
    async def list_projects(
        cls,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> dict:
        """Role-scoped listing; the scope is applied before pagination.

        ``client_id`` narrows an admin's listing and is ignored for
        other roles, whose scope already fixes the visible set.
        """
        actor = Actor.from_user(current_user)
        where, params = scope_conditions(project_scope(actor))
        if search:
            pattern = like_pattern(search)
            where.append("(id LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
            params.extend([pattern] * 3)
        if status:
            where.append("status = ?")
            params.append(status)
        if client_id and actor.is_admin:
            where.append("client_id = ?")
            params.append(client_id)
        with get_cursor("list projects") as cursor:
            rows, total = fetch_page(cursor, "projects", where, params, "created_at DESC, rowid DESC", page, page_size)
        return build_page([row_to_project(row) for row in rows], page, page_size, total)
