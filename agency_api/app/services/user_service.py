"""
Service functions for user management.

Users of all three roles live in the ``users`` table.  This service
holds the shared pieces (row conversion, insertion with a minted
``USERnn`` id, profile updates) that the auth, employee and client
services build on, plus the admin-only listing and the dashboard
statistics.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional

from ..core.db import fetch_page, get_cursor, immediate_transaction, like_pattern, now_iso
from ..core.errors import ConflictError, NotFoundError, ValidationFailed
from ..core.policy import Actor, Role, check_user_read, check_user_update, require_admin
from ..core.security import hash_password
from ..schemas.common import build_page, changed_fields
from ..schemas.user import DashboardStats, UserRead, UserUpdate
from .counter_service import USER_COUNTER, USER_PREFIX, format_id, next_sequence_in

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "email", "password", "name", "phone", "role", "status",
    "department", "salary", "company", "address", "hide",
)


def row_to_user(row: sqlite3.Row) -> UserRead:
    data = dict(row)
    data.pop("password", None)
    return UserRead.model_validate(data)


def load_user_row(cursor: sqlite3.Cursor, user_id: str) -> Optional[sqlite3.Row]:
    return cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()


def ensure_employees(cursor: sqlite3.Cursor, employee_ids: list[str]) -> None:
    """Raise ``ValidationFailed`` unless every id names an employee."""
    for employee_id in employee_ids:
        row = cursor.execute("SELECT role FROM users WHERE id = ?", (employee_id,)).fetchone()
        if not row or row["role"] != Role.EMPLOYEE.value:
            raise ValidationFailed(f"user {employee_id} is not an employee")


class UserService:
    @classmethod
    def insert_user(cls, cursor: sqlite3.Cursor, fields: Dict[str, Any]) -> str:
        """Insert a user inside the caller's write transaction.

        ``fields`` must contain ``email``, ``password`` (plain text),
        ``name`` and ``role``.  Returns the minted id.
        """
        if cursor.execute("SELECT 1 FROM users WHERE email = ?", (fields["email"],)).fetchone():
            raise ConflictError(f"email {fields['email']} is already registered")
        user_id = format_id(USER_PREFIX, next_sequence_in(cursor, USER_COUNTER))
        record = {column: fields.get(column) for column in USER_COLUMNS}
        record["password"] = hash_password(fields["password"])
        record["role"] = Role(fields["role"]).value
        record["status"] = fields.get("status") or "active"
        record["hide"] = int(bool(fields.get("hide")))
        timestamp = now_iso()
        columns = ["id", *record, "created_at", "updated_at"]
        cursor.execute(
            f"INSERT INTO users ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            [user_id, *record.values(), timestamp, timestamp],
        )
        return user_id

    @classmethod
    async def create_user(cls, fields: Dict[str, Any]) -> UserRead:
        with immediate_transaction("create user") as cursor:
            user_id = cls.insert_user(cursor, fields)
            row = load_user_row(cursor, user_id)
        logger.info("Created %s %s (%s)", fields["role"], user_id, fields["email"])
        return row_to_user(row)

    @classmethod
    async def fetch_user(cls, user_id: str, role: Optional[Role] = None) -> UserRead:
        """Load a user without any policy check.

        With ``role`` set, a user of another role is reported as missing.
        """
        with get_cursor("load user") as cursor:
            row = load_user_row(cursor, user_id)
        if not row or (role is not None and row["role"] != role.value):
            label = role.value if role is not None else "user"
            raise NotFoundError(f"{label} {user_id} not found")
        return row_to_user(row)

    @classmethod
    async def get_user(cls, user_id: str, current_user: dict, role: Optional[Role] = None) -> UserRead:
        user = await cls.fetch_user(user_id, role)
        check_user_read(Actor.from_user(current_user), user_id)
        return user

    @classmethod
    async def update_user(
        cls,
        user_id: str,
        update: UserUpdate,
        current_user: dict,
        role: Optional[Role] = None,
    ) -> UserRead:
        """Apply the fields present in ``update`` to a user profile."""
        actor = Actor.from_user(current_user)
        await cls.fetch_user(user_id, role)
        fields = changed_fields(update)
        check_user_update(actor, user_id, fields)
        if not fields:
            return await cls.fetch_user(user_id)

        if "password" in fields:
            fields["password"] = hash_password(fields["password"])
        if "hide" in fields:
            fields["hide"] = int(fields["hide"])
        fields["updated_at"] = now_iso()

        with immediate_transaction("update user") as cursor:
            if "email" in fields:
                clash = cursor.execute(
                    "SELECT id FROM users WHERE email = ? AND id != ?",
                    (fields["email"], user_id),
                ).fetchone()
                if clash:
                    raise ConflictError(f"email {fields['email']} is already registered")
            assignments = ", ".join(f"{column} = ?" for column in fields)
            cursor.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                [*fields.values(), user_id],
            )
            row = load_user_row(cursor, user_id)
        logger.info("User %s updated by %s: %s", user_id, actor.user_id, sorted(fields))
        return row_to_user(row)

    @classmethod
    async def delete_user(cls, user_id: str, current_user: dict, role: Optional[Role] = None) -> None:
        actor = Actor.from_user(current_user)
        require_admin(actor)
        if user_id == actor.user_id:
            raise ValidationFailed("cannot delete your own account")
        await cls.fetch_user(user_id, role)
        with get_cursor("delete user") as cursor:
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
        logger.info("User %s deleted by %s", user_id, actor.user_id)

    @classmethod
    async def list_users(
        cls,
        current_user: dict,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[str] = None,
    ) -> dict:
        """Admin listing with substring search over name, email and company."""
        require_admin(Actor.from_user(current_user))
        where: list[str] = []
        params: list = []
        if search:
            pattern = like_pattern(search)
            where.append(
                "(name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\' "
                "OR IFNULL(company, '') LIKE ? ESCAPE '\\' OR id LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern] * 4)
        if role is not None:
            where.append("role = ?")
            params.append(role.value)
        if status:
            where.append("status = ?")
            params.append(status)
        with get_cursor("list users") as cursor:
            rows, total = fetch_page(cursor, "users", where, params, "created_at DESC, rowid DESC", page, page_size)
        return build_page([row_to_user(row) for row in rows], page, page_size, total)

    @classmethod
    async def dashboard_stats(cls, current_user: dict) -> DashboardStats:
        """Counts shown on the dashboard, scoped to the caller's role."""
        actor = Actor.from_user(current_user)

        def grouped(cursor: sqlite3.Cursor, sql: str, params: tuple = ()) -> dict[str, int]:
            return {row[0]: row[1] for row in cursor.execute(sql, params).fetchall()}

        with get_cursor("dashboard stats") as cursor:
            if actor.role is Role.ADMIN:
                return DashboardStats(
                    users_by_role=grouped(cursor, "SELECT role, COUNT(*) FROM users GROUP BY role"),
                    projects_by_status=grouped(cursor, "SELECT status, COUNT(*) FROM projects GROUP BY status"),
                    service_requests_by_status=grouped(
                        cursor, "SELECT status, COUNT(*) FROM service_requests GROUP BY status"
                    ),
                    service_types=cursor.execute("SELECT COUNT(*) FROM service_types").fetchone()[0],
                )
            if actor.role is Role.EMPLOYEE:
                return DashboardStats(
                    projects_by_status=grouped(
                        cursor,
                        "SELECT status, COUNT(*) FROM projects WHERE EXISTS "
                        "(SELECT 1 FROM json_each(projects.employee_ids) WHERE value = ?) GROUP BY status",
                        (actor.user_id,),
                    ),
                )
            if actor.role is Role.CLIENT:
                return DashboardStats(
                    projects_by_status=grouped(
                        cursor,
                        "SELECT status, COUNT(*) FROM projects WHERE client_id = ? GROUP BY status",
                        (actor.user_id,),
                    ),
                    service_requests_by_status=grouped(
                        cursor,
                        "SELECT status, COUNT(*) FROM service_requests WHERE client_id = ? GROUP BY status",
                        (actor.user_id,),
                    ),
                )
        raise ValueError(f"Unknown role: {actor.role!r}")
