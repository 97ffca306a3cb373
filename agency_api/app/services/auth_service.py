"""
Registration and login.

The very first account registered in an empty store becomes the admin.
After that, self-registration only creates clients; employees and
further clients are created by an admin through their own endpoints.
"""

import logging

from ..core.db import get_cursor, immediate_transaction
from ..core.errors import ForbiddenError, UnauthorizedError
from ..core.policy import Role
from ..core.security import create_access_token, verify_password
from ..schemas.user import TokenResponse, UserLogin, UserRegister
from .user_service import UserService, load_user_row, row_to_user

logger = logging.getLogger(__name__)


class AuthService:
    @classmethod
    async def register(cls, payload: UserRegister) -> TokenResponse:
        fields = payload.model_dump(mode="json")
        with immediate_transaction("register user") as cursor:
            has_users = cursor.execute("SELECT 1 FROM users LIMIT 1").fetchone() is not None
            if not has_users:
                fields["role"] = Role.ADMIN.value
            elif payload.role is not Role.CLIENT:
                raise ForbiddenError("only client accounts can be self-registered")
            user_id = UserService.insert_user(cursor, fields)
            row = load_user_row(cursor, user_id)
        user = row_to_user(row)
        if not has_users:
            logger.info("Bootstrap admin %s registered (%s)", user.id, user.email)
        else:
            logger.info("Client %s registered (%s)", user.id, user.email)
        token = create_access_token(user.id, user.email, user.role.value)
        return TokenResponse(token=token, user=user)

    @classmethod
    async def login(cls, credentials: UserLogin) -> TokenResponse:
        with get_cursor("login") as cursor:
            row = cursor.execute("SELECT * FROM users WHERE email = ?", (credentials.email,)).fetchone()
        if not row or not verify_password(credentials.password, row["password"]):
            logger.info("Failed login for %s", credentials.email)
            raise UnauthorizedError("invalid email or password")
        if row["status"] != "active":
            raise UnauthorizedError("user account inactive")
        user = row_to_user(row)
        token = create_access_token(user.id, user.email, user.role.value)
        return TokenResponse(token=token, user=user)
