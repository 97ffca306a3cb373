"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens carry the
user id (``sub``), ``email``, ``role`` and an expiration timestamp
(``exp``) and are signed with ``settings.secret_key``.  Passwords are
hashed with PBKDF2-HMAC-SHA256 and stored as ``salthex$hashhex``.

``get_current_user`` is the FastAPI dependency that authenticates a
request.  It re-loads the user on every call so that deleted or
deactivated accounts lose access immediately, and the role used for
authorization is always the stored one rather than the claim.
"""

import base64
import binascii
import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_cursor
from .errors import ForbiddenError, UnauthorizedError
from .policy import Role

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    expires_delta: Optional[int] = None,
) -> str:
    """Create a signed JWT for a user.

    Parameters
    ----------
    user_id : str
        Stored as the ``sub`` claim (e.g. ``"USER01"``).
    email, role : str
        Informational claims; authorization re-reads the role from
        storage.
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "exp": int(time.time()) + exp_seconds,
    }
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT.

    Returns the claims if the signature is valid and the token has not
    expired, otherwise ``None``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        expected_sig = _sign(signing_input, settings.secret_key)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(header, dict) or header.get("alg") != settings.algorithm:
            return None
        if not isinstance(data, dict) or not data.get("sub"):
            return None
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
    except (binascii.Error, TypeError, ValueError):
        # Covers malformed base64, bad UTF-8, invalid JSON and a non-numeric exp.
        return None
    return data


security = HTTPBearer(auto_error=False)


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """Dependency that authenticates the request.

    Returns a payload with ``user_id``, ``email`` and ``role``.  Raises
    ``UnauthorizedError`` when the header is missing, the token is
    invalid or expired, or the user no longer exists or is inactive.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    with get_cursor("authenticate") as cursor:
        row = cursor.execute(
            "SELECT id, email, role, status FROM users WHERE id = ?",
            (payload["sub"],),
        ).fetchone()
    if not row:
        raise UnauthorizedError("User no longer exists")
    if row["status"] != "active":
        raise UnauthorizedError("User account inactive")
    return {
        "sub": row["id"],
        "user_id": row["id"],
        "email": row["email"],
        "role": row["role"],
    }


def require_roles(*roles: Role) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Dependency factory restricting an endpoint to the given roles.

    Use as ``Depends(require_roles(Role.ADMIN))``.  Fine-grained rules
    that depend on the resource live in ``core.policy`` and are applied
    by the services.
    """
    allowed = {role.value for role in roles}

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in allowed:
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return _role_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password; the result is
    ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
