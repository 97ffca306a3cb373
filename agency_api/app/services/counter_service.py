"""
Named monotonic counters used to mint human-readable ids.

Each counter is a row in the ``counters`` table.  Incrementing runs
under ``BEGIN IMMEDIATE`` so concurrent callers are serialized by the
database write lock and each receives a distinct value; the first
call on a fresh counter returns 1.
"""

import logging
import sqlite3

from ..core.db import immediate_transaction

logger = logging.getLogger(__name__)

USER_COUNTER = "user_counter"
PROJECT_COUNTER = "project_counter"
SERVICE_REQUEST_COUNTER = "service_request_counter"
MESSAGE_COUNTER = "message_counter"

USER_PREFIX = "USER"
PROJECT_PREFIX = "PROJECT"
SERVICE_REQUEST_PREFIX = "SERVICE"
MESSAGE_PREFIX = "MESSAGE"


def format_id(prefix: str, sequence: int) -> str:
    """``format_id("PROJECT", 7) == "PROJECT07"``; wider numbers are not truncated."""
    return f"{prefix}{sequence:02d}"


def next_sequence_in(cursor: sqlite3.Cursor, name: str) -> int:
    """Increment ``name`` inside the caller's open write transaction.

    The caller owns the transaction, so a rollback also gives the value
    back.
    """
    cursor.execute(
        """
        INSERT INTO counters (name, sequence) VALUES (?, 1)
        ON CONFLICT(name) DO UPDATE SET sequence = sequence + 1
        """,
        (name,),
    )
    row = cursor.execute("SELECT sequence FROM counters WHERE name = ?", (name,)).fetchone()
    return int(row["sequence"])


class CounterService:
    @classmethod
    async def next_sequence(cls, name: str) -> int:
        """Atomically increment counter ``name`` and return the new value."""
        with immediate_transaction(f"increment counter {name}") as cursor:
            value = next_sequence_in(cursor, name)
        logger.debug("Counter %s advanced to %s", name, value)
        return value

    @classmethod
    async def next_id(cls, name: str, prefix: str) -> str:
        return format_id(prefix, await cls.next_sequence(name))
