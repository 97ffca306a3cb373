#!/usr/bin/env python3
"""
Mint a long-lived access token for an existing user.

The token carries the user's current email and role.  The API still
re-loads the user on every request, so deleting or deactivating the
account revokes the token.

Usage:
    python create_token.py USER01 --days 365
"""

import argparse
import sys

from agency_api.app.core.db import get_cursor, init_db
from agency_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Create an access token for a user id.")
    ap.add_argument("user_id", help="User id, e.g. USER01")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days (default 365)")
    args = ap.parse_args()

    init_db()
    with get_cursor("create token") as cursor:
        row = cursor.execute("SELECT id, email, role FROM users WHERE id = ?", (args.user_id,)).fetchone()
    if not row:
        print(f"[!] No user with id {args.user_id}", file=sys.stderr)
        sys.exit(2)

    print(create_access_token(row["id"], row["email"], row["role"], expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
