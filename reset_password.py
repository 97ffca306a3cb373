#!/usr/bin/env python3
"""
Reset a user's password in the agency SQLite database.

Existing hashes are never read back; the script stores a fresh
PBKDF2 hash (``salthex$hashhex``) for the given email.  The database
path defaults to ``DATABASE_URL`` as resolved by the API.

Usage:
    python reset_password.py --email admin@example.com [--password "New!Pass"] [--db path/to/agency.db]

Without ``--password`` the new password is prompted for.
"""

import argparse
import getpass
import os
import sys
import sqlite3

from agency_api.app.core.db import get_database_path, now_iso
from agency_api.app.core.security import hash_password


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset an agency API user's password (SQLite).")
    ap.add_argument("--db", default=None, help="Path to the SQLite file (defaults to DATABASE_URL)")
    ap.add_argument("--email", required=True, help="Email of the user to update")
    ap.add_argument("--password", help="New password; prompted for when omitted")
    args = ap.parse_args()

    db_path = args.db or get_database_path()
    if not os.path.exists(db_path):
        print(f"[!] DB not found: {db_path}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("New password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(db_path)
    try:
        cur = conn.execute(
            "UPDATE users SET password = ?, updated_at = ? WHERE email = ?",
            (hash_password(new_password), now_iso(), args.email),
        )
        if cur.rowcount == 0:
            print(f"[!] No user found with email: {args.email}", file=sys.stderr)
            sys.exit(2)
        conn.commit()
        print(f"[+] Password updated for {args.email}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
