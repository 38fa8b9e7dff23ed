"""
Administrative command line for the We Plan It API.

Subcommands operate directly on the database named by ``DATABASE_URL``
(or ``--db``):

* ``migrate`` - create or upgrade the schema.
* ``create-token`` - print a bearer token for an existing user, e.g. for
  scripted access with a longer lifetime than a login token.
* ``reset-password`` - set a new password hash for a user.  Existing
  passwords are never read or revealed.

Usage::

    we-plan-it migrate
    we-plan-it create-token --email admin@example.com --days 365
    we-plan-it reset-password --email admin@example.com
"""

import argparse
import getpass
import os
import sys
from datetime import timedelta
from typing import Optional, Sequence

from .app.core.config import Settings
from .app.core.db import get_database_path, init_db, transaction
from .app.core.logging_config import setup_logging
from .app.core.security import create_access_token, hash_password


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="we-plan-it", description="We Plan It API administration.")
    parser.add_argument("--db", help="SQLite database path; defaults to DATABASE_URL.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("migrate", help="Apply pending database migrations.")

    token = sub.add_parser("create-token", help="Print a bearer token for a user.")
    token.add_argument("--email", required=True, help="E-mail of an existing user.")
    token.add_argument("--days", type=int, default=None, help="Token lifetime in days.")

    reset = sub.add_parser("reset-password", help="Set a new password for a user.")
    reset.add_argument("--email", required=True, help="E-mail of the user to update.")
    reset.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    return parser


def _load_settings(db: Optional[str]) -> Settings:
    environ = dict(os.environ)
    if db:
        environ["DATABASE_URL"] = db
    return Settings.from_env(environ)


def _create_token(settings: Settings, email: str, days: Optional[int]) -> int:
    with transaction(settings.database_url) as conn:
        row = conn.execute("SELECT id, email FROM users WHERE email = ?", (email,)).fetchone()
    if not row:
        print(f"[!] No user found with email: {email}", file=sys.stderr)
        return 2
    lifetime = timedelta(days=days) if days else None
    print(create_access_token(settings, row["id"], row["email"], expires_delta=lifetime))
    return 0


def _reset_password(settings: Settings, email: str, password: Optional[str]) -> int:
    new_password = password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1
    with transaction(settings.database_url) as conn:
        updated = conn.execute(
            "UPDATE users SET password = ? WHERE email = ?", (hash_password(new_password), email)
        ).rowcount
    if not updated:
        print(f"[!] No user found with email: {email}", file=sys.stderr)
        return 2
    print(f"[+] Password updated for user: {email}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        settings = _load_settings(args.db)
    except RuntimeError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    setup_logging(settings.log_level, settings.log_file)

    if args.command == "migrate":
        init_db(settings.database_url)
        print(f"[+] Database ready: {get_database_path(settings.database_url)}")
        return 0

    if not os.path.exists(get_database_path(settings.database_url)):
        print(f"[!] DB not found: {get_database_path(settings.database_url)}", file=sys.stderr)
        return 1
    if args.command == "create-token":
        return _create_token(settings, args.email, args.days)
    return _reset_password(settings, args.email, args.password)


if __name__ == "__main__":
    sys.exit(main())
