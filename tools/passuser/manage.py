#!/usr/bin/env python3
"""CLI management tool for passuser accounts.

Provides commands to:
- Register users with bcrypt-hashed passwords
- Verify and change passwords
- Show or list stored users (never their digests)
- Remove users, e.g. one left without a password by a failed registration

Settings resolve as: command-line flag, then environment variable, then the
JSON config file, then the built-in default.
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from passuser import credentials
from passuser.errors import PassUserError, UserExistsError, UserNotFoundError
from passuser.resolvers.sqlite import DEFAULT_DB_PATH, SQLiteResolver
from passuser.validation import DEFAULT_REALM

logger = logging.getLogger("passuser.manage")

DB_PATH_ENV = "PASSUSER_DB_PATH"
REALM_ENV = "PASSUSER_REALM"


def load_config(config_path: Optional[str]) -> dict[str, Any]:
    """Load configuration from a JSON file. A missing path yields {}."""
    if not config_path:
        return {}

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found at {path}")

    with open(path) as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Config at {path} must be a JSON object")
    return config


def resolve_settings(args: argparse.Namespace) -> dict[str, str]:
    """Merge flags, environment and config file into db_path and realm."""
    config = load_config(args.config)
    return {
        "db_path": args.db_path
        or os.environ.get(DB_PATH_ENV)
        or config.get("db_path")
        or DEFAULT_DB_PATH,
        "realm": args.realm
        or os.environ.get(REALM_ENV)
        or config.get("realm")
        or DEFAULT_REALM,
    }


def _read_password(args: argparse.Namespace, prompt: str) -> str:
    if args.password:
        return args.password
    return getpass.getpass(prompt)


async def add_user(args, resolver: SQLiteResolver, realm: str) -> int:
    """Register a new user, prompting for the password if not given."""
    username = args.username
    password = _read_password(args, f"Password for {username}: ")

    try:
        record = await credentials.register(resolver, username, password, realm)
    except UserExistsError:
        print(f"Error: Username '{username}' already exists in realm '{realm}'", file=sys.stderr)
        return 1

    print(f"✓ User registered: {record.username} (realm {record.realm})")
    return 0


async def verify(args, resolver: SQLiteResolver, realm: str) -> int:
    """Check a password. Exit status 0 if it is correct."""
    password = _read_password(args, f"Password for {args.username}: ")

    ok = await credentials.verify_password(resolver, args.username, password, realm)
    if not ok:
        print("✗ Invalid username or password", file=sys.stderr)
        return 1

    print(f"✓ Password valid for {args.username}")
    return 0


async def set_password(args, resolver: SQLiteResolver, realm: str) -> int:
    """Replace the password of an existing user."""
    password = _read_password(args, f"New password for {args.username}: ")

    try:
        await credentials.set_password(resolver, args.username, password, realm)
    except UserNotFoundError:
        print(f"Error: User '{args.username}' not found in realm '{realm}'", file=sys.stderr)
        return 1

    print(f"✓ Password updated for {args.username}")
    return 0


async def show(args, resolver: SQLiteResolver, realm: str) -> int:
    """Print a user's realm, name and extra fields."""
    record = await credentials.find(resolver, args.username, realm)
    if record is None:
        print(f"Error: User '{args.username}' not found in realm '{realm}'", file=sys.stderr)
        return 1

    print(f"Realm:    {record.realm}")
    print(f"Username: {record.username}")
    print(f"Password: {'set' if record.password else 'NOT SET'}")
    for key, value in sorted(record.fields.items()):
        print(f"{key}: {value}")
    return 0


async def list_users(args, resolver: SQLiteResolver, realm: str) -> int:
    """List users of the realm, or of every realm with --all-realms."""
    users = resolver.list_users(None if args.all_realms else realm)

    if not users:
        print("No users found")
        return 0

    print(f"{'Realm':<20} {'Username':<30} {'Password':<8}")
    print("-" * 60)

    for user in users:
        has_password = "set" if user.get("password") else "NOT SET"
        print(f"{user['realm']:<20} {user['username']:<30} {has_password:<8}")

    return 0


async def remove_user(args, resolver: SQLiteResolver, realm: str) -> int:
    """Remove a user by username."""
    if not resolver.delete_user(realm, args.username):
        print(f"Error: User '{args.username}' not found in realm '{realm}'", file=sys.stderr)
        return 1

    print(f"✓ Removed user {args.username} (realm {realm})")
    return 0


COMMANDS = {
    "add-user": add_user,
    "verify": verify,
    "set-password": set_password,
    "show": show,
    "list-users": list_users,
    "remove-user": remove_user,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="passuser-manage",
        description="Manage passuser accounts in a SQLite database",
    )
    parser.add_argument(
        "--db-path",
        help=f"Path to SQLite database (default: ${DB_PATH_ENV} or {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--realm",
        help=f"Realm to operate on (default: ${REALM_ENV} or {DEFAULT_REALM})",
    )
    parser.add_argument("--config", "-c", help="Path to JSON config file")
    parser.add_argument(
        "--log-level",
        "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    for name, help_text in (
        ("add-user", "Register a new user"),
        ("verify", "Check a user's password"),
        ("set-password", "Change a user's password"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--username", required=True, help="Username")
        sub.add_argument("--password", help="Password (prompted if omitted)")

    show_parser = subparsers.add_parser("show", help="Show a user")
    show_parser.add_argument("--username", required=True, help="Username")

    list_parser = subparsers.add_parser("list-users", help="List users")
    list_parser.add_argument(
        "--all-realms", action="store_true", help="List users of every realm"
    )

    remove_parser = subparsers.add_parser("remove-user", help="Remove a user")
    remove_parser.add_argument("--username", required=True, help="Username")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        settings = resolve_settings(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug(f"Using {settings['db_path']} realm={settings['realm']!r}")
    resolver = SQLiteResolver(db_path=settings["db_path"])

    try:
        handler = COMMANDS[args.command]
        return asyncio.run(handler(args, resolver, settings["realm"]))
    except (TypeError, ValueError, PassUserError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        resolver.close()


if __name__ == "__main__":
    sys.exit(main())
