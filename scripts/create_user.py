from __future__ import annotations

import argparse
import asyncio
import secrets
import string
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    # Allow running as: python scripts/create_user.py
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from hackmate.database import Base, engine  # noqa: E402
from hackmate.gateway import PROFILES, GatewayError  # noqa: E402
from hackmate.gateway.sql import SqlGateway  # noqa: E402


def _generate_password(length: int = 20) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


async def create_user(email: str, password: str, username: str, full_name: str | None) -> str:
    gateway = SqlGateway()
    session = await gateway.auth_sign_up(email, password)
    await gateway.insert(
        PROFILES,
        {"id": session.identity.id, "username": username, "email": email, "full_name": full_name},
    )
    return session.identity.id


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an identity and its profile (sql gateway only).")
    parser.add_argument("--email", required=True)
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", default=None, help="Generated if omitted")
    parser.add_argument("--full-name", default=None)
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)

    password = args.password or _generate_password()
    try:
        user_id = asyncio.run(create_user(args.email, password, args.username, args.full_name))
    except GatewayError as exc:
        print(f"Failed: {exc.message}", file=sys.stderr)
        return 1

    print(f"Created user id={user_id} email={args.email} username={args.username}")
    if not args.password:
        print(f"Generated password: {password}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
