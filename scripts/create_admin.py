"""
Create a user, by default an admin.  No HTTP route grants the admin flag,
so the first admin is created here.  Run from the project root:

  python -m scripts.create_admin USERNAME [--regular]

The password is prompted for without echo.  Passing it as a second
positional argument still works for non-interactive use, but it will be
visible in the process list and shell history.
"""
import argparse
import asyncio
import getpass
import sys

from newsdesk.database import async_session, engine
from newsdesk.errors import AppError
from newsdesk.services import auth_service


def read_password(given: str | None) -> str | None:
    """Return *given*, or prompt twice; None when the two entries differ."""
    if given is not None:
        return given
    password = getpass.getpass("Password: ")
    if getpass.getpass("Repeat password: ") != password:
        return None
    return password


async def create(username: str, password: str, is_admin: bool) -> int:
    try:
        async with async_session() as session:
            try:
                user = await auth_service.create_user(session, username, password, is_admin=is_admin)
                await session.commit()
            except AppError as exc:
                await session.rollback()
                print(exc.message, file=sys.stderr)
                return 1
    finally:
        await engine.dispose()

    role = "admin" if user["is_admin"] else "user"
    print(f"Created {role} '{user['username']}' (id={user['id']}).")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Newsdesk user")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument(
        "password", nargs="?", default=None,
        help="Password (8-128 chars); prompted for when omitted",
    )
    parser.add_argument("--regular", action="store_true", help="Create a non-admin user")
    args = parser.parse_args(argv)

    password = read_password(args.password)
    if password is None:
        print("Passwords do not match", file=sys.stderr)
        return 1
    return asyncio.run(create(args.username, password, is_admin=not args.regular))


if __name__ == "__main__":
    sys.exit(main())
