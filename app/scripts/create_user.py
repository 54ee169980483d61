"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [role] [--name NAME]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password admin --name Admin
"""
import argparse
import sys

from email_validator import EmailNotValidError, validate_email

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.core.exceptions import ConflictError
from app.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.admin import CreateUserRequest
from app.services.admin import UsersService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Keyhold user from the command line.")
    parser.add_argument("email", help="Email address (login name)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--name", default=None, help=f"Display name (max {NAME_MAX_LEN} chars)")
    args = parser.parse_args(argv)

    email = args.email.strip()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        print(f"Invalid email: {e}", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if args.name is not None and len(args.name) > NAME_MAX_LEN:
        print(f"Name must be at most {NAME_MAX_LEN} characters.", file=sys.stderr)
        return 1

    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        user = UsersService(db).create(
            CreateUserRequest(email=email, password=args.password, name=args.name, role=args.role)
        )
        print(f"Created user '{user.email}' with role '{user.role}'.")
        return 0
    except ConflictError:
        print(f"User '{email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
