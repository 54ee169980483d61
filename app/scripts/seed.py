"""
Seed demo accounts and default settings for local development:
  python -m app.scripts.seed

Existing accounts are left untouched. With DB_AUTO_CREATE=true the tables are
created first; otherwise run `alembic upgrade head` beforehand.
"""
import logging
import sys

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.core.exceptions import ConflictError
from app.core.logging import configure_logging
from app.models import Base
from app.schemas.admin import CreateUserRequest
from app.services.admin import SettingsService, UsersService

logger = logging.getLogger(__name__)

DEMO_USERS = (
    CreateUserRequest(email="admin@example.com", password="admin123", name="Admin User", role="admin"),
    CreateUserRequest(email="user@example.com", password="user1234", name="Test User", role="user"),
)


def seed(db) -> list[str]:
    """Create the demo users that do not exist yet; returns the emails created."""
    users = UsersService(db)
    created = []
    for body in DEMO_USERS:
        try:
            users.create(body)
        except ConflictError:
            logger.info("User %s already exists, skipping", body.email)
            continue
        created.append(body.email)
    SettingsService(db).seed_defaults()
    return created


def main() -> int:
    settings = get_settings()
    configure_logging(settings)
    engine = build_engine(settings)
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(engine)
    db = build_session_factory(engine)()
    try:
        created = seed(db)
    finally:
        db.close()
        engine.dispose()

    print("=" * 50)
    print("Seeded users:" if created else "Nothing to seed.")
    for body in DEMO_USERS:
        if body.email in created:
            print(f"  {body.role:<5}  {body.email} / {body.password}")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
