"""Shared builders for tests: settings, in-memory databases, users and a controllable clock."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import Settings
from app.core.database import build_engine, build_session_factory
from app.core.security import hash_password
from app.models import Base, User, new_id

TEST_JWT_SECRET = "test-secret-for-unit-tests-0123456789abcdef"
TEST_PASSWORD = "correct-horse-battery"


def make_settings(**overrides: object) -> Settings:
    """Dev settings on in-memory SQLite with mock email and local storage; env files ignored."""
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "DB_AUTO_CREATE": True,
        "JWT_SECRET": TEST_JWT_SECRET,
        "EMAIL_BACKEND": "mock",
        "STORAGE_BACKEND": "local",
        "FRONTEND_URL": "http://localhost:3000",
        "TOKEN_CLEANUP_ENABLED": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_session(settings: Settings | None = None) -> Session:
    """Fresh in-memory database with all tables; close the session (and its bind) when done."""
    engine = build_engine(settings or make_settings())
    Base.metadata.create_all(engine)
    return build_session_factory(engine)()


def close_session(session: Session) -> None:
    bind = session.get_bind()
    session.close()
    bind.dispose()


def add_user(
    session: Session,
    email: str = "alice@example.com",
    password: str = TEST_PASSWORD,
    *,
    role: str = "user",
    name: str | None = "Alice",
    is_active: bool = True,
    created_at: datetime | None = None,
) -> User:
    now = created_at or utcnow()
    user = User(
        id=new_id(),
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    session.commit()
    return user


class FakeClock:
    """Callable clock that stands still until advanced."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)
