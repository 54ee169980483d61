"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import build_engine, build_session_factory
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import setup_middlewares
from app.core.security import TokenCodec
from app.models import Base
from app.services.admin import SettingsService
from app.services.email import build_email_sender
from app.services.storage import LocalStorage, build_storage
from app.services.upload import UploadPolicy, UploadService

logger = logging.getLogger(__name__)


def _seed_default_settings(app: FastAPI) -> None:
    db = app.state.session_factory()
    try:
        SettingsService(db).seed_defaults()
    except SQLAlchemyError as e:
        # Tables are created by alembic; before the first migration there is nothing to seed
        db.rollback()
        logger.warning("Skipping default settings seed: %s", e)
    finally:
        db.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for settings (defaults to the environment)."""
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DB_AUTO_CREATE:
            Base.metadata.create_all(app.state.engine)
        _seed_default_settings(app)
        logger.info(
            "Application started: env=%s storage=%s email=%s",
            settings.APP_ENV,
            settings.STORAGE_BACKEND,
            settings.EMAIL_BACKEND,
        )
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title="Keyhold API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if settings.JWT_SECRET is None:
        logger.warning("JWT_SECRET is not set; using the development secret")

    engine = build_engine(settings)
    storage = build_storage(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.codec = TokenCodec.from_settings(settings)
    app.state.email_sender = build_email_sender(settings)
    app.state.storage = storage
    app.state.upload_service = UploadService(
        storage, UploadPolicy(max_file_bytes=settings.UPLOAD_MAX_FILE_BYTES)
    )

    setup_middlewares(app, settings)
    register_exception_handlers(app, expose_internal_errors=not settings.is_production)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    if isinstance(storage, LocalStorage) and settings.UPLOAD_BASE_URL.startswith("/"):
        app.mount(
            settings.UPLOAD_BASE_URL.rstrip("/"),
            StaticFiles(directory=storage.base_path, check_dir=False),
            name="uploads",
        )

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Keyhold API"}

    return app


app = create_app()
