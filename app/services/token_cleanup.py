"""Expired token sweep: delete refresh and password-reset tokens past their expiry."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.models import PasswordResetToken, RefreshToken

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def delete_expired(session: Session, model: type, now: datetime) -> int:
    """Delete rows of model (RefreshToken or PasswordResetToken) whose expires_at < now. Commits."""
    deleted = (
        session.query(model)
        .filter(model.expires_at < now)
        .delete(synchronize_session=False)
    )
    session.commit()
    if deleted > 0:
        logger.info(
            "Token cleanup: table=%s, cutoff=%s, deleted=%s",
            model.__tablename__,
            now.isoformat(),
            deleted,
        )
    return deleted


def run_token_cleanup(
    session: Session,
    settings: "Settings",
    now: datetime | None = None,
) -> tuple[int, int]:
    """
    Sweep expired reset tokens and expired refresh tokens.

    Returns (reset_tokens_deleted, refresh_tokens_deleted). Idempotent: safe to
    run repeatedly.
    """
    if not settings.TOKEN_CLEANUP_ENABLED:
        logger.info("Token cleanup is disabled (TOKEN_CLEANUP_ENABLED=false); skipping.")
        return (0, 0)

    now = now or utcnow()
    reset_deleted = delete_expired(session, PasswordResetToken, now)
    refresh_deleted = delete_expired(session, RefreshToken, now)
    return (reset_deleted, refresh_deleted)
