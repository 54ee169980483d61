"""ORM models for refresh tokens and password reset tokens."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from app.core.clock import ensure_utc, utcnow
from app.models.base import Base


class RefreshToken(Base):
    """
    Opaque long-lived credential exchanged for access tokens.

    One row per login session; a user may hold several (multi-device).
    """

    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True)
    token = Column(String(255), nullable=False, unique=True, index=True)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="refresh_tokens")

    def is_expired(self, now: datetime) -> bool:
        return now > ensure_utc(self.expires_at)


class PasswordResetToken(Base):
    """
    Single-use, time-boxed token gating a password change.

    used_at stays NULL until the reset succeeds; used rows are kept for audit
    and removed only by the expiry sweep.
    """

    __tablename__ = "password_reset_tokens"
    __table_args__ = (
        # At most one unused token per user
        Index(
            "uq_password_reset_tokens_user_unused",
            "user_id",
            unique=True,
            postgresql_where=text("used_at IS NULL"),
            sqlite_where=text("used_at IS NULL"),
        ),
    )

    id = Column(String(36), primary_key=True)
    token = Column(String(255), nullable=False, unique=True, index=True)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User")

    def is_valid(self, now: datetime) -> bool:
        """Unused and not yet expired."""
        return self.used_at is None and now < ensure_utc(self.expires_at)
