"""Password reset: single-use, time-boxed tokens delivered by email."""

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.exceptions import EmailDeliveryError, InvalidResetTokenError
from app.core.security import generate_reset_token, hash_password
from app.models import PasswordResetToken, RefreshToken, User, new_id
from app.services.email import TEMPLATE_PASSWORD_RESET, EmailSender
from app.services.token_cleanup import delete_expired

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Delete-then-insert can lose a race against a concurrent request
ISSUE_ATTEMPTS = 2


def humanize_minutes(minutes: int) -> str:
    """60 -> '1 hour', 90 -> '90 minutes'."""
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


class PasswordResetService:
    def __init__(
        self,
        db: Session,
        settings: "Settings",
        email_sender: EmailSender,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.db = db
        self.settings = settings
        self.email_sender = email_sender
        self._clock = clock

    def reset_url(self, token: str) -> str:
        return f"{self.settings.FRONTEND_URL}/reset-password?token={token}"

    def request_reset(self, email: str) -> None:
        """
        Issue a reset token for email and send the reset link.

        Unknown emails succeed silently so callers cannot discover which accounts exist.
        Issuing a token removes the user's other unused tokens in the same
        transaction; a unique index keeps at most one unused token per user.
        A failed send is logged; the token stays valid.
        """
        user = (
            self.db.query(User)
            .filter(User.email == email, User.deleted_at.is_(None))
            .first()
        )
        if user is None:
            logger.debug("Password reset requested for unknown email")
            return

        now = self._clock()
        lifetime = self.settings.PASSWORD_RESET_EXPIRE_MINUTES
        token = generate_reset_token()
        for attempt in range(1, ISSUE_ATTEMPTS + 1):
            try:
                self._replace_unused_token(user.id, token, now, lifetime)
                break
            except IntegrityError:
                # A concurrent request committed its token first; ours replaces it
                self.db.rollback()
                if attempt == ISSUE_ATTEMPTS:
                    raise
                logger.info("Reset token conflict, retrying", extra={"user_id": user.id})
            except SQLAlchemyError:
                self.db.rollback()
                raise

        try:
            self.email_sender.send_template(
                [user.email],
                TEMPLATE_PASSWORD_RESET,
                {
                    "reset_url": self.reset_url(token),
                    "expires_in": humanize_minutes(lifetime),
                    "name": user.name or user.email,
                },
            )
        except EmailDeliveryError:
            logger.exception("Failed to send password reset email", extra={"user_id": user.id})

        logger.info("Password reset token created", extra={"user_id": user.id})

    def _replace_unused_token(self, user_id: str, token: str, now: datetime, lifetime: int) -> None:
        self.db.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == user_id,
            PasswordResetToken.used_at.is_(None),
        ).delete(synchronize_session=False)
        self.db.add(
            PasswordResetToken(
                id=new_id(),
                token=token,
                user_id=user_id,
                expires_at=now + timedelta(minutes=lifetime),
                created_at=now,
            )
        )
        self.db.commit()

    def _find_valid(self, token: str) -> PasswordResetToken:
        row = (
            self.db.query(PasswordResetToken)
            .join(User, PasswordResetToken.user_id == User.id)
            .filter(PasswordResetToken.token == token, User.deleted_at.is_(None))
            .first()
        )
        # Missing, used and expired are reported identically
        if row is None or not row.is_valid(self._clock()):
            raise InvalidResetTokenError()
        return row

    def validate_token(self, token: str) -> User:
        """Return the token's owner if the token is usable."""
        return self._find_valid(token).user

    def reset_password(self, token: str, new_password: str) -> None:
        """
        Set a new password, consume the token and revoke every refresh token of
        the user, all in one transaction. A token that was consumed concurrently
        fails with InvalidResetTokenError and nothing is changed.
        """
        row = self._find_valid(token)
        user_id = row.user_id
        password_hash = hash_password(new_password)
        now = self._clock()

        try:
            marked = self.db.execute(
                update(PasswordResetToken)
                .where(PasswordResetToken.id == row.id, PasswordResetToken.used_at.is_(None))
                .values(used_at=now)
            ).rowcount
            if marked != 1:
                self.db.rollback()
                raise InvalidResetTokenError()
            self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=now)
            )
            self.db.query(RefreshToken).filter(RefreshToken.user_id == user_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.expire_all()
        logger.info("Password reset completed", extra={"user_id": user_id})

    def cleanup_expired_tokens(self) -> int:
        return delete_expired(self.db, PasswordResetToken, self._clock())
