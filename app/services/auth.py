"""Registration, login, refresh-token lifecycle, profile and password change."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.exceptions import (
    ConflictError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
    RefreshTokenExpiredError,
)
from app.core.security import TokenCodec, hash_password, verify_password
from app.models import RefreshToken, User, new_id
from app.models.user import ROLE_USER
from app.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenClaims,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
)
from app.services.token_cleanup import delete_expired

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedRefreshToken:
    token: str
    max_age_seconds: int


class AuthService:
    """
    Orchestrates the auth flows over one DB session.

    Refresh tokens are opaque UUIDs stored server-side and are not rotated on
    use. Email matching is exact (no case folding).
    """

    def __init__(
        self,
        db: Session,
        settings: "Settings",
        codec: TokenCodec | None = None,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.db = db
        self.settings = settings
        self.codec = codec or TokenCodec.from_settings(settings, clock=clock)
        self._clock = clock

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _live_user_query(self):
        return self.db.query(User).filter(User.deleted_at.is_(None))

    def _issue(self, user: User) -> AuthResult:
        token = self.codec.generate(TokenClaims(user_id=user.id, email=user.email))
        return AuthResult(
            user=UserResponse.model_validate(user),
            access_token=token,
            expires_in=self.codec.expires_in_seconds,
        )

    def register(self, body: RegisterRequest) -> AuthResult:
        """Create a user and issue an access token. Duplicate live email raises ConflictError."""
        now = self._clock()
        user = User(
            id=new_id(),
            email=body.email,
            password_hash=hash_password(body.password),
            name=body.name,
            role=ROLE_USER,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # The partial unique index on live emails is the authoritative duplicate check
            self.db.rollback()
            raise ConflictError("user already exists", code="USER_EXISTS") from e
        self.db.refresh(user)
        logger.info("User registered", extra={"user_id": user.id})
        return self._issue(user)

    def login(self, body: LoginRequest) -> AuthResult:
        """Every failure (unknown email, wrong password, inactive) is InvalidCredentialsError."""
        user = self._live_user_query().filter(User.email == body.email).first()
        if user is None:
            raise InvalidCredentialsError()
        if not verify_password(body.password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise InvalidCredentialsError()

        user.last_login_at = self._clock()
        self.db.commit()
        self.db.refresh(user)
        return self._issue(user)

    def create_refresh_token(self, user_id: str) -> IssuedRefreshToken:
        lifetime = self.refresh_token_lifetime
        now = self._clock()
        row = RefreshToken(
            id=new_id(),
            token=new_id(),
            user_id=user_id,
            expires_at=now + lifetime,
            created_at=now,
        )
        self.db.add(row)
        self.db.commit()
        return IssuedRefreshToken(token=row.token, max_age_seconds=int(lifetime.total_seconds()))

    def refresh_access_token(self, token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new access token.

        Unknown tokens (or tokens whose owner is deleted or deactivated) fail
        without side effects; an expired token is deleted before failing.
        """
        row = (
            self.db.query(RefreshToken)
            .join(User, RefreshToken.user_id == User.id)
            .filter(RefreshToken.token == token, User.deleted_at.is_(None), User.is_active.is_(True))
            .first()
        )
        if row is None:
            raise InvalidRefreshTokenError()
        if row.is_expired(self._clock()):
            self.db.delete(row)
            self.db.commit()
            raise RefreshTokenExpiredError()

        user = row.user
        access = self.codec.generate(TokenClaims(user_id=user.id, email=user.email))
        return TokenResponse(access_token=access, expires_in=self.codec.expires_in_seconds)

    def revoke_refresh_token(self, token: str) -> None:
        """Delete by value; unknown tokens are ignored."""
        self.db.query(RefreshToken).filter(RefreshToken.token == token).delete(
            synchronize_session=False
        )
        self.db.commit()

    def get_user(self, user_id: str) -> User:
        user = self._live_user_query().filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, body: UpdateProfileRequest) -> User:
        user = self.get_user(user_id)
        user.name = body.name
        user.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user_id: str, body: ChangePasswordRequest) -> None:
        """Requires the current password. Existing sessions (refresh tokens) stay valid."""
        user = self.get_user(user_id)
        if not verify_password(body.current_password, user.password_hash):
            raise IncorrectPasswordError()
        user.password_hash = hash_password(body.new_password)
        user.updated_at = self._clock()
        self.db.commit()
        logger.info("Password changed", extra={"user_id": user.id})

    def cleanup_expired_refresh_tokens(self) -> int:
        return delete_expired(self.db, RefreshToken, self._clock())
