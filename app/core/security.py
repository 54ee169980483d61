"""Password hashing and JWT creation/verification for authentication."""

import secrets
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.clock import Clock, utcnow
from app.core.exceptions import InvalidAccessTokenError
from app.schemas.auth import TokenClaims

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is ~4x the work of the library minimum of 10.
BCRYPT_ROUNDS = 12

# Min/max lengths for password validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
NAME_MAX_LEN = 100

# Reset tokens are RESET_TOKEN_BYTES of randomness, hex encoded (64 chars).
RESET_TOKEN_BYTES = 32


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. False for malformed hashes."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


class TokenCodec:
    """
    Signs and verifies short-lived access tokens.

    Claims: userId, email, sub (= userId), iat, exp. The secret is shared by
    every process; settings validation rejects weak secrets in production.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(minutes=15),
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self.expires_in = expires_in

    @property
    def expires_in_seconds(self) -> int:
        return int(self.expires_in.total_seconds())

    def generate(self, claims: TokenClaims) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": claims.user_id,
            "userId": claims.user_id,
            "email": claims.email,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token; return its identity claims.
        Raises InvalidAccessTokenError on bad signature, malformed token or expiry.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidAccessTokenError() from e
        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, str) or not user_id or not isinstance(email, str):
            raise InvalidAccessTokenError("Invalid token payload")
        return TokenClaims(user_id=user_id, email=email)

    @classmethod
    def from_settings(cls, settings: "Settings", *, clock: Clock = utcnow) -> "TokenCodec":
        return cls(
            settings.jwt_secret_value,
            algorithm=settings.JWT_ALGORITHM,
            expires_in=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            clock=clock,
        )
