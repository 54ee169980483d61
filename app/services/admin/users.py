"""Admin user management: paginated search, create, update, soft delete."""

import logging
import math

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import hash_password
from app.models import User, new_id
from app.schemas.admin import (
    USER_SORT_COLUMNS,
    CreateUserRequest,
    UpdateUserRequest,
    UserList,
    UserListParams,
)
from app.schemas.auth import UserResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally (ESCAPE '\\')."""
    return (
        value.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def normalize_list_params(params: UserListParams) -> UserListParams:
    """Clamp pagination and replace unknown sort options with defaults."""
    page = params.page if params.page >= 1 else 1
    page_size = params.page_size if 1 <= params.page_size <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE
    sort_by = params.sort_by if params.sort_by in USER_SORT_COLUMNS else "created_at"
    sort_dir = (params.sort_dir or "desc").lower()
    return params.model_copy(
        update={
            "page": page,
            "page_size": page_size,
            "sort_by": sort_by,
            "sort_dir": "desc" if sort_dir == "desc" else "asc",
        }
    )


class UsersService:
    def __init__(self, db: Session, *, clock: Clock = utcnow) -> None:
        self.db = db
        self._clock = clock

    def _live(self):
        return self.db.query(User).filter(User.deleted_at.is_(None))

    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        query = self._live().filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def list_users(self, params: UserListParams) -> UserList:
        params = normalize_list_params(params)
        query = self._live()

        if params.search:
            pattern = f"%{escape_like(params.search)}%"
            query = query.filter(
                or_(
                    User.email.like(pattern, escape=LIKE_ESCAPE),
                    User.name.like(pattern, escape=LIKE_ESCAPE),
                )
            )
        if params.role:
            query = query.filter(User.role == params.role)
        if params.is_active is not None:
            query = query.filter(User.is_active.is_(params.is_active))

        total = query.count()

        column = getattr(User, params.sort_by)
        order = column.desc() if params.sort_dir == "desc" else column.asc()
        users = (
            query.order_by(order, User.id)
            .offset((params.page - 1) * params.page_size)
            .limit(params.page_size)
            .all()
        )
        return UserList(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=params.page,
            page_size=params.page_size,
            total_pages=math.ceil(total / params.page_size) if total else 0,
        )

    def get(self, user_id: str) -> User:
        user = self._live().filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create(self, body: CreateUserRequest) -> User:
        if self._email_taken(body.email):
            raise ConflictError("Email already exists")
        now = self._clock()
        user = User(
            id=new_id(),
            email=body.email,
            password_hash=hash_password(body.password),
            name=body.name,
            role=body.role,
            is_active=body.is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        self._commit_unique()
        self.db.refresh(user)
        logger.info("Admin created user", extra={"user_id": user.id, "role": user.role})
        return user

    def update(self, user_id: str, body: UpdateUserRequest) -> User:
        """Apply only the fields present in body."""
        user = self.get(user_id)
        if body.email is not None and body.email != user.email:
            if self._email_taken(body.email, exclude_id=user_id):
                raise ConflictError("Email already exists")
            user.email = body.email
        if body.password:
            user.password_hash = hash_password(body.password)
        if body.name is not None:
            user.name = body.name
        if body.role is not None:
            user.role = body.role
        if body.is_active is not None:
            user.is_active = body.is_active
        user.updated_at = self._clock()
        self._commit_unique()
        self.db.refresh(user)
        return user

    def delete(self, user_id: str) -> None:
        """Soft delete: the row stays, hidden from every lookup, and its email is freed."""
        user = self.get(user_id)
        user.deleted_at = self._clock()
        self.db.commit()
        logger.info("Admin deleted user", extra={"user_id": user_id})

    def _commit_unique(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already exists") from e
