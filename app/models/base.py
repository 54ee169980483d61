"""SQLAlchemy declarative Base and shared model helpers."""

import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def new_id() -> str:
    """Primary key for new rows; assigned by the service that creates them."""
    return str(uuid.uuid4())
