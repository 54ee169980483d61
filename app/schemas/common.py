"""Shared schema base, response envelope and field types."""

from datetime import datetime, timezone
from typing import Annotated, Any, Generic, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def _check_email(value: str) -> str:
    # Syntax check only; the stored value is kept exactly as submitted.
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError("must be a valid email address") from e
    return value


EmailAddress = Annotated[str, Field(max_length=255), AfterValidator(_check_email)]


class CamelModel(BaseModel):
    """
    Base for API schemas: camelCase on the wire, snake_case in Python.

    Datetimes are always emitted as UTC ISO 8601 with a Z suffix, including the
    naive values SQLite hands back.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    @field_serializer("*", mode="wrap")
    def serialize_datetime(self, value: Any, handler: Any) -> Any:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return handler(value)


class Meta(CamelModel):
    timestamp: str
    request_id: str | None = None


class FieldError(CamelModel):
    field: str
    message: str


class ErrorBody(CamelModel):
    code: str
    message: str
    details: list[FieldError] | None = None


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope: {success, data, meta}."""

    success: bool = True
    data: T
    meta: Meta


class ErrorResponse(CamelModel):
    """Error envelope: {success, error, meta}."""

    success: bool = False
    error: ErrorBody
    meta: Meta


class MessageResponse(CamelModel):
    message: str
