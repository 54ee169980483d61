"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel


class HealthResponse(CamelModel):
    """Response body for the liveness endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")


class ReadinessResponse(CamelModel):
    """Response body for the readiness endpoint."""

    status: Literal["ready"] = "ready"
    checks: dict[str, Literal["ok"]] = Field(
        default_factory=lambda: {"database": "ok"},
        description="Dependency checks that passed",
    )
