from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

CheckStatus = Literal["healthy", "unhealthy"]


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Any = None


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx body: ``{"error": {code, message, details}}``."""

    error: ErrorDetail


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
    next_offset: int | None

    @classmethod
    def build(cls, items: list[T], total: int, limit: int, offset: int) -> "PaginatedResponse[T]":
        # None on the last page
        next_offset = offset + limit if offset + limit < total else None
        return cls(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            next_offset=next_offset,
        )


class ComponentCheck(BaseModel):
    status: CheckStatus


class HealthResponse(BaseModel):
    status: CheckStatus
    version: str
    env: str
    uptime_s: int
    checks: dict[str, ComponentCheck]


class StatusResponse(BaseModel):
    name: str
    version: str
