"""
Records and list options shared by the zone and qube repositories.

Repositories hand plain dataclass records to the service layer so nothing
above them touches ORM instances or the session.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StorageError
from app.models.qube import QubeStatus, QubeType
from app.models.zone import ZoneStatus, ZoneType

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100

P = ParamSpec("P")
R = TypeVar("R")


@dataclass
class ZoneRecord:
    id: str
    name: str
    type: ZoneType
    status: ZoneStatus
    config: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@dataclass
class QubeRecord:
    id: str
    name: str
    type: QubeType
    zone_id: str | None
    status: QubeStatus
    spec: dict[str, Any]
    ip_address: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class ZoneListOptions:
    status: ZoneStatus | None = None
    type: ZoneType | None = None
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0


@dataclass
class QubeListOptions:
    zone_id: str | None = None
    status: QubeStatus | None = None
    type: QubeType | None = None
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0


@dataclass
class ZoneChanges:
    """Fields to overwrite on an existing zone; ``None`` leaves a field as is."""

    name: str | None = None
    config: dict[str, Any] | None = None


@dataclass
class QubeChanges:
    name: str | None = None
    spec: dict[str, Any] | None = None


def translate_storage_errors(
    operation: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Re-raise any SQLAlchemy failure inside a repository call as StorageError."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as exc:
                logger.error(
                    "Storage operation failed",
                    exc_info=True,
                    extra={"operation": operation, "exc_type": type(exc).__name__},
                )
                raise StorageError(operation) from exc

        return wrapper

    return decorator


def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are always stored as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
