"""
Zone service — business logic for infrastructure zones.

Validates zone creation, blocks deletion while qubes still reference the
zone, and owns the connected/disconnected transitions. All validation happens
here before any repository call.
"""

import logging
import uuid
from datetime import UTC, datetime

from app.core.exceptions import (
    InvalidInputError,
    InvalidZoneTypeError,
    ZoneInUseError,
    ZoneNotFoundError,
)
from app.models.zone import ZoneStatus, ZoneType
from app.repositories.base import QubeListOptions, ZoneChanges, ZoneListOptions, ZoneRecord
from app.repositories.qube_repository import QubeRepository
from app.repositories.zone_repository import ZoneRepository
from app.schemas.zone import ZoneCreate, ZoneUpdate

logger = logging.getLogger(__name__)


def _parse_zone_type(value: str) -> ZoneType:
    try:
        return ZoneType(value)
    except ValueError:
        raise InvalidZoneTypeError(value) from None


class ZoneService:
    def __init__(self, zone_repo: ZoneRepository, qube_repo: QubeRepository) -> None:
        self._zones = zone_repo
        self._qubes = qube_repo

    async def create(self, payload: ZoneCreate) -> ZoneRecord:
        name = payload.name.strip()
        if not name:
            raise InvalidInputError("zone name")
        zone_type = _parse_zone_type(payload.type)

        now = datetime.now(UTC)
        zone = await self._zones.create(
            ZoneRecord(
                id=str(uuid.uuid4()),
                name=name,
                type=zone_type,
                status=ZoneStatus.DISCONNECTED,
                config=payload.config.model_dump(exclude_none=True),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "Zone created",
            extra={"zone_id": zone.id, "zone_name": zone.name, "zone_type": zone.type.value},
        )
        return zone

    async def get(self, zone_id: str) -> ZoneRecord:
        zone = await self._zones.get(zone_id)
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        logger.debug("Zone fetched", extra={"zone_id": zone_id})
        return zone

    async def list(self, opts: ZoneListOptions) -> tuple[list[ZoneRecord], int]:
        records, total = await self._zones.list(opts)
        logger.debug(
            "Zones listed",
            extra={"limit": opts.limit, "offset": opts.offset, "total": total},
        )
        return records, total

    async def update(self, zone_id: str, payload: ZoneUpdate) -> ZoneRecord:
        changes = ZoneChanges()
        if payload.name is not None:
            changes.name = payload.name.strip()
            if not changes.name:
                raise InvalidInputError("zone name", "must not be empty")
        if payload.config is not None:
            changes.config = payload.config.model_dump(exclude_none=True)

        zone = await self._zones.update(zone_id, changes)
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        logger.info("Zone updated", extra={"zone_id": zone_id, "zone_name": zone.name})
        return zone

    async def delete(self, zone_id: str) -> None:
        if await self._zones.get(zone_id) is None:
            raise ZoneNotFoundError(zone_id)

        await self._ensure_unused(zone_id)

        if not await self._zones.delete(zone_id):
            raise ZoneNotFoundError(zone_id)
        logger.info("Zone deleted", extra={"zone_id": zone_id})

    async def _ensure_unused(self, zone_id: str) -> None:
        qubes, _ = await self._qubes.list(QubeListOptions(zone_id=zone_id, limit=1))
        if qubes:
            logger.warning("Zone delete blocked by qubes", extra={"zone_id": zone_id})
            raise ZoneInUseError(zone_id)

    async def connect(self, zone_id: str) -> ZoneRecord:
        return await self._set_status(zone_id, ZoneStatus.CONNECTED)

    async def disconnect(self, zone_id: str) -> ZoneRecord:
        return await self._set_status(zone_id, ZoneStatus.DISCONNECTED)

    async def _set_status(self, zone_id: str, status: ZoneStatus) -> ZoneRecord:
        current = await self._zones.get(zone_id)
        if current is None:
            raise ZoneNotFoundError(zone_id)

        # Setting the status a zone already has is allowed and still touches updated_at
        zone = await self._zones.update_status(zone_id, status)
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        logger.info(
            "Zone status changed",
            extra={
                "zone_id": zone_id,
                "from_status": current.status.value,
                "to_status": zone.status.value,
            },
        )
        return zone
