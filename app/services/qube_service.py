"""
Qube service — business logic for qube lifecycle management.

Enforces creation rules (valid type, resolvable zone), fills resource
defaults by qube type, and gates the running/stopped transitions:
start needs a connected zone, delete needs a qube that is not running.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import NamedTuple

from app.core.exceptions import (
    InvalidInputError,
    InvalidQubeTypeError,
    QubeNotFoundError,
    QubeNotStoppedError,
    ZoneDisconnectedError,
    ZoneNotFoundError,
)
from app.models.qube import QubeStatus, QubeType
from app.models.zone import ZoneStatus
from app.repositories.base import QubeChanges, QubeListOptions, QubeRecord
from app.repositories.qube_repository import QubeRepository
from app.repositories.zone_repository import ZoneRepository
from app.schemas.qube import QubeCreate, QubeSpec, QubeUpdate

logger = logging.getLogger(__name__)


class SpecDefaults(NamedTuple):
    vcpu: int
    memory: int  # MB
    disk: int  # GB


GENERIC_SPEC_DEFAULTS = SpecDefaults(vcpu=2, memory=2048, disk=20)

# Types missing from this table (dev, disp, sys) use GENERIC_SPEC_DEFAULTS
SPEC_DEFAULTS: dict[QubeType, SpecDefaults] = {
    QubeType.APP: SpecDefaults(vcpu=2, memory=2048, disk=20),
    QubeType.WORK: SpecDefaults(vcpu=4, memory=4096, disk=50),
    QubeType.GPU: SpecDefaults(vcpu=8, memory=16384, disk=100),
}


def apply_default_spec(qube_type: QubeType, spec: QubeSpec) -> QubeSpec:
    """Return ``spec`` with each zero-valued vcpu/memory/disk set to the type default.

    Fields are defaulted one by one; a value the caller set is never replaced.
    """
    defaults = SPEC_DEFAULTS.get(qube_type, GENERIC_SPEC_DEFAULTS)
    return spec.model_copy(
        update={
            "vcpu": spec.vcpu or defaults.vcpu,
            "memory": spec.memory or defaults.memory,
            "disk": spec.disk or defaults.disk,
        }
    )


def _parse_qube_type(value: str) -> QubeType:
    try:
        return QubeType(value)
    except ValueError:
        raise InvalidQubeTypeError(value) from None


class QubeService:
    def __init__(self, qube_repo: QubeRepository, zone_repo: ZoneRepository) -> None:
        self._qubes = qube_repo
        self._zones = zone_repo

    async def create(self, payload: QubeCreate) -> QubeRecord:
        name = payload.name.strip()
        if not name:
            raise InvalidInputError("qube name")
        qube_type = _parse_qube_type(payload.type)

        # Zone is optional; an empty string means unassigned
        zone_id = payload.zone_id or None
        if zone_id is not None and await self._zones.get(zone_id) is None:
            raise ZoneNotFoundError(zone_id)

        spec = apply_default_spec(qube_type, payload.spec)
        now = datetime.now(UTC)
        qube = await self._qubes.create(
            QubeRecord(
                id=str(uuid.uuid4()),
                name=name,
                type=qube_type,
                zone_id=zone_id,
                status=QubeStatus.STOPPED,
                spec=spec.model_dump(exclude_none=True),
                ip_address=None,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "Qube created",
            extra={
                "qube_id": qube.id,
                "qube_name": qube.name,
                "qube_type": qube.type.value,
                "zone_id": qube.zone_id,
                "vcpu": spec.vcpu,
                "memory_mb": spec.memory,
                "disk_gb": spec.disk,
            },
        )
        return qube

    async def get(self, qube_id: str) -> QubeRecord:
        qube = await self._qubes.get(qube_id)
        if qube is None:
            raise QubeNotFoundError(qube_id)
        logger.debug("Qube fetched", extra={"qube_id": qube_id})
        return qube

    async def list(self, opts: QubeListOptions) -> tuple[list[QubeRecord], int]:
        records, total = await self._qubes.list(opts)
        logger.debug(
            "Qubes listed",
            extra={
                "zone_id": opts.zone_id,
                "limit": opts.limit,
                "offset": opts.offset,
                "total": total,
            },
        )
        return records, total

    async def update(self, qube_id: str, payload: QubeUpdate) -> QubeRecord:
        changes = QubeChanges()
        if payload.name is not None:
            changes.name = payload.name.strip()
            if not changes.name:
                raise InvalidInputError("qube name", "must not be empty")
        if payload.spec is not None:
            # Replaces the stored spec as sent; type defaults apply only at creation
            changes.spec = payload.spec.model_dump(exclude_none=True)

        qube = await self._qubes.update(qube_id, changes)
        if qube is None:
            raise QubeNotFoundError(qube_id)
        logger.info("Qube updated", extra={"qube_id": qube_id, "qube_name": qube.name})
        return qube

    async def delete(self, qube_id: str) -> None:
        qube = await self.get(qube_id)
        if qube.status == QubeStatus.RUNNING:
            logger.warning(
                "Qube delete rejected while running",
                extra={"qube_id": qube_id, "current_status": qube.status.value},
            )
            raise QubeNotStoppedError(qube_id, qube.status.value)

        if not await self._qubes.delete(qube_id):
            raise QubeNotFoundError(qube_id)
        logger.info("Qube deleted", extra={"qube_id": qube_id})

    async def start(self, qube_id: str) -> QubeRecord:
        qube = await self.get(qube_id)
        await self._ensure_zone_connected(qube)
        return await self._transition(qube, QubeStatus.RUNNING)

    async def stop(self, qube_id: str) -> QubeRecord:
        qube = await self.get(qube_id)
        return await self._transition(qube, QubeStatus.STOPPED)

    async def _ensure_zone_connected(self, qube: QubeRecord) -> None:
        # An unassigned qube has nowhere to run
        zone = await self._zones.get(qube.zone_id) if qube.zone_id else None
        if zone is None:
            logger.warning(
                "Qube start rejected: zone not found",
                extra={"qube_id": qube.id, "zone_id": qube.zone_id},
            )
            raise ZoneNotFoundError(qube.zone_id)
        if zone.status != ZoneStatus.CONNECTED:
            logger.warning(
                "Qube start rejected: zone disconnected",
                extra={"qube_id": qube.id, "zone_id": zone.id},
            )
            raise ZoneDisconnectedError(zone.id)

    async def _transition(self, qube: QubeRecord, status: QubeStatus) -> QubeRecord:
        logger.info(
            "State transition",
            extra={
                "qube_id": qube.id,
                "from_status": qube.status.value,
                "to_status": status.value,
            },
        )
        # A qube deleted between the read above and this write reports as not found
        updated = await self._qubes.update_status(qube.id, status)
        if updated is None:
            raise QubeNotFoundError(qube.id)
        logger.info(
            "State transition complete",
            extra={"qube_id": qube.id, "new_status": updated.status.value},
        )
        return updated
