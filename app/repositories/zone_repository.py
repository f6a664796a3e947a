"""
ZoneRepository: durable storage of zones on the SQLAlchemy async session.

Every method works on a single row keyed by id. Missing rows come back as
``None`` (or ``False`` for delete); deciding what that means is left to the
service layer.
"""

from datetime import UTC, datetime

from sqlalchemy import ScalarSelect, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.zone import Zone, ZoneStatus
from app.repositories.base import (
    ZoneChanges,
    ZoneListOptions,
    ZoneRecord,
    as_utc,
    translate_storage_errors,
)


def _zone_to_record(zone: Zone) -> ZoneRecord:
    return ZoneRecord(
        id=zone.id,
        name=zone.name,
        type=zone.type,
        status=zone.status,
        config=dict(zone.config or {}),
        created_at=as_utc(zone.created_at),
        updated_at=as_utc(zone.updated_at),
    )


def _next_seq() -> ScalarSelect[int]:
    # Evaluated inside the INSERT, under the write lock
    return select(func.coalesce(func.max(Zone.seq), 0) + 1).scalar_subquery()


def _apply_filters(statement: Select, opts: ZoneListOptions) -> Select:
    if opts.status is not None:
        statement = statement.where(Zone.status == opts.status)
    if opts.type is not None:
        statement = statement.where(Zone.type == opts.type)
    return statement


class ZoneRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_storage_errors("zone.create")
    async def create(self, record: ZoneRecord) -> ZoneRecord:
        zone = Zone(
            id=record.id,
            name=record.name,
            type=record.type,
            status=record.status,
            config=record.config,
            created_at=record.created_at,
            updated_at=record.updated_at,
            seq=_next_seq(),
        )
        self._session.add(zone)
        await self._session.flush()
        return _zone_to_record(zone)

    @translate_storage_errors("zone.get")
    async def get(self, zone_id: str) -> ZoneRecord | None:
        zone = await self._session.get(Zone, zone_id)
        return _zone_to_record(zone) if zone else None

    @translate_storage_errors("zone.list")
    async def list(self, opts: ZoneListOptions) -> tuple[list[ZoneRecord], int]:
        count_result = await self._session.execute(
            _apply_filters(select(func.count()).select_from(Zone), opts)
        )
        total = count_result.scalar_one()

        result = await self._session.execute(
            _apply_filters(select(Zone), opts)
            .order_by(Zone.created_at.desc(), Zone.seq.desc())
            .limit(opts.limit)
            .offset(opts.offset)
        )
        zones = list(result.scalars().all())
        return [_zone_to_record(z) for z in zones], total

    @translate_storage_errors("zone.update")
    async def update(self, zone_id: str, changes: ZoneChanges) -> ZoneRecord | None:
        zone = await self._session.get(Zone, zone_id)
        if zone is None:
            return None
        if changes.name is not None:
            zone.name = changes.name
        if changes.config is not None:
            zone.config = changes.config
        zone.updated_at = datetime.now(UTC)
        await self._session.flush()
        return _zone_to_record(zone)

    @translate_storage_errors("zone.delete")
    async def delete(self, zone_id: str) -> bool:
        zone = await self._session.get(Zone, zone_id)
        if zone is None:
            return False
        await self._session.delete(zone)
        await self._session.flush()
        return True

    @translate_storage_errors("zone.update_status")
    async def update_status(self, zone_id: str, status: ZoneStatus) -> ZoneRecord | None:
        zone = await self._session.get(Zone, zone_id)
        if zone is None:
            return None
        zone.status = status
        zone.updated_at = datetime.now(UTC)
        await self._session.flush()
        return _zone_to_record(zone)
