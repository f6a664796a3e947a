"""
QubeRepository: durable storage of qubes on the SQLAlchemy async session.
"""

from datetime import UTC, datetime

from sqlalchemy import ScalarSelect, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.qube import Qube, QubeStatus
from app.repositories.base import (
    QubeChanges,
    QubeListOptions,
    QubeRecord,
    as_utc,
    translate_storage_errors,
)


def _qube_to_record(qube: Qube) -> QubeRecord:
    return QubeRecord(
        id=qube.id,
        name=qube.name,
        type=qube.type,
        zone_id=qube.zone_id,
        status=qube.status,
        spec=dict(qube.spec or {}),
        ip_address=qube.ip_address,
        created_at=as_utc(qube.created_at),
        updated_at=as_utc(qube.updated_at),
    )


def _next_seq() -> ScalarSelect[int]:
    return select(func.coalesce(func.max(Qube.seq), 0) + 1).scalar_subquery()


def _apply_filters(statement: Select, opts: QubeListOptions) -> Select:
    if opts.zone_id:
        statement = statement.where(Qube.zone_id == opts.zone_id)
    if opts.status is not None:
        statement = statement.where(Qube.status == opts.status)
    if opts.type is not None:
        statement = statement.where(Qube.type == opts.type)
    return statement


class QubeRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_storage_errors("qube.create")
    async def create(self, record: QubeRecord) -> QubeRecord:
        qube = Qube(
            id=record.id,
            name=record.name,
            type=record.type,
            zone_id=record.zone_id,
            status=record.status,
            spec=record.spec,
            ip_address=record.ip_address,
            created_at=record.created_at,
            updated_at=record.updated_at,
            seq=_next_seq(),
        )
        self._session.add(qube)
        await self._session.flush()
        return _qube_to_record(qube)

    @translate_storage_errors("qube.get")
    async def get(self, qube_id: str) -> QubeRecord | None:
        qube = await self._session.get(Qube, qube_id)
        return _qube_to_record(qube) if qube else None

    @translate_storage_errors("qube.list")
    async def list(self, opts: QubeListOptions) -> tuple[list[QubeRecord], int]:
        count_result = await self._session.execute(
            _apply_filters(select(func.count()).select_from(Qube), opts)
        )
        total = count_result.scalar_one()

        result = await self._session.execute(
            _apply_filters(select(Qube), opts)
            .order_by(Qube.created_at.desc(), Qube.seq.desc())
            .limit(opts.limit)
            .offset(opts.offset)
        )
        qubes = list(result.scalars().all())
        return [_qube_to_record(q) for q in qubes], total

    @translate_storage_errors("qube.update")
    async def update(self, qube_id: str, changes: QubeChanges) -> QubeRecord | None:
        qube = await self._session.get(Qube, qube_id)
        if qube is None:
            return None
        if changes.name is not None:
            qube.name = changes.name
        if changes.spec is not None:
            qube.spec = changes.spec
        qube.updated_at = datetime.now(UTC)
        await self._session.flush()
        return _qube_to_record(qube)

    @translate_storage_errors("qube.delete")
    async def delete(self, qube_id: str) -> bool:
        qube = await self._session.get(Qube, qube_id)
        if qube is None:
            return False
        await self._session.delete(qube)
        await self._session.flush()
        return True

    @translate_storage_errors("qube.update_status")
    async def update_status(self, qube_id: str, status: QubeStatus) -> QubeRecord | None:
        qube = await self._session.get(Qube, qube_id)
        if qube is None:
            return None
        qube.status = status
        qube.updated_at = datetime.now(UTC)
        await self._session.flush()
        return _qube_to_record(qube)
