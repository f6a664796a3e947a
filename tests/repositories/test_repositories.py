"""
Tests for the zone and qube repositories against an in-memory DB.
"""

import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import StorageError
from app.models.qube import QubeStatus, QubeType
from app.models.zone import ZoneStatus, ZoneType
from app.repositories.base import (
    QubeChanges,
    QubeListOptions,
    QubeRecord,
    ZoneChanges,
    ZoneListOptions,
    ZoneRecord,
)
from app.repositories.qube_repository import QubeRepository
from app.repositories.zone_repository import ZoneRepository


def zone_record(**overrides) -> ZoneRecord:
    now = datetime.now(UTC)
    fields = {
        "id": str(uuid.uuid4()),
        "name": "zone",
        "type": ZoneType.PROXMOX,
        "status": ZoneStatus.DISCONNECTED,
        "config": {"endpoint": "https://pve.local:8006"},
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return ZoneRecord(**fields)


def qube_record(**overrides) -> QubeRecord:
    now = datetime.now(UTC)
    fields = {
        "id": str(uuid.uuid4()),
        "name": "qube",
        "type": QubeType.APP,
        "zone_id": None,
        "status": QubeStatus.STOPPED,
        "spec": {"vcpu": 2, "memory": 2048, "disk": 20},
        "ip_address": None,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return QubeRecord(**fields)


class TestZoneRepository:
    async def test_create_and_get(self, zone_repo: ZoneRepository):
        record = zone_record()
        await zone_repo.create(record)
        assert await zone_repo.get(record.id) == record

    async def test_get_missing_returns_none(self, zone_repo: ZoneRepository):
        assert await zone_repo.get("missing") is None

    async def test_get_from_fresh_session_is_utc(
        self, zone_repo: ZoneRepository, test_session, test_engine
    ):
        record = zone_record()
        await zone_repo.create(record)
        await test_session.commit()

        factory = async_sessionmaker(bind=test_engine, class_=AsyncSession)
        async with factory() as other:
            loaded = await ZoneRepository(other).get(record.id)
        assert loaded is not None
        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at == record.created_at
        assert loaded.config == record.config

    async def test_duplicate_id_raises_storage_error(self, zone_repo: ZoneRepository):
        record = zone_record()
        await zone_repo.create(record)
        with pytest.raises(StorageError) as exc_info:
            await zone_repo.create(zone_record(id=record.id))
        assert exc_info.value.error_code == "STORAGE_FAILURE"

    async def test_list_filters_and_counts(self, zone_repo: ZoneRepository):
        await zone_repo.create(zone_record(name="a", type=ZoneType.AWS))
        await zone_repo.create(
            zone_record(name="b", type=ZoneType.AWS, status=ZoneStatus.CONNECTED)
        )
        await zone_repo.create(zone_record(name="c", type=ZoneType.GCP))

        records, total = await zone_repo.list(ZoneListOptions(type=ZoneType.AWS))
        assert total == 2
        assert {r.name for r in records} == {"a", "b"}

        records, total = await zone_repo.list(
            ZoneListOptions(type=ZoneType.AWS, status=ZoneStatus.CONNECTED)
        )
        assert [r.name for r in records] == ["b"]

    async def test_list_orders_newest_first(self, zone_repo: ZoneRepository):
        older = zone_record(name="older", created_at=datetime(2024, 1, 1, tzinfo=UTC))
        newer = zone_record(name="newer", created_at=datetime(2025, 1, 1, tzinfo=UTC))
        await zone_repo.create(older)
        await zone_repo.create(newer)
        records, _ = await zone_repo.list(ZoneListOptions())
        assert [r.name for r in records] == ["newer", "older"]

    async def test_list_equal_timestamps_newest_inserted_first(self, zone_repo: ZoneRepository):
        created_at = datetime(2025, 6, 1, tzinfo=UTC)
        for name in ["first", "second", "third"]:
            await zone_repo.create(zone_record(name=name, created_at=created_at))
        records, _ = await zone_repo.list(ZoneListOptions())
        assert [r.name for r in records] == ["third", "second", "first"]

    async def test_update_applies_only_given_fields(self, zone_repo: ZoneRepository):
        record = zone_record()
        await zone_repo.create(record)
        updated = await zone_repo.update(record.id, ZoneChanges(name="renamed"))
        assert updated is not None
        assert updated.name == "renamed"
        assert updated.config == record.config
        assert updated.status == record.status

    async def test_update_missing_returns_none(self, zone_repo: ZoneRepository):
        assert await zone_repo.update("missing", ZoneChanges(name="x")) is None

    async def test_update_status(self, zone_repo: ZoneRepository):
        record = zone_record()
        await zone_repo.create(record)
        updated = await zone_repo.update_status(record.id, ZoneStatus.CONNECTED)
        assert updated is not None
        assert updated.status == ZoneStatus.CONNECTED
        assert updated.name == record.name

    async def test_update_status_missing_returns_none(self, zone_repo: ZoneRepository):
        assert await zone_repo.update_status("missing", ZoneStatus.CONNECTED) is None

    async def test_delete(self, zone_repo: ZoneRepository):
        record = zone_record()
        await zone_repo.create(record)
        assert await zone_repo.delete(record.id) is True
        assert await zone_repo.get(record.id) is None
        assert await zone_repo.delete(record.id) is False


class TestQubeRepository:
    async def test_create_and_get(self, qube_repo: QubeRepository):
        record = qube_record(
            spec={"vcpu": 8, "memory": 16384, "disk": 100, "gpu": {"type": "a100", "count": 1}}
        )
        await qube_repo.create(record)
        assert await qube_repo.get(record.id) == record

    async def test_list_by_zone(self, qube_repo: QubeRepository):
        await qube_repo.create(qube_record(name="in-a", zone_id="zone-a"))
        await qube_repo.create(qube_record(name="in-b", zone_id="zone-b"))
        await qube_repo.create(qube_record(name="none"))

        records, total = await qube_repo.list(QubeListOptions(zone_id="zone-a"))
        assert total == 1
        assert records[0].name == "in-a"

        _, everything = await qube_repo.list(QubeListOptions())
        assert everything == 3

    async def test_list_pagination(self, qube_repo: QubeRepository):
        for i in range(5):
            await qube_repo.create(
                qube_record(name=f"q{i}", created_at=datetime(2025, 1, 1 + i, tzinfo=UTC))
            )
        records, total = await qube_repo.list(QubeListOptions(limit=2, offset=1))
        assert total == 5
        assert [r.name for r in records] == ["q3", "q2"]

    async def test_list_equal_timestamps_newest_inserted_first(self, qube_repo: QubeRepository):
        created_at = datetime(2025, 6, 1, tzinfo=UTC)
        for name in ["first", "second", "third"]:
            await qube_repo.create(qube_record(name=name, created_at=created_at))
        records, _ = await qube_repo.list(QubeListOptions(limit=2))
        assert [r.name for r in records] == ["third", "second"]

    async def test_update_spec(self, qube_repo: QubeRepository):
        record = qube_record()
        await qube_repo.create(record)
        updated = await qube_repo.update(
            record.id, QubeChanges(spec={"vcpu": 1, "memory": 1, "disk": 1})
        )
        assert updated is not None
        assert updated.spec == {"vcpu": 1, "memory": 1, "disk": 1}
        assert updated.name == record.name

    async def test_update_status_missing_returns_none(self, qube_repo: QubeRepository):
        assert await qube_repo.update_status("missing", QubeStatus.RUNNING) is None

    async def test_delete(self, qube_repo: QubeRepository):
        record = qube_record()
        await qube_repo.create(record)
        assert await qube_repo.delete(record.id) is True
        assert await qube_repo.get(record.id) is None
