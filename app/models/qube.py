import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, enum_values


class QubeType(str, enum.Enum):
    APP = "app"  # application
    WORK = "work"  # workstation
    DEV = "dev"  # development environment
    GPU = "gpu"  # GPU compute
    DISP = "disp"  # disposable
    SYS = "sys"  # system service


class QubeStatus(str, enum.Enum):
    PENDING = "pending"
    CREATING = "creating"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class Qube(Base):
    __tablename__ = "qubes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[QubeType] = mapped_column(
        Enum(QubeType, values_callable=enum_values, native_enum=False, length=32),
        nullable=False,
    )
    # Plain column, not a ForeignKey: zone deletion is guarded by ZoneService instead
    zone_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    status: Mapped[QubeStatus] = mapped_column(
        Enum(QubeStatus, values_callable=enum_values, native_enum=False, length=32),
        nullable=False,
        default=QubeStatus.STOPPED,
        index=True,
    )
    spec: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Insertion order, assigned by the repository; breaks created_at ties
    seq: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
