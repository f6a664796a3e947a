import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, enum_values


class ZoneType(str, enum.Enum):
    PROXMOX = "proxmox"
    GCP = "gcp"
    AWS = "aws"
    AZURE = "azure"


class ZoneStatus(str, enum.Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Zone(Base):
    __tablename__ = "zones"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[ZoneType] = mapped_column(
        Enum(ZoneType, values_callable=enum_values, native_enum=False, length=32),
        nullable=False,
    )
    status: Mapped[ZoneStatus] = mapped_column(
        Enum(ZoneStatus, values_callable=enum_values, native_enum=False, length=32),
        nullable=False,
        default=ZoneStatus.DISCONNECTED,
        index=True,
    )
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Insertion order, assigned by the repository; breaks created_at ties
    seq: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
