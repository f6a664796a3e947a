from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.qube import QubeStatus, QubeType


class GPUSpec(BaseModel):
    type: str
    count: int = Field(1, ge=0)


class QubeSpec(BaseModel):
    """Resource allocation. Zero vcpu/memory/disk means "use the type default"."""

    model_config = ConfigDict(extra="ignore")

    vcpu: int = Field(0, ge=0)
    memory: int = Field(0, ge=0, description="Memory in MB")
    disk: int = Field(0, ge=0, description="Disk in GB")
    template: str | None = None
    gpu: GPUSpec | None = None


class QubeCreate(BaseModel):
    name: str = Field("", max_length=255)
    type: str = Field("", description="One of: app, work, dev, gpu, disp, sys")
    zone_id: str | None = Field(
        None, description="Hosting zone; empty or omitted leaves the qube unassigned"
    )
    spec: QubeSpec = Field(default_factory=QubeSpec)


class QubeUpdate(BaseModel):
    name: str | None = Field(None, max_length=255)
    spec: QubeSpec | None = None


class QubeResponse(BaseModel):
    id: str
    name: str
    type: QubeType
    zone_id: str | None
    status: QubeStatus
    spec: QubeSpec
    ip_address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
