from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.zone import ZoneStatus, ZoneType


class ZoneConfig(BaseModel):
    """Provider connection settings. Unknown provider keys are kept as sent."""

    model_config = ConfigDict(extra="allow")

    endpoint: str | None = None
    username: str | None = None
    project: str | None = None
    region: str | None = None
    public_key: str | None = None


class ZoneCreate(BaseModel):
    # name and type are checked by ZoneService so that a blank name or an
    # unknown type surface as INVALID_INPUT / INVALID_ZONE_TYPE
    name: str = Field("", max_length=255)
    type: str = Field("", description="One of: proxmox, gcp, aws, azure")
    config: ZoneConfig = Field(default_factory=ZoneConfig)


class ZoneUpdate(BaseModel):
    name: str | None = Field(None, max_length=255)
    config: ZoneConfig | None = None


class ZoneResponse(BaseModel):
    id: str
    name: str
    type: ZoneType
    status: ZoneStatus
    config: ZoneConfig
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
