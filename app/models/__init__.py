from app.models.qube import Qube, QubeStatus, QubeType
from app.models.zone import Zone, ZoneStatus, ZoneType

__all__ = ["Zone", "ZoneStatus", "ZoneType", "Qube", "QubeStatus", "QubeType"]
