from fastapi import APIRouter

from app.api.v1.endpoints import qubes, zones

router = APIRouter()

router.include_router(zones.router)
router.include_router(qubes.router)
