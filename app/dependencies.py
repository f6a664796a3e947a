from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.repositories.qube_repository import QubeRepository
from app.repositories.zone_repository import ZoneRepository
from app.services.qube_service import QubeService
from app.services.zone_service import ZoneService

# Function scope: commit or rollback finishes before the response goes out
DbSession = Annotated[AsyncSession, Depends(get_db, scope="function")]


async def get_zone_repository(session: DbSession) -> ZoneRepository:
    return ZoneRepository(session)


async def get_qube_repository(session: DbSession) -> QubeRepository:
    return QubeRepository(session)


async def get_zone_service(
    zone_repo: Annotated[ZoneRepository, Depends(get_zone_repository)],
    qube_repo: Annotated[QubeRepository, Depends(get_qube_repository)],
) -> ZoneService:
    return ZoneService(zone_repo, qube_repo)


async def get_qube_service(
    qube_repo: Annotated[QubeRepository, Depends(get_qube_repository)],
    zone_repo: Annotated[ZoneRepository, Depends(get_zone_repository)],
) -> QubeService:
    return QubeService(qube_repo, zone_repo)
