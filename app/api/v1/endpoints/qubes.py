from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.core.pagination import PaginationParams
from app.dependencies import get_qube_service
from app.models.qube import QubeStatus, QubeType
from app.repositories.base import QubeListOptions, QubeRecord
from app.schemas.common import ErrorResponse, PaginatedResponse
from app.schemas.qube import QubeCreate, QubeResponse, QubeSpec, QubeUpdate
from app.services.qube_service import QubeService

router = APIRouter(
    prefix="/qubes",
    tags=["qubes"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or qube type"},
        404: {"model": ErrorResponse, "description": "Qube or zone not found"},
        409: {"model": ErrorResponse, "description": "Qube must be stopped first"},
        412: {"model": ErrorResponse, "description": "Zone is disconnected"},
    },
)


def _to_response(record: QubeRecord) -> QubeResponse:
    return QubeResponse(
        id=record.id,
        name=record.name,
        type=record.type,
        zone_id=record.zone_id,
        status=record.status,
        spec=QubeSpec.model_validate(record.spec),
        ip_address=record.ip_address,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@router.post(
    "",
    response_model=QubeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a qube (stopped, with type-based spec defaults)",
)
async def create_qube(
    payload: QubeCreate,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> QubeResponse:
    record = await service.create(payload)
    return _to_response(record)


@router.get(
    "",
    response_model=PaginatedResponse[QubeResponse],
    summary="List qubes, newest first (paginated)",
)
async def list_qubes(
    pagination: Annotated[PaginationParams, Depends()],
    service: Annotated[QubeService, Depends(get_qube_service)],
    zone_id: Annotated[str | None, Query()] = None,
    qube_status: Annotated[QubeStatus | None, Query(alias="status")] = None,
    qube_type: Annotated[QubeType | None, Query(alias="type")] = None,
) -> PaginatedResponse[QubeResponse]:
    opts = QubeListOptions(
        zone_id=zone_id,
        status=qube_status,
        type=qube_type,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    records, total = await service.list(opts)
    items = [_to_response(r) for r in records]
    return PaginatedResponse.build(
        items=items, total=total, limit=pagination.limit, offset=pagination.offset
    )


@router.get(
    "/{qube_id}",
    response_model=QubeResponse,
    summary="Get a qube by ID",
)
async def get_qube(
    qube_id: str,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> QubeResponse:
    record = await service.get(qube_id)
    return _to_response(record)


@router.patch(
    "/{qube_id}",
    response_model=QubeResponse,
    summary="Update qube name and/or spec",
)
async def update_qube(
    qube_id: str,
    payload: QubeUpdate,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> QubeResponse:
    record = await service.update(qube_id, payload)
    return _to_response(record)


@router.delete(
    "/{qube_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a qube that is not running",
)
async def delete_qube(
    qube_id: str,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> None:
    await service.delete(qube_id)


@router.post(
    "/{qube_id}/start",
    response_model=QubeResponse,
    summary="Start a qube (its zone must be connected)",
)
async def start_qube(
    qube_id: str,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> QubeResponse:
    record = await service.start(qube_id)
    return _to_response(record)


@router.post(
    "/{qube_id}/stop",
    response_model=QubeResponse,
    summary="Stop a qube",
)
async def stop_qube(
    qube_id: str,
    service: Annotated[QubeService, Depends(get_qube_service)],
) -> QubeResponse:
    record = await service.stop(qube_id)
    return _to_response(record)
