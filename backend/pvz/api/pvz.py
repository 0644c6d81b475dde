"""API routes for pickup points and their last reception/product."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from pvz.api.deps import get_container
from pvz.api.schemas import PickupPointResponse, PickupPointWithReceptions, ReceptionResponse
from pvz.auth import require_permission
from pvz.container import Container
from pvz.services.pickup_point_registry import DEFAULT_LIMIT

router = APIRouter(prefix="/pvz", tags=["pvz"])


class PickupPointCreateRequest(BaseModel):
    id: uuid.UUID | None = None
    registration_date: datetime | None = Field(None, alias="registrationDate")
    city: str

    model_config = {"populate_by_name": True}


class LastReceptionStatusResponse(BaseModel):
    status: str


@router.post(
    "",
    response_model=PickupPointResponse,
    status_code=201,
    dependencies=[Depends(require_permission("create_pickup_point"))],
)
async def create_pickup_point(
    data: PickupPointCreateRequest,
    container: Container = Depends(get_container),
):
    point = await container.pickup_points.create_pickup_point(
        data.city, pvz_id=data.id, registration_date=data.registration_date
    )
    return PickupPointResponse.from_model(point)


@router.get(
    "",
    response_model=list[PickupPointWithReceptions],
    dependencies=[Depends(require_permission("list_pickup_points"))],
)
async def list_pickup_points(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_LIMIT),
    container: Container = Depends(get_container),
):
    views = await container.pickup_points.list_pickup_points(
        limit=limit, page=page, start_date=start_date, end_date=end_date
    )
    return [PickupPointWithReceptions.from_view(v) for v in views]


@router.get(
    "/all",
    response_model=list[PickupPointResponse],
    dependencies=[Depends(require_permission("list_all_pickup_points"))],
)
async def list_all_pickup_points(container: Container = Depends(get_container)):
    points = await container.pickup_points.list_all_pickup_points()
    return [PickupPointResponse.from_model(p) for p in points]


@router.get(
    "/{pvz_id}/last_reception_status",
    response_model=LastReceptionStatusResponse,
    dependencies=[Depends(require_permission("get_last_reception_status"))],
)
async def get_last_reception_status(
    pvz_id: uuid.UUID,
    container: Container = Depends(get_container),
):
    status = await container.receptions.get_last_reception_status(pvz_id)
    return LastReceptionStatusResponse(status=status.value)


@router.post(
    "/{pvz_id}/close_last_reception",
    response_model=ReceptionResponse,
    dependencies=[Depends(require_permission("close_reception"))],
)
async def close_last_reception(
    pvz_id: uuid.UUID,
    container: Container = Depends(get_container),
):
    reception = await container.receptions.close_reception(pvz_id)
    return ReceptionResponse.from_model(reception)


@router.post(
    "/{pvz_id}/delete_last_product",
    dependencies=[Depends(require_permission("remove_last_product"))],
)
async def delete_last_product(
    pvz_id: uuid.UUID,
    container: Container = Depends(get_container),
):
    await container.products.remove_last_product(pvz_id)
    return {}
