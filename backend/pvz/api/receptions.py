"""API routes for opening receptions."""

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pvz.api.deps import get_container
from pvz.api.schemas import ReceptionResponse
from pvz.auth import require_permission
from pvz.container import Container

router = APIRouter(prefix="/receptions", tags=["receptions"])


class ReceptionCreateRequest(BaseModel):
    pvz_id: uuid.UUID = Field(alias="pvzId")

    model_config = {"populate_by_name": True}


@router.post(
    "",
    response_model=ReceptionResponse,
    status_code=201,
    dependencies=[Depends(require_permission("open_reception"))],
)
async def open_reception(
    data: ReceptionCreateRequest,
    container: Container = Depends(get_container),
):
    reception = await container.receptions.open_reception(data.pvz_id)
    return ReceptionResponse.from_model(reception)
