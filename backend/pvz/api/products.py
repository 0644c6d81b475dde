"""API routes for adding products to the open reception."""

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pvz.api.deps import get_container
from pvz.api.schemas import ProductResponse
from pvz.auth import require_permission
from pvz.container import Container

router = APIRouter(prefix="/products", tags=["products"])


class ProductCreateRequest(BaseModel):
    type: str
    pvz_id: uuid.UUID = Field(alias="pvzId")

    model_config = {"populate_by_name": True}


@router.post(
    "",
    response_model=ProductResponse,
    status_code=201,
    dependencies=[Depends(require_permission("append_product"))],
)
async def append_product(
    data: ProductCreateRequest,
    container: Container = Depends(get_container),
):
    product = await container.products.append_product(data.pvz_id, data.type)
    return ProductResponse.from_model(product)
