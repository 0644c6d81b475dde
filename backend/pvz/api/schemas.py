"""Wire schemas shared by the routers.

Field aliases keep the camelCase names of the public API.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pvz.models import PickupPoint, Product, Reception
from pvz.services import PickupPointView


class PickupPointResponse(BaseModel):
    id: uuid.UUID
    registration_date: datetime = Field(serialization_alias="registrationDate")
    city: str

    @classmethod
    def from_model(cls, point: PickupPoint) -> "PickupPointResponse":
        return cls(id=point.id, registration_date=point.registration_date, city=point.city)


class ReceptionResponse(BaseModel):
    id: uuid.UUID
    date_time: datetime = Field(serialization_alias="dateTime")
    pvz_id: uuid.UUID = Field(serialization_alias="pvzId")
    status: str

    @classmethod
    def from_model(cls, reception: Reception) -> "ReceptionResponse":
        return cls(
            id=reception.id,
            date_time=reception.reception_time,
            pvz_id=reception.pvz_id,
            status=reception.status,
        )


class ProductResponse(BaseModel):
    id: uuid.UUID
    date_time: datetime = Field(serialization_alias="dateTime")
    type: str
    reception_id: uuid.UUID = Field(serialization_alias="receptionId")

    @classmethod
    def from_model(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            date_time=product.adding_time,
            type=product.product_type,
            reception_id=product.reception_id,
        )


class ReceptionWithProducts(BaseModel):
    reception: ReceptionResponse
    products: list[ProductResponse]


class PickupPointWithReceptions(BaseModel):
    pvz: PickupPointResponse
    receptions: list[ReceptionWithProducts]

    @classmethod
    def from_view(cls, view: PickupPointView) -> "PickupPointWithReceptions":
        return cls(
            pvz=PickupPointResponse.from_model(view.pickup_point),
            receptions=[
                ReceptionWithProducts(
                    reception=ReceptionResponse.from_model(r.reception),
                    products=[ProductResponse.from_model(p) for p in r.products],
                )
                for r in view.receptions
            ],
        )
