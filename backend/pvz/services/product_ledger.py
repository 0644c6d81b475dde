"""Product ledger service.

Appends products to the open reception of a pickup point and removes the
most recently added one ("undo last scan").  Both operations run the
reception lifecycle's locked lookup inside their own transaction.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pvz.exceptions import InvalidProductType, StoreError
from pvz.metrics import Metrics
from pvz.models import Product, ProductType
from pvz.services.reception_lifecycle import ReceptionLifecycle

logger = logging.getLogger(__name__)


def parse_product_type(value: str | ProductType) -> ProductType:
    try:
        return ProductType(value)
    except ValueError:
        logger.warning("Invalid product type: %r", value)
        raise InvalidProductType() from None


class ProductLedger:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        receptions: ReceptionLifecycle,
        metrics: Metrics | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._receptions = receptions
        self._metrics = metrics

    async def append_product(
        self, pvz_id: uuid.UUID, product_type: str | ProductType
    ) -> Product:
        """Add a product to the open reception and return it."""
        product_type = parse_product_type(product_type)

        try:
            async with self._session_factory() as session, session.begin():
                reception = await self._receptions.lock_open_reception(session, pvz_id)
                product = Product(
                    id=uuid.uuid4(),
                    adding_time=datetime.now(timezone.utc),
                    product_type=product_type.value,
                    reception_id=reception.id,
                )
                session.add(product)
                await session.flush()
        except SQLAlchemyError as exc:
            logger.error("Failed to create product for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to create product") from exc

        if self._metrics is not None:
            self._metrics.products_added_total.inc()
        logger.info("Added %s product %s to reception %s", product.product_type, product.id, product.reception_id)
        return product

    async def remove_last_product(self, pvz_id: uuid.UUID) -> None:
        """Delete the latest product of the open reception.

        An open reception without products is left as is.
        """
        try:
            async with self._session_factory() as session, session.begin():
                reception = await self._receptions.lock_open_reception(session, pvz_id)
                last_product = (
                    select(Product.id)
                    .where(Product.reception_id == reception.id)
                    .order_by(Product.adding_time.desc(), Product.id.desc())
                    .limit(1)
                    .scalar_subquery()
                )
                result = await session.execute(
                    delete(Product)
                    .where(Product.id == last_product)
                    .execution_options(synchronize_session=False)
                )
        except SQLAlchemyError as exc:
            logger.error("Failed to delete product for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to delete product") from exc

        if result.rowcount == 0:
            logger.info("Reception %s has no products to remove", reception.id)
        else:
            logger.info("Removed last product from reception %s", reception.id)
