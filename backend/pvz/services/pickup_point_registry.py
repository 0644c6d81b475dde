"""Pickup point registry.

Creates pickup points and serves the reporting views: a paginated listing
of pickup points with their receptions and products, and a flat export of
every pickup point.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from sqlalchemy import and_, exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pvz.exceptions import (
    InvalidCity,
    InvalidDateRange,
    InvalidLimit,
    InvalidPage,
    PickupPointExists,
    StoreError,
)
from pvz.metrics import Metrics
from pvz.models import City, PickupPoint, Product, Reception

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 30

# ---------------------------------------------------------------------------
# Composite views
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ReceptionView:
    reception: Reception
    products: list[Product] = field(default_factory=list)


@dataclass(slots=True)
class PickupPointView:
    pickup_point: PickupPoint
    receptions: list[ReceptionView] = field(default_factory=list)


def group_rows(
    rows: Iterable[tuple[PickupPoint, Reception | None, Product | None]],
) -> list[PickupPointView]:
    """Fold flattened ``pvz LEFT JOIN receptions LEFT JOIN products`` rows.

    Pickup points and receptions keep first-seen order; repeated receptions
    and products are collapsed.
    """
    points: dict[uuid.UUID, PickupPointView] = {}
    receptions: dict[uuid.UUID, ReceptionView] = {}
    seen_products: set[uuid.UUID] = set()

    for point, reception, product in rows:
        point_view = points.get(point.id)
        if point_view is None:
            point_view = points[point.id] = PickupPointView(pickup_point=point)

        if reception is None:
            continue
        reception_view = receptions.get(reception.id)
        if reception_view is None:
            reception_view = receptions[reception.id] = ReceptionView(reception=reception)
            point_view.receptions.append(reception_view)

        if product is None or product.id in seen_products:
            continue
        seen_products.add(product.id)
        reception_view.products.append(product)

    return list(points.values())


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive values are taken as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_city(value: str | City) -> City:
    try:
        return City(value)
    except ValueError:
        logger.warning("Invalid city: %r", value)
        raise InvalidCity() from None


def validate_listing(
    limit: int, page: int, start_date: datetime | None, end_date: datetime | None
) -> int:
    """Check listing parameters and return the row offset."""
    if start_date is not None and end_date is not None and _as_utc(end_date) < _as_utc(start_date):
        raise InvalidDateRange()
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidLimit()
    if page < 1:
        raise InvalidPage()
    return (page - 1) * limit


class PickupPointRegistry:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        metrics: Metrics | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._metrics = metrics

    async def create_pickup_point(
        self,
        city: str | City,
        *,
        pvz_id: uuid.UUID | None = None,
        registration_date: datetime | None = None,
    ) -> PickupPoint:
        city = parse_city(city)
        pvz_id = pvz_id or uuid.uuid4()
        registration_date = _as_utc(registration_date) or datetime.now(timezone.utc)

        try:
            async with self._session_factory() as session, session.begin():
                if await session.get(PickupPoint, pvz_id) is not None:
                    logger.warning("Pickup point %s already exists", pvz_id)
                    raise PickupPointExists()

                point = PickupPoint(id=pvz_id, registration_date=registration_date, city=city.value)
                session.add(point)
                await session.flush()
        except IntegrityError as exc:
            logger.warning("Pickup point %s created concurrently", pvz_id)
            raise PickupPointExists() from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create pickup point %s: %s", pvz_id, exc)
            raise StoreError("failed to create pvz") from exc

        if self._metrics is not None:
            self._metrics.pvz_created_total.inc()
        logger.info("Created pickup point %s in %s", point.id, point.city)
        return point

    async def list_pickup_points(
        self,
        *,
        limit: int = DEFAULT_LIMIT,
        page: int = 1,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[PickupPointView]:
        """Page of pickup points with their receptions and products.

        When a date bound is given only receptions started inside the
        (inclusive) interval are shown, and pickup points without such a
        reception are skipped.
        """
        offset = validate_listing(limit, page, start_date, end_date)
        start_date, end_date = _as_utc(start_date), _as_utc(end_date)

        interval = []
        if start_date is not None:
            interval.append(Reception.reception_time >= start_date)
        if end_date is not None:
            interval.append(Reception.reception_time <= end_date)

        page_query = select(PickupPoint.id)
        if interval:
            page_query = page_query.where(
                exists().where(Reception.pvz_id == PickupPoint.id, *interval)
            )
        page_query = page_query.order_by(PickupPoint.id).limit(limit).offset(offset)

        try:
            async with self._session_factory() as session:
                page_ids = (await session.execute(page_query)).scalars().all()
                if not page_ids:
                    return []

                result = await session.execute(
                    select(PickupPoint, Reception, Product)
                    .select_from(PickupPoint)
                    .outerjoin(Reception, and_(Reception.pvz_id == PickupPoint.id, *interval))
                    .outerjoin(Product, Product.reception_id == Reception.id)
                    .where(PickupPoint.id.in_(page_ids))
                    .order_by(PickupPoint.id, Reception.reception_time.desc(), Product.adding_time)
                )
                rows = result.all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list pickup points: %s", exc)
            raise StoreError("failed to get pvz") from exc

        return group_rows(rows)

    async def list_all_pickup_points(self) -> Sequence[PickupPoint]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(PickupPoint).order_by(PickupPoint.id))
                return result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list all pickup points: %s", exc)
            raise StoreError("failed to get pvz") from exc
