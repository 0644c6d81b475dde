"""Reception lifecycle service.

Owns the ``in_progress -> closed`` state machine of receptions and the
locked "open reception" lookup that every mutating operation on a pickup
point goes through.  The lookup locks the pickup point row first, so
callers targeting the same pickup point serialize even when no reception
row exists yet.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pvz.exceptions import (
    NoOpenReception,
    NoReceptionFound,
    PickupPointNotFound,
    ReceptionAlreadyOpen,
    StoreError,
)
from pvz.metrics import Metrics
from pvz.models import PickupPoint, Reception, ReceptionStatus

logger = logging.getLogger(__name__)


class ReceptionLifecycle:
    """Opens and closes receptions, one open reception per pickup point."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        metrics: Metrics | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._metrics = metrics

    # ------------------------------------------------------------------
    # Locked lookup
    # ------------------------------------------------------------------

    async def find_open_reception(
        self, session: AsyncSession, pvz_id: uuid.UUID
    ) -> Reception | None:
        """Lock the pickup point and return its open reception, if any.

        Must run inside the caller's transaction; the locks are held until
        that transaction ends.
        """
        try:
            locked = await session.execute(
                select(PickupPoint.id).where(PickupPoint.id == pvz_id).with_for_update()
            )
            if locked.scalar_one_or_none() is None:
                raise PickupPointNotFound()

            result = await session.execute(
                select(Reception)
                .where(
                    Reception.pvz_id == pvz_id,
                    Reception.status == ReceptionStatus.IN_PROGRESS.value,
                )
                .order_by(Reception.reception_time.desc())
                .limit(1)
                .with_for_update()
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to get reception in progress for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to get reception in progress") from exc
        return result.scalar_one_or_none()

    async def lock_open_reception(
        self, session: AsyncSession, pvz_id: uuid.UUID
    ) -> Reception:
        """Like :meth:`find_open_reception` but raises when none is open."""
        reception = await self.find_open_reception(session, pvz_id)
        if reception is None:
            logger.info("No open reception for pvz %s", pvz_id)
            raise NoOpenReception()
        return reception

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def open_reception(self, pvz_id: uuid.UUID) -> Reception:
        try:
            async with self._session_factory() as session, session.begin():
                if await self.find_open_reception(session, pvz_id) is not None:
                    logger.warning("Reception already open for pvz %s", pvz_id)
                    raise ReceptionAlreadyOpen()

                reception = Reception(
                    id=uuid.uuid4(),
                    reception_time=datetime.now(timezone.utc),
                    pvz_id=pvz_id,
                    status=ReceptionStatus.IN_PROGRESS.value,
                )
                session.add(reception)
                await session.flush()
        except IntegrityError as exc:
            # Only reachable if the row lock was bypassed; the partial
            # unique index still holds the line.
            logger.warning("Concurrent reception insert rejected for pvz %s", pvz_id)
            raise ReceptionAlreadyOpen() from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create reception for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to create reception") from exc

        if self._metrics is not None:
            self._metrics.reception_created_total.inc()
        logger.info("Opened reception %s for pvz %s", reception.id, pvz_id)
        return reception

    async def close_reception(self, pvz_id: uuid.UUID) -> Reception:
        try:
            async with self._session_factory() as session, session.begin():
                reception = await self.lock_open_reception(session, pvz_id)
                reception.status = ReceptionStatus.CLOSED.value
                await session.flush()
        except SQLAlchemyError as exc:
            logger.error("Failed to close reception for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to close reception") from exc

        logger.info("Closed reception %s for pvz %s", reception.id, pvz_id)
        return reception

    async def get_last_reception_status(self, pvz_id: uuid.UUID) -> ReceptionStatus:
        """Status of the most recently started reception (no locking)."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Reception.status)
                    .where(Reception.pvz_id == pvz_id)
                    .order_by(Reception.reception_time.desc())
                    .limit(1)
                )
                status = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Failed to get last reception status for pvz %s: %s", pvz_id, exc)
            raise StoreError("failed to get last reception status") from exc

        if status is None:
            raise NoReceptionFound()
        return ReceptionStatus(status)
