"""Explicit wiring of the engine, metrics and services for one application."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pvz.auth import TokenIssuer
from pvz.config import Settings
from pvz.database import build_engine, build_session_factory
from pvz.metrics import Metrics
from pvz.services import PickupPointRegistry, ProductLedger, ReceptionLifecycle, UserAccounts


@dataclass
class Container:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    metrics: Metrics | None
    tokens: TokenIssuer
    pickup_points: PickupPointRegistry
    receptions: ReceptionLifecycle
    products: ProductLedger
    users: UserAccounts

    async def dispose(self) -> None:
        await self.engine.dispose()


def build_container(settings: Settings, engine: AsyncEngine | None = None) -> Container:
    engine = engine or build_engine(settings)
    session_factory = build_session_factory(engine)
    metrics = Metrics() if settings.metrics_enabled else None
    tokens = TokenIssuer(settings)
    receptions = ReceptionLifecycle(session_factory, metrics)
    return Container(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        metrics=metrics,
        tokens=tokens,
        pickup_points=PickupPointRegistry(session_factory, metrics),
        receptions=receptions,
        products=ProductLedger(session_factory, receptions, metrics),
        users=UserAccounts(session_factory, tokens),
    )
