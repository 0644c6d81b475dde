"""PVZ API - Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pvz.api import auth, products, pvz, receptions
from pvz.config import Settings, get_settings
from pvz.container import Container, build_container
from pvz.exceptions import (
    EmailAlreadyRegistered,
    InternalError,
    InvalidCredentials,
    InvalidToken,
    NoReceptionFound,
    PickupPointExists,
    PickupPointNotFound,
    ReceptionAlreadyOpen,
    UserError,
)
from pvz.logging_setup import setup_logging
from pvz.metrics import metrics_middleware

logger = logging.getLogger(__name__)

USER_ERROR_STATUS: dict[type[UserError], int] = {
    PickupPointNotFound: 404,
    NoReceptionFound: 404,
    PickupPointExists: 409,
    ReceptionAlreadyOpen: 409,
    EmailAlreadyRegistered: 409,
    InvalidCredentials: 401,
    InvalidToken: 401,
}


def status_for(exc: UserError) -> int:
    for error_type, status_code in USER_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


async def user_error_handler(request: Request, exc: UserError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"message": exc.message})


async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "internal server error"})


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await container.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="API for pickup points, receptions and products",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.metrics = container.metrics

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
    if container.metrics is not None:
        app.middleware("http")(metrics_middleware)

    # Register API routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(pvz.router, prefix="/api/v1")
    app.include_router(receptions.router, prefix="/api/v1")
    app.include_router(products.router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    if container.metrics is not None:
        @app.get("/metrics", include_in_schema=False)
        async def metrics():
            return container.metrics.render()

    return app


app = create_app()
