"""Shared FastAPI dependencies for the routers."""

from fastapi import Request

from pvz.container import Container


def get_container(request: Request) -> Container:
    return request.app.state.container
