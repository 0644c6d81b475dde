"""Auth API routes: dummy login, register, login."""

import uuid

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr

from pvz.api.deps import get_container
from pvz.auth import AUTH_COOKIE
from pvz.container import Container

router = APIRouter(tags=["auth"])


# --- Schemas ---

class DummyLoginRequest(BaseModel):
    role: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    role: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    role: str

    model_config = {"from_attributes": True}


def _set_auth_cookie(response: Response, token: str, container: Container) -> None:
    response.set_cookie(
        AUTH_COOKIE,
        token,
        max_age=int(container.tokens.expire.total_seconds()),
        httponly=True,
    )


# --- Endpoints ---

@router.post("/dummyLogin", response_model=str)
async def dummy_login(
    data: DummyLoginRequest,
    response: Response,
    container: Container = Depends(get_container),
):
    token = await container.users.dummy_login(data.role)
    _set_auth_cookie(response, token, container)
    return token


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: RegisterRequest,
    response: Response,
    container: Container = Depends(get_container),
):
    user, token = await container.users.register(data.email, data.password, data.role)
    _set_auth_cookie(response, token, container)
    return user


@router.post("/login", response_model=str)
async def login(
    data: LoginRequest,
    response: Response,
    container: Container = Depends(get_container),
):
    token = await container.users.login(data.email, data.password)
    _set_auth_cookie(response, token, container)
    return token
