"""Auth router — register, login, logout, me."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.api.deps import get_auth_service, get_current_user, get_session
from worksheetweb.api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from worksheetweb.api.schemas.common import MessageResponse
from worksheetweb.models.user import User
from worksheetweb.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth.register(
        session,
        email=body.email,
        password=body.password,
        name=body.name,
        role=body.role,
        grade_level=body.grade_level,
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await auth.login(session, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    # Tokens are stateless; the client discards its copy.
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    body: UpdateProfileRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> UserResponse:
    user = await auth.update_profile(
        session, current_user, **body.model_dump(exclude_unset=True)
    )
    return UserResponse.model_validate(user)
