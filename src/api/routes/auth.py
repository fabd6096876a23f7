"""Admin authentication routes - signup, login, profile."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_admin, get_db_session
from src.api.schemas.auth import (
    AdminResponse,
    AuthResponse,
    LoginRequest,
    MeResponse,
    SignupRequest,
    TokenResponse,
)
from src.domain import AdminUser
from src.domain.services.auth_service import (
    AdminAuthService,
    AdminExistsError,
    AdminNotFoundError,
    InvalidCredentialsError,
    SignupDisabledError,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create admin account",
)
async def signup(
    payload: SignupRequest,
    session: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    service = AdminAuthService(session)

    try:
        result = await service.signup(
            email=payload.email,
            password=payload.password,
            name=payload.name,
        )
    except SignupDisabledError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except AdminExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return AuthResponse(
        message="Admin user created successfully",
        user=AdminResponse(**result["user"]),
        token=TokenResponse(**result["token"]),
    )


@router.post("/login", response_model=AuthResponse, summary="Admin login")
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    service = AdminAuthService(session)

    try:
        result = await service.login(email=payload.email, password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    return AuthResponse(
        message="Login successful",
        user=AdminResponse(**result["user"]),
        token=TokenResponse(**result["token"]),
    )


@router.get("/me", response_model=MeResponse, summary="Current admin")
async def get_me(
    admin: AdminUser = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    try:
        user = await AdminAuthService(session).get_admin(admin.user_id)
    except AdminNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return MeResponse(user=AdminResponse(**user))
