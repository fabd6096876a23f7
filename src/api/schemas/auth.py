"""Pydantic schemas for admin authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

# --- Request Schemas ---


class SignupRequest(BaseModel):
    """Request schema for admin signup."""

    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (8-72 characters)",
    )
    name: str = Field(..., min_length=1, max_length=128, description="Display name")


class LoginRequest(BaseModel):
    """Request schema for admin login."""

    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(..., max_length=72, description="Admin password")


# --- Response Schemas ---


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token TTL in seconds")


class AdminResponse(BaseModel):
    id: str
    email: str
    name: str
    created_at: datetime
    last_login_at: datetime | None = None


class AuthResponse(BaseModel):
    message: str
    user: AdminResponse
    token: TokenResponse


class MeResponse(BaseModel):
    user: AdminResponse
