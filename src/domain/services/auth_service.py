"""Administrator accounts: signup, login and profile lookup."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.config import get_settings
from src.core.security import Role, create_access_token, hash_password, verify_password
from src.infrastructure.db.models import AdminUserModel

logger = structlog.get_logger()


class AuthError(Exception):
    """Base exception for authentication errors."""


class AdminExistsError(AuthError):
    """Raised when attempting to sign up with an existing email."""


class SignupDisabledError(AuthError):
    """Raised when self-service admin signup is turned off."""


class InvalidCredentialsError(AuthError):
    """Raised when login credentials are invalid."""


class AdminNotFoundError(AuthError):
    """Raised when an admin account is not found."""


class AdminAuthService:
    """Service for administrator authentication."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def signup(self, *, email: str, password: str, name: str) -> dict:
        settings = get_settings()
        if not settings.admin_signup_enabled:
            raise SignupDisabledError("Admin signup is disabled")

        normalized = email.strip().lower()
        await logger.ainfo("admin_signup_attempt", email=normalized)

        existing = await self.session.scalar(
            select(AdminUserModel.id).where(AdminUserModel.email == normalized)
        )
        if existing:
            raise AdminExistsError(f"User with email {normalized} already exists")

        admin = AdminUserModel(
            email=normalized,
            hashed_password=hash_password(password),
            name=name.strip(),
        )
        try:
            self.session.add(admin)
            await self.session.commit()
            await self.session.refresh(admin)
        except IntegrityError as exc:
            await self.session.rollback()
            await logger.awarning("admin_signup_duplicate_email", email=normalized)
            raise AdminExistsError(f"User with email {normalized} already exists") from exc

        await logger.ainfo("admin_signup_success", user_id=admin.id, email=normalized)
        return {"user": self._to_dict(admin), "token": self._issue_token(admin)}

    async def login(self, *, email: str, password: str) -> dict:
        normalized = email.strip().lower()
        admin = await self.session.scalar(
            select(AdminUserModel).where(AdminUserModel.email == normalized)
        )

        if admin is None or not verify_password(password, admin.hashed_password):
            await logger.awarning("admin_login_failed", email=normalized)
            raise InvalidCredentialsError("Invalid email or password")

        await self.session.execute(
            update(AdminUserModel)
            .where(AdminUserModel.id == admin.id)
            .values(last_login_at=datetime.now(UTC))
        )
        await self.session.commit()
        await self.session.refresh(admin)

        await logger.ainfo("admin_login_success", user_id=admin.id)
        return {"user": self._to_dict(admin), "token": self._issue_token(admin)}

    async def get_admin(self, user_id: str) -> dict:
        admin = await self.session.get(AdminUserModel, user_id)
        if admin is None:
            raise AdminNotFoundError(f"Admin {user_id} not found")
        return self._to_dict(admin)

    def _issue_token(self, admin: AdminUserModel) -> dict:
        settings = get_settings()
        return {
            "access_token": create_access_token(
                admin.id, roles=[Role.ADMIN.value], email=admin.email
            ),
            "token_type": "bearer",
            "expires_in": settings.access_token_ttl_seconds,
        }

    @staticmethod
    def _to_dict(admin: AdminUserModel) -> dict:
        return {
            "id": admin.id,
            "email": admin.email,
            "name": admin.name,
            "created_at": admin.created_at,
            "last_login_at": admin.last_login_at,
        }
