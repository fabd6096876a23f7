"""Password hashing and bearer tokens for admin accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from passlib.context import CryptContext
from src.core.config import get_settings

# bcrypt, cost 12
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


@dataclass(slots=True)
class TokenClaims:
    subject: str
    roles: list[str] = field(default_factory=list)
    email: str = ""
    expires_at: datetime | None = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str,
    *,
    roles: list[str] | tuple[str, ...],
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token."""
    settings = get_settings()

    unknown = [role for role in roles if not Role.contains(role)]
    if unknown:
        raise TokenError(f"Unsupported role(s): {', '.join(unknown)}")

    issued_at = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    claims: dict[str, object] = {
        "sub": subject,
        "roles": list(roles),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
        "iss": settings.app_name,
    }
    if email:
        claims["email"] = email

    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Decode a JWT access token and check its roles."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    roles = payload.get("roles") or []
    for role in roles:
        if not Role.contains(role):
            raise TokenError(f"Unsupported role: {role}")

    return TokenClaims(
        subject=payload["sub"],
        roles=list(roles),
        email=payload.get("email", ""),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
