#!/usr/bin/env python3
"""Report which settings are configured, with secrets masked."""

from __future__ import annotations

import sys
from pathlib import Path

# REQUIRED: Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from src.core.config import get_settings

SECRET_FIELDS = {"jwt_secret", "resend_api_key", "database_url"}


def mask(value: str) -> str:
    if not value:
        return "(not set)"
    return f"{value[:4]}…{len(value)} chars" if len(value) > 8 else "****"


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        print("❌ Configuration invalid:")
        for error in exc.errors():
            print(f"   - {'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
        return 1

    print("=" * 60)
    print(f"  {settings.app_name} ({settings.environment})")
    print("=" * 60)
    for name, value in settings.model_dump().items():
        shown = mask(str(value)) if name in SECRET_FIELDS else value
        print(f"  {name:<32} {shown}")

    print()
    if settings.jwt_secret == "replace-with-secure-secret":
        print("⚠️  JWT_SECRET is the default placeholder")
    if settings.notifications_configured:
        print("✅ Email notifications enabled")
    else:
        print("⚠️  Email notifications will be skipped (RESEND_API_KEY / NOTIFY_FROM_EMAIL)")
    if not settings.notify_internal_to:
        print("⚠️  NOTIFY_INTERNAL_TO not set; internal notices will be skipped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
