#!/usr/bin/env python3
"""Generate an admin JWT for calling the /admin endpoints by hand."""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.security import Role, create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--subject", default="admin-test", help="Token subject (admin id)")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--ttl", type=int, default=3600, help="Lifetime in seconds")
    args = parser.parse_args()

    token = create_access_token(
        args.subject,
        roles=[Role.ADMIN.value],
        email=args.email,
        expires_delta=timedelta(seconds=args.ttl),
    )
    print(f"Admin Token:\n{token}")


if __name__ == "__main__":
    main()
