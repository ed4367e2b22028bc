#!/usr/bin/env python3
"""
Issue a local admin access token and store it for auth_request.py.

Tokens are normally issued by the identity service; this helper signs one
with the configured JWT secret for development.

Usage:
    python scripts/issue_admin_token.py
    python scripts/issue_admin_token.py --sub 3f0c... --minutes 120
"""

import argparse
import uuid
from datetime import timedelta
from pathlib import Path

from app.core.security import create_access_token

TOKEN_FILE = Path(__file__).parent.parent / ".token"


def issue(sub: str, email: str, minutes: int) -> str:
    """Create an admin token and write it to the token file."""
    token = create_access_token(
        {"sub": sub, "role": "admin", "email": email},
        expires_delta=timedelta(minutes=minutes),
    )
    TOKEN_FILE.write_text(token)
    return token


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue a development admin token")
    parser.add_argument("--sub", default=str(uuid.uuid4()), help="Admin user id")
    parser.add_argument("--email", default="admin@nol.local")
    parser.add_argument("--minutes", type=int, default=60, help="Token lifetime in minutes")
    args = parser.parse_args()

    token = issue(args.sub, args.email, args.minutes)
    print(f"Token written to {TOKEN_FILE}")
    print(f"Token: {token}")
