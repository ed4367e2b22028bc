#!/usr/bin/env python3
"""
Make authenticated admin API requests using the stored token.

Usage:
    python scripts/auth_request.py
    python scripts/auth_request.py GET /api/v1/admin/dashboard/stats
    python scripts/auth_request.py GET /api/v1/admin/extra-type-prices --param search=seat
    python scripts/auth_request.py POST /api/v1/admin/bookings/close-ended
    python scripts/auth_request.py PUT /api/v1/admin/extra-type-prices/3/pricing \
        --data '{"daily_price": "30", "weekly_price": "180", "monthly_price": "600"}'
"""

import argparse
import json
import sys
from pathlib import Path

import httpx

BASE_URL = "http://localhost:8000"
TOKEN_FILE = Path(__file__).parent.parent / ".token"
METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def get_token() -> str:
    """Read stored access token."""
    if not TOKEN_FILE.exists():
        print("ERROR: No token found. Run issue_admin_token.py first.")
        sys.exit(1)

    token = TOKEN_FILE.read_text().strip()
    if not token:
        print("ERROR: Token file is empty. Run issue_admin_token.py first.")
        sys.exit(1)

    return token


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Turn repeated key=value arguments into query parameters."""
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            print(f"ERROR: Invalid --param {pair!r}, expected key=value")
            sys.exit(1)
        params[key] = value
    return params


def request(
    method: str,
    endpoint: str,
    data: str | None = None,
    params: dict[str, str] | None = None,
    base_url: str = BASE_URL,
) -> int:
    """Make authenticated API request and print the response envelope."""
    if method not in METHODS:
        print(f"ERROR: Unknown method {method}")
        sys.exit(1)

    headers = {"Authorization": f"Bearer {get_token()}"}
    body = json.loads(data) if data else None

    with httpx.Client(base_url=base_url, headers=headers, timeout=10.0, follow_redirects=True) as client:
        response = client.request(method, endpoint, json=body, params=params)

    print(f"Status: {response.status_code}")
    if request_id := response.headers.get("X-Request-ID"):
        print(f"Request ID: {request_id}")

    if response.headers.get("content-type", "").startswith("application/json"):
        print(json.dumps(response.json(), indent=2, ensure_ascii=False))
    else:
        print(response.text)

    return response.status_code


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Make authenticated admin API request")
    parser.add_argument("method", nargs="?", default="GET")
    parser.add_argument("endpoint", nargs="?", default="/api/v1/admin/dashboard/overall")
    parser.add_argument("--data", "-d", help="JSON request body")
    parser.add_argument("--param", "-p", action="append", default=[], help="Query parameter key=value")
    parser.add_argument("--base-url", default=BASE_URL)
    args = parser.parse_args()

    status = request(
        args.method.upper(),
        args.endpoint,
        args.data,
        parse_params(args.param),
        args.base_url,
    )
    sys.exit(0 if status < 400 else 1)
