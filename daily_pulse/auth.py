"""Shared authentication dependencies."""

import secrets

from fastapi import Header, HTTPException

from daily_pulse.config import get_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    """Validate the shared API secret. Fails closed if API_SECRET_KEY is not set."""
    expected_key = get_settings().API_SECRET_KEY

    if not expected_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: API authentication not configured",
        )

    if not x_api_key or not secrets.compare_digest(x_api_key, expected_key):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
        )
