"""Helpers shared by the backend modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.types import ValidationResult

logger = structlog.get_logger()


def as_options(opts: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Copy caller options into a plain dict (``None`` becomes empty)."""
    return dict(opts or {})


async def check_endpoint(
    url: str,
    api_key: Optional[str],
    *,
    headers: Optional[dict[str, str]] = None,
    invalid_statuses: tuple[int, ...] = (401, 403),
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 10.0,
) -> ValidationResult:
    """
    Check an API key with a cheap authenticated GET.

    Network failures and unexpected statuses are reported in the result,
    never raised.

    Args:
        url: Endpoint to query, usually the vendor's model listing
        api_key: Key being checked; empty keys fail without a request
        headers: Authentication headers carrying the key
        invalid_statuses: Status codes meaning the key was rejected
        transport: Optional httpx transport (used by tests)
        timeout: Request timeout in seconds

    Returns:
        ValidationResult with success flag and error message
    """
    if not api_key:
        return ValidationResult(success=False, error="API key is required")

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        logger.warning("API key check failed", url=url, error=str(exc))
        return ValidationResult(success=False, error=str(exc) or exc.__class__.__name__)

    if response.status_code in invalid_statuses:
        return ValidationResult(success=False, error="Invalid API key")
    if response.is_error:
        return ValidationResult(
            success=False, error=f"Unexpected response: HTTP {response.status_code}"
        )
    return ValidationResult(success=True)
