"""HTTP helpers shared by provider adapters.

Transport failures are converted into :class:`ProviderFetchError` here so
adapters never leak ``httpx`` exceptions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from ..core.logger import get_logger
from .exceptions import ProviderFetchError

logger = get_logger("search.http")

# Browser-like header set; lowers (but does not remove) the odds of anti-bot rejection.
BROWSER_HEADERS: Mapping[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}


async def http_get(
    url: str,
    *,
    provider: str,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout: float = 10.0,
    raise_for_status: bool = True,
) -> httpx.Response:
    """Perform a GET request.

    Args:
        url: Target URL
        provider: Provider name used in errors and logs
        params: Query string parameters
        headers: Request headers
        timeout: Request timeout in seconds
        raise_for_status: Raise ProviderFetchError on non-2xx responses

    Returns:
        The response (body already read)

    Raises:
        ProviderFetchError: On network failure, timeout or HTTP error status
    """
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=dict(headers or {}),
        ) as client:
            response = await client.get(url, params=dict(params or {}))
    except httpx.TimeoutException as exc:
        raise ProviderFetchError(
            f"{provider} request timed out after {timeout:.1f}s",
            provider=provider,
            original_error=exc,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderFetchError(
            f"{provider} request failed: {exc}",
            provider=provider,
            original_error=exc,
        ) from exc

    logger.debug("%s GET %s -> %d", provider, response.url, response.status_code)

    if raise_for_status and not response.is_success:
        raise ProviderFetchError(
            f"{provider} returned HTTP {response.status_code}",
            provider=provider,
            status_code=response.status_code,
        )
    return response
