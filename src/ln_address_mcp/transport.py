"""
HTTP Transport

Builds the httpx client used for LNURL requests and performs the single,
non-retried GET each pipeline step is allowed.
"""

import asyncio
import logging
from typing import Any

import httpx

from .config import HttpSettings

logger = logging.getLogger("ln-address-mcp.transport")


def build_http_client(
    settings: HttpSettings | None = None, **httpx_kwargs: Any
) -> httpx.AsyncClient:
    """
    Create an AsyncClient with a finite timeout.

    Args:
        settings: HTTP settings. Defaults to HttpSettings()
        **httpx_kwargs: Additional kwargs passed to httpx.AsyncClient
    """
    settings = settings or HttpSettings()
    return httpx.AsyncClient(
        timeout=settings.timeout_seconds,
        follow_redirects=settings.follow_redirects,
        headers={
            "Accept": "application/json",
            "User-Agent": settings.user_agent,
        },
        **httpx_kwargs,
    )


def _request_deadline(http_client: httpx.AsyncClient) -> float | None:
    """Longest of the client's per-phase timeouts, used as a whole-request cap."""
    timeout = http_client.timeout
    limits = [
        t
        for t in (timeout.connect, timeout.read, timeout.write, timeout.pool)
        if t is not None
    ]
    return max(limits) if limits else None


async def get_once(
    http_client: httpx.AsyncClient, url: str, error_cls: type
) -> httpx.Response:
    """
    Issue one GET and map every failure onto error_cls.

    error_cls is called as error_cls(url, status_code=...) for non-2xx
    responses and error_cls(url, cause=...) for transport failures.
    httpx timeouts bound each connect or read step; the whole request,
    body included, is also capped at the same duration.
    asyncio.CancelledError is not intercepted.
    """
    try:
        response = await asyncio.wait_for(
            http_client.get(url), timeout=_request_deadline(http_client)
        )
    except asyncio.TimeoutError as e:
        logger.warning(f"Request to {url} exceeded its deadline")
        raise error_cls(url, cause="timeout") from e
    except httpx.TimeoutException as e:
        logger.warning(f"Timeout fetching {url}")
        raise error_cls(url, cause="timeout") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Transport error fetching {url}: {e}")
        raise error_cls(url, cause=str(e) or type(e).__name__) from e
    except UnicodeError as e:
        # IDNA failures surface while httpx builds the request
        logger.warning(f"Cannot encode host of {url}: {e}")
        raise error_cls(url, cause=f"invalid host: {e}") from e

    if not response.is_success:
        logger.warning(f"{url} returned HTTP {response.status_code}")
        raise error_cls(url, status_code=response.status_code)

    return response
