"""
HTTP helpers shared by the discovery, monitoring and snapshot components.

Every remote call here has a bounded timeout. Failures of any kind surface
as ``EndpointUnavailableError`` so pollers can treat them as "no data this
round" with a single ``except`` clause.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from qubic_sync.types import EndpointUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
"""HTTP request timeout in seconds when the caller does not pick one."""


def _get(client: httpx.Client, url: str, timeout: float) -> httpx.Response:
    try:
        response = client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise EndpointUnavailableError(url, f"timed out after {timeout}s") from exc
    except httpx.HTTPStatusError as exc:
        raise EndpointUnavailableError(url, f"HTTP {exc.response.status_code}") from exc
    except httpx.RequestError as exc:
        raise EndpointUnavailableError(url, f"network error: {exc}") from exc
    return response


def fetch_json(client: httpx.Client, url: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """
    GET ``url`` and decode the body as JSON.

    A body truncated mid-stream (the node is restarting, a proxy cut the
    connection) fails to decode and is reported as malformed.

    Raises:
        EndpointUnavailableError: On timeout, transport error, non-2xx status
            or a body that is not JSON.
    """
    response = _get(client, url, timeout)
    try:
        return response.json()
    except ValueError as exc:
        raise EndpointUnavailableError(url, "response is not valid JSON", malformed=True) from exc


def fetch_text(client: httpx.Client, url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    GET ``url`` and return the decoded body.

    Raises:
        EndpointUnavailableError: On timeout, transport error or non-2xx status.
    """
    return _get(client, url, timeout).text


def probe_content_length(
    client: httpx.Client, url: str, timeout: float = DEFAULT_TIMEOUT
) -> int | None:
    """
    Ask the server how large the resource at ``url`` is without downloading it.

    Returns:
        The ``Content-Length`` in bytes, or None when the server does not say
        or cannot be reached.
    """
    try:
        response = client.head(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.debug("Content-length probe of %s failed: %s", url, exc)
        return None

    header = response.headers.get("content-length")
    if header is None or not header.strip().isdigit():
        return None
    return int(header.strip())
