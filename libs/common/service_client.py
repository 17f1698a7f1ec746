"""Async HTTP helper for calls to collaborators outside the core transaction.

CRM sync and notifications run after a booking or progression change has
already been committed. Their failures must never undo that change, so
``best_effort_request`` logs and swallows transport errors and non-2xx
responses instead of raising.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


async def best_effort_request(
    *,
    method: str,
    url: str,
    purpose: str,
    json: Any = None,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: Optional[float] = None,
) -> Optional[httpx.Response]:
    """Make an HTTP call whose failure is logged, not raised.

    Args:
        method: HTTP method.
        url: Absolute URL of the collaborator endpoint.
        purpose: Short label used in log lines (e.g. "crm.sync_booking").
        json: Optional JSON body.
        params: Optional query parameters.
        headers: Extra headers; ``X-Request-ID`` is added when known.
        timeout: Seconds; defaults to ``INTEGRATION_TIMEOUT_SECONDS``.

    Returns:
        The response on a 2xx status, otherwise ``None``.
    """
    settings = get_settings()
    request_headers = dict(headers or {})
    request_id = get_request_id()
    if request_id:
        request_headers["X-Request-ID"] = request_id

    try:
        async with httpx.AsyncClient(
            timeout=timeout or settings.INTEGRATION_TIMEOUT_SECONDS
        ) as client:
            response = await client.request(
                method,
                url,
                json=json,
                params=params,
                headers=request_headers,
            )
    except httpx.HTTPError as exc:
        logger.warning("%s failed: %s", purpose, exc)
        return None

    if response.is_error:
        logger.warning(
            "%s returned %d: %s", purpose, response.status_code, response.text[:200]
        )
        return None
    return response
