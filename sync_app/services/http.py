"""Single-shot HTTP calls to external services."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from sync_app.exceptions import UpstreamServiceError


logger = logging.getLogger(__name__)


async def post_once(
    url: str,
    *,
    service: str,
    timeout: float,
    http_client: httpx.AsyncClient | None = None,
    error_status: int = 500,
    **request_kwargs: Any,
) -> httpx.Response:
    """
    POST once and return the successful response.

    There is no retry. Non-success statuses and transport failures raise
    ``UpstreamServiceError``; for statuses the raw response body is kept as
    the error detail.
    """
    try:
        if http_client is not None:
            response = await http_client.post(url, timeout=timeout, **request_kwargs)
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, **request_kwargs)
    except httpx.HTTPError as err:
        logger.error("%s request failed: %s", service, err)
        raise UpstreamServiceError(f"{service} request failed", detail=str(err), status_code=error_status) from err

    if not response.is_success:
        body = response.text
        logger.error("[%s error] HTTP %s: %s", service, response.status_code, body)
        raise UpstreamServiceError(f"{service} API error", detail=body, status_code=error_status)

    return response
