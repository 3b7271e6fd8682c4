import asyncio
import logging
from typing import Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
FEED_ACCEPT = "application/rss+xml,application/xml;q=0.9,*/*;q=0.8"


def default_headers(accept: str = HTML_ACCEPT) -> dict[str, str]:
    return {"User-Agent": settings.user_agent, "Accept": accept}


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    headers: Optional[dict[str, str]] = None,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> Optional[httpx.Response]:
    """
    GET *url*, retrying on network errors and non-success statuses.

    Waits ``retry_delay * attempt`` seconds before each retry. Returns None
    once every attempt came back with a non-success status; a network error
    on the last attempt is raised.
    """
    retries = settings.max_retries if max_retries is None else max_retries
    delay = settings.retry_delay if retry_delay is None else retry_delay
    attempts = retries + 1

    for attempt in range(attempts):
        if attempt:
            await asyncio.sleep(delay * attempt)

        try:
            response = await client.get(url, headers=headers, follow_redirects=True)
        except httpx.HTTPError as exc:
            if attempt == attempts - 1:
                raise
            logger.warning(
                "Request to %s failed (%s), attempt %d/%d",
                url, type(exc).__name__, attempt + 1, attempts,
            )
            continue

        if response.is_success:
            return response
        logger.warning(
            "Request to %s returned %d, attempt %d/%d",
            url, response.status_code, attempt + 1, attempts,
        )

    return None
