"""HTTP fetcher."""

from __future__ import annotations

from typing import Optional

import httpx

from wtd.config import settings
from wtd.errors import HttpError, NetworkError
from wtd.logging import get_logger
from wtd.scraper.models import RawPage

logger = get_logger(__name__)


def _default_headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent}


def fetch_url(
    url: str,
    *,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Exactly one GET request is made; there is no retry.

    Args:
        url: Absolute ``http(s)`` URL.
        timeout: Seconds before giving up.  Defaults to
            ``settings.request_timeout``.
        client: Optional pre-built ``httpx.Client`` (its own timeout and
            headers then apply).

    Raises:
        NetworkError: The URL is invalid, the host is unreachable, or the
            request timed out.
        HttpError: The server returned a 4xx/5xx status code.
    """
    effective_timeout = settings.request_timeout if timeout is None else timeout
    logger.debug("fetching_page", url=url, timeout=effective_timeout)

    try:
        if client is not None:
            response = client.get(url)
        else:
            with httpx.Client(
                headers=_default_headers(),
                timeout=effective_timeout,
                follow_redirects=True,
            ) as own_client:
                response = own_client.get(url)
    except httpx.TimeoutException as exc:
        raise NetworkError(f"Timed out after {effective_timeout}s fetching {url}") from exc
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise NetworkError(f"Unable to reach {url}: {exc}") from exc

    if response.is_error:
        raise HttpError(url, response.status_code)

    logger.info(
        "page_fetched",
        url=url,
        status=response.status_code,
        size=len(response.content),
    )
    return RawPage(
        url=url,
        content=response.content,
        status_code=response.status_code,
        encoding=response.charset_encoding,
    )
