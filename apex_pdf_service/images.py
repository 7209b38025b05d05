"""
Remote image inlining for the report.

Competitor logos and ad creatives are fetched once per request and embedded
as base64 data URLs, so the PDF render never waits on a third-party host.
Fetch failures degrade to a missing image; they never fail the report.
"""

import asyncio
import base64
import logging
from typing import List, Optional

import httpx

from .config import get_settings
from .models import Competitor, ResolvedCompetitor

logger = logging.getLogger(__name__)


async def image_url_to_data_url(
    client: httpx.AsyncClient,
    url: Optional[str],
    timeout: Optional[float] = None,
) -> Optional[str]:
    """
    Fetch an image and convert it to a base64 data URL.

    Args:
        client: Shared HTTP client
        url: Image URL; None or non-http values are skipped
        timeout: Deadline in seconds for the whole fetch, body included

    Returns:
        "data:<content-type>;base64,<payload>", or None when the URL is
        missing, unreachable, non-2xx, too slow, or not served as image/*
    """
    if not url:
        logger.debug("No image URL provided")
        return None
    if not url.startswith("http"):
        logger.warning(f"Invalid image URL: {url!r}")
        return None

    try:
        response = await asyncio.wait_for(client.get(url), timeout)
        response.raise_for_status()
    except asyncio.TimeoutError:
        logger.warning(f"Image fetch exceeded {timeout}s: {url}")
        return None
    except httpx.HTTPStatusError as e:
        logger.warning(f"Image fetch returned {e.response.status_code}: {url}")
        return None
    except httpx.TimeoutException:
        logger.warning(f"Image fetch timed out: {url}")
        return None
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Could not fetch image at {url}: {e}")
        return None

    mime_type = response.headers.get("content-type", "")
    if not mime_type.startswith("image/"):
        logger.warning(f"URL did not point to a valid image ({mime_type or 'no content-type'}): {url}")
        return None

    payload = base64.b64encode(response.content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


async def resolve_competitor_images(
    competitors: List[Competitor],
    timeout: Optional[float] = None,
) -> List[ResolvedCompetitor]:
    """
    Inline logo and creative images for every competitor.

    All fetches run concurrently on one client; the result keeps the input
    order and is only returned once every fetch has settled.

    Args:
        competitors: Competitors from the request
        timeout: Total deadline per fetch in seconds (defaults to IMAGE_FETCH_TIMEOUT)

    Returns:
        New ResolvedCompetitor objects; the input models are not modified
    """
    if timeout is None:
        timeout = get_settings().image_fetch_timeout

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        urls = []
        for competitor in competitors:
            urls.extend([competitor.logoUrl, competitor.creativeUrl])
        data_urls = await asyncio.gather(
            *(image_url_to_data_url(client, url, timeout) for url in urls)
        )

    resolved = []
    for index, competitor in enumerate(competitors):
        resolved.append(
            ResolvedCompetitor(
                **competitor.model_dump(),
                logoDataUrl=data_urls[2 * index],
                creativeDataUrl=data_urls[2 * index + 1],
            )
        )

    inlined = sum(1 for data_url in data_urls if data_url)
    logger.info(f"Inlined {inlined}/{len(data_urls)} competitor images")
    return resolved
