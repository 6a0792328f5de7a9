"""
Client for the upstream currency quote provider.
"""

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..shared.errors import UpstreamUnavailable
from ..storage.models import Quote

logger = logging.getLogger(__name__)


def parse_upstream_payload(data: Any, pair_key: str) -> Quote:
    """
    Extract the quote nested under ``pair_key`` in the provider's payload.

    Raises:
        UpstreamUnavailable: If the payload does not carry a valid quote
    """
    if not isinstance(data, dict) or pair_key not in data:
        raise UpstreamUnavailable(f"Provider payload has no '{pair_key}' quote")

    try:
        return Quote.model_validate(data[pair_key])
    except ValidationError as e:
        raise UpstreamUnavailable(f"Invalid '{pair_key}' quote: {e}") from e


async def fetch_upstream_quote(
    session: aiohttp.ClientSession, url: str, pair_key: str
) -> Quote:
    """
    Fetch and parse the current quote from the provider.

    Raises:
        UpstreamUnavailable: On network errors, non-2xx replies or bad JSON
    """
    logger.info("Requesting currency quote...")

    try:
        async with session.get(url) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
    except (aiohttp.ClientError, ValueError) as e:
        raise UpstreamUnavailable(f"Error fetching quote from {url}: {e}") from e

    quote = parse_upstream_payload(data, pair_key)
    logger.info(f"Received {quote.pair} quote, bid {quote.bid}")
    return quote
