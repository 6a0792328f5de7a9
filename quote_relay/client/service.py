"""
One-shot client that fetches the quote from the quote server and writes the bid to a file.
"""

import asyncio
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Final

import aiohttp
from pydantic import ValidationError

from ..shared.bounded import Expired, Ready, run_bounded
from ..shared.errors import DeadlineExceeded, SinkWriteFailure, UpstreamUnavailable
from .models import QuoteBid
from .settings import ClientSettings, client_settings

OUTPUT_TEMPLATE: Final[str] = "Dólar: {bid}"

logger = logging.getLogger(__name__)


async def request_quote(session: aiohttp.ClientSession, url: str) -> QuoteBid:
    """
    Request the current quote from the quote server.

    Raises:
        UpstreamUnavailable: On network errors, non-2xx replies or a body without a bid
    """
    logger.info("Requesting currency quote...")

    try:
        async with session.get(url) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
        return QuoteBid.model_validate(data)
    except (aiohttp.ClientError, ValidationError, ValueError) as e:
        raise UpstreamUnavailable(f"Error requesting quote from {url}: {e}") from e


def write_quote_file(path: str | Path, quote: QuoteBid) -> None:
    """
    Write the bid to ``path``, replacing any previous content.

    Raises:
        SinkWriteFailure: If the file cannot be written
    """
    logger.info("Storing currency quote in file...")
    try:
        Path(path).write_text(OUTPUT_TEMPLATE.format(bid=quote.bid), encoding="utf-8")
    except OSError as e:
        raise SinkWriteFailure(f"Could not write quote to {path}: {e}") from e
    logger.info("Currency quote storage completed")


async def relay_quote(settings: ClientSettings = client_settings) -> QuoteBid:
    """
    Fetch the quote within the request deadline and write it to the output file.

    Raises:
        DeadlineExceeded: If the server did not answer in time
        UpstreamUnavailable: If the server answered with an error or bad body
        SinkWriteFailure: If the output file cannot be written
    """
    async with aiohttp.ClientSession() as session:
        outcome = await run_bounded(
            partial(request_quote, session, settings.server_url),
            settings.request_timeout,
            operation="quote request",
        )

    match outcome:
        case Ready(value=quote):
            write_quote_file(settings.output_path, quote)
            return quote
        case Expired(deadline_exceeded=True, operation=operation, timeout=timeout):
            raise DeadlineExceeded(operation, timeout)
        case Expired(detail=detail):
            raise UpstreamUnavailable(detail or "Quote request failed")


async def main() -> None:
    """Main entry point for the quote client."""
    await relay_quote()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Quote client failed: {e}")
        sys.exit(1)
