"""FastAPI application serving the current USD-BRL quote."""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from functools import partial
from typing import Annotated, Final

import aiohttp
import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..shared.bounded import Expired, run_bounded
from ..storage.models import Quote
from ..storage.quote_storage import persist_quote
from .settings import ServerSettings, server_settings
from .upstream import fetch_upstream_quote

QUOTE_ROUTE: Final[str] = "/cotacao"

ERROR_ROUTE_NOT_FOUND: Final[str] = "route_not_found"
ERROR_UPSTREAM_UNAVAILABLE: Final[str] = "upstream_unavailable"
ERROR_PERSISTENCE_FAILURE: Final[str] = "persistence_failure"
ERROR_INTERNAL_ERROR: Final[str] = "internal_error"

QuoteFetcher = Callable[[], Awaitable[Quote]]
QuotePersister = Callable[[Quote], Awaitable[int]]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Share one outbound HTTP session across all requests."""
    async with aiohttp.ClientSession() as session:
        app.state.http_session = session
        yield


def get_settings() -> ServerSettings:
    return server_settings


def get_http_session(request: Request) -> aiohttp.ClientSession:
    return request.app.state.http_session


def get_quote_fetcher(
    session: Annotated[aiohttp.ClientSession, Depends(get_http_session)],
    settings: Annotated[ServerSettings, Depends(get_settings)],
) -> QuoteFetcher:
    """
    Dependency function to provide the upstream fetch operation.

    Returns:
        QuoteFetcher: Zero-argument coroutine function fetching one quote
    """
    return partial(
        fetch_upstream_quote, session, settings.upstream_url, settings.upstream_pair_key
    )


def get_quote_persister() -> QuotePersister:
    """
    Dependency function to provide the persistence operation.

    Returns:
        QuotePersister: Coroutine function storing one quote
    """
    return persist_quote


def log_expired(error_code: str, outcome: Expired) -> None:
    message = f"{error_code}: {outcome.operation} {outcome.reason}"
    if outcome.detail:
        message += f" ({outcome.detail})"
    logger.error(message)


app = FastAPI(
    title="Quote Relay Server",
    description="Fetches, stores and serves the current USD-BRL quote",
    version="1.0.0",
    lifespan=lifespan,
    redirect_slashes=False,
)


@app.get(QUOTE_ROUTE)
async def get_currency_quote(
    settings: Annotated[ServerSettings, Depends(get_settings)],
    fetch_quote: Annotated[QuoteFetcher, Depends(get_quote_fetcher)],
    store_quote: Annotated[QuotePersister, Depends(get_quote_persister)],
) -> Response:
    """
    Fetch the current quote, store it, and return it.

    The fetch and the store each run under their own deadline, one after
    the other. The quote is only returned once it has been stored.

    Returns:
        Response: 200 with the quote as JSON, or 500 with an empty body
    """
    fetched = await run_bounded(
        fetch_quote, settings.fetch_timeout, operation="upstream fetch"
    )
    if isinstance(fetched, Expired):
        log_expired(ERROR_UPSTREAM_UNAVAILABLE, fetched)
        return Response(status_code=500)

    quote = fetched.value
    stored = await run_bounded(
        partial(store_quote, quote), settings.persist_timeout, operation="quote persist"
    )
    if isinstance(stored, Expired):
        log_expired(ERROR_PERSISTENCE_FAILURE, stored)
        return Response(status_code=500)

    logger.info(f"Serving {quote.pair} quote {stored.value}")
    return JSONResponse(status_code=200, content=quote.to_wire())


@app.exception_handler(404)
async def not_found_handler(request: Request, _: Exception) -> Response:
    """Handle unknown routes with an empty 404."""
    logger.info(f"{ERROR_ROUTE_NOT_FOUND}: {request.method} {request.url.path}")
    return Response(status_code=404)


@app.exception_handler(500)
async def internal_error_handler(_: Request, exc: Exception) -> Response:
    """Handle internal server errors without leaking details."""
    logger.error(f"{ERROR_INTERNAL_ERROR}: {exc}", exc_info=exc)
    return Response(status_code=500)


async def main() -> None:
    """Main entry point for the quote server."""
    config = uvicorn.Config(
        app,
        host=server_settings.server_host,
        port=server_settings.server_port,
        log_level=server_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
