"""
Storage interface for currency quotes using async SQLite.
"""

import logging
from pathlib import Path
from types import TracebackType
from typing import Final, Self

import aiosqlite

from ..shared.errors import PersistenceFailure
from .models import Quote
from .settings import storage_settings

IN_MEMORY_DATABASE: Final[str] = ":memory:"

QUOTE_COLUMNS: Final[tuple[str, ...]] = (
    "code",
    "codein",
    "name",
    "high",
    "low",
    "varBid",
    "pctChange",
    "bid",
    "ask",
    "timestamp",
    "create_date",
)

logger = logging.getLogger(__name__)


class QuoteStorage:
    """Async SQLite-based storage for currency quotes."""

    def __init__(self, database_path: str | None = None):
        """Initialize the quote storage."""
        self.database_path = database_path or storage_settings.database_path
        self._connection: aiosqlite.Connection | None = None

    async def __aenter__(self) -> Self:
        try:
            await self.initialize()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Create the database file if missing, connect and create tables."""
        self._ensure_database_file()
        await self._get_connection()
        await self._create_tables()

    def _ensure_database_file(self) -> None:
        if self.database_path == IN_MEMORY_DATABASE:
            return

        path = Path(self.database_path)
        if not path.exists():
            logger.info(f"Creating '{path}' file...")
            path.touch()
            logger.info(f"The '{path}' file has been created")

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create async database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.database_path)
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def _create_tables(self) -> None:
        """Create the currency_quote table if it doesn't exist."""
        connection = await self._get_connection()

        # TEXT affinity everywhere: NUMERIC columns would let SQLite
        # rewrite "5.2500" as 5.25.
        await connection.execute("""
            CREATE TABLE IF NOT EXISTS currency_quote (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                code TEXT,
                codein TEXT,
                name TEXT,
                high TEXT,
                low TEXT,
                varBid TEXT,
                pctChange TEXT,
                bid TEXT,
                ask TEXT,
                timestamp TEXT,
                create_date TEXT
            )
        """)

        await connection.commit()

    async def save_quote(self, quote: Quote) -> int:
        """
        Insert one quote row.

        Returns:
            The auto-incremented id of the new row
        """
        connection = await self._get_connection()
        row = quote.to_wire()

        async with connection.execute(
            f"""
            INSERT INTO currency_quote ({", ".join(QUOTE_COLUMNS)})
            VALUES ({", ".join("?" for _ in QUOTE_COLUMNS)})
        """,
            tuple(row[column] for column in QUOTE_COLUMNS),
        ) as cursor:
            quote_id = cursor.lastrowid

        await connection.commit()
        logger.info(f"Saved {quote.pair} quote with id {quote_id}")
        return quote_id

    async def get_latest_quote(self) -> Quote | None:
        """
        Get the most recently inserted quote, or None if the table is empty.

        Inspection helper, not used on the request path.
        """
        connection = await self._get_connection()

        async with connection.execute(
            f"""
            SELECT {", ".join(QUOTE_COLUMNS)}
            FROM currency_quote
            ORDER BY id DESC
            LIMIT 1
        """
        ) as cursor:
            row = await cursor.fetchone()

        if row:
            return Quote.model_validate(dict(row))
        return None

    async def count_quotes(self) -> int:
        """Count stored quotes. Inspection helper, not used on the request path."""
        connection = await self._get_connection()

        async with connection.execute("SELECT COUNT(*) FROM currency_quote") as cursor:
            (count,) = await cursor.fetchone()

        return count

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None


async def persist_quote(quote: Quote, database_path: str | None = None) -> int:
    """
    Store a quote using a connection scoped to this call.

    Raises:
        PersistenceFailure: If the file, schema or insert step fails
    """
    logger.info("Storing currency quote in database...")
    try:
        async with QuoteStorage(database_path) as storage:
            return await storage.save_quote(quote)
    except (aiosqlite.Error, OSError) as e:
        raise PersistenceFailure(f"Could not store quote: {e}") from e
