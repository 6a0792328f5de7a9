"""
Test configuration for the quote relay tests.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path before importing our modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import our modules after path setup
from quote_relay.storage.models import Quote  # noqa: E402
from quote_relay.storage.quote_storage import QuoteStorage  # noqa: E402


@pytest.fixture
def quote_payload():
    """Provide the quote object as the upstream provider nests it."""
    return {
        "code": "USD",
        "codein": "BRL",
        "name": "Dólar Americano/Real Brasileiro",
        "high": "5.2740",
        "low": "5.2185",
        "varBid": "0.0312",
        "pctChange": "0.59",
        "bid": "5.2500",
        "ask": "5.2510",
        "timestamp": "1718035199",
        "create_date": "2024-06-10 12:59:59",
    }


@pytest.fixture
def upstream_payload(quote_payload):
    """Provide a full upstream provider response body."""
    return {"USDBRL": quote_payload}


@pytest.fixture
def sample_quote(quote_payload):
    return Quote.model_validate(quote_payload)


@pytest.fixture
def database_path(tmp_path):
    return str(tmp_path / "database.db")


@pytest_asyncio.fixture
async def temp_storage(database_path):
    """Create a temporary storage instance for testing."""
    storage = QuoteStorage(database_path)
    await storage.initialize()
    try:
        yield storage
    finally:
        await storage.close()
