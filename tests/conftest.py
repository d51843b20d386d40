"""
Shared fixtures for the Streamline client tests.
"""

import aiohttp
import pytest
import pytest_asyncio

from helpers import FakeBroker
from streamline.core.config import StreamlineOptions


@pytest.fixture
def options():
    """Valid options for constructing managers without a live server."""
    return StreamlineOptions(bootstrap_servers="localhost:9092")


@pytest_asyncio.fixture
async def broker():
    """Start a fake broker for the duration of a test."""
    fake = FakeBroker()
    await fake.server.start_server()
    yield fake
    await fake.server.close()


@pytest_asyncio.fixture
async def session(broker):
    """Client session bound to the fake broker's base URL."""
    client_session = aiohttp.ClientSession(base_url=broker.base_url)
    yield client_session
    await client_session.close()
