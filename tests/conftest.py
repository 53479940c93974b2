"""Pytest configuration and fixtures for graphql-endpoint-scraper tests."""

from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: End-to-end tests requiring a real browser and network")
    config.addinivalue_line("markers", "integration: Tests wiring several components against a mocked browser session")
    config.addinivalue_line("markers", "slow: Tests that take longer to run")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@dataclass
class MockCDPSession:
    """Mock CDP session for testing."""

    session_id: str = "test-session-123"


@pytest.fixture
def mock_browser_session() -> MagicMock:
    """Create a mock browser session with Page/Runtime/Browser/Emulation domains."""
    session = MagicMock()
    session.cdp_client = MagicMock()
    session.get_or_create_cdp_session = AsyncMock(return_value=MockCDPSession())

    session.cdp_client.send = MagicMock()
    session.cdp_client.send.Page = MagicMock()
    session.cdp_client.send.Page.enable = AsyncMock()
    session.cdp_client.send.Page.navigate = AsyncMock(return_value={"frameId": "frame-1"})
    session.cdp_client.send.Page.addScriptToEvaluateOnNewDocument = AsyncMock(return_value={"identifier": "1"})

    session.cdp_client.send.Runtime = MagicMock()
    session.cdp_client.send.Runtime.enable = AsyncMock()
    session.cdp_client.send.Runtime.evaluate = AsyncMock(return_value={"result": {"value": True}})

    session.cdp_client.send.Browser = MagicMock()
    session.cdp_client.send.Browser.getVersion = AsyncMock(
        return_value={"userAgent": "Mozilla/5.0 (X11; Linux x86_64) HeadlessChrome/140.0.0.0 Safari/537.36"}
    )
    session.cdp_client.send.Emulation = MagicMock()
    session.cdp_client.send.Emulation.setUserAgentOverride = AsyncMock()

    session.start = AsyncMock()
    session.stop = AsyncMock()
    return session


@pytest.fixture
def page(mock_browser_session):
    """PageHandle bound to the mock browser session."""
    from graphql_endpoint_scraper.session import PageHandle

    return PageHandle(browser_session=mock_browser_session, cdp_session=MockCDPSession())
