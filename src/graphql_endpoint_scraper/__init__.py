"""Scrape GraphQL operation ids from a web client's JavaScript bundles."""

from .config import settings
from .discovery import EndpointRecord, ResultSet, extract_endpoints, reduce_endpoints
from .exceptions import BrowserError, BrowserLaunchError, NavigationError, ScraperError

__all__ = [
    "settings",
    "EndpointRecord",
    "ResultSet",
    "extract_endpoints",
    "reduce_endpoints",
    "ScraperError",
    "BrowserError",
    "BrowserLaunchError",
    "NavigationError",
]
