"""Endpoint discovery: extraction, bundle sources, scanning and reduction.

The browser-driving state machine lives in ``discovery.machine`` and is not
imported here, so the pure parts load without browser-use.
"""

from .extractor import extract_endpoints, extract_minimal_form, extract_rich_form
from .models import EndpointRecord, ResultSet, ScanReport, ScrapeStage
from .reducer import reduce_endpoints
from .scanner import scan_bundles, select_bundle_urls
from .sources import fetch_bundle_urls, harvest_chunk_source, parse_asset_manifest

__all__ = [
    "EndpointRecord",
    "ResultSet",
    "ScanReport",
    "ScrapeStage",
    "extract_endpoints",
    "extract_minimal_form",
    "extract_rich_form",
    "fetch_bundle_urls",
    "harvest_chunk_source",
    "parse_asset_manifest",
    "reduce_endpoints",
    "scan_bundles",
    "select_bundle_urls",
]
