"""Where bundle source comes from: the service worker manifest and live chunks.

Both sources are best effort. A missing manifest or an empty chunk registry
contributes nothing to the run; neither is an error.
"""

import logging
import re
from typing import TYPE_CHECKING

from ..exceptions import BrowserError
from .scripts import build_chunk_source_js

if TYPE_CHECKING:
    from ..session import PageHandle

logger = logging.getLogger(__name__)

ASSET_MANIFEST_PATTERN = re.compile(r"self\.ASSETS=\[([\s\S]*?)\]")
_QUOTED = re.compile(r'"([^"]+)"')

SCRIPT_SUFFIX = ".js"


def parse_asset_manifest(text: str) -> list[str]:
    """Script URLs listed in a service worker's ``self.ASSETS=[…]`` literal.

    Order is preserved. Returns an empty list when the marker is absent.
    """
    match = ASSET_MANIFEST_PATTERN.search(text or "")
    if not match:
        return []
    return [asset for asset in _QUOTED.findall(match.group(1)) if asset.endswith(SCRIPT_SUFFIX)]


async def fetch_bundle_urls(page: "PageHandle", service_worker_url: str, timeout: float | None = None) -> list[str]:
    """Fetch the service worker from inside the page and list its script assets."""
    try:
        text = await page.fetch_text(service_worker_url, timeout=timeout)
    except (BrowserError, TimeoutError) as e:
        logger.warning(f"Service worker fetch failed, no extra bundles: {e}")
        return []

    urls = parse_asset_manifest(text)
    if not urls:
        logger.warning(f"No asset manifest found in {service_worker_url}")
    return urls


async def harvest_chunk_source(page: "PageHandle", registry: str, timeout: float | None = None) -> str:
    """Source text of every module factory already loaded into ``window[registry]``."""
    try:
        source = await page.evaluate(build_chunk_source_js(registry), timeout=timeout)
    except (BrowserError, TimeoutError) as e:
        logger.warning(f"Chunk registry {registry} could not be read: {e}")
        return ""
    return source if isinstance(source, str) else ""
