"""Sequential fetch-and-extract over candidate bundle URLs."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

from .extractor import DEFAULT_MINIMAL_FORM_WINDOW, extract_endpoints
from .models import ScanReport

logger = logging.getLogger(__name__)

DEFAULT_BUNDLE_KEYWORDS = ("main", "vendor", "bundle.", "ondemand.")
DEFAULT_PROGRESS_INTERVAL = 50

FetchText = Callable[[str], Awaitable[str]]
ProgressCallback = Callable[[int, int], None]


def select_bundle_urls(urls: Iterable[str], keywords: Sequence[str] = DEFAULT_BUNDLE_KEYWORDS) -> list[str]:
    """Keep primary, vendor and on-demand bundles; locale and feature bundles rarely add anything."""
    return [url for url in urls if any(keyword in url for keyword in keywords)]


async def scan_bundles(
    urls: Sequence[str],
    fetch: FetchText,
    *,
    window: int = DEFAULT_MINIMAL_FORM_WINDOW,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    on_progress: ProgressCallback | None = None,
) -> ScanReport:
    """Fetch each URL in order and extract its descriptors.

    A URL whose fetch or extraction fails is recorded in ``failed`` and
    skipped; there is no retry and the scan never raises for a single bundle.

    Args:
        urls: Bundle URLs, scanned strictly one after another.
        fetch: Coroutine returning a URL's body.
        window: Gap bound for the minimal-form pattern.
        progress_interval: Call ``on_progress`` every N scanned bundles.
        on_progress: Receives ``(scanned, total)``.
    """
    report = ScanReport(total=len(urls))

    for url in urls:
        try:
            code = await fetch(url)
            records = extract_endpoints(code, window)
        except Exception as e:
            logger.debug(f"Skipping bundle {url}: {e}")
            report.failed.append(url)
            continue

        report.records.extend(records)
        report.scanned += 1
        if on_progress and progress_interval > 0 and report.scanned % progress_interval == 0:
            on_progress(report.scanned, report.total)

    logger.info(f"Scanned {report.scanned}/{report.total} bundles, {len(report.failed)} failed")
    return report
