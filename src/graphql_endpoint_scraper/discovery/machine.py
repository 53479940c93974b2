"""Scrape state machine: launch, navigate, harvest, scan, reduce, close."""

import logging
import uuid
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Optional

from ..config import AppSettings, BrowserSettings
from ..observability.logging import bind_run_context, bind_stage, clear_run_context, get_run_logger
from ..session import open_browser_session
from .extractor import extract_endpoints
from .models import EndpointRecord, ResultSet, ScanReport, ScrapeStage
from .reducer import reduce_endpoints
from .scanner import scan_bundles, select_bundle_urls
from .scripts import build_registry_ready_js
from .sources import fetch_bundle_urls, harvest_chunk_source

if TYPE_CHECKING:
    from ..session import PageHandle

logger = logging.getLogger(__name__)

SessionFactory = Callable[[BrowserSettings], AbstractAsyncContextManager["PageHandle"]]
Narrator = Callable[[str], None]


class ScrapeMachine:
    """Runs one full scrape and returns the canonical ResultSet.

    Usage:
        machine = ScrapeMachine(settings, narrate=typer.echo)
        result = await machine.run()

    Launch and navigation failures propagate; everything after the page is
    up degrades to an empty contribution instead of aborting the run.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        session_factory: SessionFactory = open_browser_session,
        narrate: Optional[Narrator] = None,
    ):
        self.settings = app_settings
        self.session_factory = session_factory
        self.narrate = narrate
        self.stage = ScrapeStage.IDLE
        self.chunk_records: list[EndpointRecord] = []
        self.scan_report: ScanReport | None = None

    def _say(self, message: str) -> None:
        logger.info(message)
        if self.narrate:
            self.narrate(message)

    def _enter(self, stage: ScrapeStage) -> None:
        self.stage = stage
        bind_stage(stage.value)
        logger.debug(f"Stage: {stage.value}")

    async def run(self) -> ResultSet:
        """Execute the scrape. The browser session is released on every exit path."""
        bind_run_context(uuid.uuid4().hex[:12])
        run_logger = get_run_logger()
        scraper = self.settings.scraper
        run_logger.info("scrape_started", entry_url=scraper.entry_url)
        try:
            self._enter(ScrapeStage.LAUNCHING)
            self._say("Launching browser...")
            async with self.session_factory(self.settings.browser) as page:
                self._enter(ScrapeStage.READY)
                self._say(f"Navigating to {scraper.entry_url}...")
                await page.navigate(scraper.entry_url, timeout=scraper.navigation_timeout)
                if not await page.wait_for(build_registry_ready_js(scraper.chunk_registry), scraper.readiness_timeout):
                    logger.warning(f"Chunk registry still empty after {scraper.readiness_timeout:.0f}s, continuing")

                self._enter(ScrapeStage.HARVESTING)
                self.chunk_records = await self._harvest(page)
                bundle_urls = await self._discover(page)

                self._enter(ScrapeStage.SCANNING)
                self.scan_report = await self._scan(page, bundle_urls)

            self._enter(ScrapeStage.REDUCING)
            self._say("Processing...")
            result = reduce_endpoints([*self.chunk_records, *self.scan_report.records])
            self._say(f"  {result.count} unique ({result.with_features} with features)")
            run_logger.info(
                "scrape_completed",
                count=result.count,
                with_features=result.with_features,
                bundles_scanned=self.scan_report.scanned,
                bundles_failed=len(self.scan_report.failed),
            )
            return result
        except Exception as e:
            run_logger.error("scrape_failed", error=str(e))
            raise
        finally:
            self._enter(ScrapeStage.CLOSED)
            clear_run_context()

    async def _harvest(self, page: "PageHandle") -> list[EndpointRecord]:
        scraper = self.settings.scraper
        self._say("Extracting from webpack chunks...")
        source = await harvest_chunk_source(page, scraper.chunk_registry, timeout=scraper.fetch_timeout)
        records = extract_endpoints(source, scraper.minimal_form_window)
        self._say(f"  From chunks: {len(records)} endpoints")
        return records

    async def _discover(self, page: "PageHandle") -> list[str]:
        scraper = self.settings.scraper
        self._say("Fetching bundle list from service worker...")
        urls = await fetch_bundle_urls(page, scraper.service_worker_url, timeout=scraper.fetch_timeout)
        self._say(f"Found {len(urls)} JS bundles")
        return urls

    async def _scan(self, page: "PageHandle", bundle_urls: list[str]) -> ScanReport:
        scraper = self.settings.scraper
        key_bundles = select_bundle_urls(bundle_urls, scraper.bundle_keywords)
        self._say(f"Scanning {len(key_bundles)} bundles...")

        async def fetch(url: str) -> str:
            return await page.fetch_text(url, timeout=scraper.fetch_timeout)

        report = await scan_bundles(
            key_bundles,
            fetch,
            window=scraper.minimal_form_window,
            progress_interval=scraper.progress_interval,
            on_progress=lambda done, total: self._say(f"  Scanned {done}/{total}..."),
        )
        self._say(f"  From bundles: {len(report.records)} ({report.scanned} scanned)")
        return report
