"""Browser session handle for in-page evaluation and fetch.

Uses session-scoped CDP commands (``session_id``) rather than browser-use's
high-level actions, to bypass its watchdog system and avoid hangs. The Page
and Runtime domains are enabled on the CDP session before first use.

The session is owned by ``open_browser_session``: it is started once and
stopped exactly once, whatever happens inside the ``async with`` block.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from playwright_stealth import Stealth

from .config import BrowserSettings
from .discovery.scripts import DOCUMENT_READY_JS, build_fetch_text_js
from .exceptions import BrowserError, BrowserLaunchError, EvaluationError, NavigationError

if TYPE_CHECKING:
    from browser_use.browser.session import BrowserSession, CDPSession

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.25


@dataclass
class PageHandle:
    """The single page a scrape run works in."""

    browser_session: "BrowserSession"
    cdp_session: "CDPSession"

    @property
    def session_id(self) -> str:
        return self.cdp_session.session_id

    @property
    def send(self) -> Any:
        return self.browser_session.cdp_client.send

    async def evaluate(self, expression: str, *, await_promise: bool = False, timeout: float | None = None) -> Any:
        """Evaluate ``expression`` in the page and return its JSON value.

        Raises:
            EvaluationError: The expression threw inside the page.
            asyncio.TimeoutError: No reply within ``timeout`` seconds.
        """
        call = self.send.Runtime.evaluate(
            params={
                "expression": expression,
                "returnByValue": True,
                "awaitPromise": await_promise,
            },
            session_id=self.session_id,
        )
        result = await (asyncio.wait_for(call, timeout) if timeout else call)

        if result.get("exceptionDetails"):
            error = result["exceptionDetails"].get("text", "Unknown error")
            raise EvaluationError(f"Evaluation failed: {error}")

        return result.get("result", {}).get("value")

    async def fetch_text(self, url: str, timeout: float | None = None) -> str:
        """fetch() ``url`` from the page so origin, cookies and headers match a real load."""
        value = await self.evaluate(build_fetch_text_js(url, timeout), await_promise=True, timeout=timeout)
        if not isinstance(value, dict):
            raise BrowserError(f"Fetch of {url} returned no result")
        if not value.get("ok"):
            error = value.get("error") or f"HTTP {value.get('status', 0)}"
            raise BrowserError(f"Fetch of {url} failed: {error}")
        return value.get("body") or ""

    async def wait_for(self, expression: str, timeout: float, interval: float = POLL_INTERVAL) -> bool:
        """Poll ``expression`` until it is truthy. Returns False on timeout."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                if await self.evaluate(expression, timeout=max(deadline - loop.time(), interval)):
                    return True
            except (BrowserError, asyncio.TimeoutError) as e:
                # The execution context is torn down while a navigation commits
                logger.debug(f"wait_for({expression!r}): {e}")
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(interval)

    async def navigate(self, url: str, timeout: float) -> None:
        """Navigate to ``url`` and wait for DOMContentLoaded, within ``timeout`` seconds.

        Raises:
            NavigationError: The navigation failed or did not finish in time.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        try:
            nav_result = await asyncio.wait_for(
                self.send.Page.navigate(
                    params={"url": url, "transitionType": "address_bar"},
                    session_id=self.session_id,
                ),
                timeout,
            )
        except asyncio.TimeoutError as e:
            raise NavigationError(f"Navigation to {url} timed out after {timeout:.0f}s") from e
        except Exception as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

        if nav_result.get("errorText"):
            raise NavigationError(f"Navigation to {url} failed: {nav_result['errorText']}")

        if not await self.wait_for(DOCUMENT_READY_JS, max(deadline - loop.time(), 0.0)):
            raise NavigationError(f"{url} did not reach DOMContentLoaded within {timeout:.0f}s")


async def prepare_cdp_session(browser_session: "BrowserSession") -> "CDPSession":
    """Get the focused tab's CDP session with Page and Runtime enabled."""
    cdp_session = await browser_session.get_or_create_cdp_session()

    try:
        await browser_session.cdp_client.send.Page.enable(session_id=cdp_session.session_id)
        logger.debug(f"Enabled Page domain for session {cdp_session.session_id[-8:]}")
    except Exception as e:
        # May already be enabled by session manager
        logger.debug(f"Page.enable: {e}")

    try:
        await browser_session.cdp_client.send.Runtime.enable(session_id=cdp_session.session_id)
        logger.debug(f"Enabled Runtime domain for session {cdp_session.session_id[-8:]}")
    except Exception as e:
        logger.debug(f"Runtime.enable: {e}")

    return cdp_session


async def apply_stealth(page: PageHandle) -> None:
    """Register playwright-stealth's evasions on every new document and drop "Headless" from the UA.

    Must run before the first navigation; init scripts only apply to
    documents created after they are registered.
    """
    await page.send.Page.addScriptToEvaluateOnNewDocument(
        params={"source": Stealth().script_payload},
        session_id=page.session_id,
    )

    version = await page.send.Browser.getVersion()
    user_agent = version.get("userAgent", "")
    if "HeadlessChrome" in user_agent:
        await page.send.Emulation.setUserAgentOverride(
            params={"userAgent": user_agent.replace("HeadlessChrome", "Chrome")},
            session_id=page.session_id,
        )
    logger.debug("Stealth init script registered")


def build_browser_profile(browser_settings: BrowserSettings):
    from browser_use import BrowserProfile
    from browser_use.browser.profile import ProxySettings

    proxy = None
    if browser_settings.proxy_server:
        proxy = ProxySettings(server=browser_settings.proxy_server, bypass=browser_settings.proxy_bypass)
    profile = BrowserProfile(
        headless=browser_settings.headless,
        proxy=proxy,
        cdp_url=browser_settings.cdp_url,
    )
    if browser_settings.cdp_url:
        logger.info(f"Using external browser via CDP: {browser_settings.cdp_url}")
    return profile


@asynccontextmanager
async def open_browser_session(browser_settings: BrowserSettings) -> AsyncIterator[PageHandle]:
    """Start a browser session, yield its page, and always stop it.

    Raises:
        BrowserLaunchError: The browser could not be started or prepared.
    """
    from browser_use.browser.session import BrowserSession

    try:
        browser_session = BrowserSession(browser_profile=build_browser_profile(browser_settings))
    except Exception as e:
        raise BrowserLaunchError(f"Invalid browser configuration: {e}") from e

    try:
        try:
            await browser_session.start()
            page = PageHandle(browser_session=browser_session, cdp_session=await prepare_cdp_session(browser_session))
            if browser_settings.stealth:
                await apply_stealth(page)
        except Exception as e:
            raise BrowserLaunchError(f"Failed to start browser session: {e}") from e

        yield page
    finally:
        try:
            await browser_session.stop()
        except Exception as e:
            logger.warning(f"Failed to stop browser session cleanly: {e}")
