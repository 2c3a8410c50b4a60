"""
Browser session management for the emulation tools.
A BrowserSession owns one Playwright browser, tracks its open pages and
the page selected for single-page tools, and records the emulation
settings that were last applied successfully.
"""

from __future__ import annotations

import asyncio

from playwright import async_api

from page_emulation.browser import page_control
from page_emulation.config import EmulationSettings, get_settings
from page_emulation.models.emulation import EmulationState
from page_emulation.utils import logger

log = logger.create_logger("BrowserSession")

BLANK_URL = "about:blank"


class BrowserSession:
    """
    Manages the browser, its pages, and the session's emulation state.
    """

    def __init__(
        self,
        settings: EmulationSettings | None = None,
        controller: page_control.PageController | None = None,
    ) -> None:
        """Initialise a session with no browser and unset emulation state."""
        self.settings = settings or get_settings()
        self.controller = controller or page_control.PageController()

        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None

        self._pages: list[async_api.Page] = []
        self._selected_page: async_api.Page | None = None
        self._emulation_state = EmulationState()

        # Held by each tool call so batches never interleave on the pages.
        self.tool_lock = asyncio.Lock()

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self) -> None:
        """Launch Chromium with a single blank page."""
        await self.close()

        pw = await async_api.async_playwright().start()
        self._playwright = pw

        launch_kwargs: dict[str, object] = {
            "headless": self.settings.headless,
            "args": ["--no-first-run", "--no-default-browser-check"],
        }
        channel = self.settings.browser_channel
        log.info("Launching browser", {"channel": channel or "chromium", "headless": self.settings.headless})

        if channel:
            try:
                br = await pw.chromium.launch(channel=channel, **launch_kwargs)  # type: ignore[arg-type]
            except Exception as exc:
                log.info("Browser channel not available, falling back to bundled Chromium", {"error": str(exc)[:100]})
                br = await pw.chromium.launch(**launch_kwargs)  # type: ignore[arg-type]
        else:
            br = await pw.chromium.launch(**launch_kwargs)  # type: ignore[arg-type]
        self._browser = br

        # Leave viewport unset so emulation overrides start from the real window size.
        self._context = await br.new_context(no_viewport=True)
        page = await self._context.new_page()
        self._pages = [page]
        self._selected_page = page
        log.success("Browser launched")

    async def close(self) -> None:
        """Close the browser and clean up all resources."""
        await self.controller.detach_all()
        self._pages = []
        self._selected_page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

        self._emulation_state = EmulationState()

    # ==========================================================================
    # Pages
    # ==========================================================================

    async def create_pages_snapshot(self) -> list[async_api.Page]:
        """Re-read the open pages from the browser and return them.

        Pages opened by the site (popups, ``target=_blank`` links) are
        picked up here; pages that have closed are dropped.
        """
        pages: list[async_api.Page] = []
        if self._browser:
            for context in self._browser.contexts:
                pages.extend(p for p in context.pages if not p.is_closed())
        self._pages = pages

        if self._selected_page is not None and self._selected_page not in pages:
            self._selected_page = None
        if self._selected_page is None and pages:
            self._selected_page = pages[0]
            log.debug("Selected page was closed, selecting first open page", {"url": pages[0].url})
        return list(pages)

    def get_pages(self) -> list[async_api.Page]:
        """Return the pages captured by the last snapshot."""
        return list(self._pages)

    def get_selected_page(self) -> async_api.Page | None:
        """Return the page single-page tools act on, if it is still open."""
        page = self._selected_page
        if page is None or page.is_closed():
            return None
        return page

    def select_page(self, index: int) -> async_api.Page:
        """Select the page at *index* in the last snapshot."""
        if not 0 <= index < len(self._pages):
            raise IndexError(f"No page at index {index}; {len(self._pages)} page(s) open")
        self._selected_page = self._pages[index]
        log.info("Page selected", {"index": index, "url": self._selected_page.url})
        return self._selected_page

    async def new_page(self, url: str | None = None) -> async_api.Page:
        """Open a new page, optionally navigating it, and select it."""
        if not self._context:
            raise RuntimeError("No browser session active")
        page = await self._context.new_page()
        if url:
            await page.goto(url, wait_until="domcontentloaded")
        self._pages.append(page)
        self._selected_page = page
        log.info("Opened page", {"url": page.url, "pages": len(self._pages)})
        return page

    # ==========================================================================
    # Emulation State
    # ==========================================================================

    def get_emulation_state(self) -> EmulationState:
        """Return a copy of the last successfully applied emulation settings."""
        return self._emulation_state.model_copy()

    def record_session_state(
        self,
        *,
        network: str | None = None,
        cpu: float | None = None,
        device: str | None = None,
        clear_network: bool = False,
        clear_device: bool = False,
    ) -> EmulationState:
        """Write new emulation settings into the session state.

        Only the provided kinds change; ``clear_*`` flags reset a kind
        to its disabled value.
        """
        update: dict[str, object] = {}
        if clear_network:
            update["network"] = None
        elif network is not None:
            update["network"] = network
        if cpu is not None:
            update["cpu_throttling_rate"] = cpu
        if clear_device:
            update["device"] = None
        elif device is not None:
            update["device"] = device

        self._emulation_state = self._emulation_state.model_copy(update=update)
        log.debug("Emulation state updated", self._emulation_state.model_dump())
        return self.get_emulation_state()

    def set_network_conditions(self, name: str | None) -> None:
        """Record the active network profile; ``None`` means disabled."""
        self.record_session_state(network=name, clear_network=name is None)

    def set_cpu_throttling_rate(self, rate: float) -> None:
        """Record the active CPU slowdown factor."""
        self.record_session_state(cpu=rate)

    def set_device_emulation(self, name: str | None) -> None:
        """Record the active device; ``None`` means desktop mode."""
        self.record_session_state(device=name, clear_device=name is None)
