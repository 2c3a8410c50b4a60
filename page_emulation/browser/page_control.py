"""
Page-level emulation primitives backed by the Chrome DevTools Protocol.

Playwright exposes viewport size at context creation only, so network
throttling, CPU slowdown, device metrics, touch and user-agent overrides
are sent over a per-page CDP session instead.  Every method may raise
when the page has closed underneath it; callers treat that as an
ordinary failure.
"""

from __future__ import annotations

from typing import Any

from playwright import async_api

from page_emulation.models.emulation import NetworkProfile, Viewport
from page_emulation.utils import logger

log = logger.create_logger("PageControl")


class PageController:
    """Applies emulation settings to individual Playwright pages."""

    def __init__(self) -> None:
        self._cdp_sessions: dict[async_api.Page, async_api.CDPSession] = {}

    # ==========================================================================
    # Page inspection
    # ==========================================================================

    @staticmethod
    def current_url(page: async_api.Page) -> str:
        """Return the URL currently shown by *page*."""
        return page.url

    @staticmethod
    def is_closed(page: async_api.Page) -> bool:
        """Whether *page* has been closed."""
        return page.is_closed()

    # ==========================================================================
    # CDP plumbing
    # ==========================================================================

    async def _cdp(self, page: async_api.Page) -> async_api.CDPSession:
        """Return the CDP session for *page*, attaching one on first use."""
        for stale in [p for p in self._cdp_sessions if p.is_closed()]:
            del self._cdp_sessions[stale]

        session = self._cdp_sessions.get(page)
        if session is None:
            session = await page.context.new_cdp_session(page)
            self._cdp_sessions[page] = session
        return session

    async def _send(self, page: async_api.Page, method: str, params: dict[str, Any] | None = None) -> None:
        session = await self._cdp(page)
        await session.send(method, params or {})

    async def detach_all(self) -> None:
        """Detach every CDP session, ignoring pages that already closed."""
        sessions = list(self._cdp_sessions.values())
        self._cdp_sessions.clear()
        for session in sessions:
            try:
                await session.detach()
            except Exception as exc:
                log.debug("CDP detach error (non-fatal)", {"error": str(exc)})

    # ==========================================================================
    # Emulation primitives
    # ==========================================================================

    async def emulate_network_conditions(self, page: async_api.Page, profile: NetworkProfile | None) -> None:
        """Throttle *page* to *profile*, or clear throttling when ``None``."""
        await self._send(page, "Network.enable")
        if profile is None:
            params: dict[str, Any] = {
                "offline": False,
                "latency": 0,
                "downloadThroughput": -1,
                "uploadThroughput": -1,
            }
        else:
            params = {
                "offline": profile.offline,
                "latency": profile.latency,
                "downloadThroughput": profile.download,
                "uploadThroughput": profile.upload,
            }
        await self._send(page, "Network.emulateNetworkConditions", params)

    async def emulate_cpu_throttling(self, page: async_api.Page, rate: float) -> None:
        """Slow *page* down by *rate*; ``1`` disables throttling."""
        await self._send(page, "Emulation.setCPUThrottlingRate", {"rate": rate})

    async def set_viewport(self, page: async_api.Page, viewport: Viewport) -> None:
        """Override device metrics and touch support for *page*."""
        orientation = (
            {"angle": 90, "type": "landscapePrimary"}
            if viewport.is_landscape
            else {"angle": 0, "type": "portraitPrimary"}
        )
        await self._send(
            page,
            "Emulation.setDeviceMetricsOverride",
            {
                "width": viewport.width,
                "height": viewport.height,
                "deviceScaleFactor": viewport.device_scale_factor,
                "mobile": viewport.is_mobile,
                "screenOrientation": orientation,
            },
        )
        # Chromium rejects maxTouchPoints outside 1..16, even with touch disabled.
        touch: dict[str, Any] = {"enabled": viewport.has_touch}
        if viewport.has_touch:
            touch["maxTouchPoints"] = 1
        await self._send(page, "Emulation.setTouchEmulationEnabled", touch)

    async def set_user_agent(self, page: async_api.Page, user_agent: str) -> None:
        """Override the user agent sent by *page*."""
        await self._send(page, "Network.setUserAgentOverride", {"userAgent": user_agent})

    async def emulate_device(self, page: async_api.Page, user_agent: str, viewport: Viewport) -> None:
        """Apply a full device identity (user agent then viewport) to *page*."""
        await self.set_user_agent(page, user_agent)
        await self.set_viewport(page, viewport)
