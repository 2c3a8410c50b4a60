"""Tests for page_emulation.browser.page_control — CDP commands sent per primitive."""

from __future__ import annotations

import asyncio
from unittest import mock

import pytest

from page_emulation.browser.page_control import PageController
from page_emulation.catalog import devices
from page_emulation.catalog.network import NETWORK_PROFILES


def _make_cdp_page(url: str = "about:blank") -> tuple[mock.MagicMock, mock.MagicMock]:
    """Return (page, cdp_session) where the page hands out the session."""
    cdp = mock.MagicMock()
    cdp.send = mock.AsyncMock()
    cdp.detach = mock.AsyncMock()
    page = mock.MagicMock()
    page.url = url
    page.is_closed.return_value = False
    page.context.new_cdp_session = mock.AsyncMock(return_value=cdp)
    return page, cdp


def _sent(cdp: mock.MagicMock) -> list[tuple[str, dict]]:
    return [(c.args[0], c.args[1]) for c in cdp.send.await_args_list]


class TestPageInspection:
    def test_current_url(self) -> None:
        page, _ = _make_cdp_page("https://a.com")
        assert PageController.current_url(page) == "https://a.com"

    def test_is_closed(self) -> None:
        page, _ = _make_cdp_page()
        page.is_closed.return_value = True
        assert PageController.is_closed(page) is True


class TestCdpSessions:
    def test_session_reused_per_page(self) -> None:
        controller = PageController()
        page, _ = _make_cdp_page()

        async def run() -> None:
            await controller.emulate_cpu_throttling(page, 2)
            await controller.emulate_cpu_throttling(page, 3)

        asyncio.run(run())
        page.context.new_cdp_session.assert_awaited_once_with(page)

    def test_closed_page_session_dropped(self) -> None:
        controller = PageController()
        page, _ = _make_cdp_page()
        asyncio.run(controller.emulate_cpu_throttling(page, 2))
        page.is_closed.return_value = True

        other, _ = _make_cdp_page()
        asyncio.run(controller.emulate_cpu_throttling(other, 2))

        assert page not in controller._cdp_sessions
        assert other in controller._cdp_sessions

    def test_detach_all_tolerates_errors(self) -> None:
        controller = PageController()
        page, cdp = _make_cdp_page()
        cdp.detach.side_effect = RuntimeError("already detached")
        asyncio.run(controller.emulate_cpu_throttling(page, 2))

        asyncio.run(controller.detach_all())

        cdp.detach.assert_awaited_once()
        assert controller._cdp_sessions == {}

    def test_failure_propagates(self) -> None:
        controller = PageController()
        page, cdp = _make_cdp_page()
        cdp.send.side_effect = RuntimeError("Target closed")
        with pytest.raises(RuntimeError, match="Target closed"):
            asyncio.run(controller.emulate_cpu_throttling(page, 2))


class TestPrimitives:
    def test_network_profile(self) -> None:
        page, cdp = _make_cdp_page()
        asyncio.run(PageController().emulate_network_conditions(page, NETWORK_PROFILES["Slow 3G"]))
        assert _sent(cdp) == [
            ("Network.enable", {}),
            (
                "Network.emulateNetworkConditions",
                {"offline": False, "latency": 2000, "downloadThroughput": 50000, "uploadThroughput": 50000},
            ),
        ]

    def test_network_offline(self) -> None:
        page, cdp = _make_cdp_page()
        asyncio.run(PageController().emulate_network_conditions(page, NETWORK_PROFILES["Offline"]))
        params = _sent(cdp)[-1][1]
        assert params == {"offline": True, "latency": 0, "downloadThroughput": 0, "uploadThroughput": 0}

    def test_network_cleared(self) -> None:
        page, cdp = _make_cdp_page()
        asyncio.run(PageController().emulate_network_conditions(page, None))
        params = _sent(cdp)[-1][1]
        assert params["downloadThroughput"] == -1
        assert params["uploadThroughput"] == -1
        assert params["offline"] is False

    def test_cpu_rate(self) -> None:
        page, cdp = _make_cdp_page()
        asyncio.run(PageController().emulate_cpu_throttling(page, 4))
        assert _sent(cdp) == [("Emulation.setCPUThrottlingRate", {"rate": 4})]

    def test_emulate_device(self) -> None:
        page, cdp = _make_cdp_page()
        iphone = devices.DEVICE_DESCRIPTORS["iPhone 8"]

        asyncio.run(PageController().emulate_device(page, iphone.user_agent, iphone.viewport))

        assert _sent(cdp) == [
            ("Network.setUserAgentOverride", {"userAgent": iphone.user_agent}),
            (
                "Emulation.setDeviceMetricsOverride",
                {
                    "width": 375,
                    "height": 667,
                    "deviceScaleFactor": 2,
                    "mobile": True,
                    "screenOrientation": {"angle": 0, "type": "portraitPrimary"},
                },
            ),
            ("Emulation.setTouchEmulationEnabled", {"enabled": True, "maxTouchPoints": 1}),
        ]

    def test_desktop_viewport(self) -> None:
        page, cdp = _make_cdp_page()
        asyncio.run(PageController().set_viewport(page, devices.DESKTOP_VIEWPORT))
        metrics, touch = _sent(cdp)
        assert metrics[1]["screenOrientation"] == {"angle": 90, "type": "landscapePrimary"}
        assert metrics[1]["mobile"] is False
        assert touch[1] == {"enabled": False}

    def test_disabled_touch_never_sends_touch_points(self) -> None:
        page, cdp = _make_cdp_page()
        pixel = devices.DEVICE_DESCRIPTORS["Pixel 5"]

        async def run() -> None:
            controller = PageController()
            await controller.emulate_device(page, pixel.user_agent, pixel.viewport)
            await controller.set_viewport(page, devices.DESKTOP_VIEWPORT)

        asyncio.run(run())

        touch_calls = [params for method, params in _sent(cdp) if method == "Emulation.setTouchEmulationEnabled"]
        assert touch_calls == [{"enabled": True, "maxTouchPoints": 1}, {"enabled": False}]
        for params in touch_calls:
            if "maxTouchPoints" in params:
                assert 1 <= params["maxTouchPoints"] <= 16
