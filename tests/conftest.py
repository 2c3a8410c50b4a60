"""Shared fixtures for the test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from types import SimpleNamespace
from typing import Any
from unittest import mock

import pytest

from page_emulation.browser.page_control import PageController
from page_emulation.browser.session import BrowserSession
from page_emulation.config import EmulationSettings
from page_emulation.models.emulation import NetworkProfile, Viewport

# ── Fake pages ──────────────────────────────────────────────────


def make_page(url: str = "about:blank", *, closed: bool = False) -> mock.MagicMock:
    """A stand-in for a Playwright page with a URL and a closed flag."""
    page = mock.MagicMock(name=f"Page({url})")
    page.url = url
    page.is_closed.return_value = closed
    return page


def close_page(page: mock.MagicMock) -> None:
    page.is_closed.return_value = True


def make_unreadable_page() -> mock.MagicMock:
    """A page whose URL read fails, as when it closes mid-scan."""
    page = mock.MagicMock(name="Page(unreadable)")
    page.is_closed.return_value = False
    type(page).url = mock.PropertyMock(side_effect=RuntimeError("Target page, context or browser has been closed"))
    return page


# ── Recording controller ────────────────────────────────────────


class RecordingController(PageController):
    """Page controller that records calls instead of talking to a browser.

    ``failures`` maps a page to the exception its calls raise,
    ``hanging`` holds pages whose calls never finish, and
    ``before_apply`` runs before each per-page call (e.g. to close
    another page mid-batch).
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[Any, Exception] = {}
        self.hanging: set[Any] = set()
        self.before_apply: Callable[[Any], None] | None = None

    async def _record(self, kind: str, page: Any, *args: Any) -> None:
        if self.before_apply is not None:
            self.before_apply(page)
        if page in self.hanging:
            await asyncio.sleep(10)
        if page in self.failures:
            raise self.failures[page]
        self.calls.append((kind, page, *args))

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == kind]

    async def emulate_network_conditions(self, page: Any, profile: NetworkProfile | None) -> None:
        await self._record("network", page, profile)

    async def emulate_cpu_throttling(self, page: Any, rate: float) -> None:
        await self._record("cpu", page, rate)

    async def set_viewport(self, page: Any, viewport: Viewport) -> None:
        await self._record("viewport", page, viewport)

    async def set_user_agent(self, page: Any, user_agent: str) -> None:
        await self._record("user_agent", page, user_agent)

    async def emulate_device(self, page: Any, user_agent: str, viewport: Viewport) -> None:
        await self._record("device", page, user_agent, viewport)

    async def detach_all(self) -> None:
        return None


# ── Sessions ────────────────────────────────────────────────────


def attach_pages(session: BrowserSession, pages: Sequence[Any], selected: int | None = 0) -> None:
    """Point *session* at a fake browser whose single context holds *pages*."""
    context = SimpleNamespace(pages=list(pages))
    session._browser = SimpleNamespace(contexts=[context])  # type: ignore[assignment]
    session._pages = list(pages)
    session._selected_page = pages[selected] if selected is not None and pages else None


@pytest.fixture()
def settings() -> EmulationSettings:
    """Settings with a short per-page timeout."""
    return EmulationSettings(apply_timeout_ms=200)


@pytest.fixture()
def controller() -> RecordingController:
    return RecordingController()


@pytest.fixture()
def session(settings: EmulationSettings, controller: RecordingController) -> BrowserSession:
    """A browser session with no pages, backed by the recording controller."""
    return BrowserSession(settings=settings, controller=controller)
