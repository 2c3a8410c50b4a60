"""
Multi-page device emulation phases.

Each public function performs a single focused step: snapshot the
open pages, pick the pages that need the device identity, apply it
page by page, and render the outcome as report lines.
``emulate_device_across_pages`` runs the steps in order and records
the resulting device state on the session.

Pages belong to the browser and can close at any point, so every
liveness check is treated as advisory and every per-page call is
isolated: one failing page never aborts its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from playwright import async_api

from page_emulation.browser import page_control
from page_emulation.browser import session as browser_session
from page_emulation.catalog import devices
from page_emulation.models.emulation import DeviceDescriptor, PageOutcome
from page_emulation.utils import errors, logger

log = logger.create_logger("DeviceEmulation")

PAGE_CLOSED_REASON = "Page closed before emulation could be applied"
UNKNOWN_URL = "<unknown>"

TROUBLESHOOTING_TIPS: tuple[str, ...] = (
    "Check that the target pages are still open (list the pages and reselect one).",
    "Internal pages such as chrome:// or devtools:// URLs cannot be emulated; navigate to a regular site.",
    "Close extra tabs and retry with a single page.",
    "Restart the browser session if emulation keeps failing.",
)

PageApply = Callable[[async_api.Page], Awaitable[None]]


# ====================================================================
# Page snapshot
# ====================================================================


async def take_pages_snapshot(session: browser_session.BrowserSession) -> list[async_api.Page]:
    """Capture the currently open pages.

    Raises:
        NoActivePagesError: If no page is open.
    """
    pages = await session.create_pages_snapshot()
    live = [p for p in pages if not session.controller.is_closed(p)]
    if not live:
        raise errors.NoActivePagesError()
    return live


def read_url(controller: page_control.PageController, page: async_api.Page) -> str | None:
    """Return the URL of *page*, or ``None`` if it cannot be read."""
    try:
        return controller.current_url(page)
    except Exception as exc:
        log.debug("Could not read page URL, skipping", {"error": errors.get_error_message(exc)})
        return None


# ====================================================================
# Navigation classification
# ====================================================================


def classify_targets(
    controller: page_control.PageController,
    pages: Sequence[async_api.Page],
    selected: async_api.Page,
) -> tuple[list[async_api.Page], list[str]]:
    """Decide which pages receive the device emulation.

    The selected page is always targeted.  Other pages are added when
    they show content of their own: a URL that is neither blank nor
    the selected page's URL.  Pages whose URL cannot be read are
    skipped.

    Returns:
        Tuple of (target pages with the selected page first, URLs of
        the additional pages in discovery order).
    """
    targets = [selected]
    additional_urls: list[str] = []
    if len(pages) <= 1:
        return targets, additional_urls

    selected_url = read_url(controller, selected)
    for page in pages:
        if page is selected:
            continue
        url = read_url(controller, page)
        if url is None or url == browser_session.BLANK_URL or url == selected_url:
            continue
        targets.append(page)
        additional_urls.append(url)
    return targets, additional_urls


def filter_live_targets(
    controller: page_control.PageController,
    targets: Sequence[async_api.Page],
) -> list[async_api.Page]:
    """Drop targets that closed since classification.

    Raises:
        AllTargetsClosedError: If every target has closed.
    """
    live = [p for p in targets if not controller.is_closed(p)]
    if not live:
        raise errors.AllTargetsClosedError()
    return live


# ====================================================================
# Emulation applier
# ====================================================================


async def _apply_to_pages(
    controller: page_control.PageController,
    targets: Sequence[async_api.Page],
    apply: PageApply,
    timeout_ms: int,
) -> list[PageOutcome]:
    """Run *apply* on each target, collecting one outcome per page."""
    outcomes: list[PageOutcome] = []
    for page in targets:
        url = read_url(controller, page) or UNKNOWN_URL
        if controller.is_closed(page):
            outcomes.append(PageOutcome.failed(url, PAGE_CLOSED_REASON))
            continue
        try:
            async with asyncio.timeout(timeout_ms / 1000):
                await apply(page)
        except TimeoutError:
            log.warn("Emulation timed out on page", {"url": url, "timeoutMs": timeout_ms})
            outcomes.append(PageOutcome.failed(url, f"Timed out after {timeout_ms}ms"))
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.warn("Emulation failed on page", {"url": url, "error": message})
            outcomes.append(PageOutcome.failed(url, message))
        else:
            outcomes.append(PageOutcome.ok(url))
    return outcomes


async def apply_device_emulation(
    controller: page_control.PageController,
    targets: Sequence[async_api.Page],
    descriptor: DeviceDescriptor,
    custom_user_agent: str | None,
    timeout_ms: int,
) -> list[PageOutcome]:
    """Apply *descriptor* (or its viewport with *custom_user_agent*) to every target."""
    user_agent = custom_user_agent or descriptor.user_agent

    async def apply(page: async_api.Page) -> None:
        await controller.emulate_device(page, user_agent, descriptor.viewport)

    return await _apply_to_pages(controller, targets, apply, timeout_ms)


async def apply_desktop_mode(
    controller: page_control.PageController,
    targets: Sequence[async_api.Page],
    user_agent: str,
    timeout_ms: int,
) -> list[PageOutcome]:
    """Restore the desktop viewport and *user_agent* on every target."""

    async def apply(page: async_api.Page) -> None:
        await controller.set_viewport(page, devices.DESKTOP_VIEWPORT)
        await controller.set_user_agent(page, user_agent)

    return await _apply_to_pages(controller, targets, apply, timeout_ms)


# ====================================================================
# Reporting
# ====================================================================


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def navigation_warning(url: str) -> str:
    return (
        f"⚠️  WARNING: Device emulation is being applied AFTER page navigation (current URL: {url}). "
        "Resources already loaded by the page (including user-agent sniffing during the initial load) "
        "are not affected. For best results, set device emulation BEFORE navigating to the target website."
    )


def multi_page_note(additional_urls: Sequence[str]) -> str:
    count = len(additional_urls)
    return (
        f"🔄 MULTI-PAGE MODE: Detected {count} additional page(s) with content. "
        f"Applying device emulation to the current page and {count} other page(s): "
        f"{', '.join(additional_urls)}."
    )


def fallback_note(requested: str, resolved: str) -> str:
    return (
        f'Device "{requested}" not found in known devices; using "{resolved}" instead. '
        f"Common devices: {', '.join(devices.COMMON_DEVICES)}."
    )


def _failure_lines(outcomes: Sequence[PageOutcome], what: str) -> list[str]:
    lines = [f"Failed to apply {what} on all {len(outcomes)} page(s):"]
    lines.extend(f"  - {o.url}: {o.error}" for o in outcomes)
    lines.append("Troubleshooting:")
    lines.extend(f"  - {tip}" for tip in TROUBLESHOOTING_TIPS)
    return lines


def _partial_failure_lines(outcomes: Sequence[PageOutcome]) -> list[str]:
    failed = [o for o in outcomes if not o.success]
    if not failed:
        return []
    lines = [f"Emulation could not be applied to {len(failed)} page(s):"]
    lines.extend(f"  - {o.url}: {o.error}" for o in failed)
    return lines


def summarize_device_outcomes(
    outcomes: Sequence[PageOutcome],
    device_name: str,
    descriptor: DeviceDescriptor,
    custom_user_agent: str | None,
) -> list[str]:
    """Render the report lines for a device emulation batch."""
    success_count = sum(1 for o in outcomes if o.success)
    if success_count == 0:
        return _failure_lines(outcomes, f"device emulation ({device_name})")

    vp = descriptor.viewport
    summary = (
        f"Successfully emulated device: {device_name} on {success_count} page(s). "
        f"Viewport: {vp.width}x{vp.height}, "
        f"Scale: {vp.device_scale_factor:g}x, "
        f"Mobile: {_yes_no(vp.is_mobile)}, "
        f"Touch: {_yes_no(vp.has_touch)}"
        f"{', Custom UA applied' if custom_user_agent else ''}."
    )
    return [summary, *_partial_failure_lines(outcomes)]


def summarize_desktop_outcomes(outcomes: Sequence[PageOutcome]) -> list[str]:
    """Render the report lines for a desktop-mode batch."""
    success_count = sum(1 for o in outcomes if o.success)
    if success_count == 0:
        return _failure_lines(outcomes, "desktop mode")
    return [
        f"Device emulation disabled. Desktop mode applied to {success_count} page(s).",
        *_partial_failure_lines(outcomes),
    ]


# ====================================================================
# Orchestration
# ====================================================================


async def emulate_device_across_pages(
    session: browser_session.BrowserSession,
    device: str | None,
    custom_user_agent: str | None = None,
) -> tuple[bool, list[str]]:
    """Apply a device identity (or desktop mode) to the relevant open pages.

    Args:
        session: Browser session owning the pages and emulation state.
        device: Requested device name, ``"No emulation"`` for desktop
            mode, or ``None`` for the configured default.
        custom_user_agent: Optional user agent overriding the device's.

    Returns:
        Tuple of (whether at least one page succeeded, report lines).
    """
    controller = session.controller
    settings = session.settings
    lines: list[str] = []
    device = device.strip() if device else device
    desktop = device == devices.NO_EMULATION

    log.start_timer("device-emulation")
    try:
        pages = await take_pages_snapshot(session)
        selected = session.get_selected_page()
        if selected is None or selected not in pages:
            selected = pages[0]

        selected_url = read_url(controller, selected)
        targets, additional_urls = classify_targets(controller, pages, selected)
        targets = filter_live_targets(controller, targets)
    except errors.EmulationError as exc:
        log.error("Device emulation aborted", {"reason": str(exc)})
        log.end_timer("device-emulation", "Device emulation aborted")
        return False, [str(exc)]

    if selected_url is not None and selected_url != browser_session.BLANK_URL:
        lines.append(navigation_warning(selected_url))
    if additional_urls:
        lines.append(multi_page_note(additional_urls))

    log.info(
        "Applying device emulation",
        {"device": device or settings.default_device, "targets": len(targets), "customUA": bool(custom_user_agent)},
    )

    if desktop:
        outcomes = await apply_desktop_mode(
            controller, targets, custom_user_agent or settings.desktop_user_agent, settings.apply_timeout_ms
        )
        lines.extend(summarize_desktop_outcomes(outcomes))
        resolved_name: str | None = None
    else:
        resolved_name, descriptor = devices.resolve_device(device, settings.default_device)
        requested = device or settings.default_device
        if requested != resolved_name:
            log.warn("Unknown device, using fallback", {"requested": requested, "resolved": resolved_name})
            lines.append(fallback_note(requested, resolved_name))
        outcomes = await apply_device_emulation(
            controller, targets, descriptor, custom_user_agent, settings.apply_timeout_ms
        )
        lines.extend(summarize_device_outcomes(outcomes, resolved_name, descriptor, custom_user_agent))

    success_count = sum(1 for o in outcomes if o.success)
    log.end_timer("device-emulation", "Device emulation complete")
    if success_count == 0:
        log.error("Device emulation failed on every page", {"targets": len(outcomes)})
        return False, lines

    session.set_device_emulation(resolved_name)
    log.success(
        "Device emulation applied",
        {"device": resolved_name or devices.NO_EMULATION, "succeeded": success_count, "failed": len(outcomes) - success_count},
    )
    return True, lines
