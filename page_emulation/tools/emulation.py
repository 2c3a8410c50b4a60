"""
Emulation tool handlers: network throttling, CPU slowdown and device identity.

Network and CPU emulation act on the selected page only.  Device
emulation fans out across every open page showing its own content
(see ``pipeline.device_phases``).  Handlers never raise: every failure
ends as a failed response with an explanatory line, and the session's
emulation state only changes after a successful apply.
"""

from __future__ import annotations

import asyncio

import pydantic
from playwright import async_api

from page_emulation.browser import session as browser_session
from page_emulation.catalog import devices, network
from page_emulation.models.emulation import NetworkProfile
from page_emulation.pipeline import device_phases
from page_emulation.tools.response import ToolResponse
from page_emulation.utils import errors, logger, serialization

log = logger.create_logger("EmulationTools")


# ============================================================================
# Tool arguments
# ============================================================================


class _ToolParams(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class EmulateNetworkParams(_ToolParams):
    """Arguments of ``emulate_network``."""

    throttling_option: str = pydantic.Field(
        description=(
            "The network throttling option to emulate. Available throttling options are: "
            f"{', '.join(network.THROTTLING_OPTIONS)}. Set to \"{network.NO_EMULATION}\" to disable."
        ),
        json_schema_extra={"enum": list(network.THROTTLING_OPTIONS)},
    )

    @pydantic.field_validator("throttling_option")
    @classmethod
    def _known_option(cls, value: str) -> str:
        if value not in network.THROTTLING_OPTIONS:
            raise ValueError(f"must be one of: {', '.join(network.THROTTLING_OPTIONS)}")
        return value


class EmulateCpuParams(_ToolParams):
    """Arguments of ``emulate_cpu``."""

    throttling_rate: float = pydantic.Field(
        ge=1,
        le=20,
        description="The CPU throttling rate representing the slowdown factor 1-20x. Set the rate to 1 to disable throttling.",
    )


class EmulateDeviceParams(_ToolParams):
    """Arguments of ``emulate_device``."""

    device: str | None = pydantic.Field(
        default=None,
        description=(
            f"The device to emulate, e.g. {', '.join(devices.COMMON_DEVICES)}. Unknown names fall back to "
            f"\"{devices.COMMON_DEVICES[0]}\"; omit for \"{devices.DEFAULT_DEVICE}\". "
            f"Set to \"{devices.NO_EMULATION}\" to disable device emulation and use desktop mode."
        ),
    )
    custom_user_agent: str | None = pydantic.Field(
        default=None,
        description="Optional custom user agent string. If provided, it overrides the device's default user agent.",
    )


# ============================================================================
# Helpers
# ============================================================================


async def _resolve_selected_page(session: browser_session.BrowserSession) -> async_api.Page:
    """Return the selected page, re-reading the open pages once if it has gone.

    Raises:
        NoActivePagesError: If no page is open.
    """
    page = session.get_selected_page()
    if page is None:
        await session.create_pages_snapshot()
        page = session.get_selected_page()
    if page is None:
        raise errors.NoActivePagesError()
    return page


def _describe_profile(profile: NetworkProfile) -> str:
    if profile.offline:
        return f"Emulating network conditions: {profile.name} (all requests fail)."
    return (
        f"Emulating network conditions: {profile.name} "
        f"(download {profile.download / 1000:g} kB/s, upload {profile.upload / 1000:g} kB/s, "
        f"latency {profile.latency:g}ms)."
    )


# ============================================================================
# Handlers
# ============================================================================


async def emulate_network(
    params: EmulateNetworkParams,
    response: ToolResponse,
    session: browser_session.BrowserSession,
) -> None:
    """Emulate network conditions such as throttling on the selected page."""
    option = params.throttling_option
    profile = network.resolve_network_profile(option)

    try:
        page = await _resolve_selected_page(session)
        async with asyncio.timeout(session.settings.apply_timeout_ms / 1000):
            await session.controller.emulate_network_conditions(page, profile)
    except TimeoutError:
        response.fail(f"Failed to emulate network conditions ({option}): timed out.")
        return
    except Exception as exc:
        log.warn("Network emulation failed", {"option": option, "error": errors.get_error_message(exc)})
        response.fail(f"Failed to emulate network conditions ({option}): {errors.get_error_message(exc)}")
        return

    if profile is None:
        session.set_network_conditions(None)
        response.append_response_line("Network emulation disabled.")
    else:
        session.set_network_conditions(option)
        response.append_response_line(_describe_profile(profile))
    log.info("Network emulation applied", {"option": option})


async def emulate_cpu(
    params: EmulateCpuParams,
    response: ToolResponse,
    session: browser_session.BrowserSession,
) -> None:
    """Emulate CPU throttling by slowing down the selected page's execution."""
    rate = params.throttling_rate

    try:
        page = await _resolve_selected_page(session)
        async with asyncio.timeout(session.settings.apply_timeout_ms / 1000):
            await session.controller.emulate_cpu_throttling(page, rate)
    except TimeoutError:
        response.fail(f"Failed to emulate CPU throttling ({rate:g}x): timed out.")
        return
    except Exception as exc:
        log.warn("CPU emulation failed", {"rate": rate, "error": errors.get_error_message(exc)})
        response.fail(f"Failed to emulate CPU throttling ({rate:g}x): {errors.get_error_message(exc)}")
        return

    session.set_cpu_throttling_rate(rate)
    if rate == 1:
        response.append_response_line("CPU throttling disabled.")
    else:
        response.append_response_line(f"Emulating CPU throttling: {rate:g}x slowdown.")
    log.info("CPU emulation applied", {"rate": rate})


async def emulate_device(
    params: EmulateDeviceParams,
    response: ToolResponse,
    session: browser_session.BrowserSession,
) -> None:
    """Emulate a mobile device (viewport, user agent, touch, scale) on every relevant page."""
    try:
        ok, lines = await device_phases.emulate_device_across_pages(
            session, params.device, params.custom_user_agent
        )
    except Exception as exc:
        log.error("Device emulation crashed", {"error": errors.get_error_message(exc)})
        response.fail(f"Device emulation failed: {errors.get_error_message(exc)}")
        return

    response.extend(lines)
    if not ok:
        response.fail()
