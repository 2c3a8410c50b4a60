"""Pydantic models for device descriptors, network profiles, per-page outcomes and session state."""

from __future__ import annotations

import pydantic

from page_emulation.utils import serialization


class Viewport(pydantic.BaseModel):
    """Viewport and screen capabilities applied to a page."""

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    width: int
    height: int
    device_scale_factor: float = 1
    is_mobile: bool = False
    has_touch: bool = False
    is_landscape: bool = False


class DeviceDescriptor(pydantic.BaseModel):
    """A named device from the static catalog."""

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    name: str
    user_agent: str
    viewport: Viewport


class NetworkProfile(pydantic.BaseModel):
    """Predefined network throttling conditions.

    Throughput is in bytes per second, latency in milliseconds.
    """

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    name: str
    download: float
    upload: float
    latency: float
    offline: bool = False


class PageOutcome(pydantic.BaseModel):
    """Result of applying emulation to one page."""

    url: str
    success: bool
    error: str | None = None

    @classmethod
    def ok(cls, url: str) -> PageOutcome:
        return cls(url=url, success=True)

    @classmethod
    def failed(cls, url: str, error: str) -> PageOutcome:
        return cls(url=url, success=False, error=error)


class EmulationState(pydantic.BaseModel):
    """Last successfully applied emulation settings for a browser session.

    Attributes:
        network: Active network profile name, or ``None`` when disabled.
        cpu_throttling_rate: CPU slowdown factor; ``1`` means disabled.
        device: Active device name, or ``None`` for no device emulation.
    """

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    network: str | None = None
    cpu_throttling_rate: float = 1
    device: str | None = None


class ToolResult(pydantic.BaseModel):
    """Structured response of a tool call."""

    tool: str
    success: bool
    lines: list[str]
    state: EmulationState
