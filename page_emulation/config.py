"""
Runtime configuration for the browser session and emulation tools.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings

from page_emulation.catalog import devices


class EmulationSettings(pydantic_settings.BaseSettings):
    """Settings loaded from environment variables.

    Attributes:
        headless: Launch the browser without a visible window.
        browser_channel: Playwright channel to try first (e.g. ``chrome``);
            an empty value uses the bundled Chromium directly.
        default_device: Device emulated when ``emulate_device`` is called
            without a device name.
        apply_timeout_ms: Upper bound for applying emulation to one page.
        desktop_user_agent: User agent restored by ``"No emulation"``.
        host: Bind address of the HTTP server.
        port: Port of the HTTP server.
    """

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    headless: bool = pydantic.Field(default=True, validation_alias="BROWSER_HEADLESS")
    browser_channel: str = pydantic.Field(default="chrome", validation_alias="BROWSER_CHANNEL")
    default_device: str = pydantic.Field(
        default=devices.DEFAULT_DEVICE, validation_alias="DEFAULT_EMULATED_DEVICE"
    )
    apply_timeout_ms: int = pydantic.Field(
        default=10000, gt=0, validation_alias="EMULATION_APPLY_TIMEOUT_MS"
    )
    desktop_user_agent: str = pydantic.Field(
        default=devices.DESKTOP_USER_AGENT, validation_alias="DESKTOP_USER_AGENT"
    )
    host: str = pydantic.Field(default="0.0.0.0", validation_alias="SERVER_HOST")
    port: int = pydantic.Field(default=3001, validation_alias="SERVER_PORT")


@functools.lru_cache(maxsize=1)
def get_settings() -> EmulationSettings:
    """Return the process-wide settings, loaded once."""
    return EmulationSettings()
