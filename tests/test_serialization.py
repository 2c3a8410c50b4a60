"""Tests for page_emulation.utils.serialization — camelCase conversion."""

from __future__ import annotations

import pytest

from page_emulation.models.emulation import EmulationState, Viewport
from page_emulation.utils.serialization import snake_to_camel, to_camel_dict


class TestSnakeToCamel:
    """Tests for snake_to_camel()."""

    @pytest.mark.parametrize(
        ("input_str", "expected"),
        [
            ("throttling_option", "throttlingOption"),
            ("custom_user_agent", "customUserAgent"),
            ("cpu_throttling_rate", "cpuThrottlingRate"),
            ("device_scale_factor", "deviceScaleFactor"),
            ("a_b_c", "aBC"),
        ],
    )
    def test_conversion(self, input_str: str, expected: str) -> None:
        assert snake_to_camel(input_str) == expected

    def test_no_underscores(self) -> None:
        assert snake_to_camel("device") == "device"

    def test_empty_string(self) -> None:
        assert snake_to_camel("") == ""


class TestToCamelDict:
    def test_emulation_state(self) -> None:
        state = EmulationState(network="Slow 3G", cpu_throttling_rate=4, device=None)
        assert to_camel_dict(state) == {"network": "Slow 3G", "cpuThrottlingRate": 4, "device": None}

    def test_viewport(self) -> None:
        viewport = Viewport(width=375, height=667, device_scale_factor=2, is_mobile=True, has_touch=True)
        dumped = to_camel_dict(viewport)
        assert dumped["deviceScaleFactor"] == 2
        assert dumped["isMobile"] is True
        assert dumped["isLandscape"] is False
