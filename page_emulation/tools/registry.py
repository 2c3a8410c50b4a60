"""
Tool definitions and dispatch.

Validates raw controller arguments against each tool's parameter
model, runs the handler, and returns a structured ``ToolResult``
that always carries the session's current emulation state.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import pydantic

from page_emulation.browser import session as browser_session
from page_emulation.models.emulation import ToolResult
from page_emulation.tools import emulation
from page_emulation.tools.response import ToolResponse, format_emulation_state
from page_emulation.utils import logger

log = logger.create_logger("ToolRegistry")

EMULATION_CATEGORY = "emulation"

Handler = Callable[[Any, ToolResponse, browser_session.BrowserSession], Awaitable[None]]


@dataclasses.dataclass(frozen=True)
class ToolDefinition:
    """A tool exposed to the controller."""

    name: str
    description: str
    params_model: type[pydantic.BaseModel]
    handler: Handler
    category: str = EMULATION_CATEGORY
    read_only: bool = False

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the tool's arguments (camelCase names)."""
        return self.params_model.model_json_schema(by_alias=True)


TOOLS: dict[str, ToolDefinition] = {
    tool.name: tool
    for tool in (
        ToolDefinition(
            name="emulate_network",
            description="Emulates network conditions such as throttling on the selected page.",
            params_model=emulation.EmulateNetworkParams,
            handler=emulation.emulate_network,
        ),
        ToolDefinition(
            name="emulate_cpu",
            description="Emulates CPU throttling by slowing down the selected page's execution.",
            params_model=emulation.EmulateCpuParams,
            handler=emulation.emulate_cpu,
        ),
        ToolDefinition(
            name="emulate_device",
            description=(
                "IMPORTANT: Emulates a mobile device including viewport, user-agent, touch support, and "
                "device scale factor on the selected page and every other open page showing content. "
                "Call this BEFORE navigating to a website so the mobile user-agent is used from the first request."
            ),
            params_model=emulation.EmulateDeviceParams,
            handler=emulation.emulate_device,
        ),
    )
}


def _validation_lines(error: pydantic.ValidationError) -> list[str]:
    lines = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue["loc"]) or "arguments"
        lines.append(f"Invalid argument {location}: {issue['msg']}")
    return lines


async def call_tool(
    name: str,
    arguments: Mapping[str, Any] | None,
    session: browser_session.BrowserSession,
) -> ToolResult:
    """Validate *arguments*, run tool *name*, and collect its result.

    Raises:
        KeyError: If no tool is registered under *name*.
    """
    tool = TOOLS[name]
    response = ToolResponse(name)

    try:
        params = tool.params_model.model_validate(dict(arguments or {}))
    except pydantic.ValidationError as exc:
        log.warn("Rejected tool arguments", {"tool": name, "errors": exc.error_count()})
        for line in _validation_lines(exc):
            response.fail(line)
        return response.to_result(session.get_emulation_state())

    if session.tool_lock.locked():
        log.debug("Waiting for running tool call to finish", {"tool": name})
    async with session.tool_lock:
        log.info("Running tool", {"tool": name, "arguments": params.model_dump(exclude_none=True)})
        await tool.handler(params, response, session)
        state = session.get_emulation_state()

    response.extend(format_emulation_state(state))
    if response.success:
        log.success("Tool completed", {"tool": name})
    else:
        log.warn("Tool reported failure", {"tool": name})
    return response.to_result(state)
