"""Collects the human-readable lines a tool call reports back to the controller."""

from __future__ import annotations

from page_emulation.models.emulation import EmulationState, ToolResult


class ToolResponse:
    """Mutable response handed to a tool handler."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        self.success = True
        self._lines: list[str] = []

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def append_response_line(self, line: str) -> None:
        self._lines.append(line)

    def extend(self, lines: list[str]) -> None:
        self._lines.extend(lines)

    def fail(self, line: str | None = None) -> None:
        """Mark the call as failed, optionally adding an explanation."""
        self.success = False
        if line:
            self._lines.append(line)

    def to_result(self, state: EmulationState) -> ToolResult:
        """Freeze the response together with the session's emulation state."""
        return ToolResult(tool=self.tool, success=self.success, lines=self.lines, state=state)


def format_emulation_state(state: EmulationState) -> list[str]:
    """Describe the active emulation settings, one line per enabled kind."""
    lines: list[str] = []
    if state.network:
        lines.append(f"Network emulation: {state.network}")
    if state.cpu_throttling_rate > 1:
        lines.append(f"CPU throttling: {state.cpu_throttling_rate:g}x slowdown")
    if state.device:
        lines.append(f"Device emulation: {state.device}")
    return lines
