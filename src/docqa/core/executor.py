"""
Executor - dispatches model tool calls to registered tools.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from docqa.core.message import Message, ToolUseContent
from docqa.core.tools import Tool, ToolResult

logger = logging.getLogger(__name__)


class ToolExecutor:
    """
    Executes tool calls against a fixed set of tools, keyed by tool name.
    """

    def __init__(self, tools: list[Tool]):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> Tool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def get_tools_api_format(self) -> list[dict[str, Any]]:
        """Get tools in API format."""
        return [tool.to_api_format() for tool in self._tools.values()]

    async def execute(self, call: ToolUseContent) -> ToolResult:
        """Execute one tool call."""
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"Model requested unknown tool '{call.name}'")
            return ToolResult(
                tool_name=call.name,
                content=f"Tool '{call.name}' not found",
                is_error=True,
            )

        return await tool.execute(call.input)

    async def execute_tool_uses(self, calls: list[ToolUseContent]) -> list[Message]:
        """
        Execute tool calls concurrently.

        Returns:
            Tool result messages, in call order
        """
        results = await asyncio.gather(*(self.execute(call) for call in calls))

        return [
            Message.tool_result(
                tool_use_id=call.id,
                content=result.content,
                is_error=result.is_error,
                name=result.tool_name,
            )
            for call, result in zip(calls, results)
        ]
