"""
Tool definitions and execution.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docqa.errors import ToolExecutionFailure

logger = logging.getLogger(__name__)


class Tool(BaseModel):
    """A tool that can be called by the model.

    Arguments from the model are validated against ``input_model`` before
    the handler sees them, so a handler always receives a typed request.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], Any] = Field(exclude=True)

    def to_api_format(self) -> dict[str, Any]:
        """Convert to the function-calling format."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.input_model.model_json_schema(),
        }

    def parse_input(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw model arguments into the tool's request type."""
        try:
            return self.input_model.model_validate(arguments)
        except ValidationError as e:
            raise ToolExecutionFailure(self.name, f"invalid arguments: {e}") from e

    async def execute(self, arguments: dict[str, Any]) -> "ToolResult":
        """Execute the tool with given arguments.

        Failures are returned as error results so that the model can react
        to them.
        """
        try:
            request = self.parse_input(arguments)
            result = self.handler(request)
            if asyncio.iscoroutine(result):
                result = await result
        except ToolExecutionFailure as e:
            logger.warning(e.message)
            return ToolResult(tool_name=self.name, content=f"Error: {e.message}", is_error=True)
        except Exception as e:
            logger.warning(f"Tool '{self.name}' raised: {e}", exc_info=True)
            return ToolResult(
                tool_name=self.name,
                content=f"Error executing tool: {e}",
                is_error=True
            )

        return ToolResult(tool_name=self.name, content=serialize_result(result))


class ToolResult(BaseModel):
    """Result of a tool execution."""
    tool_name: str
    content: str
    is_error: bool = False


def serialize_result(result: Any) -> str:
    """Render a handler's return value as text for the model."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json()
    if isinstance(result, list):
        return json.dumps([
            item.model_dump(mode="json") if isinstance(item, BaseModel) else item
            for item in result
        ])
    return json.dumps(result, default=str)
