"""
Message types for agent communication.
"""

import json
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Message role in conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextContent(BaseModel):
    """Text content block."""
    type: Literal["text"] = "text"
    text: str


class ToolUseContent(BaseModel):
    """Tool call requested by the model."""
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultContent(BaseModel):
    """Tool result content block."""
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Union[TextContent, ToolUseContent, ToolResultContent]


class Message(BaseModel):
    """A message in the conversation."""
    role: Role
    content: Union[str, list[ContentBlock]]
    name: str | None = None

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls,
        content: str,
        tool_calls: list[ToolUseContent] | None = None,
    ) -> "Message":
        """Create an assistant message, optionally carrying tool calls."""
        if not tool_calls:
            return cls(role=Role.ASSISTANT, content=content)

        blocks: list[ContentBlock] = []
        if content:
            blocks.append(TextContent(text=content))
        blocks.extend(tool_calls)
        return cls(role=Role.ASSISTANT, content=blocks)

    @classmethod
    def tool_result(
        cls,
        tool_use_id: str,
        content: str,
        is_error: bool = False,
        name: str | None = None
    ) -> "Message":
        """Create a tool result message."""
        return cls(
            role=Role.TOOL,
            content=[
                ToolResultContent(
                    tool_use_id=tool_use_id,
                    content=content,
                    is_error=is_error
                )
            ],
            name=name
        )

    @property
    def text(self) -> str:
        """Text of the message with non-text blocks left out."""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(
            block.text for block in self.content
            if isinstance(block, TextContent)
        )

    @property
    def tool_calls(self) -> list[ToolUseContent]:
        if isinstance(self.content, str):
            return []
        return [b for b in self.content if isinstance(b, ToolUseContent)]

    def to_api_format(self) -> dict[str, Any]:
        """Convert to the chat-completions message format."""
        if self.role == Role.TOOL and not isinstance(self.content, str):
            block = self.content[0]
            if not isinstance(block, ToolResultContent):
                raise TypeError("Tool messages must carry a tool result block")
            return {
                "role": "tool",
                "tool_call_id": block.tool_use_id,
                "content": block.content,
            }

        if isinstance(self.content, str):
            return {"role": self.role.value, "content": self.content}

        result: dict[str, Any] = {
            "role": self.role.value,
            "content": self.text or None,
        }
        tool_calls = self.tool_calls
        if tool_calls:
            result["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.input),
                    },
                }
                for call in tool_calls
            ]
        if self.name:
            result["name"] = self.name
        return result
