"""
Base LLM Provider interface.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from docqa.core.message import Message, ToolUseContent


class LLMResponse(BaseModel):
    """Response from an LLM."""
    message: Message | None = None
    tool_calls: list[ToolUseContent] = Field(default_factory=list)
    usage: dict[str, int] = Field(default_factory=dict)
    finish_reason: str = "stop"

    @property
    def text(self) -> str:
        return self.message.text if self.message else ""


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        *,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        **kwargs: Any
    ) -> LLMResponse:
        """
        Get a completion from the LLM.

        Args:
            messages: List of messages in API format
            tools: List of available tools
            model: Model identifier (deployment name on Azure)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional provider-specific options

        Returns:
            LLMResponse with the assistant message and requested tool calls

        Raises:
            ModelFailure: If the model call fails
        """
        pass
