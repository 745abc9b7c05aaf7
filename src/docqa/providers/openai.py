"""
OpenAI LLM Provider.
"""

import json
import logging
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from docqa.core.message import Message, ToolUseContent
from docqa.errors import ModelFailure
from docqa.providers.base import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """
    LLM Provider for the OpenAI chat completions API.

    When ``azure_endpoint`` is set, requests go to Azure OpenAI and the
    ``model`` argument of ``complete`` is the deployment name.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        azure_endpoint: str | None = None,
        api_version: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
        client: Any = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.organization = organization
        self.azure_endpoint = azure_endpoint
        self.api_version = api_version
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client

    def _get_client(self):
        """Get or create OpenAI client."""
        if self._client is None:
            if self.azure_endpoint:
                self._client = AsyncAzureOpenAI(
                    api_key=self.api_key,
                    azure_endpoint=self.azure_endpoint,
                    api_version=self.api_version,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
            else:
                self._client = AsyncOpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    organization=self.organization,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        *,
        model: str = "gpt-4o",
        temperature: float = 0.0,
        max_tokens: int = 1024,
        **kwargs: Any
    ) -> LLMResponse:
        """Get a completion from OpenAI."""
        client = self._get_client()

        params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if tools:
            params["tools"] = [
                {"type": "function", "function": tool}
                for tool in tools
            ]
            params["tool_choice"] = "auto"

        params.update(kwargs)

        try:
            response = await client.chat.completions.create(**params)
        except OpenAIError as e:
            raise ModelFailure(f"Chat completion failed: {e}") from e

        if not response.choices:
            raise ModelFailure("Chat completion returned no choices")

        choice = response.choices[0]
        message = choice.message

        tool_calls = []
        for tc in message.tool_calls or []:
            tool_calls.append(ToolUseContent(
                id=tc.id,
                name=tc.function.name,
                input=self._parse_arguments(tc.function.name, tc.function.arguments),
            ))

        text = message.content or ""
        assistant = Message.assistant(text, tool_calls) if (text or tool_calls) else None

        return LLMResponse(
            message=assistant,
            tool_calls=tool_calls,
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0
            },
            finish_reason=choice.finish_reason or "stop",
        )

    @staticmethod
    def _parse_arguments(name: str, arguments: Any) -> dict[str, Any]:
        """Parse tool arguments; never use eval()."""
        if isinstance(arguments, dict):
            return arguments
        if not arguments:
            return {}
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError:
            logger.warning(f"Unparseable arguments for tool '{name}': {arguments!r}")
            return {}
        return parsed if isinstance(parsed, dict) else {}
