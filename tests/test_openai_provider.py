"""
Tests for the OpenAI provider with a fake chat-completions client.
"""

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from docqa.errors import ModelFailure
from docqa.providers import OpenAIProvider


def make_tool_call(call_id: str, name: str, arguments: str):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def make_completion(content=None, tool_calls=None, finish_reason="stop"):
    return SimpleNamespace(
        choices=[SimpleNamespace(
            message=SimpleNamespace(content=content, tool_calls=tool_calls),
            finish_reason=finish_reason,
        )],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests: list[dict] = []

    async def create(self, **params):
        self.requests.append(params)
        if self.error:
            raise self.error
        return self.response


def make_provider(completions: FakeCompletions) -> OpenAIProvider:
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIProvider(client=client)


SEARCH_TOOL = {
    "name": "search_knowledge_base",
    "description": "Search",
    "parameters": {"type": "object", "properties": {"content": {"type": "string"}}},
}


class TestOpenAIProvider:
    """Tests for OpenAIProvider."""

    @pytest.mark.asyncio
    async def test_text_response(self):
        completions = FakeCompletions(make_completion(content="Revenue was $4.2M [source](report.pdf)."))
        provider = make_provider(completions)

        response = await provider.complete([{"role": "user", "content": "Revenue?"}], model="gpt-4o")

        assert response.text == "Revenue was $4.2M [source](report.pdf)."
        assert response.tool_calls == []
        assert response.usage == {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
        assert "tools" not in completions.requests[0]

    @pytest.mark.asyncio
    async def test_request_parameters(self):
        completions = FakeCompletions(make_completion(content="ok"))
        provider = make_provider(completions)

        await provider.complete(
            [{"role": "user", "content": "Revenue?"}],
            [SEARCH_TOOL],
            model="my-deployment",
            temperature=0.2,
            max_tokens=256,
        )

        request = completions.requests[0]
        assert request["model"] == "my-deployment"
        assert request["temperature"] == 0.2
        assert request["max_tokens"] == 256
        assert request["tools"] == [{"type": "function", "function": SEARCH_TOOL}]
        assert request["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_tool_calls(self):
        completions = FakeCompletions(make_completion(
            tool_calls=[
                make_tool_call("call_1", "search_knowledge_base", '{"content": "Q4 revenue"}'),
                make_tool_call("call_2", "search_knowledge_base", '{"content": "Q3 revenue"}'),
            ],
            finish_reason="tool_calls",
        ))
        provider = make_provider(completions)

        response = await provider.complete([{"role": "user", "content": "Revenue?"}], [SEARCH_TOOL], model="gpt-4o")

        assert [c.id for c in response.tool_calls] == ["call_1", "call_2"]
        assert response.tool_calls[0].input == {"content": "Q4 revenue"}
        assert response.finish_reason == "tool_calls"
        assert response.message is not None
        assert response.message.tool_calls == response.tool_calls
        assert response.text == ""

    @pytest.mark.asyncio
    async def test_unparseable_arguments(self):
        completions = FakeCompletions(make_completion(
            tool_calls=[make_tool_call("call_1", "search_knowledge_base", "{not json")],
        ))
        provider = make_provider(completions)

        response = await provider.complete([{"role": "user", "content": "Revenue?"}], [SEARCH_TOOL], model="gpt-4o")

        assert response.tool_calls[0].input == {}

    @pytest.mark.asyncio
    async def test_empty_message(self):
        provider = make_provider(FakeCompletions(make_completion(content=None)))

        response = await provider.complete([{"role": "user", "content": "Revenue?"}], model="gpt-4o")

        assert response.message is None
        assert response.text == ""

    @pytest.mark.asyncio
    async def test_api_error(self):
        provider = make_provider(FakeCompletions(error=OpenAIError("invalid api key")))

        with pytest.raises(ModelFailure, match="invalid api key"):
            await provider.complete([{"role": "user", "content": "Revenue?"}], model="gpt-4o")

    @pytest.mark.asyncio
    async def test_no_choices(self):
        response = SimpleNamespace(choices=[], usage=None)
        provider = make_provider(FakeCompletions(response))

        with pytest.raises(ModelFailure):
            await provider.complete([{"role": "user", "content": "Revenue?"}], model="gpt-4o")
