"""
Test configuration and fixtures.
"""

from typing import Any

import pytest

from docqa.core.message import Message, ToolUseContent
from docqa.providers.base import LLMProvider, LLMResponse
from docqa.rag import (
    DocumentManager,
    DocumentMetadata,
    FakeEmbedding,
    MemoryVectorIndex,
    RecursiveChunker,
    SourceDocument,
)


class ScriptedProvider(LLMProvider):
    """LLM provider that replays queued responses and records requests.

    With ``repeat_last`` the final queued response is returned forever.
    """

    def __init__(self, responses: list[LLMResponse], repeat_last: bool = False):
        self.responses = list(responses)
        self.repeat_last = repeat_last
        self.calls: list[dict[str, Any]] = []

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
        self.calls.append({"messages": messages, "tools": tools, "model": model})
        if self.repeat_last and len(self.responses) == 1:
            return self.responses[0]
        return self.responses.pop(0)


def _text_response(text: str) -> LLMResponse:
    return LLMResponse(message=Message.assistant(text))


def _tool_response(*searches: str, text: str = "", name: str = "search_knowledge_base") -> LLMResponse:
    calls = [
        ToolUseContent(id=f"call_{i}", name=name, input={"content": search})
        for i, search in enumerate(searches)
    ]
    return LLMResponse(message=Message.assistant(text, calls), tool_calls=calls)


def _make_document(text: str, source_file: str = "report.pdf", **metadata: Any) -> SourceDocument:
    page_breaks = metadata.pop("page_breaks", [])
    return SourceDocument(
        text=text,
        metadata=DocumentMetadata(source_file=source_file, **metadata),
        page_breaks=page_breaks,
    )


@pytest.fixture
def scripted_provider():
    """Factory for providers that replay canned responses."""
    return ScriptedProvider


@pytest.fixture
def text_response():
    return _text_response


@pytest.fixture
def tool_response():
    """Factory for responses requesting one knowledge-base search per argument."""
    return _tool_response


@pytest.fixture
def make_document():
    return _make_document


@pytest.fixture
def embedding():
    return FakeEmbedding(dimension=256)


@pytest.fixture
def index():
    return MemoryVectorIndex()


@pytest.fixture
def manager(embedding, index):
    """Document manager over an in-memory index; await initialize() before use."""
    return DocumentManager(
        collection_name="documents",
        embedding=embedding,
        index=index,
        chunker=RecursiveChunker(chunk_size=200, overlap=40),
    )
