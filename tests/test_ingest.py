"""
Tests for the ingestion entry point and the Application wiring.
"""

from pathlib import Path

import pytest

from docqa.app import Application
from docqa.errors import EmbeddingFailure, ExtractionFailure
from docqa.extraction import ExtractedDocument
from docqa.ingest import build_parser, ingest_files
from docqa.rag import ChromaVectorIndex, DocumentManager, FakeEmbedding, MemoryVectorIndex
from docqa.utils import Settings


class StubExtractor:
    """Returns canned documents keyed by file name."""

    def __init__(self, documents: dict[str, str]):
        self.documents = documents
        self.seen: list[str] = []

    def extract(self, path) -> ExtractedDocument:
        name = Path(path).name
        self.seen.append(name)
        if name not in self.documents:
            raise ExtractionFailure(str(path), "EOF marker not found")
        return ExtractedDocument(text=self.documents[name], source_file=name, page_count=1)


class RejectingEmbedding(FakeEmbedding):
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if any("poison" in text for text in texts):
            raise EmbeddingFailure(len(texts), "input rejected")
        return await super().embed_documents(texts)


class TestIngestFiles:
    """Tests for ingest_files."""

    @pytest.mark.asyncio
    async def test_skips_unreadable_files(self, manager):
        await manager.initialize()
        extractor = StubExtractor({
            "q3.pdf": "Q3 revenue was 3.9 million.",
            "q4.pdf": "Q4 revenue was 4.2 million.",
        })

        summary = await ingest_files(["q3.pdf", "broken.pdf", "q4.pdf"], extractor, manager)

        assert extractor.seen == ["q3.pdf", "broken.pdf", "q4.pdf"]
        assert [o.source for o in summary.succeeded] == ["q3.pdf", "q4.pdf"]
        assert [o.source for o in summary.failed] == ["broken.pdf"]
        assert "EOF marker not found" in summary.failed[0].error
        assert not summary.ok
        assert await manager.count_points() == 2

    @pytest.mark.asyncio
    async def test_all_succeed(self, manager):
        await manager.initialize()
        extractor = StubExtractor({"q4.pdf": "Q4 revenue was 4.2 million."})

        summary = await ingest_files(["q4.pdf"], extractor, manager)

        assert summary.ok
        assert len(summary.succeeded[0].point_ids) == 1

    @pytest.mark.asyncio
    async def test_ingestion_failure_is_recorded(self):
        manager = DocumentManager("documents", RejectingEmbedding(), MemoryVectorIndex())
        await manager.initialize()
        extractor = StubExtractor({
            "bad.pdf": "A poison paragraph.",
            "good.pdf": "Costs fell.",
        })

        summary = await ingest_files(["bad.pdf", "good.pdf"], extractor, manager)

        assert [o.source for o in summary.failed] == ["bad.pdf"]
        assert [o.source for o in summary.succeeded] == ["good.pdf"]
        assert await manager.count_points() == 1


class TestParser:
    """Tests for the ingestion CLI parser."""

    def test_paths_and_config(self):
        args = build_parser().parse_args(["a.pdf", "b.pdf", "--config", "prod.yaml"])

        assert args.paths == ["a.pdf", "b.pdf"]
        assert args.config == "prod.yaml"

    def test_default_config(self):
        args = build_parser().parse_args(["a.pdf"])
        assert args.config == "docqa.yaml"

    def test_requires_paths(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestApplication:
    """Tests for Application.create with injected components."""

    @pytest.mark.asyncio
    async def test_create_and_answer(self, scripted_provider, tool_response, text_response):
        index = MemoryVectorIndex()
        provider = scripted_provider([
            tool_response("Q4 revenue"),
            text_response("Q4 revenue was 4.2 million [source](q4.pdf)."),
        ])
        settings = Settings(collection_name="reports", chunk_size=300, chunk_overlap=50, max_turns=3)

        app = await Application.create(
            settings,
            embedding=FakeEmbedding(dimension=64),
            index=index,
            provider=provider,
        )
        app.extractor = StubExtractor({"q4.pdf": "Q4 revenue was 4.2 million."})

        summary = await app.ingest_files(["q4.pdf"])
        answer = await app.answer("What was Q4 revenue?")

        assert summary.ok
        assert await index.count("reports") == 1
        assert app.manager.chunker.chunk_size == 300
        assert app.agent.config.max_turns == 3
        assert answer.text == "Q4 revenue was 4.2 million [source](q4.pdf)."
        assert "[source](q4.pdf)" in provider.calls[1]["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_chroma_index_uses_request_timeout(self, monkeypatch, scripted_provider):
        class Collection:
            metadata = {"dimension": 64}

        class Client:
            def get_collection(self, name):
                return Collection()

        monkeypatch.setattr(ChromaVectorIndex, "_get_client", lambda self: Client())
        settings = Settings(embedding_dimension=64, request_timeout=5.0)

        app = await Application.create(
            settings,
            embedding=FakeEmbedding(dimension=64),
            provider=scripted_provider([]),
        )

        assert isinstance(app.manager.index, ChromaVectorIndex)
        assert app.manager.index.timeout == 5.0
