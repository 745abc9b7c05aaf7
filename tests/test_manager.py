"""Tests for the document manager."""

import pytest

from docqa.errors import EmbeddingFailure, IngestionFailure
from docqa.rag import DocumentManager, FakeEmbedding, MemoryVectorIndex, RecursiveChunker


class RejectingEmbedding(FakeEmbedding):
    """Fails any batch that contains the word 'poison'."""

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if any("poison" in text for text in texts):
            raise EmbeddingFailure(len(texts), "input rejected")
        return await super().embed_documents(texts)


class ShortEmbedding(FakeEmbedding):
    """Returns one vector fewer than requested."""

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        vectors = await super().embed_documents(texts)
        return vectors[:-1]


class TestDocumentManager:
    """Tests for DocumentManager."""

    @pytest.mark.asyncio
    async def test_requires_initialize(self, manager, make_document):
        with pytest.raises(RuntimeError):
            await manager.ingest(make_document("Revenue grew."))

        with pytest.raises(RuntimeError):
            await manager.answer_query("revenue")

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, manager, make_document):
        await manager.initialize()
        await manager.ingest(make_document("Revenue grew."))
        await manager.initialize()

        assert manager.initialized
        assert await manager.count_points() == 1

    @pytest.mark.asyncio
    async def test_ingest_writes_one_point_per_chunk(self, manager, make_document):
        await manager.initialize()
        text = " ".join(f"sentence{i} about quarterly results." for i in range(40))

        ids = await manager.ingest(make_document(text))

        expected_chunks = manager.chunker.split(text)
        assert len(ids) == len(expected_chunks) > 1
        assert len(set(ids)) == len(ids)
        assert await manager.count_points() == len(ids)

    @pytest.mark.asyncio
    async def test_exact_text_query_ranks_first(self, manager, make_document):
        await manager.initialize()
        await manager.ingest(make_document("The cafeteria menu changes every Tuesday.", "memo.pdf"))
        await manager.ingest(make_document("Q4 revenue was 4.2 million dollars, up 12 percent.", "report.pdf"))
        await manager.ingest(make_document("Headcount stayed flat across all regions.", "hr.pdf"))

        results = await manager.answer_query("Q4 revenue was 4.2 million dollars, up 12 percent.")

        assert results[0].payload.source_file == "report.pdf"
        assert results[0].score > 0.9
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_payload_carries_document_metadata(self, manager, make_document):
        await manager.initialize()
        await manager.ingest(make_document(
            "Net income was 1.1 million.",
            "annual.pdf",
            title="Annual Report",
            author="Finance Team",
            total_pages=12,
        ))

        [result] = await manager.answer_query("net income", top_k=1)
        payload = result.payload

        assert payload.content == "Net income was 1.1 million."
        assert payload.title == "Annual Report"
        assert payload.author == "Finance Team"
        assert payload.total_pages == 12
        assert payload.source_file == "annual.pdf"
        assert payload.chunk_index == 0
        assert payload.page == 1

    @pytest.mark.asyncio
    async def test_default_metadata(self, manager, make_document):
        await manager.initialize()
        await manager.ingest(make_document("Untitled memo text."))

        [result] = await manager.answer_query("memo", top_k=1)

        assert result.payload.title == "Untitled"
        assert result.payload.author == "Unknown"
        assert result.payload.page is None

    @pytest.mark.asyncio
    async def test_chunks_are_stamped_with_pages(self, manager, make_document):
        await manager.initialize()
        first_page = "alpha " * 40
        second_page = "beta " * 40
        text = first_page + "\n" + second_page
        page_break = len(first_page) + 1

        await manager.ingest(make_document(text, total_pages=2, page_breaks=[page_break]))
        results = await manager.answer_query("alpha beta", top_k=50)

        assert {r.payload.page for r in results} == {1, 2}
        for result in results:
            expected = 1 if result.payload.start_offset < page_break else 2
            assert result.payload.page == expected

    @pytest.mark.asyncio
    async def test_duplicate_ingestion_adds_new_points(self, manager, make_document):
        await manager.initialize()
        document = make_document("Operating margin improved to 18 percent.")

        first = await manager.ingest(document)
        second = await manager.ingest(document)

        assert len(first) == len(second) == 1
        assert set(first).isdisjoint(second)
        assert await manager.count_points() == 2

    @pytest.mark.asyncio
    async def test_blank_document_writes_nothing(self, manager, make_document):
        await manager.initialize()

        assert await manager.ingest(make_document("  \n\n ")) == []
        assert await manager.count_points() == 0

    @pytest.mark.asyncio
    async def test_embedding_failure_writes_nothing(self, make_document):
        manager = DocumentManager("documents", RejectingEmbedding(), MemoryVectorIndex())
        await manager.initialize()

        with pytest.raises(IngestionFailure) as exc_info:
            await manager.ingest(make_document("This poison pill fails.", "bad.pdf"))

        assert exc_info.value.source == "bad.pdf"
        assert isinstance(exc_info.value.cause, EmbeddingFailure)
        assert await manager.count_points() == 0

    @pytest.mark.asyncio
    async def test_vector_count_mismatch_writes_nothing(self, make_document):
        manager = DocumentManager("documents", ShortEmbedding(), MemoryVectorIndex())
        await manager.initialize()

        with pytest.raises(IngestionFailure):
            await manager.ingest(make_document("Some text."))
        assert await manager.count_points() == 0

    @pytest.mark.asyncio
    async def test_ingest_many_skips_failures(self, make_document):
        manager = DocumentManager(
            "documents",
            RejectingEmbedding(),
            MemoryVectorIndex(),
            chunker=RecursiveChunker(chunk_size=200, overlap=40),
        )
        await manager.initialize()

        outcomes = await manager.ingest_many([
            make_document("Revenue grew.", "a.pdf"),
            make_document("A poison document.", "b.pdf"),
            make_document("Costs fell.", "c.pdf"),
        ])

        assert [o.source for o in outcomes] == ["a.pdf", "b.pdf", "c.pdf"]
        assert [o.ok for o in outcomes] == [True, False, True]
        assert "input rejected" in outcomes[1].error
        assert await manager.count_points() == 2

    @pytest.mark.asyncio
    async def test_query_filter(self, manager, make_document):
        await manager.initialize()
        await manager.ingest(make_document("Revenue grew in 2022.", "2022.pdf"))
        await manager.ingest(make_document("Revenue grew in 2023.", "2023.pdf"))

        results = await manager.answer_query("revenue", filter={"source_file": "2023.pdf"})

        assert [r.payload.source_file for r in results] == ["2023.pdf"]

    @pytest.mark.asyncio
    async def test_delete(self, manager, make_document):
        await manager.initialize()
        ids = await manager.ingest(make_document("Temporary note."))

        await manager.delete(ids)

        assert await manager.count_points() == 0
        assert await manager.answer_query("note") == []
