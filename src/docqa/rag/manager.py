"""Document manager: ingestion and similarity queries over one collection."""

import logging
import uuid
from typing import Optional

from pydantic import BaseModel

from docqa.errors import DocQAError, EmbeddingFailure, IngestionFailure

from .base import BaseChunker, BaseEmbedding, BaseVectorIndex, Distance, PayloadFilter
from .chunking import RecursiveChunker
from .document import EmbeddedPoint, PointPayload, ScoredPoint, SourceDocument

logger = logging.getLogger(__name__)


class IngestOutcome(BaseModel):
    """Result of ingesting one document in a batch run."""
    source: str
    point_ids: list[str] = []
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DocumentManager:
    """Owns the chunker and the index handle for a single collection.

    Ingestion chunks a document fully in memory, embeds all chunks in one
    batched call, and upserts the resulting points only if every chunk was
    embedded. It is the only component that writes to the collection.

    Example:
        ```python
        manager = DocumentManager(
            collection_name="documents",
            embedding=OpenAIEmbedding(),
            index=ChromaVectorIndex(url="http://localhost:8000"),
        )
        await manager.initialize()

        await manager.ingest(SourceDocument(
            text="Revenue grew 12% year over year.",
            metadata=DocumentMetadata(source_file="report.pdf", total_pages=1),
        ))
        results = await manager.answer_query("What was the revenue growth?")
        ```
    """

    def __init__(
        self,
        collection_name: str,
        embedding: BaseEmbedding,
        index: BaseVectorIndex,
        chunker: Optional[BaseChunker] = None,
        distance: Distance = Distance.COSINE,
    ):
        """Initialize the document manager.

        Args:
            collection_name: Name of the collection to manage
            embedding: Embedding model for chunks and queries
            index: Vector index holding the collection
            chunker: Text chunker (default: RecursiveChunker)
            distance: Similarity metric used when creating the collection
        """
        self.collection_name = collection_name
        self.embedding = embedding
        self.index = index
        self.chunker = chunker or RecursiveChunker()
        self.distance = distance
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Ensure the collection exists. Safe to call more than once."""
        if self._initialized:
            return
        await self.index.ensure_collection(
            self.collection_name,
            self.embedding.dimension,
            self.distance,
        )
        self._initialized = True

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DocumentManager.initialize() must be awaited before use")

    async def ingest(self, document: SourceDocument) -> list[str]:
        """Chunk, embed and store one document.

        Args:
            document: Document to ingest

        Returns:
            Ids of the points written

        Raises:
            IngestionFailure: If embedding or writing failed. Nothing is
                written when embedding fails.
        """
        self._require_initialized()
        source = document.identifier

        chunks = self.chunker.split(document.text)
        if not chunks:
            logger.info(f"Document '{source}' has no text, nothing to ingest")
            return []

        try:
            vectors = await self.embedding.embed_documents([c.content for c in chunks])
            if len(vectors) != len(chunks):
                raise EmbeddingFailure(len(chunks), f"got {len(vectors)} vectors")

            points = [
                EmbeddedPoint(
                    id=str(uuid.uuid4()),
                    vector=vector,
                    payload=PointPayload.from_chunk(
                        chunk,
                        document.metadata,
                        page=document.page_at(chunk.start_offset),
                    ),
                )
                for chunk, vector in zip(chunks, vectors)
            ]

            await self.index.upsert(self.collection_name, points)
        except DocQAError as e:
            raise IngestionFailure(source, e) from e

        logger.info(f"Ingested '{source}': {len(points)} chunks")
        return [p.id for p in points]

    async def ingest_many(self, documents: list[SourceDocument]) -> list[IngestOutcome]:
        """Ingest documents one by one; a failing document does not stop the run.

        Args:
            documents: Documents to ingest

        Returns:
            One outcome per document, in input order
        """
        outcomes = []

        for document in documents:
            try:
                point_ids = await self.ingest(document)
            except IngestionFailure as e:
                logger.warning(f"Skipping '{e.source}': {e.cause}")
                outcomes.append(IngestOutcome(source=e.source, error=str(e.cause)))
                continue
            outcomes.append(IngestOutcome(source=document.identifier, point_ids=point_ids))

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(f"Ingested {len(outcomes) - failed}/{len(outcomes)} documents")
        return outcomes

    async def answer_query(
        self,
        question: str,
        top_k: int = 5,
        filter: Optional[PayloadFilter] = None,
    ) -> list[ScoredPoint]:
        """Return the passages most similar to a question.

        Args:
            question: Natural-language question or search phrase
            top_k: Maximum number of results
            filter: Optional payload equality filter

        Returns:
            Results sorted by descending similarity
        """
        self._require_initialized()

        vector = await self.embedding.embed_query(question)
        return await self.index.query(self.collection_name, vector, top_k, filter)

    async def delete(self, ids: list[str]) -> None:
        """Delete points by id."""
        self._require_initialized()
        await self.index.delete_by_ids(self.collection_name, ids)

    async def count_points(self) -> int:
        """Return the number of points in the collection."""
        self._require_initialized()
        return await self.index.count(self.collection_name)
