"""RAG (Retrieval-Augmented Generation) components for docqa.

This module provides:
- Chunk, document and point data structures
- Recursive chunking with exact overlap
- Embedding providers (OpenAI / Azure OpenAI, fake)
- Vector indexes (in-memory, ChromaDB)
- The document manager and the knowledge-base search tool

Example:
    ```python
    from docqa.rag import (
        DocumentManager,
        DocumentMetadata,
        FakeEmbedding,
        MemoryVectorIndex,
        SourceDocument,
    )

    manager = DocumentManager("documents", FakeEmbedding(), MemoryVectorIndex())
    await manager.initialize()
    await manager.ingest(SourceDocument(
        text="Python is a programming language.",
        metadata=DocumentMetadata(source_file="intro.pdf"),
    ))
    results = await manager.answer_query("What is Python?")
    ```
"""

from .document import (
    Chunk,
    DocumentMetadata,
    EmbeddedPoint,
    PointPayload,
    ScoredPoint,
    SourceDocument,
)
from .base import (
    BaseChunker,
    BaseEmbedding,
    BaseVectorIndex,
    Distance,
    PayloadFilter,
)
from .chunking import RecursiveChunker
from .embeddings import FakeEmbedding, OpenAIEmbedding, normalize_query
from .vectorstore import ChromaVectorIndex, MemoryVectorIndex, cosine_similarity
from .manager import DocumentManager, IngestOutcome
from .tool import (
    RETRIEVAL_TOOL_NAME,
    RetrievalHit,
    RetrievalInput,
    create_retrieval_tool,
    format_citation,
    search_knowledge_base,
)

__all__ = [
    # Data structures
    "Chunk",
    "DocumentMetadata",
    "EmbeddedPoint",
    "PointPayload",
    "ScoredPoint",
    "SourceDocument",
    # Base classes
    "BaseChunker",
    "BaseEmbedding",
    "BaseVectorIndex",
    "Distance",
    "PayloadFilter",
    # Chunking
    "RecursiveChunker",
    # Embeddings
    "FakeEmbedding",
    "OpenAIEmbedding",
    "normalize_query",
    # Vector indexes
    "ChromaVectorIndex",
    "MemoryVectorIndex",
    "cosine_similarity",
    # Manager and tool
    "DocumentManager",
    "IngestOutcome",
    "RETRIEVAL_TOOL_NAME",
    "RetrievalHit",
    "RetrievalInput",
    "create_retrieval_tool",
    "format_citation",
    "search_knowledge_base",
]
