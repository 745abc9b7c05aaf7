"""
docqa - cited question answering over PDF reports.
"""

from docqa.app import Application
from docqa.core.agent import AgentAnswer, AgentConfig, AnswerAgent
from docqa.core.message import Message, Role
from docqa.core.tools import Tool
from docqa.errors import (
    DimensionMismatchError,
    DocQAError,
    EmbeddingFailure,
    ExtractionFailure,
    IndexQueryFailure,
    IndexWriteFailure,
    IngestionFailure,
    ModelFailure,
    ToolExecutionFailure,
)
from docqa.extraction import ExtractedDocument, PDFExtractor
from docqa.rag import (
    Chunk,
    ChromaVectorIndex,
    DocumentManager,
    DocumentMetadata,
    EmbeddedPoint,
    FakeEmbedding,
    MemoryVectorIndex,
    OpenAIEmbedding,
    PointPayload,
    RecursiveChunker,
    ScoredPoint,
    SourceDocument,
    create_retrieval_tool,
)
from docqa.utils.config import Settings, load_config

__version__ = "0.1.0"
__all__ = [
    # Application
    "Application",
    "Settings",
    "load_config",
    # Agent
    "AgentAnswer",
    "AgentConfig",
    "AnswerAgent",
    "Message",
    "Role",
    "Tool",
    # Errors
    "DimensionMismatchError",
    "DocQAError",
    "EmbeddingFailure",
    "ExtractionFailure",
    "IndexQueryFailure",
    "IndexWriteFailure",
    "IngestionFailure",
    "ModelFailure",
    "ToolExecutionFailure",
    # Extraction
    "ExtractedDocument",
    "PDFExtractor",
    # RAG
    "Chunk",
    "ChromaVectorIndex",
    "DocumentManager",
    "DocumentMetadata",
    "EmbeddedPoint",
    "FakeEmbedding",
    "MemoryVectorIndex",
    "OpenAIEmbedding",
    "PointPayload",
    "RecursiveChunker",
    "ScoredPoint",
    "SourceDocument",
    "create_retrieval_tool",
]
