"""
Application - the explicitly constructed set of components shared by the
CLI and the HTTP server.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from docqa.core.agent import AgentAnswer, AgentConfig, AnswerAgent
from docqa.extraction.pdf import PDFExtractor
from docqa.ingest import IngestSummary, ingest_files
from docqa.providers.openai import OpenAIProvider
from docqa.rag.base import BaseEmbedding, BaseVectorIndex
from docqa.rag.chunking import RecursiveChunker
from docqa.rag.embeddings import OpenAIEmbedding
from docqa.rag.manager import DocumentManager
from docqa.rag.tool import create_retrieval_tool
from docqa.rag.vectorstore import ChromaVectorIndex
from docqa.utils.config import Settings

if TYPE_CHECKING:
    from docqa.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class Application:
    """
    Holds one document manager, agent and extractor built from settings.

    Build it with ``await Application.create(settings)``; the collection is
    ensured exactly once during creation.
    """

    def __init__(
        self,
        settings: Settings,
        manager: DocumentManager,
        agent: AnswerAgent,
        extractor: PDFExtractor,
    ):
        self.settings = settings
        self.manager = manager
        self.agent = agent
        self.extractor = extractor

    @classmethod
    async def create(
        cls,
        settings: Settings | None = None,
        *,
        embedding: BaseEmbedding | None = None,
        index: BaseVectorIndex | None = None,
        provider: "LLMProvider | None" = None,
    ) -> "Application":
        """
        Build and initialize the application.

        Args:
            settings: Settings (defaults if None)
            embedding: Embedding model override
            index: Vector index override
            provider: LLM provider override

        Returns:
            Initialized Application
        """
        settings = settings or Settings()
        azure_version = settings.azure_api_version if settings.azure_endpoint else None

        embedding = embedding or OpenAIEmbedding(
            model=settings.embedding_model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            azure_endpoint=settings.azure_endpoint,
            api_version=azure_version,
            dimension=settings.embedding_dimension,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )
        index = index or ChromaVectorIndex(
            url=settings.vector_store_url,
            api_key=settings.vector_store_api_key,
            persist_directory=settings.vector_store_path,
            timeout=settings.request_timeout,
        )
        provider = provider or OpenAIProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            azure_endpoint=settings.azure_endpoint,
            api_version=azure_version,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )

        manager = DocumentManager(
            collection_name=settings.collection_name,
            embedding=embedding,
            index=index,
            chunker=RecursiveChunker(
                chunk_size=settings.chunk_size,
                overlap=settings.chunk_overlap,
            ),
        )
        await manager.initialize()

        agent = AnswerAgent(
            provider=provider,
            tools=[
                create_retrieval_tool(
                    manager,
                    top_k=settings.top_k,
                    min_score=settings.min_score,
                )
            ],
            config=AgentConfig(
                max_turns=settings.max_turns,
                model=settings.chat_model,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            ),
        )

        logger.info(f"Application ready (collection='{settings.collection_name}')")
        return cls(settings, manager, agent, PDFExtractor())

    async def answer(self, question: str) -> AgentAnswer:
        """Answer a question with citations."""
        return await self.agent.answer(question)

    async def ingest_files(self, paths: list[str | Path]) -> IngestSummary:
        """Extract and ingest files, skipping the ones that fail."""
        return await ingest_files(paths, self.extractor, self.manager)
