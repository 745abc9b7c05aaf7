"""Knowledge-base search exposed to the model as a tool."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from docqa.core.tools import Tool

from .base import PayloadFilter
from .document import ScoredPoint
from .manager import DocumentManager

logger = logging.getLogger(__name__)

RETRIEVAL_TOOL_NAME = "search_knowledge_base"

RETRIEVAL_TOOL_DESCRIPTION = (
    "Search and retrieve information from the knowledge base with accurate "
    "citations. Returns matching passages with a citation for each."
)


class RetrievalInput(BaseModel):
    """Arguments of a knowledge-base search."""
    content: str = Field(
        min_length=1,
        description=(
            "What you want to search for in the knowledge base. Be specific "
            "and direct about the content you are looking for."
        ),
    )


class HitMetadata(BaseModel):
    title: str
    author: str
    page: Optional[int] = None


class RetrievalHit(BaseModel):
    """One passage as shown to the model."""
    content: str
    score: float
    citation: str
    metadata: HitMetadata

    @classmethod
    def from_point(cls, point: ScoredPoint) -> "RetrievalHit":
        payload = point.payload
        return cls(
            content=payload.content,
            score=point.score,
            citation=format_citation(payload.source_file),
            metadata=HitMetadata(
                title=payload.title or "Untitled",
                author=payload.author or "Unknown",
                page=payload.page,
            ),
        )


def format_citation(source_file: str) -> str:
    """Markdown citation pointing at a source file."""
    return f"[source]({source_file})"


async def search_knowledge_base(
    manager: DocumentManager,
    request: RetrievalInput,
    top_k: int = 5,
    min_score: Optional[float] = None,
    filter: Optional[PayloadFilter] = None,
) -> list[RetrievalHit]:
    """Run a search and format the results, keeping the query order.

    Args:
        manager: Document manager to query
        request: Search request chosen by the model
        top_k: Maximum number of passages
        min_score: Drop passages scoring below this, if set
        filter: Optional payload equality filter

    Returns:
        Formatted hits
    """
    results = await manager.answer_query(request.content, top_k=top_k, filter=filter)

    hits = [
        RetrievalHit.from_point(point)
        for point in results
        if min_score is None or point.score >= min_score
    ]

    logger.info(f"Search {request.content!r}: {len(hits)} of {len(results)} results kept")
    return hits


def create_retrieval_tool(
    manager: DocumentManager,
    name: str = RETRIEVAL_TOOL_NAME,
    top_k: int = 5,
    min_score: Optional[float] = None,
    filter: Optional[PayloadFilter] = None,
) -> Tool:
    """Create the knowledge-base search tool.

    Args:
        manager: Document manager to search
        name: Name for the tool
        top_k: Passages returned per search
        min_score: Optional relevance floor (off by default)
        filter: Optional payload filter applied to every search

    Returns:
        Tool instance
    """
    async def handler(request: RetrievalInput) -> list[RetrievalHit]:
        return await search_knowledge_base(
            manager,
            request,
            top_k=top_k,
            min_score=min_score,
            filter=filter,
        )

    return Tool(
        name=name,
        description=RETRIEVAL_TOOL_DESCRIPTION,
        input_model=RetrievalInput,
        handler=handler,
    )
