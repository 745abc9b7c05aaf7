"""Document, chunk and point data structures for RAG."""

from bisect import bisect_right
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PAYLOAD_SCHEMA_VERSION = 1


class Chunk(BaseModel):
    """A contiguous slice of a document's text.

    Attributes:
        content: The text of the chunk, equal to text[start_offset:end_offset]
        index: Position of the chunk in document order, starting at 0
        start_offset: Start character offset in the source text
        end_offset: End character offset (exclusive) in the source text
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)
    index: int = Field(ge=0)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)

    def __repr__(self) -> str:
        content_preview = self.content[:30] + "..." if len(self.content) > 30 else self.content
        return f"Chunk(index={self.index}, content={content_preview!r})"


class DocumentMetadata(BaseModel):
    """Document-level attributes copied onto every chunk of a document."""

    model_config = ConfigDict(frozen=True)

    title: str = "Untitled"
    author: str = "Unknown"
    total_pages: int = Field(default=0, ge=0)
    source_file: str


class SourceDocument(BaseModel):
    """A document ready for ingestion.

    Attributes:
        text: Full document text
        metadata: Document-level metadata
        page_breaks: Character offsets at which pages 2..N begin
    """

    text: str
    metadata: DocumentMetadata
    page_breaks: list[int] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.metadata.source_file

    def page_at(self, offset: int) -> Optional[int]:
        """Return the 1-based page containing offset, if pages are known."""
        if not self.page_breaks and self.metadata.total_pages == 0:
            return None
        return bisect_right(self.page_breaks, offset) + 1

    def __repr__(self) -> str:
        return f"SourceDocument(source={self.identifier!r}, length={len(self.text)})"


class PointPayload(BaseModel):
    """Versioned payload stored next to each vector.

    The fields are the only keys that query filters may reference.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: int = PAYLOAD_SCHEMA_VERSION
    content: str
    chunk_index: int
    title: str = "Untitled"
    author: str = "Unknown"
    total_pages: int = 0
    source_file: str
    page: Optional[int] = None
    start_offset: int = 0
    end_offset: int = 0

    @classmethod
    def from_chunk(
        cls,
        chunk: Chunk,
        metadata: DocumentMetadata,
        page: Optional[int] = None,
    ) -> "PointPayload":
        return cls(
            content=chunk.content,
            chunk_index=chunk.index,
            title=metadata.title,
            author=metadata.author,
            total_pages=metadata.total_pages,
            source_file=metadata.source_file,
            page=page,
            start_offset=chunk.start_offset,
            end_offset=chunk.end_offset,
        )


class EmbeddedPoint(BaseModel):
    """The unit stored in the vector index."""

    model_config = ConfigDict(frozen=True)

    id: str
    vector: list[float]
    payload: PointPayload

    def __repr__(self) -> str:
        return f"EmbeddedPoint(id={self.id!r}, dim={len(self.vector)})"


class ScoredPoint(BaseModel):
    """A query result: a stored point and its similarity to the query.

    Attributes:
        id: Point identifier
        score: Similarity score (higher is better)
        payload: Stored payload
    """

    id: str
    score: float
    payload: PointPayload

    def __repr__(self) -> str:
        return f"ScoredPoint(id={self.id!r}, score={self.score:.4f})"
