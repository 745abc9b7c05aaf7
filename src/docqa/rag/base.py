"""Base classes and abstract interfaces for RAG components."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .document import Chunk, EmbeddedPoint, ScoredPoint

# Filter values are matched by equality against payload fields.
PayloadFilter = dict[str, Any]


class Distance(str, Enum):
    """Similarity metric of a collection."""
    COSINE = "cosine"
    DOT = "dot"


class BaseChunker(ABC):
    """Abstract base class for text chunkers."""

    @abstractmethod
    def split(self, text: str) -> list["Chunk"]:
        """Split text into ordered, overlapping chunks.

        Args:
            text: Raw document text

        Returns:
            List of chunks in document order
        """
        pass


class BaseEmbedding(ABC):
    """Abstract base class for embedding models.

    Embedding models convert text into dense vector representations.
    """

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            One embedding vector per input, in input order
        """
        pass

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector
        """
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        pass


class BaseVectorIndex(ABC):
    """Abstract base class for vector indexes.

    A vector index holds named collections of embedded points with a fixed
    dimension and similarity metric.
    """

    @abstractmethod
    async def ensure_collection(
        self,
        name: str,
        dimension: int,
        distance: Distance = Distance.COSINE,
    ) -> None:
        """Create the collection if it does not exist yet.

        Args:
            name: Collection name
            dimension: Vector dimension
            distance: Similarity metric
        """
        pass

    @abstractmethod
    async def upsert(self, name: str, points: list["EmbeddedPoint"]) -> None:
        """Write points and wait until they are visible to queries.

        Args:
            name: Collection name
            points: Points to write
        """
        pass

    @abstractmethod
    async def query(
        self,
        name: str,
        vector: list[float],
        limit: int = 5,
        filter: Optional[PayloadFilter] = None,
    ) -> list["ScoredPoint"]:
        """Find the points most similar to vector.

        Args:
            name: Collection name
            vector: Query vector
            limit: Maximum number of results
            filter: Payload fields that must all be equal to the given values

        Returns:
            Results sorted by descending score
        """
        pass

    @abstractmethod
    async def delete_by_ids(self, name: str, ids: list[str]) -> None:
        """Delete points by id. Unknown ids are ignored.

        Args:
            name: Collection name
            ids: Point ids to delete
        """
        pass

    @abstractmethod
    async def count(self, name: str) -> int:
        """Return the number of points in the collection."""
        pass
