"""Vector index implementations."""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urlparse

import chromadb
from chromadb.errors import NotFoundError

from docqa.errors import DimensionMismatchError, IndexQueryFailure, IndexWriteFailure

from .base import BaseVectorIndex, Distance, PayloadFilter
from .document import EmbeddedPoint, PointPayload, ScoredPoint

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimension")

    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


def dot_product(a: list[float], b: list[float]) -> float:
    """Calculate the dot product of two vectors."""
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimension")
    return sum(x * y for x, y in zip(a, b))


def validate_filter(filter: Optional[PayloadFilter]) -> None:
    """Reject filter keys that are not payload fields."""
    if not filter:
        return
    unknown = sorted(set(filter) - set(PointPayload.model_fields))
    if unknown:
        raise ValueError(f"Unknown payload filter field(s): {', '.join(unknown)}")


def check_dimension(expected: int, vectors: list[list[float]]) -> None:
    for vector in vectors:
        if len(vector) != expected:
            raise DimensionMismatchError(expected, len(vector))


@dataclass
class _StoredPoint:
    seq: int
    vector: list[float]
    payload: PointPayload


@dataclass
class _MemoryCollection:
    dimension: int
    distance: Distance
    points: dict[str, _StoredPoint] = field(default_factory=dict)
    next_seq: int = 0


class MemoryVectorIndex(BaseVectorIndex):
    """In-memory vector index for testing and small datasets.

    Stores all vectors in memory and performs exact similarity search.
    Ties are broken by insertion order. Not suitable for large-scale
    production use.
    """

    def __init__(self) -> None:
        self._collections: dict[str, _MemoryCollection] = {}

    async def ensure_collection(
        self,
        name: str,
        dimension: int,
        distance: Distance = Distance.COSINE,
    ) -> None:
        existing = self._collections.get(name)
        if existing is not None:
            if existing.dimension != dimension:
                raise DimensionMismatchError(existing.dimension, dimension)
            logger.debug(f"Collection '{name}' already exists")
            return

        self._collections[name] = _MemoryCollection(dimension=dimension, distance=distance)
        logger.info(f"Created collection '{name}' (dimension={dimension}, distance={distance.value})")

    async def upsert(self, name: str, points: list[EmbeddedPoint]) -> None:
        collection = self._collections.get(name)
        if collection is None:
            raise IndexWriteFailure(name, len(points), "collection does not exist")

        check_dimension(collection.dimension, [p.vector for p in points])

        for point in points:
            stored = collection.points.get(point.id)
            if stored is not None:
                stored.vector = list(point.vector)
                stored.payload = point.payload
                continue
            collection.points[point.id] = _StoredPoint(
                seq=collection.next_seq,
                vector=list(point.vector),
                payload=point.payload,
            )
            collection.next_seq += 1

        logger.debug(f"Upserted {len(points)} points into '{name}'")

    async def query(
        self,
        name: str,
        vector: list[float],
        limit: int = 5,
        filter: Optional[PayloadFilter] = None,
    ) -> list[ScoredPoint]:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        validate_filter(filter)

        collection = self._collections.get(name)
        if collection is None:
            raise IndexQueryFailure(name, "collection does not exist")

        check_dimension(collection.dimension, [vector])
        score_fn = cosine_similarity if collection.distance == Distance.COSINE else dot_product

        scored = []
        for point_id, stored in collection.points.items():
            if filter and not self._matches_filter(stored.payload, filter):
                continue
            scored.append((score_fn(vector, stored.vector), stored.seq, point_id, stored))

        scored.sort(key=lambda item: (-item[0], item[1]))

        return [
            ScoredPoint(id=point_id, score=score, payload=stored.payload)
            for score, _, point_id, stored in scored[:limit]
        ]

    def _matches_filter(self, payload: PointPayload, filter: PayloadFilter) -> bool:
        """Check that every filter field equals the payload value."""
        for key, value in filter.items():
            if getattr(payload, key) != value:
                return False
        return True

    async def delete_by_ids(self, name: str, ids: list[str]) -> None:
        collection = self._collections.get(name)
        if collection is None:
            raise IndexWriteFailure(name, len(ids), "collection does not exist")
        for point_id in ids:
            collection.points.pop(point_id, None)

    async def count(self, name: str) -> int:
        collection = self._collections.get(name)
        return len(collection.points) if collection else 0


@dataclass
class _ChromaCollection:
    handle: Any
    dimension: int


class ChromaVectorIndex(BaseVectorIndex):
    """ChromaDB vector index implementation.

    Connects to a Chroma server when ``url`` is given (the API key is sent
    as the ``x-chroma-token`` header), otherwise uses a persistent local
    directory, or an in-memory client when neither is set.
    """

    SPACES = {
        Distance.COSINE: "cosine",
        Distance.DOT: "ip",
    }

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        persist_directory: Optional[str] = None,
        client: Any = None,
        timeout: float = 60.0,
    ):
        """Initialize the ChromaDB vector index.

        Args:
            url: Chroma server URL, e.g. https://chroma.example.com:8000
            api_key: Token for the Chroma server
            persist_directory: Directory for persistent local storage
            client: Pre-built Chroma client (mainly for tests)
            timeout: Seconds allowed for each Chroma call
        """
        self.url = url
        self.api_key = api_key
        self.persist_directory = persist_directory
        self._client = client
        self.timeout = timeout
        self._collections: dict[str, _ChromaCollection] = {}

    def _get_client(self):
        """Get or create the ChromaDB client."""
        if self._client is None:
            if self.url:
                parsed = urlparse(self.url)
                secure = parsed.scheme == "https"
                headers = {"x-chroma-token": self.api_key} if self.api_key else None
                self._client = chromadb.HttpClient(
                    host=parsed.hostname or "localhost",
                    port=parsed.port or (443 if secure else 8000),
                    ssl=secure,
                    headers=headers,
                )
            elif self.persist_directory:
                self._client = chromadb.PersistentClient(path=self.persist_directory)
            else:
                self._client = chromadb.EphemeralClient()
        return self._client

    async def _run(self, func: Callable[[], T]) -> T:
        """Run a blocking client call in the default executor, bounded by the timeout."""
        loop = asyncio.get_event_loop()
        try:
            return await asyncio.wait_for(loop.run_in_executor(None, func), self.timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"Chroma call timed out after {self.timeout}s") from None

    async def ensure_collection(
        self,
        name: str,
        dimension: int,
        distance: Distance = Distance.COSINE,
    ) -> None:
        client = self._get_client()

        try:
            handle = await self._run(lambda: client.get_collection(name=name))
            logger.info(f"Collection '{name}' already exists")
        except NotFoundError:
            metadata = {"hnsw:space": self.SPACES[distance], "dimension": dimension}
            # get_or_create keeps a concurrent creator's collection
            handle = await self._run(
                lambda: client.get_or_create_collection(name=name, metadata=metadata)
            )
            logger.info(f"Created collection '{name}' (dimension={dimension}, distance={distance.value})")

        existing = (handle.metadata or {}).get("dimension")
        if existing is not None and int(existing) != dimension:
            raise DimensionMismatchError(int(existing), dimension)

        self._collections[name] = _ChromaCollection(handle=handle, dimension=dimension)

    async def upsert(self, name: str, points: list[EmbeddedPoint]) -> None:
        collection = self._collections.get(name)
        if collection is None:
            raise IndexWriteFailure(name, len(points), "collection has not been ensured")
        if not points:
            return

        check_dimension(collection.dimension, [p.vector for p in points])

        ids = [p.id for p in points]
        embeddings = [p.vector for p in points]
        documents = [p.payload.content for p in points]
        metadatas = [p.payload.model_dump(exclude_none=True) for p in points]

        try:
            await self._run(
                lambda: collection.handle.upsert(
                    ids=ids,
                    embeddings=embeddings,
                    documents=documents,
                    metadatas=metadatas,
                )
            )
        except Exception as e:
            raise IndexWriteFailure(name, len(points), str(e)) from e

        logger.debug(f"Upserted {len(points)} points into Chroma collection '{name}'")

    async def query(
        self,
        name: str,
        vector: list[float],
        limit: int = 5,
        filter: Optional[PayloadFilter] = None,
    ) -> list[ScoredPoint]:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        validate_filter(filter)

        collection = self._collections.get(name)
        if collection is None:
            raise IndexQueryFailure(name, "collection has not been ensured")

        check_dimension(collection.dimension, [vector])
        where = self._build_where(filter)

        try:
            results = await self._run(
                lambda: collection.handle.query(
                    query_embeddings=[vector],
                    n_results=limit,
                    where=where,
                    include=["documents", "metadatas", "distances"],
                )
            )
        except Exception as e:
            raise IndexQueryFailure(name, str(e)) from e

        scored = []
        if results and results["ids"] and results["ids"][0]:
            for i, point_id in enumerate(results["ids"][0]):
                metadata = dict(results["metadatas"][0][i] or {})
                metadata.setdefault("content", results["documents"][0][i])

                # Chroma returns distances; both spaces use 1 - similarity.
                # Float error can push it just outside [-1, 1].
                distance = results["distances"][0][i]
                score = max(-1.0, min(1.0, 1.0 - distance))
                scored.append(ScoredPoint(
                    id=point_id,
                    score=score,
                    payload=PointPayload.model_validate(metadata),
                ))

        scored.sort(key=lambda point: point.score, reverse=True)
        return scored[:limit]

    @staticmethod
    def _build_where(filter: Optional[PayloadFilter]) -> Optional[dict[str, Any]]:
        """Translate an equality filter into a Chroma where clause."""
        if not filter:
            return None
        clauses = [{key: {"$eq": value}} for key, value in filter.items()]
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    async def delete_by_ids(self, name: str, ids: list[str]) -> None:
        collection = self._collections.get(name)
        if collection is None:
            raise IndexWriteFailure(name, len(ids), "collection has not been ensured")
        if not ids:
            return

        try:
            await self._run(lambda: collection.handle.delete(ids=list(ids)))
        except Exception as e:
            raise IndexWriteFailure(name, len(ids), str(e)) from e

    async def count(self, name: str) -> int:
        collection = self._collections.get(name)
        if collection is None:
            return 0
        return await self._run(collection.handle.count)
