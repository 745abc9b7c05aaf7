"""Embedding model implementations."""

import hashlib
import logging
import math
import re
from typing import Any, Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from docqa.errors import DimensionMismatchError, EmbeddingFailure

from .base import BaseEmbedding

logger = logging.getLogger(__name__)


class OpenAIEmbedding(BaseEmbedding):
    """OpenAI embedding model.

    Uses the OpenAI embeddings API, or an Azure OpenAI deployment when
    ``azure_endpoint`` is given (``model`` is then the deployment name).
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-3-large",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        azure_endpoint: Optional[str] = None,
        api_version: Optional[str] = None,
        dimension: Optional[int] = None,
        batch_size: Optional[int] = None,
        timeout: float = 60.0,
        max_retries: int = 2,
        client: Any = None,
    ):
        """Initialize the OpenAI embedding model.

        Args:
            model: Model name, or Azure deployment name
            api_key: API key (uses env var if not provided)
            base_url: Optional base URL for API
            azure_endpoint: Azure OpenAI resource endpoint
            api_version: Azure OpenAI API version
            dimension: Expected output dimension (model default if None)
            batch_size: Split batches larger than this into several requests
            timeout: Request timeout in seconds
            max_retries: SDK-level retries for transient errors
            client: Pre-built async client (mainly for tests)
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.azure_endpoint = azure_endpoint
        self.api_version = api_version
        self.batch_size = batch_size
        self.timeout = timeout
        self.max_retries = max_retries
        self._requested_dimension = dimension
        self._client = client

    @property
    def dimension(self) -> int:
        if self._requested_dimension:
            return self._requested_dimension
        return self.MODEL_DIMENSIONS.get(self.model, 1536)

    def _get_client(self):
        """Get or create the OpenAI client."""
        if self._client is None:
            if self.azure_endpoint:
                self._client = AsyncAzureOpenAI(
                    api_key=self.api_key,
                    azure_endpoint=self.azure_endpoint,
                    api_version=self.api_version,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
            else:
                self._client = AsyncOpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
        return self._client

    async def _create(self, texts: list[str]) -> list[list[float]]:
        client = self._get_client()

        params: dict[str, Any] = {"model": self.model, "input": texts}
        # Only models with a known native size accept a shortened output
        native = self.MODEL_DIMENSIONS.get(self.model)
        if self._requested_dimension and native and self._requested_dimension != native:
            params["dimensions"] = self._requested_dimension

        try:
            response = await client.embeddings.create(**params)
        except OpenAIError as e:
            raise EmbeddingFailure(len(texts), str(e)) from e

        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise EmbeddingFailure(
                len(texts),
                f"model returned {len(data)} vectors",
            )

        vectors = [list(item.embedding) for item in data]
        for vector in vectors:
            if len(vector) != self.dimension:
                raise DimensionMismatchError(self.dimension, len(vector))
        return vectors

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts in as few requests as possible.

        Either every text is embedded or an EmbeddingFailure is raised.
        """
        if not texts:
            return []

        if not self.batch_size or len(texts) <= self.batch_size:
            return await self._create(texts)

        all_embeddings = []
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i : i + self.batch_size]
            try:
                all_embeddings.extend(await self._create(batch))
            except EmbeddingFailure as e:
                raise EmbeddingFailure(len(texts), e.message) from e

        return all_embeddings

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using OpenAI API."""
        vectors = await self._create([normalize_query(text)])
        return vectors[0]


class FakeEmbedding(BaseEmbedding):
    """Deterministic hashed bag-of-words embedding.

    Each word is hashed into one of ``dimension`` buckets, so texts that
    share words have positive cosine similarity and identical texts have a
    similarity of 1. Useful for tests and offline runs.
    """

    def __init__(self, dimension: int = 256, seed: int = 42):
        """Initialize the fake embedding.

        Args:
            dimension: Dimension of the embedding vectors
            seed: Hash seed
        """
        self._dimension = dimension
        self.seed = seed

    @property
    def dimension(self) -> int:
        return self._dimension

    def _hash_text(self, text: str) -> list[float]:
        vector = [0.0] * self._dimension
        for token in re.findall(r"\w+", text.lower()):
            digest = hashlib.sha256(f"{self.seed}:{token}".encode()).digest()
            bucket = int.from_bytes(digest[:4], "big") % self._dimension
            vector[bucket] += 1.0 if digest[4] & 1 else -1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_text(text) for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._hash_text(normalize_query(text))


def normalize_query(text: str) -> str:
    """Replace newlines, which embedding models treat as tokens, with spaces."""
    return text.replace("\r\n", " ").replace("\n", " ")
