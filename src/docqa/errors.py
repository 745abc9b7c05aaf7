"""
docqa exceptions.
"""


class DocQAError(Exception):
    """Base exception for docqa errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ExtractionFailure(DocQAError):
    """Raised when a source document cannot be read or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to extract '{path}': {message}")


class EmbeddingFailure(DocQAError):
    """Raised when the embedding model rejects or fails a request."""

    def __init__(self, input_count: int, message: str):
        self.input_count = input_count
        super().__init__(f"Embedding of {input_count} input(s) failed: {message}")


class DimensionMismatchError(DocQAError, ValueError):
    """Raised when a vector does not match the collection dimension."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}"
        )


class IndexWriteFailure(DocQAError):
    """Raised when an upsert or delete against the vector index fails.

    Point ids are fresh per ingestion, so blindly retrying a failed batch
    may duplicate points that were already written.
    """

    def __init__(self, collection: str, point_count: int, message: str):
        self.collection = collection
        self.point_count = point_count
        super().__init__(
            f"Write of {point_count} point(s) to '{collection}' failed: {message}"
        )


class IndexQueryFailure(DocQAError):
    """Raised when a similarity query against the vector index fails."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"Query on '{collection}' failed: {message}")


class IngestionFailure(DocQAError):
    """Raised when one document could not be ingested."""

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(f"Ingestion of '{source}' failed: {cause}")


class ToolExecutionFailure(DocQAError):
    """Raised when a model-directed tool call cannot be executed."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' failed: {message}")


class ModelFailure(DocQAError):
    """Raised when the language model call fails."""
