"""Document chunking strategies."""

import logging
from typing import Optional

from .base import BaseChunker
from .document import Chunk, SourceDocument

logger = logging.getLogger(__name__)

# (start, end) character offsets into the source text
Span = tuple[int, int]


class RecursiveChunker(BaseChunker):
    """Recursively chunk text using multiple separators.

    Tries to split on larger separators first (paragraphs), then
    progressively smaller ones (lines, words) as needed, and finally cuts
    on character boundaries. The resulting pieces are merged greedily into
    chunks of at most ``chunk_size`` characters, each chunk starting exactly
    ``overlap`` characters before the end of the previous one.

    Chunks are exact slices of the input, so their offsets can be used to
    recover the original text.
    """

    DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]

    def __init__(
        self,
        chunk_size: int = 1000,
        overlap: int = 200,
        separators: Optional[list[str]] = None,
    ):
        """Initialize the recursive chunker.

        Args:
            chunk_size: Maximum characters per chunk
            overlap: Number of characters shared by consecutive chunks
            separators: Separators to try, most semantic first
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if overlap < 0:
            raise ValueError("Overlap must not be negative")
        if overlap >= chunk_size:
            raise ValueError("Overlap must be less than chunk_size")

        self.chunk_size = chunk_size
        self.overlap = overlap
        self.separators = list(separators if separators is not None else self.DEFAULT_SEPARATORS)
        if "" not in self.separators:
            self.separators.append("")

    @property
    def piece_size(self) -> int:
        """Largest piece that still fits after an overlap prefix."""
        return self.chunk_size - self.overlap

    def split(self, text: str) -> list[Chunk]:
        """Split text into overlapping chunks."""
        if not text.strip():
            return []

        pieces = self._split_span(text, 0, len(text), self.separators)
        chunks = self._merge(text, pieces)

        logger.debug(f"Split {len(text)} characters into {len(chunks)} chunks")
        return chunks

    def chunk_document(self, document: SourceDocument) -> list[Chunk]:
        """Split a source document's text."""
        return self.split(document.text)

    def _split_span(
        self,
        text: str,
        start: int,
        end: int,
        separators: list[str],
    ) -> list[Span]:
        """Recursively cut text[start:end] into pieces of at most piece_size."""
        if end - start <= self.piece_size:
            return [(start, end)]

        separator = ""
        finer: list[str] = []
        for i, sep in enumerate(separators):
            if sep == "" or text.find(sep, start, end) != -1:
                separator = sep
                finer = separators[i + 1:]
                break

        if separator == "":
            return [
                (pos, min(pos + self.piece_size, end))
                for pos in range(start, end, self.piece_size)
            ]

        spans: list[Span] = []
        pos = start
        while pos < end:
            hit = text.find(separator, pos, end)
            # The separator stays with the piece before it
            cut = end if hit == -1 else hit + len(separator)
            if cut - pos <= self.piece_size:
                spans.append((pos, cut))
            else:
                spans.extend(self._split_span(text, pos, cut, finer))
            pos = cut

        return spans

    def _merge(self, text: str, pieces: list[Span]) -> list[Chunk]:
        """Merge consecutive pieces into overlapping chunks."""
        chunks: list[Chunk] = []
        start = pieces[0][0]
        end = start

        for _, piece_end in pieces:
            if piece_end - start > self.chunk_size:
                chunks.append(self._create_chunk(text, start, end, len(chunks)))
                start = end - self.overlap
            end = piece_end

        chunks.append(self._create_chunk(text, start, end, len(chunks)))
        return chunks

    def _create_chunk(self, text: str, start: int, end: int, index: int) -> Chunk:
        return Chunk(
            content=text[start:end],
            index=index,
            start_offset=start,
            end_offset=end,
        )
