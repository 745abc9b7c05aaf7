"""
PDF text and metadata extraction.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from docqa.errors import ExtractionFailure
from docqa.rag.document import DocumentMetadata, SourceDocument

logger = logging.getLogger(__name__)


class ExtractedDocument(BaseModel):
    """Text and metadata read from one PDF."""
    text: str
    title: str = "Untitled"
    author: str = "Unknown"
    page_count: int = 0
    source_file: str
    page_breaks: list[int] = Field(default_factory=list)

    def to_source_document(self) -> SourceDocument:
        """Convert to the value ingested by the document manager."""
        return SourceDocument(
            text=self.text,
            metadata=DocumentMetadata(
                title=self.title,
                author=self.author,
                total_pages=self.page_count,
                source_file=self.source_file,
            ),
            page_breaks=self.page_breaks,
        )


class PDFExtractor:
    """
    Reads PDF files with pypdf.

    Pages are joined with a newline; the offset at which each page after
    the first begins is kept so chunks can be attributed to pages.
    """

    def extract(self, path: str | Path) -> ExtractedDocument:
        """
        Extract text and metadata from a PDF file.

        Args:
            path: Path to the PDF

        Returns:
            ExtractedDocument

        Raises:
            ExtractionFailure: If the file is missing, unreadable or corrupt
        """
        path = Path(path)

        try:
            reader = PdfReader(path)
            page_texts = [page.extract_text() or "" for page in reader.pages]
            info = reader.metadata
        except (OSError, PyPdfError, ValueError) as e:
            raise ExtractionFailure(str(path), str(e)) from e

        parts = []
        page_breaks = []
        offset = 0
        for i, page_text in enumerate(page_texts):
            if i > 0:
                parts.append("\n")
                offset += 1
                page_breaks.append(offset)
            parts.append(page_text)
            offset += len(page_text)

        title = (info.title if info else None) or "Untitled"
        author = (info.author if info else None) or "Unknown"

        logger.info(f"Extracted {len(page_texts)} pages from '{path.name}'")

        return ExtractedDocument(
            text="".join(parts),
            title=str(title),
            author=str(author),
            page_count=len(page_texts),
            source_file=path.name,
            page_breaks=page_breaks,
        )
