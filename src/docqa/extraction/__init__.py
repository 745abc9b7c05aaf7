"""
Text and metadata extraction from source files.
"""

from docqa.extraction.pdf import ExtractedDocument, PDFExtractor

__all__ = [
    "ExtractedDocument",
    "PDFExtractor",
]
