"""Document storage and text extraction adapters."""

from thesis_review.boundary.storage.document_source import (
    DocumentSource,
    PlainTextExtractor,
    S3DocumentSource,
    TextExtractor,
    file_extension,
)

__all__ = [
    "DocumentSource",
    "PlainTextExtractor",
    "S3DocumentSource",
    "TextExtractor",
    "file_extension",
]
