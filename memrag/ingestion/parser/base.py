# memrag/ingestion/parser/base.py
"""
TextExtractor protocol.

Extractors turn a file on disk into plain text for the chunker.

Flow: file path → TextExtractor.extract() → text → ParagraphChunker
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Set, Union, runtime_checkable

from memrag.core.exceptions import KnowledgeError


@runtime_checkable
class TextExtractor(Protocol):
    """
    Protocol for text extractors.

    Implementations:
    - PlainTextExtractor: text, markdown, code, data files
    - PdfTextExtractor: PDF via pypdf
    """

    plugin_name: str
    supported_extensions: Set[str]

    def extract(self, path: Union[str, Path]) -> str:
        """
        Extract the text content of a file.

        Raises:
            ParseError: For unsupported, missing or corrupt input.
        """
        ...

    def can_extract(self, path: Union[str, Path]) -> bool: ...


class ParseError(KnowledgeError):
    """Raised when an extractor fails to process a file."""

    def __init__(self, message: str, source: str, cause: Exception | None = None):
        super().__init__(message)
        self.source = source
        self.cause = cause


__all__ = ["TextExtractor", "ParseError"]
