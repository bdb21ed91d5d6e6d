# memrag/ingestion/parser/router.py
"""Extension-based extractor selection."""

from __future__ import annotations

from pathlib import Path
from typing import List, Set, Union

from memrag.ingestion.parser.base import ParseError, TextExtractor
from memrag.ingestion.parser.pdf import PdfTextExtractor
from memrag.ingestion.parser.plaintext import PlainTextExtractor


def _extractors() -> List[TextExtractor]:
    return [PlainTextExtractor(), PdfTextExtractor()]


def supported_extensions() -> Set[str]:
    exts: Set[str] = set()
    for extractor in _extractors():
        exts |= extractor.supported_extensions
    return exts


def get_extractor(path: Union[str, Path]) -> TextExtractor:
    """
    Pick the extractor for a file by extension.

    Raises:
        ParseError: If no extractor supports the extension
    """
    for extractor in _extractors():
        if extractor.can_extract(path):
            return extractor
    suffix = Path(path).suffix or "(none)"
    raise ParseError(f"Unsupported file type: {suffix}", source=str(path))


def extract_text(path: Union[str, Path]) -> str:
    return get_extractor(path).extract(path)
