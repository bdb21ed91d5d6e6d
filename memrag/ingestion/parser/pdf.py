# memrag/ingestion/parser/pdf.py
"""PDF text extraction via pypdf."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Set, Union

from memrag.ingestion.parser.base import ParseError
from memrag.logging.logger import get_logger
from memrag.logging.tags import INGEST

logger = get_logger(__name__)


@dataclass
class PdfTextExtractor:
    plugin_name: str = field(default="pdf", repr=False)
    supported_extensions: Set[str] = field(default_factory=lambda: {".pdf"})

    def can_extract(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.supported_extensions

    def extract(self, path: Union[str, Path]) -> str:
        """
        Extract page text, pages joined by blank lines so the chunker
        treats page breaks as paragraph boundaries.
        """
        from pypdf import PdfReader
        from pypdf.errors import PdfReadError

        p = Path(path)
        if not p.is_file():
            raise ParseError("File not found", source=str(p))

        try:
            reader = PdfReader(p)
            parts = []
            for page in reader.pages:
                page_text = page.extract_text()
                if page_text:
                    parts.append(page_text)
        except (PdfReadError, OSError, ValueError) as e:
            raise ParseError(f"Failed to read PDF: {e}", source=str(p), cause=e) from e

        logger.debug(f"{INGEST} {p.name}: {len(reader.pages)} pages, {len(parts)} with text")
        return "\n\n".join(parts)
