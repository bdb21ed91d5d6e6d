# memrag/ingestion/parser/plaintext.py
"""
Plain text extractor for text-based formats.

Reads UTF-8 and falls back to latin-1, which decodes any byte sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Set, Union

from memrag.ingestion.parser.base import ParseError
from memrag.logging.logger import get_logger
from memrag.logging.tags import INGEST

logger = get_logger(__name__)

PLAINTEXT_EXTENSIONS: Set[str] = {
    ".txt",
    ".text",
    ".md",
    ".markdown",
    ".rst",
    ".csv",
    ".tsv",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
    ".xml",
    ".html",
    ".htm",
    ".log",
    ".py",
    ".java",
    ".js",
    ".ts",
    ".go",
    ".rs",
    ".c",
    ".cpp",
    ".h",
    ".sh",
    ".sql",
}


@dataclass
class PlainTextExtractor:
    plugin_name: str = field(default="plaintext", repr=False)
    supported_extensions: Set[str] = field(default_factory=lambda: set(PLAINTEXT_EXTENSIONS))

    def can_extract(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.supported_extensions

    def extract(self, path: Union[str, Path]) -> str:
        p = Path(path)
        try:
            content = p.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug(f"{INGEST} {p.name} is not UTF-8, reading as latin-1")
            try:
                content = p.read_text(encoding="latin-1")
            except OSError as e:
                raise ParseError(f"Failed to read file: {e}", source=str(p), cause=e) from e
        except OSError as e:
            raise ParseError(f"Failed to read file: {e}", source=str(p), cause=e) from e

        return content
