# memrag/ingestion/parser/__init__.py
from memrag.ingestion.parser.base import ParseError, TextExtractor
from memrag.ingestion.parser.pdf import PdfTextExtractor
from memrag.ingestion.parser.plaintext import PlainTextExtractor
from memrag.ingestion.parser.router import extract_text, get_extractor, supported_extensions

__all__ = [
    "TextExtractor",
    "ParseError",
    "PlainTextExtractor",
    "PdfTextExtractor",
    "get_extractor",
    "extract_text",
    "supported_extensions",
]
