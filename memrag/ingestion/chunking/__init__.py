# memrag/ingestion/chunking/__init__.py
from memrag.ingestion.chunking.paragraph import ParagraphChunker, chunk_text

__all__ = ["ParagraphChunker", "chunk_text"]
