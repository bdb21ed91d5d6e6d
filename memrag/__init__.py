# memrag/__init__.py
"""
memrag - in-memory retrieval-augmented generation.

Documents are chunked, embedded through a local Ollama runtime and held in
memory; questions are answered from the most relevant chunks.

Quick Start:
    >>> from memrag import RagService
    >>> with RagService.from_config() as rag:
    ...     rag.add_document("notes.md")
    ...     print(rag.query("What did we decide about caching?").text)

Architecture:
    memrag/
    ├── core/          # Chunk model, exceptions, HTTP and YAML helpers
    ├── config/        # Schema, package defaults, layered loading
    ├── ingestion/     # Text extraction and chunking
    ├── llm/           # Ollama embedding and chat gateways
    ├── runtime/       # Shared bounded worker pool
    ├── vector_db/     # Corpus, query cache, store facade
    ├── retrieval/     # Cosine scoring and diversity-aware selection
    ├── generation/    # Prompt assembly
    ├── sdk/           # RagService
    └── cli/           # memrag command
"""

from memrag.core.chunk import Chunk, FileSummary
from memrag.core.exceptions import (
    ConfigurationError,
    EngineError,
    GenerationError,
    KnowledgeError,
    QueryError,
)
from memrag.sdk.service import Answer, FileRecord, RagService
from memrag.vector_db.memory import InMemoryVectorStore, SearchResult

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "RagService",
    "Answer",
    "FileRecord",
    "InMemoryVectorStore",
    "SearchResult",
    "Chunk",
    "FileSummary",
    "EngineError",
    "QueryError",
    "KnowledgeError",
    "GenerationError",
    "ConfigurationError",
]
