# memrag/sdk/service.py
"""
RagService - document upload, grounded Q&A and file management.

Usage:
    from memrag import RagService

    with RagService.from_config() as rag:
        record = rag.add_document("handbook.pdf")
        answer = rag.query("How many vacation days do I get?")
        print(answer.text)
        for source in answer.sources:
            print(source)

Gateways can be injected for tests or alternative runtimes:
    rag = RagService(config, embedder=my_embedder, chat=my_chat)
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from memrag.config.loader import load_config
from memrag.config.schema import MemragConfig
from memrag.core.chunk import Chunk
from memrag.core.exceptions import QueryError
from memrag.generation.prompt import build_messages, select_context_chunks
from memrag.ingestion.chunking.paragraph import ParagraphChunker
from memrag.ingestion.parser.router import extract_text
from memrag.llm.chat import OllamaChatClient
from memrag.llm.embedding import OllamaEmbedder
from memrag.llm.protocols import (
    ChatGateway,
    DoneCallback,
    EmbeddingGateway,
    ErrorCallback,
    StreamHandle,
    TokenCallback,
)
from memrag.logging.logger import get_logger
from memrag.logging.tags import INGEST, PIPELINE
from memrag.runtime.pool import WorkerPool
from memrag.vector_db.cache import QueryCache
from memrag.vector_db.memory import InMemoryVectorStore
from memrag.vector_db.store import AddReport

logger = get_logger(__name__)

FILE_ID_PREFIX = "file-"
UNKNOWN_TYPE = "unknown"


def new_file_id() -> str:
    return f"{FILE_ID_PREFIX}{uuid.uuid4()}"


def _file_type(name: Optional[str]) -> str:
    if name:
        suffix = Path(name).suffix
        if len(suffix) > 1:
            return suffix[1:].upper()
    return UNKNOWN_TYPE


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class FileRecord:
    """One uploaded file as shown to users."""

    id: str
    name: str
    size: int
    type: str
    uploaded_at: datetime


@dataclass(frozen=True)
class IngestResult:
    file_id: str
    file_name: str
    chunks: int
    failed: int

    @property
    def partial(self) -> bool:
        return self.failed > 0


@dataclass(frozen=True)
class Answer:
    text: str
    question: str
    context: List[Chunk] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        """Distinct source file names, in context order."""
        names = [c.source_file_name for c in self.context if c.source_file_name]
        return list(dict.fromkeys(names))


class _FailedStream:
    """Stream handle for a request that failed before streaming began."""

    finished = True

    def __init__(self, error: BaseException) -> None:
        self.error = error

    def cancel(self) -> None:
        pass

    def wait(self, timeout: Optional[float] = None) -> bool:
        return True


# =============================================================================
# Service
# =============================================================================


class RagService:
    def __init__(
        self,
        config: Optional[MemragConfig] = None,
        embedder: Optional[EmbeddingGateway] = None,
        chat: Optional[ChatGateway] = None,
    ):
        self.config = config or MemragConfig()
        ollama = self.config.ollama

        self._owned: list = []
        self.embedder = embedder or OllamaEmbedder(
            ollama.base_url, timeout=ollama.embedding_timeout
        )
        self.chat = chat or OllamaChatClient(
            ollama.base_url, timeout=ollama.chat_timeout, stream_timeout=ollama.stream_timeout
        )
        if embedder is None:
            self._owned.append(self.embedder)
        if chat is None:
            self._owned.append(self.chat)

        self.chunker = ParagraphChunker(
            chunk_size=self.config.chunking.chunk_size,
            chunk_overlap=self.config.chunking.chunk_overlap,
        )
        self.pool = WorkerPool(size=self.config.runtime.pool_size)
        retrieval = self.config.retrieval
        self.store = InMemoryVectorStore(
            embedder=self.embedder,
            model=ollama.embedding_model,
            pool=self.pool,
            cache=QueryCache(max_size=self.config.cache.max_size, ttl=self.config.cache.ttl_seconds),
            cache_enabled=self.config.cache.enabled,
            fetch_size=retrieval.fetch_size,
            relevance_floor=retrieval.relevance_floor,
            diversity_threshold=retrieval.diversity_threshold,
        )

        self._files_lock = threading.Lock()
        self._file_names: Dict[str, str] = {}

    @classmethod
    def from_config(cls, path: Optional[Union[str, Path]] = None, **kwargs) -> "RagService":
        return cls(load_config(path), **kwargs)

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def add_document(self, path: Union[str, Path]) -> IngestResult:
        """
        Extract, chunk, embed and index one file.

        Raises:
            ParseError: If the file cannot be read or its type is unsupported
        """
        p = Path(path)
        logger.info(f"{INGEST} Parsing {p.name}")
        text = extract_text(p)
        logger.info(f"{INGEST} Parsed {p.name}: {len(text)} characters")
        return self.ingest_text(text, file_name=p.name, file_size=p.stat().st_size)

    def ingest_text(
        self,
        text: str,
        file_name: str,
        file_size: Optional[int] = None,
        file_id: Optional[str] = None,
    ) -> IngestResult:
        file_id = file_id or new_file_id()
        if file_size is None:
            file_size = len(text.encode("utf-8"))

        chunks = self.chunker.chunk(text, file_id=file_id, file_name=file_name, file_size=file_size)
        report: AddReport = self.store.add(chunks)

        with self._files_lock:
            self._file_names[file_id] = file_name

        if report.partial:
            logger.warning(
                f"{INGEST} {file_name}: {report.failed} of {len(chunks)} chunks failed to embed"
            )
        return IngestResult(
            file_id=file_id, file_name=file_name, chunks=report.added, failed=report.failed
        )

    # -------------------------------------------------------------------------
    # Querying
    # -------------------------------------------------------------------------

    def search(self, query: str, top_k: int = 5):
        return self.store.search(query, top_k)

    def _context_for(self, question: str) -> List[Chunk]:
        if not question or not question.strip():
            raise QueryError("Question is empty")
        result = self.store.search(question, self.config.retrieval.fetch_size)
        if result.failed:
            raise result.error
        return select_context_chunks(result.chunks, self.config.retrieval.context_limit)

    def query(self, question: str) -> Answer:
        """
        Answer a question from the indexed documents.

        Raises:
            QueryError: For an empty question
            EmbeddingError: If the question cannot be embedded
            LLMError: If the chat model fails
        """
        context = self._context_for(question)
        messages = build_messages(question, context)
        logger.info(f"{PIPELINE} Answering with {len(context)} context chunks")
        text = self.chat.complete(self.config.ollama.chat_model, messages)
        return Answer(text=text, question=question, context=context)

    def query_stream(
        self,
        question: str,
        on_token: TokenCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        timeout: Optional[float] = None,
    ) -> StreamHandle:
        """
        Stream an answer. Exactly one of on_done / on_error fires, including
        when retrieval fails before the model is called.
        """
        try:
            context = self._context_for(question)
        except Exception as e:
            logger.error(f"{PIPELINE} Retrieval failed before streaming: {e}")
            on_error(e)
            return _FailedStream(e)

        messages = build_messages(question, context)
        return self.chat.complete_stream(
            self.config.ollama.chat_model,
            messages,
            on_token=on_token,
            on_done=on_done,
            on_error=on_error,
            timeout=timeout or self.config.ollama.stream_timeout,
        )

    # -------------------------------------------------------------------------
    # File management
    # -------------------------------------------------------------------------

    def delete_file(self, file_id: str) -> bool:
        """
        Forget a registered file and remove its chunks.

        Returns:
            True if the file was registered; False for an unknown id
        """
        with self._files_lock:
            name = self._file_names.pop(file_id, None)
        if name is None:
            return False

        removed = self.store.delete_by_file_id(file_id)
        logger.info(f"{INGEST} Deleted {file_id} ({name}){'' if removed else ', no chunks indexed'}")
        return True

    def clear(self) -> None:
        self.store.delete_all()
        with self._files_lock:
            self._file_names.clear()

    def list_files(self) -> List[FileRecord]:
        with self._files_lock:
            names = dict(self._file_names)

        records: List[FileRecord] = []
        seen = set()
        for summary in self.store.list_file_summaries():
            seen.add(summary.file_id)
            name = summary.file_name or names.get(summary.file_id, "")
            records.append(
                FileRecord(
                    id=summary.file_id,
                    name=name,
                    size=summary.file_size or 0,
                    type=_file_type(name),
                    uploaded_at=summary.first_seen,
                )
            )

        # Registered files with no chunks left in the corpus
        now = datetime.now(timezone.utc)
        for file_id, name in names.items():
            if file_id not in seen:
                records.append(
                    FileRecord(id=file_id, name=name, size=0, type=UNKNOWN_TYPE, uploaded_at=now)
                )
        return records

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self.pool.shutdown(timeout=self.config.runtime.shutdown_timeout)
        for gateway in self._owned:
            gateway.close()

    def __enter__(self) -> "RagService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
