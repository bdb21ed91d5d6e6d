# tests/test_vector_store.py
"""
End-to-end tests for the in-memory vector store facade.

Verifies:
1. Relevance floor and diversity-aware ranking through search()
2. Cache sharing across top_k and invalidation on every mutation
3. Query-embedding failure is reported, not mistaken for "no matches"
4. Deleted files never reappear in results
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from memrag.core.exceptions import QueryError
from memrag.retrieval.exceptions import EmbeddingError
from memrag.vector_db.cache import QueryCache
from memrag.vector_db.memory import InMemoryVectorStore

from tests.conftest import QUERY_VECTOR, FakeEmbedder, make_chunk, unit_at, wait_until

pytestmark = pytest.mark.tier2


class FailsOnceEmbedder(FakeEmbedder):
    """Each text in fail_on fails on its next call only."""

    def embed(self, model, text):
        try:
            return super().embed(model, text)
        finally:
            self.fail_on.discard(text)


class GatedEmbedder(FakeEmbedder):
    """Query embeddings block until the gate opens."""

    def __init__(self, gate, **kwargs):
        super().__init__(**kwargs)
        self.gate = gate

    def embed(self, model, text):
        if text == "query":
            self.gate.wait(5)
        return super().embed(model, text)


def build(pool, vectors, **kwargs):
    embedder = FakeEmbedder(vectors={"query": QUERY_VECTOR, **vectors}, **kwargs)
    return InMemoryVectorStore(embedder, "m", pool=pool), embedder


class TestRanking:
    def test_sole_file_representative_below_diversity_threshold(self, pool):
        store, _ = build(pool, {"A": unit_at(0.9), "B": unit_at(0.55)})
        store.add([make_chunk("A", "file-a"), make_chunk("B", "file-b")])

        result = store.search("query", 2)

        assert [c.content for c in result.chunks] == ["A", "B"]
        assert not result.failed

    def test_same_file_returns_two_highest(self, pool):
        store, _ = build(pool, {"a1": unit_at(0.9), "a2": unit_at(0.8), "a3": unit_at(0.75)})
        store.add([make_chunk("a1", "fa"), make_chunk("a2", "fa", index=1), make_chunk("a3", "fa", index=2)])

        result = store.search("query", 2)

        assert [h.score for h in result.hits] == [pytest.approx(0.9), pytest.approx(0.8)]

    def test_floor_is_exclusive(self, pool):
        # Integer-valued vectors so the boundary score is exactly 0.5
        embedder = FakeEmbedder(
            vectors={
                "q4": [1.0, 0.0, 0.0, 0.0],
                "at": [1.0, 1.0, 1.0, 1.0],
                "above": [3.0, 4.0, 0.0, 0.0],
                "below": [0.0, 1.0, 0.0, 0.0],
            }
        )
        store = InMemoryVectorStore(embedder, "m", pool=pool)
        store.add([make_chunk("at", "f1"), make_chunk("above", "f2"), make_chunk("below", "f3")])

        result = store.search("q4", 5)
        assert [c.content for c in result.chunks] == ["above"]
        assert result.hits[0].score == pytest.approx(0.6)

    def test_ties_break_by_insertion_order(self, pool):
        store, _ = build(pool, {"first": unit_at(0.8), "second": unit_at(0.8)})
        store.add([make_chunk("first")])
        store.add([make_chunk("second")])

        assert [c.content for c in store.search("query", 2).chunks] == ["first", "second"]

    def test_invalid_queries(self, pool):
        store, _ = build(pool, {})
        with pytest.raises(QueryError):
            store.search("   ", 3)
        with pytest.raises(QueryError):
            store.search("query", 0)


class TestCaching:
    def test_different_top_k_share_one_entry(self, pool):
        store, embedder = build(pool, {f"c{i}": unit_at(0.9 - i * 0.01) for i in range(6)})
        store.add([make_chunk(f"c{i}") for i in range(6)])

        top3 = store.search("query", 3)
        top5 = store.search("  query ", 5)

        assert [c.content for c in top3.chunks] == ["c0", "c1", "c2"]
        assert len(top5) == 5
        assert embedder.calls_for("query") == 1

    def test_top_k_above_fetch_size_bypasses_cache(self, pool):
        store, embedder = build(pool, {"x": unit_at(0.9)})
        store.add([make_chunk("x")])

        store.search("query", 20)
        store.search("query", 20)

        assert embedder.calls_for("query") == 2
        assert len(store.cache) == 0

    def test_add_invalidates_previous_results(self, pool):
        store, _ = build(pool, {"old": unit_at(0.6), "new": unit_at(0.95)})
        store.add([make_chunk("old", "f-old")])
        assert [c.content for c in store.search("query", 5).chunks] == ["old"]

        store.add([make_chunk("new", "f-new")])

        assert [c.content for c in store.search("query", 5).chunks] == ["new", "old"]

    def test_delete_by_file_id_never_returns_deleted_chunks(self, pool):
        store, _ = build(pool, {"a": unit_at(0.9), "b": unit_at(0.8)})
        store.add([make_chunk("a", "fa"), make_chunk("b", "fb")])
        assert len(store.search("query", 5)) == 2

        assert store.delete_by_file_id("fa") is True

        result = store.search("query", 5)
        assert all(c.source_file_id != "fa" for c in result.chunks)
        assert [c.content for c in result.chunks] == ["b"]

    def test_delete_all_then_search_is_empty(self, pool):
        store, _ = build(pool, {"a": unit_at(0.9)})
        store.add([make_chunk("a", "fa")])
        store.search("query", 5)

        store.delete_all()

        result = store.search("query", 5)
        assert result.hits == ()
        assert not result.failed

    def test_cache_disabled(self, pool):
        embedder = FakeEmbedder(vectors={"query": QUERY_VECTOR})
        store = InMemoryVectorStore(embedder, "m", pool=pool, cache_enabled=False)
        store.search("query", 3)
        store.search("query", 3)
        assert store.cache is None
        assert embedder.calls_for("query") == 2

    def test_shared_cache_instance_is_used(self, pool):
        cache = QueryCache(max_size=5, ttl=60.0)
        store = InMemoryVectorStore(FakeEmbedder(vectors={"query": QUERY_VECTOR}), "m", pool=pool, cache=cache)
        store.search("query", 3)
        assert len(cache) == 1


class TestFailures:
    def test_query_embedding_failure_is_explicit(self, pool):
        store, _ = build(pool, {"a": unit_at(0.9)}, fail_on={"broken query"})
        store.add([make_chunk("a", "fa")])

        result = store.search("broken query", 3)

        assert result.failed
        assert isinstance(result.error, EmbeddingError)
        assert result.hits == ()

    def test_failed_search_is_not_cached(self, pool):
        embedder = FakeEmbedder(vectors={"query": QUERY_VECTOR}, fail_on={"query"})
        store = InMemoryVectorStore(embedder, "m", pool=pool)

        assert store.search("query", 3).failed
        embedder.fail_on.clear()
        assert not store.search("query", 3).failed

    def test_failed_load_falls_back_to_direct_search(self, pool):
        embedder = FailsOnceEmbedder(vectors={"query": QUERY_VECTOR, "a": unit_at(0.9)})
        store = InMemoryVectorStore(embedder, "m", pool=pool)
        store.add([make_chunk("a", "fa")])
        embedder.fail_on.add("query")

        result = store.search("query", 3)

        assert result.error is None
        assert [c.content for c in result.chunks] == ["a"]
        assert embedder.calls_for("query") == 2
        assert store.cache.stats().load_failures == 1

    def test_concurrent_callers_do_not_retry_a_shared_failed_load(self, pool):
        gate = threading.Event()
        embedder = GatedEmbedder(gate, vectors={"query": QUERY_VECTOR}, fail_on={"query"})
        store = InMemoryVectorStore(embedder, "m", pool=pool)

        with ThreadPoolExecutor(max_workers=8) as executor:
            futures = [executor.submit(store.search, "query", 3) for _ in range(8)]
            assert wait_until(lambda: store.cache.stats().misses == 8)
            gate.set()
            results = [f.result(5) for f in futures]

        assert all(isinstance(r.error, EmbeddingError) for r in results)
        # One shared load plus one direct retry by the caller that ran it
        assert embedder.calls_for("query") == 2

    def test_list_file_summaries(self, pool):
        store, _ = build(pool, {})
        store.add([make_chunk("a", "fa", "a.txt"), make_chunk("b", "fb", "b.txt")])
        assert sorted(s.file_name for s in store.list_file_summaries()) == ["a.txt", "b.txt"]

    def test_owned_pool_is_shut_down_on_close(self):
        store = InMemoryVectorStore(FakeEmbedder(), "m")
        store.close()
        assert store.pool.closed
