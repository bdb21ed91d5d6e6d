# tests/test_document_store.py
"""
Tests for DocumentStore.

Verifies:
1. Parallel embedding with per-chunk failure isolation
2. Atomic publication: every visible chunk carries its embedding
3. Index and legacy-scan deletion, unknown ids return False
4. Change hook runs on every mutation
5. File summaries derived from the corpus
"""

import threading

import pytest

from memrag.vector_db.store import DocumentStore

from tests.conftest import FakeEmbedder, make_chunk

pytestmark = pytest.mark.tier2


@pytest.fixture
def changes():
    return []


@pytest.fixture
def store(pool, embedder, changes):
    return DocumentStore(embedder, "test-model", pool, on_change=lambda: changes.append(1))


class TestAdd:
    def test_add_embeds_and_sequences(self, store, embedder):
        report = store.add([make_chunk("one", "f1", "a.txt", 0), make_chunk("two", "f1", "a.txt", 1)])

        assert report.added == 2
        assert report.failed == 0
        assert report.file_ids == ("f1",)
        chunks = store.snapshot().chunks
        assert [c.seq for c in chunks] == [0, 1]
        assert all(c.embedding for c in chunks)
        assert embedder.call_count == 2

    def test_failed_chunks_are_dropped_batch_continues(self, pool, changes):
        embedder = FakeEmbedder(fail_on={"bad"})
        store = DocumentStore(embedder, "m", pool, on_change=lambda: changes.append(1))

        report = store.add([make_chunk("good", "f1"), make_chunk("bad", "f1", index=1), make_chunk("fine", "f2")])

        assert report.added == 2
        assert report.failed == 1
        assert report.partial
        assert [c.content for c in store.snapshot().chunks] == ["good", "fine"]

    def test_all_failures_leave_corpus_untouched(self, pool, changes):
        store = DocumentStore(FakeEmbedder(fail_on={"x"}), "m", pool, on_change=lambda: changes.append(1))
        report = store.add([make_chunk("x", "f1")])

        assert report.added == 0
        assert store.count() == 0
        assert changes == []

    def test_empty_batch(self, store, changes):
        assert store.add([]).added == 0
        assert changes == []

    def test_embedding_with_other_dimension_is_dropped(self, pool, changes):
        embedder = FakeEmbedder(vectors={"a": [1.0, 0.0], "b": [1.0, 0.0, 0.0, 0.0]})
        store = DocumentStore(embedder, "m", pool, on_change=lambda: changes.append(1))
        store.add([make_chunk("a", "f1")])

        report = store.add([make_chunk("b", "f2")])

        assert report.added == 0
        assert report.failed == 1
        assert [len(c.embedding) for c in store.snapshot().chunks] == [2]
        assert store.dimension == 2
        assert changes == [1]

    def test_dimension_mismatch_inside_one_batch(self, pool):
        embedder = FakeEmbedder(
            vectors={"a": [1.0, 0.0], "b": [1.0, 0.0, 0.0], "c": [0.0, 1.0]}
        )
        store = DocumentStore(embedder, "m", pool)

        report = store.add([make_chunk("a", "f1"), make_chunk("b", "f1", index=1), make_chunk("c", "f2")])

        assert (report.added, report.failed) == (2, 1)
        assert [c.content for c in store.snapshot().chunks] == ["a", "c"]

    def test_delete_all_resets_dimension(self, pool):
        embedder = FakeEmbedder(vectors={"a": [1.0, 0.0], "b": [1.0, 0.0, 0.0, 0.0]})
        store = DocumentStore(embedder, "m", pool)
        store.add([make_chunk("a", "f1")])
        store.delete_all()

        assert store.dimension is None
        assert store.add([make_chunk("b", "f2")]).added == 1
        assert store.dimension == 4

    def test_caller_mutation_after_add_does_not_reach_corpus(self, store):
        chunk = make_chunk("a", None, fileId="legacy")
        store.add([chunk])

        chunk.metadata["fileId"] = "other"

        (stored,) = store.snapshot().chunks
        assert stored.source_file_id == "legacy"
        assert store.delete_by_file_id("other") is False
        assert store.delete_by_file_id("legacy") is True

    def test_sequence_continues_across_batches(self, store):
        store.add([make_chunk("a", "f1")])
        store.add([make_chunk("b", "f2")])
        assert [c.seq for c in store.snapshot().chunks] == [0, 1]

    def test_readers_never_see_unembedded_chunks(self, pool):
        store = DocumentStore(FakeEmbedder(delay=0.002), "m", pool)
        stop = threading.Event()
        violations = []

        def reader():
            while not stop.is_set():
                for chunk in store.snapshot().chunks:
                    if not chunk.embedding:
                        violations.append(chunk.id)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for batch in range(5):
                store.add([make_chunk(f"c{batch}-{i}", f"f{batch}", index=i) for i in range(8)])
        finally:
            stop.set()
            thread.join()

        assert violations == []
        assert store.count() == 40


class TestDelete:
    def test_delete_by_file_id_removes_all_its_chunks(self, store, changes):
        store.add([make_chunk("a1", "fa"), make_chunk("a2", "fa", index=1), make_chunk("b1", "fb")])
        changes.clear()

        assert store.delete_by_file_id("fa") is True
        assert [c.content for c in store.snapshot().chunks] == ["b1"]
        assert "fa" not in store.snapshot().by_file
        assert changes == [1]

    def test_unknown_file_id_returns_false(self, store, changes):
        store.add([make_chunk("a1", "fa")])
        changes.clear()

        assert store.delete_by_file_id("nope") is False
        assert store.delete_by_file_id("") is False
        assert store.count() == 1
        assert changes == []

    def test_legacy_metadata_ids_found_by_scan(self, store):
        store.add([make_chunk("old", fileId="legacy-1"), make_chunk("new", "fn")])
        assert "legacy-1" not in store.snapshot().by_file

        assert store.delete_by_file_id("legacy-1") is True
        assert [c.content for c in store.snapshot().chunks] == ["new"]

    def test_delete_all(self, store, changes):
        store.add([make_chunk("a", "fa"), make_chunk("b", "fb")])
        store.delete_all()
        assert store.count() == 0
        assert dict(store.snapshot().by_file) == {}
        assert changes[-1] == 1


class TestSummaries:
    def test_one_summary_per_file(self, store):
        store.add(
            [
                make_chunk("a1", "fa", "a.txt"),
                make_chunk("a2", "fa", "a.txt", index=1),
                make_chunk("b1", "fb", "b.md"),
                make_chunk("loose"),
            ]
        )
        summaries = {s.file_id: s for s in store.list_file_summaries()}

        assert set(summaries) == {"fa", "fb"}
        assert summaries["fa"].file_name == "a.txt"
        assert summaries["fa"].file_size == len("a1")

    def test_legacy_summary_reads_metadata(self, store):
        store.add([make_chunk("old", fileId="legacy", fileName="old.pdf", fileSize=99)])
        (summary,) = store.list_file_summaries()
        assert summary.file_id == "legacy"
        assert summary.file_name == "old.pdf"
        assert summary.file_size == 99
