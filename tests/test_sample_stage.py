"""Tests for the bounded reservoir sample stage."""

from __future__ import annotations

import pytest

from docsample.document import Document
from docsample.errors import NegativeSizeError
from docsample.reservoir.sample import SampleStage
from docsample.stage import GetNextResult, QueueSource, Stage


class _CountingSource(QueueSource):
    """Queue source that records how often it was pulled."""

    def __init__(self, items=()) -> None:
        super().__init__(items)
        self.n_pulls = 0

    def get_next(self) -> GetNextResult:
        self.n_pulls += 1
        return super().get_next()


def _make_stage(
    size: int, n_docs: int, seed: int | None = 0
) -> tuple[SampleStage, _CountingSource]:
    source = _CountingSource({"_id": i} for i in range(n_docs))
    stage = SampleStage(size, seed=seed)
    stage.set_source(source)
    return stage, source


def _assert_eof(stage: Stage) -> None:
    for _ in range(3):
        assert stage.get_next().is_eof()


def _check_results(stage: SampleStage, n_expected: int) -> list[Document]:
    docs: list[Document] = []
    for _ in range(n_expected):
        result = stage.get_next()
        assert result.is_advanced()
        doc = result.document
        assert doc.has_rand_meta
        if docs:
            assert doc.rand_meta <= docs[-1].rand_meta
        docs.append(doc)
    _assert_eof(stage)
    return docs


def test_zero_size_returns_eof_without_pulling() -> None:
    """A sample of size 0 is exhausted immediately and never touches its source."""
    stage, source = _make_stage(size=0, n_docs=2)
    _check_results(stage, 0)
    assert source.n_pulls == 0
    assert len(source.queue) == 2


def test_source_eof_before_sample() -> None:
    """With fewer documents than requested, every document is returned."""
    stage, _ = _make_stage(size=10, n_docs=5)
    docs = _check_results(stage, 5)
    assert sorted(d["_id"] for d in docs) == [0, 1, 2, 3, 4]


def test_sample_eof_before_source() -> None:
    """Output is limited to the requested size."""
    stage, _ = _make_stage(size=5, n_docs=10)
    docs = _check_results(stage, 5)
    ids = [d["_id"] for d in docs]
    assert len(set(ids)) == 5
    assert set(ids).issubset(set(range(10)))


@pytest.mark.parametrize("size,n_docs", [(1, 1), (3, 50), (50, 3), (7, 7)])
def test_output_count_is_min_of_size_and_input(size: int, n_docs: int) -> None:
    """Stage emits min(size, N) documents in non-increasing key order."""
    stage, _ = _make_stage(size=size, n_docs=n_docs, seed=None)
    _check_results(stage, min(size, n_docs))


def test_docs_unmodified() -> None:
    """Only the ranking metadata is added; fields pass through untouched."""
    stage = SampleStage(1, seed=3)
    stage.set_source(QueueSource([{"a": 1, "b": {"c": 2}}]))
    result = stage.get_next()
    assert result.is_advanced()
    doc = result.document
    assert doc["a"] == 1
    assert doc["b"]["c"] == 2
    assert doc.to_dict() == {"a": 1, "b": {"c": 2}}
    assert doc.has_rand_meta
    _assert_eof(stage)


def test_should_propagate_pauses() -> None:
    """All upstream pauses are returned, in order, before any output."""
    source = QueueSource()
    for _ in range(3):
        source.push(Document())
        source.push_pause()
    stage = SampleStage(2, seed=0)
    stage.set_source(source)

    assert stage.get_next().is_paused()
    assert stage.get_next().is_paused()
    assert stage.get_next().is_paused()
    assert stage.get_next().is_advanced()
    assert stage.get_next().is_advanced()
    _assert_eof(stage)


def test_keys_are_in_unit_interval() -> None:
    stage, _ = _make_stage(size=20, n_docs=100)
    for doc in stage:
        assert 0.0 <= doc.rand_meta < 1.0


def test_reservoir_never_exceeds_size() -> None:
    """The buffered reservoir holds at most ``size`` entries while populating."""
    source = QueueSource()
    for i in range(40):
        source.push({"_id": i})
        source.push_pause()
    stage = SampleStage(4, seed=1)
    stage.set_source(source)
    while stage.get_next().is_paused():
        assert len(stage) <= 4


def test_sample_is_roughly_uniform() -> None:
    """Each of 10 documents appears in a size-3 sample about 30% of the time."""
    counts = [0] * 10
    n_trials = 4000
    for trial in range(n_trials):
        stage, _ = _make_stage(size=3, n_docs=10, seed=trial)
        for doc in stage:
            counts[doc["_id"]] += 1
    for count in counts:
        assert 0.26 < count / n_trials < 0.34


def test_negative_size_rejected() -> None:
    with pytest.raises(NegativeSizeError):
        SampleStage(-1)


def test_serialize_round_trips_spec() -> None:
    stage = SampleStage.create_from_spec({"size": 7})
    assert stage.size == 7
    assert stage.serialize() == {"$sample": {"size": 7}}


def test_dispose_releases_reservoir() -> None:
    stage, _ = _make_stage(size=5, n_docs=10)
    assert stage.get_next().is_advanced()
    stage.dispose()
    assert len(stage) == 0
    _assert_eof(stage)
