"""Merging samples taken independently over disjoint partitions.

Each partition's sample stage emits documents in non-increasing ``rand_meta``
order.  Taking the ``size`` highest-ranked documents across all partitions
yields a uniform sample of the union.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterable

from docsample.document import Document
from docsample.errors import InvariantViolation, NegativeSizeError
from docsample.stage import GetNextResult, Stage


def _rank(document: Document) -> float:
    if not document.has_rand_meta:
        raise InvariantViolation("cannot merge a document without a random metadata value")
    return document.rand_meta


def merge_samples(partitions: Iterable[Iterable[Document]], size: int) -> list[Document]:
    """Merge per-partition samples into one sample of ``size`` documents.

    Args:
        partitions: Sample outputs, each sorted by ``rand_meta`` descending.
        size: Number of documents to keep.

    Returns:
        At most ``size`` documents, highest ``rand_meta`` first.
    """
    if size < 0:
        raise NegativeSizeError("size must not be negative", {"size": size})
    merged = heapq.merge(*partitions, key=_rank, reverse=True)
    return list(itertools.islice(merged, size))


class MergeStage(Stage):
    """Pull-based merge of several sample stages, limited to ``size`` outputs.

    Holds one pending document per source.  A pause from any source is
    returned to the caller immediately; the merge resumes on the next pull.
    """

    def __init__(self, sources: list[Stage], size: int) -> None:
        super().__init__()
        if size < 0:
            raise NegativeSizeError("size must not be negative", {"size": size})
        self.sources = list(sources)
        self.size = int(size)
        self._heads: dict[int, Document] = {}
        self._exhausted: set[int] = set()
        self._n_returned = 0

    def _fill(self) -> GetNextResult | None:
        for idx, source in enumerate(self.sources):
            if idx in self._heads or idx in self._exhausted:
                continue
            result = source.get_next()
            if result.is_paused():
                return result
            if result.is_eof():
                self._exhausted.add(idx)
            else:
                _rank(result.document)
                self._heads[idx] = result.document
        return None

    def get_next(self) -> GetNextResult:
        if self._n_returned >= self.size:
            return GetNextResult.eof()
        paused = self._fill()
        if paused is not None:
            return paused
        if not self._heads:
            self._n_returned = self.size
            return GetNextResult.eof()
        idx = max(self._heads, key=lambda i: self._heads[i].rand_meta)
        self._n_returned += 1
        return GetNextResult.advanced(self._heads.pop(idx))

    def dispose(self) -> None:
        self._heads.clear()
        for source in self.sources:
            source.dispose()
