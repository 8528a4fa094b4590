"""Bounded reservoir sampling over an upstream of unknown length."""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Any

from docsample.config import SAMPLE_STAGE_NAME, SampleSpec, parse_sample_spec
from docsample.document import Document
from docsample.reservoir.base import SampleStageBase
from docsample.stage import GetNextResult

logger = logging.getLogger(__name__)


class SampleStage(SampleStageBase):
    """Uniform random sample of ``size`` documents without replacement.

    Every upstream document gets a fresh uniform(0, 1) key; the ``size``
    highest-keyed documents are kept in a min-heap and emitted in decreasing
    key order once upstream is exhausted.  Because keys are independent per
    document, outputs of several stages over disjoint partitions can be merged
    by key to give a valid sample of the union.
    """

    def __init__(self, size: int, seed: int | None = None) -> None:
        """Initialize the stage.

        Args:
            size: Number of documents to output.
            seed: Random seed for reproducibility.
        """
        super().__init__(size, seed=seed)
        # (key, tiebreak, document); heap[0] holds the smallest key.
        self._heap: list[tuple[float, int, Document]] = []
        self._counter = itertools.count()
        self._populated = False
        self._done = False

    @classmethod
    def create_from_spec(cls, spec: Any, seed: int | None = None) -> SampleStage:
        """Build a stage from the argument of a ``$sample`` stage."""
        parsed = spec if isinstance(spec, SampleSpec) else parse_sample_spec(spec)
        return cls(parsed.size, seed=seed)

    def serialize(self) -> dict[str, Any]:
        return {SAMPLE_STAGE_NAME: {"size": self.size}}

    def __len__(self) -> int:
        return len(self._heap)

    def _offer(self, document: Document) -> None:
        key = float(self._rng.random())
        if len(self._heap) < self.size:
            heapq.heappush(self._heap, (key, next(self._counter), document))
        elif key > self._heap[0][0]:
            heapq.heapreplace(self._heap, (key, next(self._counter), document))

    def _get_next(self) -> GetNextResult:
        if self._done:
            return GetNextResult.eof()
        if self.size == 0:
            self._done = True
            return GetNextResult.eof()

        while not self._populated:
            result = self._pull()
            if result.is_paused():
                return result
            if result.is_eof():
                self._populated = True
                # Ascending, so pop() yields the highest key first.
                self._heap.sort()
                logger.debug(f"{SAMPLE_STAGE_NAME} populated with {len(self._heap)} documents")
                break
            self._offer(result.document)

        if not self._heap:
            self._done = True
            return GetNextResult.eof()
        key, _, document = self._heap.pop()
        return GetNextResult.advanced(document.with_rand_meta(key))

    def dispose(self) -> None:
        self._heap.clear()
        self._populated = True
        self._done = True
