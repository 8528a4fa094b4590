"""Shared base for sample stages."""

from __future__ import annotations

from abc import abstractmethod

import numpy as np

from docsample.errors import InvariantViolation, NegativeSizeError
from docsample.stage import GetNextResult, Stage


class SampleStageBase(Stage):
    """Stage producing at most ``size`` documents tagged with a ranking value.

    Subclasses implement :meth:`_get_next`.  Any :class:`InvariantViolation`
    poisons the stage: every later pull raises it again.
    """

    def __init__(self, size: int, seed: int | None = None) -> None:
        super().__init__()
        if size < 0:
            raise NegativeSizeError(f"size must be non-negative, got {size}", {"size": size})
        self.size = int(size)
        self._rng = np.random.default_rng(seed)
        self._fatal: InvariantViolation | None = None

    def get_next(self) -> GetNextResult:
        if self._fatal is not None:
            raise self._fatal
        try:
            return self._get_next()
        except InvariantViolation as exc:
            self._fatal = exc
            raise

    @abstractmethod
    def _get_next(self) -> GetNextResult:
        """Produce the next result; called only while the stage is healthy."""
