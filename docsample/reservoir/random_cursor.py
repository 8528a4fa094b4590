"""Sampling from a random-access source that may repeat documents."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from docsample.config import (
    MAX_CONSECUTIVE_DUPLICATES,
    RANDOM_CURSOR_STAGE_NAME,
    RandomCursorSpec,
)
from docsample.errors import InvariantViolation, MissingIdFieldError, TooManyDuplicatesError
from docsample.reservoir.base import SampleStageBase
from docsample.reservoir.order_stats import OrderStatisticKeys
from docsample.stage import GetNextResult

logger = logging.getLogger(__name__)


def _hashable(value: Any) -> Any:
    """Return a hashable stand-in for an identifier value.

    Containers are tagged by kind so a mapping never equals a list of pairs.
    """
    if isinstance(value, Mapping):
        return ("map", tuple((k, _hashable(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(_hashable(v) for v in value))
    return value


class SampleFromRandomCursorStage(SampleStageBase):
    """Emit ``size`` distinct documents from a pre-randomized source.

    Each accepted document is tagged with the next value from
    :class:`OrderStatisticKeys` over ``population_estimate`` draws, so the
    output carries the same ranking distribution a :class:`SampleStage` over
    the whole population would produce, without buffering anything.

    Documents whose ``id_field`` has been seen before are dropped.  The
    upstream is expected never to pause once documents start flowing; a pause
    after the first accepted document is an :class:`InvariantViolation`.
    """

    def __init__(
        self,
        size: int,
        *,
        population_estimate: int,
        id_field: str = "_id",
        max_consecutive_duplicates: int = MAX_CONSECUTIVE_DUPLICATES,
        seed: int | None = None,
    ) -> None:
        """Initialize the stage.

        Args:
            size: Number of documents to output.
            population_estimate: Assumed number of distinct documents in the source.
            id_field: Field used to recognise repeated documents.
            max_consecutive_duplicates: Duplicates in a row tolerated before failing.
            seed: Random seed for reproducibility.
        """
        self.spec = RandomCursorSpec(
            size=size,
            id_field=id_field,
            population_estimate=population_estimate,
            max_consecutive_duplicates=max_consecutive_duplicates,
        )
        super().__init__(self.spec.size, seed=seed)
        self.id_field = self.spec.id_field
        self.population_estimate = self.spec.population_estimate
        self.max_consecutive_duplicates = self.spec.max_consecutive_duplicates
        self._keys = OrderStatisticKeys(self.population_estimate, seed=self._rng)
        self._seen_ids: set[Any] = set()
        self._n_returned = 0
        self._done = False

    @classmethod
    def create(cls, spec: RandomCursorSpec, seed: int | None = None) -> SampleFromRandomCursorStage:
        return cls(
            spec.size,
            id_field=spec.id_field,
            population_estimate=spec.population_estimate,
            max_consecutive_duplicates=spec.max_consecutive_duplicates,
            seed=seed,
        )

    def serialize(self) -> dict[str, Any]:
        return {RANDOM_CURSOR_STAGE_NAME: {"size": self.size}}

    def _get_next(self) -> GetNextResult:
        if self._done:
            return GetNextResult.eof()
        if self._n_returned >= self.size:
            self._done = True
            return GetNextResult.eof()

        n_duplicates = 0
        while True:
            result = self._pull()
            if result.is_paused():
                if self._n_returned == 0 and n_duplicates == 0:
                    return result
                logger.critical(
                    f"{RANDOM_CURSOR_STAGE_NAME} received a pause after "
                    f"{self._n_returned} documents"
                )
                raise InvariantViolation(
                    f"{RANDOM_CURSOR_STAGE_NAME} does not expect its source to pause"
                )
            if result.is_eof():
                self._done = True
                return result

            document = result.document
            if self.id_field not in document:
                logger.error(
                    f"document without '{self.id_field}' reached {RANDOM_CURSOR_STAGE_NAME}"
                )
                raise MissingIdFieldError(
                    f"{RANDOM_CURSOR_STAGE_NAME} stage could not find {self.id_field} "
                    f"field in document: {document.to_dict()!r}",
                    {"id_field": self.id_field},
                )

            doc_id = _hashable(document[self.id_field])
            if doc_id in self._seen_ids:
                n_duplicates += 1
                if n_duplicates == self.max_consecutive_duplicates // 2:
                    logger.warning(
                        f"{RANDOM_CURSOR_STAGE_NAME} saw {n_duplicates} duplicates in a row"
                    )
                if n_duplicates >= self.max_consecutive_duplicates:
                    logger.error(
                        f"{RANDOM_CURSOR_STAGE_NAME} gave up after {n_duplicates} duplicates"
                    )
                    raise TooManyDuplicatesError(
                        f"{RANDOM_CURSOR_STAGE_NAME} stage could not find a non-duplicate "
                        f"document after {n_duplicates} attempts",
                        {"attempts": n_duplicates, "n_returned": self._n_returned},
                    )
                continue

            self._seen_ids.add(doc_id)
            self._n_returned += 1
            return GetNextResult.advanced(document.with_rand_meta(self._next_key()))

    def _next_key(self) -> float:
        if self._keys.n_drawn >= self._keys.population:
            # Stale estimate: treat the population as one larger than what was drawn.
            logger.warning(
                f"{RANDOM_CURSOR_STAGE_NAME} returned more documents than the "
                f"population estimate of {self.population_estimate}"
            )
            self._keys.population = self._keys.n_drawn + 1
        return self._keys.next_key()

    def dispose(self) -> None:
        self._seen_ids.clear()
        self._done = True
