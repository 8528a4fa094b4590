"""Choosing between the reservoir and random-cursor sample stages."""

from __future__ import annotations

import logging

from docsample.config import MAX_CONSECUTIVE_DUPLICATES, RandomCursorSpec, SampleSpec
from docsample.reservoir.base import SampleStageBase
from docsample.reservoir.random_cursor import SampleFromRandomCursorStage
from docsample.reservoir.sample import SampleStage
from docsample.stage import Stage

logger = logging.getLogger(__name__)

# A random cursor is used only for small samples of large collections.
MIN_RECORDS_FOR_RANDOM_CURSOR = 100
RANDOM_CURSOR_MAX_FRACTION = 0.05


def use_random_cursor(size: int, num_records: int) -> bool:
    """Return True when sampling ``size`` of ``num_records`` should use a random cursor."""
    return (
        num_records > MIN_RECORDS_FOR_RANDOM_CURSOR
        and size < RANDOM_CURSOR_MAX_FRACTION * num_records
    )


def plan_sample(
    spec: SampleSpec,
    num_records: int,
    source: Stage,
    random_source: Stage | None = None,
    id_field: str = "_id",
    max_consecutive_duplicates: int = MAX_CONSECUTIVE_DUPLICATES,
    seed: int | None = None,
) -> SampleStageBase:
    """Build the sample stage for ``spec`` and attach its source.

    Args:
        spec: Validated sample request.
        num_records: Number of documents in the collection being sampled.
        source: Sequential source over the full collection.
        random_source: Optional source yielding documents in random order.
        id_field: Field identifying documents returned by ``random_source``.
        max_consecutive_duplicates: Passed through to the random-cursor stage.
        seed: Random seed for reproducibility.

    Returns:
        A ready-to-pull sample stage.
    """
    if random_source is not None and use_random_cursor(spec.size, num_records):
        logger.debug(f"sampling {spec.size} of {num_records} records from a random cursor")
        cursor_spec = RandomCursorSpec(
            size=spec.size,
            population_estimate=num_records,
            id_field=id_field,
            max_consecutive_duplicates=max_consecutive_duplicates,
        )
        stage: SampleStageBase = SampleFromRandomCursorStage.create(cursor_spec, seed=seed)
        stage.set_source(random_source)
        return stage

    logger.debug(f"sampling {spec.size} of {num_records} records with a reservoir")
    stage = SampleStage(spec.size, seed=seed)
    stage.set_source(source)
    return stage
