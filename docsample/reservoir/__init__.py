"""Sample stages."""

from docsample.reservoir.base import SampleStageBase
from docsample.reservoir.order_stats import OrderStatisticKeys
from docsample.reservoir.random_cursor import SampleFromRandomCursorStage
from docsample.reservoir.sample import SampleStage

__all__ = [
    "SampleStageBase",
    "OrderStatisticKeys",
    "SampleStage",
    "SampleFromRandomCursorStage",
]
