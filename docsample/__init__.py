"""docsample — random sampling stages for pull-based document pipelines.

Public API
----------
The entire usable surface is importable directly from ``docsample``::

    from docsample import SampleStage, SampleFromRandomCursorStage, QueueSource
    from docsample import parse_sample_spec, merge_samples, plan_sample
    from docsample.reservoir.order_stats import OrderStatisticKeys
"""

from __future__ import annotations

# Configuration
from docsample.config import (
    MAX_CONSECUTIVE_DUPLICATES,
    RandomCursorSpec,
    SampleSpec,
    load_sample_config,
    parse_sample_spec,
    parse_stage,
)

# Documents and the pull contract
from docsample.document import Document

# Errors
from docsample.errors import (
    ConfigurationError,
    DataError,
    InvariantViolation,
    MissingIdFieldError,
    ResourceError,
    SampleError,
    TooManyDuplicatesError,
)

# Merging and planning
from docsample.merge import MergeStage, merge_samples
from docsample.planner import plan_sample, use_random_cursor

# Sample stages
from docsample.reservoir import OrderStatisticKeys, SampleFromRandomCursorStage, SampleStage
from docsample.stage import (
    GetNextResult,
    IteratorSource,
    QueueSource,
    ReturnStatus,
    Stage,
    drain,
)

__version__ = "0.1.0"

__all__ = [
    # Primary abstractions
    "Stage",
    "GetNextResult",
    "ReturnStatus",
    "Document",
    "QueueSource",
    "IteratorSource",
    "drain",
    # Samplers
    "SampleStage",
    "SampleFromRandomCursorStage",
    "OrderStatisticKeys",
    # Configuration
    "SampleSpec",
    "RandomCursorSpec",
    "parse_sample_spec",
    "parse_stage",
    "load_sample_config",
    "MAX_CONSECUTIVE_DUPLICATES",
    # Merge and planning
    "merge_samples",
    "MergeStage",
    "plan_sample",
    "use_random_cursor",
    # Errors
    "SampleError",
    "ConfigurationError",
    "DataError",
    "ResourceError",
    "MissingIdFieldError",
    "TooManyDuplicatesError",
    "InvariantViolation",
    "__version__",
]
