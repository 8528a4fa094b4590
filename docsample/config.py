"""Sample stage specifications and their validation.

A ``$sample`` specification is a mapping with a single required ``size``
option::

    {"size": 100}

Specifications can be plain mappings, OmegaConf configs, or YAML files loaded
through :func:`load_sample_config`.  Every malformation is rejected here,
before a stage is built, with its own error class.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

from docsample.errors import (
    InvalidDuplicateBoundError,
    InvalidIdFieldError,
    InvalidPopulationEstimateError,
    MissingSizeError,
    NegativeSizeError,
    NonNumericSizeError,
    NonObjectSpecError,
    UnknownOptionError,
)

SAMPLE_STAGE_NAME = "$sample"
RANDOM_CURSOR_STAGE_NAME = "$sampleFromRandomCursor"

# Random cursor stage gives up after this many duplicates in a row.
MAX_CONSECUTIVE_DUPLICATES = 500


@dataclass(frozen=True)
class SampleSpec:
    """Validated ``$sample`` request.

    Attributes:
        size: Number of documents to output.
    """

    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise NegativeSizeError(
                f"size argument to {SAMPLE_STAGE_NAME} must not be negative",
                {"size": self.size},
            )

    def to_dict(self) -> dict[str, Any]:
        return {SAMPLE_STAGE_NAME: {"size": self.size}}


@dataclass(frozen=True)
class RandomCursorSpec:
    """Request for sampling from a random-access source.

    Attributes:
        size: Number of documents to output.
        id_field: Field used to recognise repeated documents.
        population_estimate: Assumed number of distinct documents available.
        max_consecutive_duplicates: Duplicates in a row tolerated before
            the source is declared unable to satisfy the request.
    """

    size: int
    population_estimate: int
    id_field: str = "_id"
    max_consecutive_duplicates: int = MAX_CONSECUTIVE_DUPLICATES

    def __post_init__(self) -> None:
        # Frozen, so coerced values are written through object.__setattr__.
        object.__setattr__(self, "size", _coerce_size(self.size, RANDOM_CURSOR_STAGE_NAME))
        if not isinstance(self.id_field, str) or not self.id_field:
            raise InvalidIdFieldError(
                "id_field must be a non-empty string", {"id_field": self.id_field}
            )
        population = _positive_integral(self.population_estimate)
        if population is None:
            raise InvalidPopulationEstimateError(
                "population_estimate must be a positive integer",
                {"population_estimate": self.population_estimate},
            )
        object.__setattr__(self, "population_estimate", population)
        bound = _positive_integral(self.max_consecutive_duplicates)
        if bound is None:
            raise InvalidDuplicateBoundError(
                "max_consecutive_duplicates must be a positive integer",
                {"max_consecutive_duplicates": self.max_consecutive_duplicates},
            )
        object.__setattr__(self, "max_consecutive_duplicates", bound)


def _is_numeric(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _positive_integral(value: Any) -> int | None:
    """Return ``value`` as a positive ``int``, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value) if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def _coerce_size(value: Any, stage_name: str = SAMPLE_STAGE_NAME) -> int:
    """Validate and convert a ``size`` value to ``int``."""
    if not _is_numeric(value):
        raise NonNumericSizeError(
            f"size argument to {stage_name} must be a number",
            {"size": value, "type": type(value).__name__},
        )
    if value < 0:
        raise NegativeSizeError(
            f"size argument to {stage_name} must not be negative",
            {"size": value},
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise NonNumericSizeError(
            f"size argument to {stage_name} must be finite", {"size": value}
        )
    return int(value)


def parse_sample_spec(spec: Any) -> SampleSpec:
    """Parse the argument of a ``$sample`` stage.

    Args:
        spec: Mapping (or ``DictConfig``) of options.

    Returns:
        The validated :class:`SampleSpec`.

    Raises:
        NonObjectSpecError: ``spec`` is not a mapping.
        UnknownOptionError: ``spec`` contains an option other than ``size``.
        NonNumericSizeError: ``size`` is not a number.
        NegativeSizeError: ``size`` is negative.
        MissingSizeError: ``size`` is absent.
    """
    if isinstance(spec, DictConfig):
        spec = OmegaConf.to_container(spec, resolve=True)
    if not isinstance(spec, Mapping):
        raise NonObjectSpecError(
            f"the argument to {SAMPLE_STAGE_NAME} must be an object",
            {"spec": spec},
        )

    size: int | None = None
    for key, value in spec.items():
        if key != "size":
            raise UnknownOptionError(
                f"unrecognized option to {SAMPLE_STAGE_NAME}: {key}", {"option": key}
            )
        size = _coerce_size(value)

    if size is None:
        raise MissingSizeError(f"{SAMPLE_STAGE_NAME} stage must specify a size argument")
    return SampleSpec(size=size)


def parse_stage(stage_spec: Any) -> SampleSpec:
    """Parse a full ``{"$sample": {...}}`` stage document."""
    if isinstance(stage_spec, DictConfig):
        stage_spec = OmegaConf.to_container(stage_spec, resolve=True)
    if not isinstance(stage_spec, Mapping) or SAMPLE_STAGE_NAME not in stage_spec:
        raise NonObjectSpecError(f"expected a {SAMPLE_STAGE_NAME} stage", {"spec": stage_spec})
    return parse_sample_spec(stage_spec[SAMPLE_STAGE_NAME])


def load_sample_config(path: str | Path) -> SampleSpec:
    """Load a ``$sample`` specification from a YAML file.

    The file may hold either the bare options (``size: 10``) or the full
    stage document (``$sample: {size: 10}``).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing config: {path}")
    cfg = OmegaConf.load(path)
    if isinstance(cfg, DictConfig) and SAMPLE_STAGE_NAME in cfg:
        return parse_stage(cfg)
    return parse_sample_spec(cfg)
