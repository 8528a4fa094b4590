"""Error types raised by sample stages.

User-facing errors derive from :class:`SampleError` and carry a stable numeric
``code``.  :class:`InvariantViolation` is kept outside that hierarchy: it
signals upstream misbehaviour and the caller must abandon the operation.
"""

from __future__ import annotations

from typing import Any


class SampleError(Exception):
    """Base class for user-facing sampling errors."""

    code: int = 0

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error with message and optional details.

        Args:
            message: Error description.
            details: Additional context about the error.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Configuration errors (raised at construction time)
# ---------------------------------------------------------------------------


class ConfigurationError(SampleError):
    """Malformed sample specification."""


class NonObjectSpecError(ConfigurationError):
    code = 28745


class NonNumericSizeError(ConfigurationError):
    code = 28746


class NegativeSizeError(ConfigurationError):
    code = 28747


class UnknownOptionError(ConfigurationError):
    code = 28748


class MissingSizeError(ConfigurationError):
    code = 28749


class InvalidIdFieldError(ConfigurationError):
    code = 28790


class InvalidPopulationEstimateError(ConfigurationError):
    code = 28791


class InvalidDuplicateBoundError(ConfigurationError):
    code = 28792


# ---------------------------------------------------------------------------
# Runtime errors (raised from get_next)
# ---------------------------------------------------------------------------


class DataError(SampleError):
    """An input document cannot be processed."""


class MissingIdFieldError(DataError):
    code = 28793


class ResourceError(SampleError):
    """The upstream cannot satisfy the request."""


class TooManyDuplicatesError(ResourceError):
    code = 28799


class InvariantViolation(RuntimeError):
    """Internal invariant broken by upstream; the operation cannot continue."""
