"""Pull-based stage interface shared by every pipeline stage.

Each call to :meth:`Stage.get_next` returns a :class:`GetNextResult` in one of
three states:

* ``ADVANCED`` - a document was produced;
* ``PAUSE_EXECUTION`` - nothing was produced this call, the caller should retry;
* ``EOF`` - the stage is exhausted and will stay exhausted.

A stage that pulls several times from its source to produce one output must
hand every pause back to its caller instead of holding on to it.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from docsample.document import Document
from docsample.errors import InvariantViolation


class ReturnStatus(enum.Enum):
    ADVANCED = "advanced"
    PAUSE_EXECUTION = "pause_execution"
    EOF = "eof"


@dataclass(frozen=True)
class GetNextResult:
    """Outcome of a single pull from a stage."""

    status: ReturnStatus
    _document: Document | None = None

    @classmethod
    def advanced(cls, document: Document) -> GetNextResult:
        return cls(ReturnStatus.ADVANCED, document)

    @classmethod
    def pause(cls) -> GetNextResult:
        return _PAUSE

    @classmethod
    def eof(cls) -> GetNextResult:
        return _EOF

    def is_advanced(self) -> bool:
        return self.status is ReturnStatus.ADVANCED

    def is_paused(self) -> bool:
        return self.status is ReturnStatus.PAUSE_EXECUTION

    def is_eof(self) -> bool:
        return self.status is ReturnStatus.EOF

    @property
    def document(self) -> Document:
        """Payload of an advanced result."""
        if self._document is None:
            raise InvariantViolation(f"no document on a {self.status.value} result")
        return self._document


_PAUSE = GetNextResult(ReturnStatus.PAUSE_EXECUTION)
_EOF = GetNextResult(ReturnStatus.EOF)


class Stage(ABC):
    """Base interface for pull-based pipeline stages."""

    def __init__(self) -> None:
        self.source: Stage | None = None

    def set_source(self, source: Stage) -> None:
        """Attach the upstream stage this stage pulls from."""
        self.source = source

    def _pull(self) -> GetNextResult:
        if self.source is None:
            raise InvariantViolation(f"{type(self).__name__} has no source stage")
        return self.source.get_next()

    @abstractmethod
    def get_next(self) -> GetNextResult:
        """Return the next result from this stage."""

    def serialize(self) -> dict[str, Any]:
        """Return the stage specification this stage was built from."""
        return {}

    def dispose(self) -> None:
        """Release any buffered state; the stage must not be pulled again."""

    def __iter__(self) -> Iterator[Document]:
        """Yield documents until EOF, skipping pauses.

        Convenience for callers that have nothing else to do on a pause.
        """
        while True:
            result = self.get_next()
            if result.is_eof():
                return
            if result.is_advanced():
                yield result.document


class QueueSource(Stage):
    """In-memory source yielding queued documents and pauses, then EOF.

    Mappings are wrapped as :class:`Document` when queued.
    """

    def __init__(self, items: Iterable[Document | Mapping[str, Any] | GetNextResult] = ()) -> None:
        super().__init__()
        self.queue: deque[GetNextResult] = deque()
        for item in items:
            self.push(item)

    def push(self, item: Document | Mapping[str, Any] | GetNextResult) -> None:
        if isinstance(item, GetNextResult):
            self.queue.append(item)
        elif isinstance(item, Document):
            self.queue.append(GetNextResult.advanced(item))
        else:
            self.queue.append(GetNextResult.advanced(Document(item)))

    def push_pause(self) -> None:
        self.queue.append(GetNextResult.pause())

    def get_next(self) -> GetNextResult:
        if not self.queue:
            return GetNextResult.eof()
        return self.queue.popleft()


def drain(stage: Stage) -> list[GetNextResult]:
    """Pull ``stage`` until EOF and return every non-EOF result in order."""
    results: list[GetNextResult] = []
    while True:
        result = stage.get_next()
        if result.is_eof():
            return results
        results.append(result)


class IteratorSource(Stage):
    """Lazy source over an iterable of documents or mappings."""

    def __init__(self, items: Iterable[Document | Mapping[str, Any]]) -> None:
        super().__init__()
        self._items = iter(items)
        self._done = False

    def get_next(self) -> GetNextResult:
        if self._done:
            return GetNextResult.eof()
        try:
            item = next(self._items)
        except StopIteration:
            self._done = True
            return GetNextResult.eof()
        if not isinstance(item, Document):
            item = Document(item)
        return GetNextResult.advanced(item)
