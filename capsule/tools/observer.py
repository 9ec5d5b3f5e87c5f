"""Optional operation tracing injected into engine entry points."""
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol


logger = logging.getLogger(__name__)


class EngineObserver(Protocol):
    """Receives start/finish/failure notifications for engine operations."""

    def operation_started(self, name: str, context: dict) -> None: ...

    def operation_finished(self, name: str, context: dict) -> None: ...

    def operation_failed(self, name: str, error: BaseException) -> None: ...


class NullObserver:
    """Observer that ignores everything."""

    def operation_started(self, name: str, context: dict) -> None:
        pass

    def operation_finished(self, name: str, context: dict) -> None:
        pass

    def operation_failed(self, name: str, error: BaseException) -> None:
        pass


class LoggingObserver:
    """Writes one DEBUG record per event, tagged with an operation id."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self._active: dict[str, list[tuple[str, float]]] = {}

    def operation_started(self, name: str, context: dict) -> None:
        operation_id = uuid.uuid4().hex[:8]
        self._active.setdefault(name, []).append((operation_id, time.perf_counter()))
        self.log.debug("[%s] %s started %s", operation_id, name, context)

    def operation_finished(self, name: str, context: dict) -> None:
        operation_id, elapsed = self._pop(name)
        self.log.debug("[%s] %s finished in %.3fs %s", operation_id, name, elapsed, context)

    def operation_failed(self, name: str, error: BaseException) -> None:
        operation_id, elapsed = self._pop(name)
        self.log.debug("[%s] %s failed after %.3fs: %s", operation_id, name, elapsed, error)

    def _pop(self, name: str) -> tuple[str, float]:
        stack = self._active.get(name)
        if not stack:
            return "-", 0.0
        operation_id, started = stack.pop()
        return operation_id, time.perf_counter() - started


@contextmanager
def observe(
    observer: Optional[EngineObserver],
    name: str,
    **context
) -> Iterator[dict]:
    """
    Report an operation to the observer.

    Yields a dict the caller may fill with result details; it is passed to
    ``operation_finished``. Exceptions are reported and re-raised.
    """
    observer = observer or NullObserver()
    observer.operation_started(name, dict(context))
    result: dict = {}
    try:
        yield result
    except BaseException as e:
        observer.operation_failed(name, e)
        raise
    observer.operation_finished(name, result)
