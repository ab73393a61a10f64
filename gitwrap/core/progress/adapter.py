"""Bridge between a process output stream and a caller's progress callback."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from gitwrap.core.progress.parser import Progress, ProgressParser

EventT = TypeVar("EventT")


class AdapterState(str, Enum):
    """Lifecycle of a progress adapter."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


class ProgressAdapter(Generic[EventT]):
    """Feed output chunks through a parser and report each progress record.

    The adapter does not emit the synthetic start event: callers send the
    zero-progress event themselves before attaching the adapter to a stream.
    """

    def __init__(
        self,
        parser: ProgressParser,
        mapper: Callable[[Progress], EventT],
        callback: Callable[[EventT], None],
    ) -> None:
        self.parser = parser
        self._mapper = mapper
        self._callback = callback
        self.state = AdapterState.NOT_STARTED

    def feed(self, chunk: str) -> None:
        """Parse a chunk of output and invoke the callback for every progress record in it."""
        if self.state is AdapterState.FINISHED:
            msg = "Cannot feed a finished progress adapter"
            raise RuntimeError(msg)
        self.state = AdapterState.RUNNING
        self._dispatch(self.parser.feed(chunk))

    def close(self) -> None:
        """Flush the last buffered line and finish. Closing twice is a no-op."""
        if self.state is AdapterState.FINISHED:
            return
        try:
            self._dispatch(self.parser.flush())
        finally:
            self.state = AdapterState.FINISHED

    def consume(self, chunks: Iterable[str]) -> None:
        """Feed a whole stream of chunks, then close.

        If the callback raises, reporting stops but the stream is still read to
        the end so the producing process never blocks on a full pipe. The
        callback's exception is re-raised once the stream is exhausted.
        """
        error: Exception | None = None
        for chunk in chunks:
            if error is not None:
                continue
            try:
                self.feed(chunk)
            except Exception as e:  # noqa: BLE001
                logger.debug(f"Progress callback failed, draining remaining output: {e}")
                error = e
        if error is not None:
            self.state = AdapterState.FINISHED
            raise error
        self.close()

    def _dispatch(self, records: list[Progress]) -> None:
        for record in records:
            self._callback(self._mapper(record))
