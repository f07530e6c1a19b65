from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, Optional, Protocol, Tuple


class Runner(Protocol):
    def submit(
        self,
        fn: Callable[[], Any],
        *,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finish: Optional[Callable[[], None]] = None,
    ) -> None:
        ...


class ImmediateRunner:
    """Runs work inline on the calling thread with the same callbacks as the Qt runner."""

    def submit(
        self,
        fn: Callable[[], Any],
        *,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finish: Optional[Callable[[], None]] = None,
    ) -> None:
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001 - handed to on_error
            if on_error is None:
                raise
            on_error(exc)
        else:
            if on_success:
                on_success(result)
        finally:
            if on_finish:
                on_finish()


class SerialRunner:
    """Queues work on top of another runner so only one call is in flight.

    Every client shares one ``requests.Session``, so the dashboard funnels all
    remote calls through a single ``SerialRunner``. Callbacks run in submission
    order. After ``close()`` queued work is dropped and late callbacks are
    ignored.
    """

    def __init__(self, runner: Runner) -> None:
        self.runner = runner
        self._queue: Deque[Tuple[Callable[[], Any], Optional[Callable], Optional[Callable], Optional[Callable]]] = deque()
        self._busy = False
        self._closed = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def queued(self) -> int:
        return len(self._queue)

    def submit(
        self,
        fn: Callable[[], Any],
        *,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finish: Optional[Callable[[], None]] = None,
    ) -> None:
        if self._closed:
            return
        self._queue.append((fn, on_success, on_error, on_finish))
        if not self._busy:
            self._next()

    def close(self) -> None:
        self._closed = True
        self._queue.clear()

    def _guard(self, callback: Optional[Callable[..., None]]) -> Optional[Callable[..., None]]:
        if callback is None:
            return None

        def call(*args: Any) -> None:
            if not self._closed:
                callback(*args)

        return call

    def _next(self) -> None:
        if self._closed or not self._queue:
            self._busy = False
            return
        self._busy = True
        fn, on_success, on_error, on_finish = self._queue.popleft()

        def finished() -> None:
            try:
                if on_finish and not self._closed:
                    on_finish()
            finally:
                self._next()

        self.runner.submit(
            fn,
            on_success=self._guard(on_success),
            on_error=self._guard(on_error),
            on_finish=finished,
        )
