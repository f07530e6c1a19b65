from __future__ import annotations

from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal


class TaskSignals(QObject):
    success = Signal(object)
    error = Signal(Exception)
    finished = Signal()


class TaskRunnable(QRunnable):
    def __init__(self, fn: Callable[[], Any]) -> None:
        super().__init__()
        self.fn = fn
        self.signals = TaskSignals()

    def run(self) -> None:  # pragma: no cover
        try:
            result = self.fn()
        except Exception as exc:  # noqa: BLE001 - delivered through the error signal
            self.signals.error.emit(exc)
        else:
            self.signals.success.emit(result)
        finally:
            self.signals.finished.emit()


class TaskRunner(QObject):
    """Runs blocking HTTP calls on a background thread pool.

    Callbacks are connected to signals owned by the GUI thread, so view-model
    state is only ever touched from that thread. The dashboard wraps this in a
    ``SerialRunner``; ``max_threads`` caps the private pool for callers that
    do not.
    """

    def __init__(self, max_threads: Optional[int] = None) -> None:
        super().__init__()
        if max_threads is None:
            self.pool = QThreadPool.globalInstance()
        else:
            self.pool = QThreadPool(self)
            self.pool.setMaxThreadCount(max_threads)
        self._tasks: List[TaskRunnable] = []
        self._closed = False

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
        runnable = TaskRunnable(fn)
        self._tasks.append(runnable)

        def deliver(callback: Callable[..., None]) -> Callable[..., None]:
            def call(*args: Any) -> None:
                # the window may be gone by the time a slow request returns
                if not self._closed:
                    callback(*args)

            return call

        def _cleanup() -> None:
            try:
                self._tasks.remove(runnable)
            except ValueError:
                pass

        if on_success:
            runnable.signals.success.connect(deliver(on_success))
        if on_error:
            runnable.signals.error.connect(deliver(on_error))
        if on_finish:
            runnable.signals.finished.connect(deliver(on_finish))
        runnable.signals.finished.connect(_cleanup)
        self.pool.start(runnable)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def shutdown(self, timeout_ms: int = 3000) -> bool:
        """Stop delivering callbacks and wait for running requests to return."""
        self._closed = True
        self.pool.clear()
        return self.pool.waitForDone(timeout_ms)
