"""Run blocking work (model loading) on the Qt thread pool."""
from __future__ import annotations

import time
import traceback
from typing import Any, Callable

from loguru import logger
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal


class TaskSignals(QObject):
    """Signals delivered on the thread that owns the receiving slots."""

    finished = pyqtSignal(object)
    failed = pyqtSignal(object, str)  # exception, formatted traceback


class FunctionTask(QRunnable):
    """Wrap a callable for execution in the Qt thread pool."""

    def __init__(self, fn: Callable[..., Any], *args: Any, description: str = "", **kwargs: Any) -> None:
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.description = description or getattr(fn, "__name__", "task")
        self.signals = TaskSignals()

    def run(self) -> None:
        started = time.perf_counter()
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:  # noqa: BLE001
            self.signals.failed.emit(exc, traceback.format_exc())
        else:
            logger.debug("{} finished in {:.2f}s", self.description, time.perf_counter() - started)
            self.signals.finished.emit(result)


class TaskRunner:
    """Thin wrapper around QThreadPool for convenience."""

    def __init__(self, max_threads: int | None = None) -> None:
        self._pool = QThreadPool.globalInstance()
        if max_threads is not None:
            self._pool.setMaxThreadCount(max_threads)

    def submit(self, task: FunctionTask) -> None:
        logger.debug("Submitting {}", task.description)
        self._pool.start(task)
