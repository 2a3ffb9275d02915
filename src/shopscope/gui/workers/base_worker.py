"""Base classes for ShopScope background workers."""

from __future__ import annotations

import asyncio
import traceback
from typing import Any

from PySide6.QtCore import QRunnable, Slot

from .signals import WorkerSignals


class BaseWorker(QRunnable):
    """Thread-pool-friendly runnable with standard signal plumbing.

    Subclasses implement :meth:`execute` and return a result object.
    The base class emits started/finished/error/result around it.
    """

    def __init__(self) -> None:
        super().__init__()
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self) -> None:
        """Entry point called by QThreadPool.  Do not override."""
        self.signals.started.emit()
        try:
            result = self.execute()
        except Exception:
            self.signals.error.emit(traceback.format_exc())
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()

    def execute(self) -> Any:
        raise NotImplementedError


class AsyncWorker(BaseWorker):
    """Worker whose job is a coroutine, run on a private event loop.

    Each run gets its own loop through :func:`asyncio.run`, so nothing
    async is shared with the GUI thread.
    """

    def execute(self) -> Any:
        return asyncio.run(self.execute_async())

    async def execute_async(self) -> Any:
        raise NotImplementedError
