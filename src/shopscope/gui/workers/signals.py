"""Qt signals shared by the list-screen workers."""

from PySide6.QtCore import QObject, Signal


class WorkerSignals(QObject):
    """Signals emitted by every background worker.

    Attributes:
        started: Emitted when the worker begins execution.
        finished: Emitted when the worker completes (success or failure).
        error: Emitted with a traceback string on unhandled exception.
        result: Emitted with the return value of execute() on success.
    """

    started = Signal()
    finished = Signal()
    error = Signal(str)
    result = Signal(object)
