"""
===============================================================================
RemoteSync – fire-and-forget execution of remote store writes
-------------------------------------------------------------------------------
Local commits happen synchronously in the stores; the remote commit is handed
to a RemoteSync which runs it either inline or on a background worker (so the
Tk mainloop is never blocked). Failures are routed to the job's error
callback; there is no retry.

Ordering:
    Jobs run strictly in dispatch order, one at a time. Two saves of the same
    document therefore reach the remote store in the order they were made,
    and the later one is what remains there.
===============================================================================
"""
from __future__ import annotations

import queue
import threading
from typing import Callable, Optional, Tuple

from core.logging.logic.logger import logger

Job = Callable[[], None]
ErrorCallback = Callable[[Exception], None]
SuccessCallback = Callable[[], None]

_Item = Tuple[Job, Optional[SuccessCallback], Optional[ErrorCallback]]


class InlineRemoteSync:
    """Runs jobs immediately on the caller's thread."""

    def dispatch(self, job: Job, *, on_success: Optional[SuccessCallback] = None,
                 on_error: Optional[ErrorCallback] = None) -> None:
        try:
            job()
        except Exception as exc:  # noqa: BLE001 - delivered to the error callback
            if on_error is None:
                raise
            on_error(exc)
            return
        if on_success is not None:
            on_success()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return True


class ThreadedRemoteSync(InlineRemoteSync):
    """
    Runs jobs on a single daemon worker fed by a FIFO queue.

    wait_idle() blocks until every job dispatched so far (including its
    callbacks) has finished. It must not be called from a job or callback.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[_Item]" = queue.Queue()
        self._idle = threading.Condition()
        self._unfinished = 0
        self._worker_lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None

    def dispatch(self, job: Job, *, on_success: Optional[SuccessCallback] = None,
                 on_error: Optional[ErrorCallback] = None) -> None:
        with self._idle:
            self._unfinished += 1
        self._queue.put((job, on_success, on_error))
        self._ensure_worker()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Returns False if jobs are still outstanding after *timeout* seconds."""
        with self._idle:
            return self._idle.wait_for(lambda: self._unfinished == 0, timeout)

    # ------------------------------------------------------------------ #
    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(target=self._run, name="remote-sync", daemon=True)
                self._worker.start()

    def _run(self) -> None:
        while True:
            job, on_success, on_error = self._queue.get()
            try:
                InlineRemoteSync.dispatch(self, job, on_success=on_success, on_error=on_error)
            except Exception as exc:  # noqa: BLE001 - no caller left to raise to
                logger.log("RemoteSync", "JobFailed", level="ERROR", message=repr(exc))
            finally:
                with self._idle:
                    self._unfinished -= 1
                    self._idle.notify_all()
