"""
One-shot "radio on for N seconds" helper running on its own worker thread.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from proximity_doze.core.radio import RadioController

logger = logging.getLogger(__name__)


class RadioToggle:
    """
    Enables the radio, waits, then disables it again.

    The wait happens on a dedicated single-thread executor so screen
    transition handlers never block on it. :meth:`interrupt` cuts the wait
    short; the radio is still switched off afterwards.

    Parameters
    ----------
    radio : RadioController
        Failure-tolerant radio wrapper.
    default_duration : float
        On-time in seconds used when none is passed (default 20).
    """

    def __init__(self, radio: RadioController, default_duration: float = 20.0) -> None:
        self._radio = radio
        self._default_duration = default_duration
        self._interrupt = threading.Event()
        self._idle = threading.Condition()
        self._active = 0
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """True while a cycle is queued or running."""
        with self._idle:
            return self._active > 0

    def toggle_radio_on_for(self, duration: Optional[float] = None) -> Future:
        """
        Queue one on/wait/off cycle on the worker thread.

        Returns a future that resolves to True if the wait was interrupted.
        A cycle interrupted while still queued never touches the radio.
        """
        seconds = self._default_duration if duration is None else duration
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="radio-toggle"
                )
            self._acquire()
            try:
                future = self._executor.submit(self._cycle, seconds)
            except RuntimeError:
                self._release()
                raise
        future.add_done_callback(self._on_cycle_done)
        return future

    def run_blocking(self, duration: float) -> bool:
        """Run one cycle on the calling thread."""
        self._acquire()
        return self._cycle(duration)

    def interrupt(self, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Abort the running wait and any queued cycle.

        With ``wait=True`` this blocks until the cycles have switched the
        radio off. Returns False if nothing was queued or running.
        """
        with self._idle:
            if self._active == 0:
                return False
            self._interrupt.set()
            if wait:
                self._idle.wait_for(lambda: self._active == 0, timeout)
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Drop queued cycles, interrupt the running one and stop the worker."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is None:
            return
        self.interrupt()
        executor.shutdown(wait=wait, cancel_futures=True)

    # -- internals -----------------------------------------------------------

    def _cycle(self, duration: float) -> bool:
        # The caller has already counted this cycle in ``_active``.
        try:
            if self._interrupt.is_set():
                logger.debug("Radio toggle interrupted before it started, skipping")
                return True
            logger.debug("Enabling radio for %.1f s", duration)
            self._radio.set_enabled(True)
            try:
                interrupted = self._interrupt.wait(duration)
                if interrupted:
                    logger.debug("Caught an interrupt while waiting, disabling radio early")
            finally:
                logger.debug("Disabling radio")
                self._radio.set_enabled(False)
            return interrupted
        finally:
            self._release()

    def _acquire(self) -> None:
        with self._idle:
            self._active += 1

    def _release(self) -> None:
        with self._idle:
            self._active -= 1
            if self._active == 0:
                self._interrupt.clear()
            self._idle.notify_all()

    def _on_cycle_done(self, future: Future) -> None:
        # Cancelled cycles never ran, so nobody released them.
        if future.cancelled():
            self._release()
