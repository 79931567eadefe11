"""
Repeating alarms on background threads, keyed by a stable token.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from proximity_doze.core.ports import AlarmCallback

logger = logging.getLogger(__name__)


class _RepeatingAlarm:
    """One daemon thread that fires *callback* after *initial_delay*, then every *interval*."""

    def __init__(
        self,
        token: str,
        initial_delay: float,
        interval: float,
        callback: AlarmCallback,
    ) -> None:
        self.token = token
        self.initial_delay = initial_delay
        self.interval = interval
        self.callback = callback
        self.fire_count = 0
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name=f"alarm-{token}"
        )

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _loop(self) -> None:
        delay = self.initial_delay
        while not self._cancelled.wait(delay):
            self.fire_count += 1
            try:
                self.callback()
            except Exception:
                logger.exception("Alarm %s callback failed", self.token)
            delay = self.interval


class ThreadingAlarmScheduler:
    """
    Alarm scheduler backed by one thread per outstanding alarm.

    Scheduling a token that is already pending replaces the old alarm.
    """

    def __init__(self) -> None:
        self._alarms: Dict[str, _RepeatingAlarm] = {}
        self._lock = threading.Lock()

    def schedule_repeating(
        self,
        token: str,
        initial_delay: float,
        interval: float,
        callback: AlarmCallback,
    ) -> None:
        if interval <= 0:
            raise ValueError("Alarm interval must be greater than zero")
        alarm = _RepeatingAlarm(token, initial_delay, interval, callback)
        with self._lock:
            previous = self._alarms.pop(token, None)
            self._alarms[token] = alarm
        if previous is not None:
            logger.debug("Replacing pending alarm %s", token)
            previous.cancel()
        alarm.start()
        logger.debug(
            "Alarm %s scheduled (initial=%.1fs, interval=%.1fs)",
            token, initial_delay, interval,
        )

    def cancel(self, token: str) -> bool:
        with self._lock:
            alarm = self._alarms.pop(token, None)
        if alarm is None:
            return False
        alarm.cancel()
        logger.debug("Alarm %s cancelled", token)
        return True

    def is_scheduled(self, token: str) -> bool:
        with self._lock:
            return token in self._alarms

    def shutdown(self, timeout: float = 2.0) -> None:
        """Cancel every alarm and wait for the threads to exit."""
        with self._lock:
            alarms = list(self._alarms.values())
            self._alarms.clear()
        for alarm in alarms:
            alarm.cancel()
        for alarm in alarms:
            alarm.join(timeout)
