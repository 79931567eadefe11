"""
Fan-out broadcaster for the doze pulse event.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)

DOZE_PULSE_ACTION = "proximity_doze.doze.pulse"

PulseReceiver = Callable[[str], None]


class PulseBroadcaster:
    """Delivers each pulse to every subscribed receiver; one failing receiver does not stop the others."""

    def __init__(self, action: str = DOZE_PULSE_ACTION) -> None:
        self._action = action
        self._receivers: List[PulseReceiver] = []
        self._lock = threading.Lock()
        self.pulse_count = 0

    @property
    def action(self) -> str:
        return self._action

    def subscribe(self, receiver: PulseReceiver) -> None:
        with self._lock:
            self._receivers.append(receiver)

    def unsubscribe(self, receiver: PulseReceiver) -> None:
        with self._lock:
            if receiver in self._receivers:
                self._receivers.remove(receiver)

    def emit_pulse(self) -> None:
        with self._lock:
            receivers = list(self._receivers)
            self.pulse_count += 1
        logger.debug("Broadcasting %s to %d receiver(s)", self._action, len(receivers))
        for receiver in receivers:
            try:
                receiver(self._action)
            except Exception:
                logger.exception("Pulse receiver %r failed", receiver)
