"""
Failure-tolerant wrapper around a radio port.
"""

from __future__ import annotations

import logging

from proximity_doze.core.ports import RadioPort, RadioState

logger = logging.getLogger(__name__)


class RadioController:
    """
    Sequences calls to a :class:`RadioPort` and swallows driver failures.

    Radio errors must never block or crash the screen handlers, so every
    exception is logged and mapped to a neutral result instead.

    Parameters
    ----------
    port : RadioPort
        The underlying radio driver.
    """

    def __init__(self, port: RadioPort) -> None:
        self._port = port

    @property
    def port(self) -> RadioPort:
        return self._port

    def get_state(self) -> RadioState:
        """Return the radio state, or ``RadioState.UNKNOWN`` if the query fails."""
        try:
            return self._port.get_state()
        except Exception:
            logger.exception("Caught an exception while getting radio state")
        return RadioState.UNKNOWN

    def set_enabled(self, enabled: bool) -> bool:
        """Switch the radio; returns False if the driver call failed."""
        try:
            self._port.set_enabled(enabled)
            return True
        except Exception:
            logger.exception("Caught an exception while setting radio state to %s", enabled)
        return False

    def is_enabled(self) -> bool:
        return self.get_state() is RadioState.ENABLED
