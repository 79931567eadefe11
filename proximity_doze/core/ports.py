"""
Collaborator ports used by the doze core.

The core never talks to the host directly. Every side effect goes through one
of the narrow protocols below, so tests and the replay command can substitute
the simulated implementations from ``proximity_doze.testing``.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Shared types
# ---------------------------------------------------------------------------

class RadioState(Enum):
    """Radio power state as reported by the radio port."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    UNKNOWN = "unknown"


class RadioControlError(Exception):
    """Raised by a radio port when the underlying driver call fails."""


class ScreenEvent(Enum):
    """Screen power transitions delivered to the service."""

    SCREEN_ON = "screen_on"
    SCREEN_OFF = "screen_off"


SampleListener = Callable[[float, int], object]
PreferenceListener = Callable[[str, bool], None]
AlarmCallback = Callable[[], None]


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class ProximitySensorPort(Protocol):
    """Proximity sensor that pushes ``(distance, timestamp_ns)`` samples."""

    @property
    def max_range(self) -> float: ...

    def register_listener(self, listener: SampleListener) -> None: ...

    def unregister_listener(self, listener: SampleListener) -> None: ...


@runtime_checkable
class PowerPort(Protocol):
    """Host power manager."""

    def wake_up(self, timestamp_ms: int) -> None: ...

    def is_interactive(self) -> bool: ...


@runtime_checkable
class RadioPort(Protocol):
    """Wireless radio driver. ``set_enabled`` raises RadioControlError on failure."""

    def get_state(self) -> RadioState: ...

    def set_enabled(self, enabled: bool) -> None: ...


@runtime_checkable
class AlarmSchedulerPort(Protocol):
    """Repeating alarm facility keyed by a stable token."""

    def schedule_repeating(
        self,
        token: str,
        initial_delay: float,
        interval: float,
        callback: AlarmCallback,
    ) -> None: ...

    def cancel(self, token: str) -> bool:
        """Cancel the alarm for *token*; an unknown token returns False."""
        ...


@runtime_checkable
class PulseEmitterPort(Protocol):
    """Broadcasts the doze pulse to downstream consumers."""

    def emit_pulse(self) -> None: ...


@runtime_checkable
class PreferenceStorePort(Protocol):
    """Boolean user preferences with change notification."""

    def get_bool(self, key: str, default: bool = False) -> bool: ...

    def register_listener(self, listener: PreferenceListener) -> None: ...

    def unregister_listener(self, listener: PreferenceListener) -> None: ...
