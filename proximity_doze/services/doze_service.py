"""
Doze service: wires the proximity filter and the radio scheduler to the host.
"""

from __future__ import annotations

import time
from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from proximity_doze.config.settings import Settings
from proximity_doze.core.gesture_config import GestureConfig
from proximity_doze.core.ports import (
    AlarmSchedulerPort,
    PowerPort,
    PreferenceStorePort,
    ProximitySensorPort,
    PulseEmitterPort,
    RadioPort,
    ScreenEvent,
)
from proximity_doze.core.proximity_filter import ProximityFilter
from proximity_doze.core.radio import RadioController
from proximity_doze.core.radio_scheduler import ScreenTransitionScheduler
from proximity_doze.core.radio_toggle import RadioToggle
from proximity_doze.logger import LoggerMixin
from proximity_doze.services.preference_store import InMemoryPreferenceStore


class DozeService(LoggerMixin):
    """
    Long-lived service owning the doze core.

    Screen transitions arrive through :meth:`handle_screen_event`; gesture
    preference changes arrive through the preference store listener.
    """

    def __init__(
        self,
        settings: Settings,
        sensor: ProximitySensorPort,
        power: PowerPort,
        radio: RadioPort,
        alarms: AlarmSchedulerPort,
        pulse_emitter: PulseEmitterPort,
        preferences: Optional[PreferenceStorePort] = None,
        is_doze_enabled: Optional[Callable[[], bool]] = None,
        clock_ns: Callable[[], int] = time.monotonic_ns,
    ):
        """Initialize doze service."""
        self.settings = settings
        self.power = power
        self.alarms = alarms
        self.preferences = preferences or InMemoryPreferenceStore(
            settings.get_gesture_defaults()
        )
        self.gesture_config = GestureConfig()
        self.radio = RadioController(radio)
        self.toggle = RadioToggle(self.radio, settings.radio_enable_window_seconds)

        self.proximity_filter = ProximityFilter(
            sensor=sensor,
            config=self.gesture_config,
            pulse_emitter=pulse_emitter,
            power=power,
            is_doze_enabled=is_doze_enabled or (lambda: self.settings.doze_enabled),
            clock_ns=clock_ns,
        )
        self.scheduler = ScreenTransitionScheduler(
            proximity_filter=self.proximity_filter,
            radio=self.radio,
            alarms=alarms,
            initial_delay=settings.radio_initial_delay_seconds,
            repeat_interval=settings.radio_repeat_interval_seconds,
            toggle=self.toggle,
            restore_window=settings.radio_restore_window_seconds,
            clock_ns=clock_ns,
        )

        # Service state
        self.is_running = False
        self.last_error: Optional[str] = None
        self.stats = {
            "screen_off_events": 0,
            "screen_on_events": 0,
            "failed_events": 0,
            "started_at": None,
        }

    def start(self) -> None:
        """Start the doze service."""
        if self.is_running:
            return

        self.logger.info("Starting doze service...")
        self.gesture_config.attach(self.preferences)
        self.is_running = True
        self.stats["started_at"] = datetime.now(timezone.utc)

        if not self.power.is_interactive():
            self.proximity_filter.test_and_enable()

        self.logger.info(f"Doze service started ({self.gesture_config!r})")

    def stop(self) -> None:
        """Stop the doze service and give the radio back to the user."""
        if not self.is_running:
            return

        if self.scheduler.restore_task is not None:
            self.scheduler.on_screen_on()
        self.proximity_filter.disable()
        self.gesture_config.detach()
        self.toggle.shutdown(wait=True)
        self.is_running = False
        self.logger.info("Doze service stopped")

    def handle_screen_event(self, event: ScreenEvent) -> None:
        """Dispatch one screen transition. Never raises."""
        if not self.is_running:
            self.logger.warning(f"Ignoring {event.value}: service is not running")
            return

        try:
            if event is ScreenEvent.SCREEN_OFF:
                self.stats["screen_off_events"] += 1
                self.scheduler.on_screen_off()
            elif event is ScreenEvent.SCREEN_ON:
                self.stats["screen_on_events"] += 1
                self.scheduler.on_screen_on()
        except Exception as e:
            self.stats["failed_events"] += 1
            self.last_error = str(e)
            self.logger.exception(f"Caught an exception while handling {event.value}")

    def on_screen_off(self) -> None:
        self.handle_screen_event(ScreenEvent.SCREEN_OFF)

    def on_screen_on(self) -> None:
        self.handle_screen_event(ScreenEvent.SCREEN_ON)

    def toggle_radio_on_for(self, duration: Optional[float] = None) -> Future:
        """Turn the radio on for *duration* seconds on the toggle worker."""
        return self.toggle.toggle_radio_on_for(duration)

    def get_status(self) -> Dict[str, Any]:
        """Get service status."""
        task = self.scheduler.restore_task
        return {
            "running": self.is_running,
            "filter_active": self.proximity_filter.is_active,
            "gestures": self.gesture_config.as_dict(),
            "radio_enabled_by_user": self.scheduler.radio_enabled_by_user,
            "radio_restore_pending": task is not None,
            "radio_restore_fires": self.scheduler.restore_fires,
            "toggle_running": self.toggle.is_running,
            "last_error": self.last_error,
            "stats": dict(self.stats),
        }


def create_radio_port(settings: Settings) -> RadioPort:
    """Build the radio port selected by ``settings.radio_backend``."""
    if settings.radio_backend == "simulated":
        from proximity_doze.testing.simulated import SimulatedRadio
        return SimulatedRadio(enabled=True)

    from proximity_doze.hardware.nmcli_radio import NmcliRadio
    return NmcliRadio(timeout=settings.nmcli_timeout_seconds)
