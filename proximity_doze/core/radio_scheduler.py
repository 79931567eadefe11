"""
Screen transition scheduler.

On screen off the radio is switched off and a repeating restore alarm is
armed. On screen on the alarm is cancelled and the radio is switched back on,
but only if the user had it on when the screen went off.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from proximity_doze.core.ports import AlarmSchedulerPort, RadioState
from proximity_doze.core.proximity_filter import ProximityFilter
from proximity_doze.core.radio import RadioController
from proximity_doze.core.radio_toggle import RadioToggle

logger = logging.getLogger(__name__)

RADIO_RESTORE_TOKEN = "proximity_doze.radio_restore"

RADIO_INITIAL_WAKEUP_SECONDS = 5 * 60
RADIO_WAKEUP_INTERVAL_SECONDS = 10 * 60
TOGGLE_STOP_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class RadioRestoreTask:
    """The single outstanding restore alarm."""

    token: str
    scheduled_at_ns: int
    initial_delay: float
    repeat_interval: float
    saved_user_radio_state: bool


class ScreenTransitionScheduler:
    """
    Reacts to screen on/off and sequences the radio around them.

    Parameters
    ----------
    proximity_filter : ProximityFilter
        Enabled on screen off, disabled on screen on.
    radio : RadioController
        Failure-tolerant radio wrapper.
    alarms : AlarmSchedulerPort
        Repeating alarm facility.
    initial_delay, repeat_interval : float
        Restore alarm timing in seconds.
    toggle : RadioToggle, optional
        Used by restore fires when ``restore_window`` is set.
    restore_window : float, optional
        If set, each restore fire turns the radio on only for this long
        instead of leaving it on.
    clock_ns : callable
        Monotonic nanosecond clock.
    """

    def __init__(
        self,
        proximity_filter: ProximityFilter,
        radio: RadioController,
        alarms: AlarmSchedulerPort,
        initial_delay: float = RADIO_INITIAL_WAKEUP_SECONDS,
        repeat_interval: float = RADIO_WAKEUP_INTERVAL_SECONDS,
        toggle: Optional[RadioToggle] = None,
        restore_window: Optional[float] = None,
        clock_ns: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        if restore_window is not None and toggle is None:
            raise ValueError("restore_window requires a RadioToggle")
        self._filter = proximity_filter
        self._radio = radio
        self._alarms = alarms
        self._initial_delay = initial_delay
        self._repeat_interval = repeat_interval
        self._toggle = toggle
        self._restore_window = restore_window
        self._clock_ns = clock_ns

        self._radio_enabled_by_user = False
        self._restore_task: Optional[RadioRestoreTask] = None
        self._restore_fires = 0
        # Serializes screen transitions with restore fires from the alarm thread.
        self._lock = threading.Lock()

    # -- properties ----------------------------------------------------------

    @property
    def radio_enabled_by_user(self) -> bool:
        """Radio state cached at the last screen off."""
        return self._radio_enabled_by_user

    @property
    def restore_task(self) -> Optional[RadioRestoreTask]:
        return self._restore_task

    @property
    def restore_fires(self) -> int:
        return self._restore_fires

    # -- screen transitions --------------------------------------------------

    def on_screen_off(self) -> None:
        with self._lock:
            self._screen_off()

    def on_screen_on(self) -> None:
        with self._lock:
            self._screen_on()

    def _screen_off(self) -> None:
        logger.debug("Display off")
        self._filter.test_and_enable()

        state = self._radio.get_state()
        # A pending task means the radio is off because we turned it off.
        self._radio_enabled_by_user = (
            state is RadioState.ENABLED or self._restore_task is not None
        )

        if not self._radio_enabled_by_user:
            logger.debug("Radio is %s, nothing to schedule", state.value)
            return

        logger.info("Turning radio off")
        self._arm_restore()
        self._radio.set_enabled(False)

    def _screen_on(self) -> None:
        logger.debug("Display on")
        self._filter.disable()

        if not self._radio_enabled_by_user:
            return

        logger.info("Turning radio on")
        self._cancel_restore()
        if self._toggle is not None:
            # The toggle switches the radio off when it ends; let it finish first.
            self._toggle.interrupt(wait=True, timeout=TOGGLE_STOP_TIMEOUT_SECONDS)
        self._radio.set_enabled(True)

    # -- restore alarm -------------------------------------------------------

    def _arm_restore(self) -> None:
        self._cancel_restore()
        self._alarms.schedule_repeating(
            RADIO_RESTORE_TOKEN,
            self._initial_delay,
            self._repeat_interval,
            self._on_restore_alarm,
        )
        self._restore_task = RadioRestoreTask(
            token=RADIO_RESTORE_TOKEN,
            scheduled_at_ns=self._clock_ns(),
            initial_delay=self._initial_delay,
            repeat_interval=self._repeat_interval,
            saved_user_radio_state=self._radio_enabled_by_user,
        )
        logger.debug(
            "Radio restore armed (initial=%.0fs, interval=%.0fs)",
            self._initial_delay,
            self._repeat_interval,
        )

    def _cancel_restore(self) -> None:
        if not self._alarms.cancel(RADIO_RESTORE_TOKEN):
            logger.debug("No pending radio restore to cancel")
        self._restore_task = None

    def _on_restore_alarm(self) -> None:
        with self._lock:
            self._restore()

    def _restore(self) -> None:
        if self._restore_task is None:
            logger.debug("Ignoring radio restore fire with no outstanding task")
            return
        self._restore_fires += 1
        if self._restore_window is not None:
            logger.info("Radio restore: enabling radio for %.0f s", self._restore_window)
            self._toggle.toggle_radio_on_for(self._restore_window)
        else:
            logger.info("Radio restore: enabling radio")
            self._radio.set_enabled(True)
