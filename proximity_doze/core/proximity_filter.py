"""
Proximity sample filter and gesture classifier.

Turns a stream of raw proximity readings into doze actions:

    EMIT_PULSE      -- broadcast an always-on-display pulse
    IMMEDIATE_WAKE  -- wake the device right away (proximity wake)
    NONE            -- nothing to do

Classification happens only on a near -> far edge. The dwell time runs from
the previous non-edge reading, which for an on-change sensor is the moment
it got covered.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from proximity_doze.core.gesture_config import GestureConfig
from proximity_doze.core.ports import PowerPort, ProximitySensorPort, PulseEmitterPort

logger = logging.getLogger(__name__)

# Hand wave / pocket threshold between two far periods.
POCKET_DELTA_NS = 1000 * 1000 * 1000


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

class GestureAction(Enum):
    """Outcome of one sensor sample."""

    NONE = "none"
    EMIT_PULSE = "emit_pulse"
    IMMEDIATE_WAKE = "immediate_wake"


@dataclass(frozen=True)
class SensorSample:
    """A single proximity reading."""

    distance: float
    timestamp_ns: int


@dataclass
class ProximityState:
    """Edge-tracking state, owned by one filter for one active lifetime."""

    was_near: bool = False
    # Last reading that was not a near -> far edge
    entered_far_at_ns: int = 0


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

class ProximityFilter:
    """
    Classifies near/far transitions into pulse or wake actions.

    Parameters
    ----------
    sensor : ProximitySensorPort
        Sample source; the filter subscribes only while active.
    config : GestureConfig
        Gesture toggles, consulted on every classification.
    pulse_emitter : PulseEmitterPort
        Receives ``emit_pulse()`` on EMIT_PULSE.
    power : PowerPort
        Receives ``wake_up(ms)`` on IMMEDIATE_WAKE.
    is_doze_enabled : callable
        Global doze feature flag, read on demand by :meth:`test_and_enable`.
    clock_ns : callable
        Monotonic nanosecond clock used for the wake-up timestamp.
    """

    def __init__(
        self,
        sensor: ProximitySensorPort,
        config: GestureConfig,
        pulse_emitter: PulseEmitterPort,
        power: PowerPort,
        is_doze_enabled: Callable[[], bool],
        clock_ns: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        self._sensor = sensor
        self._config = config
        self._pulse_emitter = pulse_emitter
        self._power = power
        self._is_doze_enabled = is_doze_enabled
        self._clock_ns = clock_ns
        self._state = ProximityState()
        self._active = False

    # -- properties ----------------------------------------------------------

    @property
    def config(self) -> GestureConfig:
        return self._config

    @property
    def state(self) -> ProximityState:
        return self._state

    @property
    def is_active(self) -> bool:
        """True while subscribed to the sensor."""
        return self._active

    # -- sensor callback -----------------------------------------------------

    def on_sample(self, distance: float, timestamp_ns: int) -> GestureAction:
        """Consume one reading and perform the resulting action."""
        is_near = distance < self._sensor.max_range
        action = GestureAction.NONE

        if self._state.was_near and not is_near:
            delta = timestamp_ns - self._state.entered_far_at_ns
            action = self.classify(delta)
            self._dispatch(action, delta)
        else:
            self._state.entered_far_at_ns = timestamp_ns

        self._state.was_near = is_near
        return action

    def process(self, sample: SensorSample) -> GestureAction:
        return self.on_sample(sample.distance, sample.timestamp_ns)

    # -- classification ------------------------------------------------------

    def classify(self, delta_ns: int) -> GestureAction:
        """
        Map a dwell time to an action. Rules are tried in order:

        1. hand wave and pocket both on    -> pulse
        2. proximity wake and delta < 1s   -> immediate wake
        3. hand wave only                  -> pulse if delta < 1s
        4. pocket only                     -> pulse if delta >= 1s
        5. otherwise                       -> nothing
        """
        handwave = self._config.handwave_enabled
        pocket = self._config.pocket_enabled

        if handwave and pocket:
            return GestureAction.EMIT_PULSE
        if self._config.proximity_wake_enabled and delta_ns < POCKET_DELTA_NS:
            return GestureAction.IMMEDIATE_WAKE
        if handwave and not pocket:
            return GestureAction.EMIT_PULSE if delta_ns < POCKET_DELTA_NS else GestureAction.NONE
        if pocket and not handwave:
            return GestureAction.EMIT_PULSE if delta_ns >= POCKET_DELTA_NS else GestureAction.NONE
        return GestureAction.NONE

    def should_pulse(self, delta_ns: int) -> bool:
        """
        Pulse decision for *delta_ns*.

        The proximity wake rule returns False but wakes the device as a side
        effect.
        """
        action = self.classify(delta_ns)
        if action is GestureAction.IMMEDIATE_WAKE:
            self._wake_up()
        return action is GestureAction.EMIT_PULSE

    # -- activation ----------------------------------------------------------

    def should_enable(self) -> bool:
        return (
            (self._is_doze_enabled() and self._config.any_gesture_enabled)
            or self._config.proximity_wake_enabled
        )

    def test_and_enable(self) -> bool:
        """Subscribe to the sensor if any mode needs it. Returns the active flag."""
        if self._active:
            return True
        if not self.should_enable():
            logger.debug("Proximity filter stays idle (%r)", self._config)
            return False
        self._state = ProximityState()
        self._sensor.register_listener(self.on_sample)
        self._active = True
        logger.debug("Proximity filter enabled (%r)", self._config)
        return True

    def disable(self) -> None:
        if not self._active:
            return
        self._sensor.unregister_listener(self.on_sample)
        self._active = False
        logger.debug("Proximity filter disabled")

    # -- side effects --------------------------------------------------------

    def _dispatch(self, action: GestureAction, delta_ns: int) -> None:
        if action is GestureAction.EMIT_PULSE:
            logger.debug("Near->far after %d ns, launching doze pulse", delta_ns)
            self._pulse_emitter.emit_pulse()
        elif action is GestureAction.IMMEDIATE_WAKE:
            logger.debug("Near->far after %d ns, waking device", delta_ns)
            self._wake_up()

    def _wake_up(self) -> None:
        self._power.wake_up(self._clock_ns() // 1_000_000)
