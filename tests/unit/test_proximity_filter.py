"""
Unit tests for the proximity sample filter.

Tests cover:
    - The should_pulse priority table for every gesture combination
    - Proximity wake as a side channel of the pulse decision
    - Near/far edge tracking and the dwell-time measurement
    - Activation gating (test_and_enable / disable)
    - Noisy simulated cover traces end to end
"""

from __future__ import annotations

import pytest

from proximity_doze.core.gesture_config import GESTURE_HAND_WAVE_KEY, GESTURE_POCKET_KEY
from proximity_doze.core.proximity_filter import (
    POCKET_DELTA_NS,
    GestureAction,
    ProximityState,
    SensorSample,
)
from proximity_doze.testing.simulated import generate_cover_trace, on_change_only

SECOND_NS = 1_000_000_000
NEAR = 0.0
FAR = 5.0


def configure(config, handwave=False, pocket=False, proximity_wake=False):
    config.handwave_enabled = handwave
    config.pocket_enabled = pocket
    config.proximity_wake_enabled = proximity_wake


# ===========================================================================
# should_pulse decision table
# ===========================================================================

class TestShouldPulse:
    @pytest.mark.parametrize("delta", [0, 1, POCKET_DELTA_NS // 2, POCKET_DELTA_NS - 1])
    def test_handwave_only_pulses_below_threshold(self, proximity_filter, gesture_config, delta):
        configure(gesture_config, handwave=True)
        assert proximity_filter.should_pulse(delta) is True

    @pytest.mark.parametrize("delta", [POCKET_DELTA_NS, POCKET_DELTA_NS + 1, 10 * SECOND_NS])
    def test_handwave_only_ignores_long_cover(self, proximity_filter, gesture_config, delta):
        configure(gesture_config, handwave=True)
        assert proximity_filter.should_pulse(delta) is False

    @pytest.mark.parametrize("delta", [POCKET_DELTA_NS, POCKET_DELTA_NS + 1, 10 * SECOND_NS])
    def test_pocket_only_pulses_at_or_above_threshold(self, proximity_filter, gesture_config, delta):
        configure(gesture_config, pocket=True)
        assert proximity_filter.should_pulse(delta) is True

    @pytest.mark.parametrize("delta", [0, POCKET_DELTA_NS // 2, POCKET_DELTA_NS - 1])
    def test_pocket_only_ignores_short_cover(self, proximity_filter, gesture_config, delta):
        configure(gesture_config, pocket=True)
        assert proximity_filter.should_pulse(delta) is False

    @pytest.mark.parametrize("delta", [0, POCKET_DELTA_NS - 1, POCKET_DELTA_NS, 60 * SECOND_NS])
    def test_both_gestures_always_pulse(self, proximity_filter, gesture_config, power, delta):
        configure(gesture_config, handwave=True, pocket=True, proximity_wake=True)
        assert proximity_filter.should_pulse(delta) is True
        assert power.wake_ups == []

    @pytest.mark.parametrize("delta", [0, POCKET_DELTA_NS, 60 * SECOND_NS])
    def test_nothing_enabled_never_pulses(self, proximity_filter, delta):
        assert proximity_filter.should_pulse(delta) is False

    def test_proximity_wake_returns_false_and_wakes_once(self, proximity_filter, gesture_config, power):
        configure(gesture_config, proximity_wake=True)

        assert proximity_filter.should_pulse(POCKET_DELTA_NS // 2) is False
        assert len(power.wake_ups) == 1

    def test_proximity_wake_does_not_fire_on_long_cover(self, proximity_filter, gesture_config, power):
        configure(gesture_config, proximity_wake=True)

        assert proximity_filter.should_pulse(POCKET_DELTA_NS) is False
        assert power.wake_ups == []

    def test_proximity_wake_takes_priority_over_handwave(self, proximity_filter, gesture_config, power):
        configure(gesture_config, handwave=True, proximity_wake=True)

        assert proximity_filter.should_pulse(POCKET_DELTA_NS // 2) is False
        assert len(power.wake_ups) == 1

        # Past the threshold the hand wave rule applies again (and says no).
        assert proximity_filter.should_pulse(2 * SECOND_NS) is False
        assert len(power.wake_ups) == 1

    def test_pocket_still_pulses_with_proximity_wake(self, proximity_filter, gesture_config, power):
        configure(gesture_config, pocket=True, proximity_wake=True)

        assert proximity_filter.should_pulse(2 * SECOND_NS) is True
        assert power.wake_ups == []

    def test_classify_is_side_effect_free(self, proximity_filter, gesture_config, power):
        configure(gesture_config, proximity_wake=True)

        assert proximity_filter.classify(0) is GestureAction.IMMEDIATE_WAKE
        assert power.wake_ups == []


# ===========================================================================
# Sample processing
# ===========================================================================

class TestOnSample:
    def test_handwave_scenario_emits_pulse(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, handwave=True)

        assert proximity_filter.on_sample(NEAR, 0) is GestureAction.NONE
        assert proximity_filter.on_sample(FAR, SECOND_NS // 2) is GestureAction.EMIT_PULSE
        assert broadcaster.pulse_count == 1

    def test_pocket_scenario_emits_pulse(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, pocket=True)

        proximity_filter.on_sample(NEAR, 0)
        assert proximity_filter.on_sample(FAR, 3 * SECOND_NS // 2) is GestureAction.EMIT_PULSE
        assert broadcaster.pulse_count == 1

    def test_pocket_ignores_quick_wave(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, pocket=True)

        proximity_filter.on_sample(NEAR, 0)
        assert proximity_filter.on_sample(FAR, SECOND_NS // 2) is GestureAction.NONE
        assert broadcaster.pulse_count == 0

    def test_proximity_wake_scenario(self, proximity_filter, gesture_config, broadcaster, power, alarms):
        configure(gesture_config, proximity_wake=True)
        alarms.advance(2.0)

        proximity_filter.on_sample(NEAR, 0)
        assert proximity_filter.on_sample(FAR, SECOND_NS // 4) is GestureAction.IMMEDIATE_WAKE
        assert power.wake_ups == [2000]
        assert broadcaster.pulse_count == 0

    def test_only_near_to_far_edge_classifies(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, handwave=True, pocket=True)

        assert proximity_filter.on_sample(FAR, 0) is GestureAction.NONE
        assert proximity_filter.on_sample(NEAR, 100) is GestureAction.NONE
        assert proximity_filter.on_sample(NEAR, 200) is GestureAction.NONE
        assert proximity_filter.on_sample(FAR, 300) is GestureAction.EMIT_PULSE
        assert proximity_filter.on_sample(FAR, 400) is GestureAction.NONE
        assert broadcaster.pulse_count == 1

    def test_reading_at_max_range_is_far(self, proximity_filter, sensor):
        proximity_filter.on_sample(sensor.max_range, 0)
        assert proximity_filter.state.was_near is False

        proximity_filter.on_sample(sensor.max_range - 0.01, 1)
        assert proximity_filter.state.was_near is True

    def test_every_non_edge_sample_refreshes_anchor(self, proximity_filter, gesture_config):
        configure(gesture_config, handwave=True)

        proximity_filter.on_sample(FAR, 0)
        proximity_filter.on_sample(FAR, 2 * SECOND_NS)
        assert proximity_filter.state.entered_far_at_ns == 2 * SECOND_NS

        proximity_filter.on_sample(NEAR, 2 * SECOND_NS + 200_000_000)
        assert proximity_filter.state.entered_far_at_ns == 2 * SECOND_NS + 200_000_000

        action = proximity_filter.on_sample(FAR, 2 * SECOND_NS + 600_000_000)
        assert action is GestureAction.EMIT_PULSE

        # The edge sample itself does not move the anchor
        assert proximity_filter.state.entered_far_at_ns == 2 * SECOND_NS + 200_000_000

    def test_preference_change_applies_to_next_sample(self, proximity_filter, gesture_config, broadcaster):
        proximity_filter.on_sample(NEAR, 0)
        assert proximity_filter.on_sample(FAR, SECOND_NS // 2) is GestureAction.NONE

        gesture_config.on_preference_changed(GESTURE_HAND_WAVE_KEY, True)
        proximity_filter.on_sample(NEAR, SECOND_NS // 2 + 1)
        assert proximity_filter.on_sample(FAR, SECOND_NS // 2 + 2) is GestureAction.EMIT_PULSE

        gesture_config.on_preference_changed(GESTURE_HAND_WAVE_KEY, False)
        gesture_config.on_preference_changed(GESTURE_POCKET_KEY, True)
        proximity_filter.on_sample(NEAR, 5 * SECOND_NS)
        assert proximity_filter.on_sample(FAR, 7 * SECOND_NS) is GestureAction.EMIT_PULSE
        assert broadcaster.pulse_count == 2

    def test_process_accepts_sensor_sample(self, proximity_filter, gesture_config):
        configure(gesture_config, handwave=True)

        proximity_filter.process(SensorSample(distance=NEAR, timestamp_ns=0))
        action = proximity_filter.process(SensorSample(distance=FAR, timestamp_ns=10))
        assert action is GestureAction.EMIT_PULSE


class TestDwellTime:
    """
    The dwell time runs from the last reading that was not a near -> far
    edge. For an on-change sensor that is the start of the cover.
    """

    @pytest.mark.parametrize("start_ns", [0, 3600 * SECOND_NS, 123_456_789_012_345])
    def test_quick_wave_pulses_at_any_clock_offset(self, proximity_filter, gesture_config, broadcaster, start_ns):
        configure(gesture_config, handwave=True)

        assert proximity_filter.on_sample(NEAR, start_ns) is GestureAction.NONE
        action = proximity_filter.on_sample(FAR, start_ns + SECOND_NS // 2)

        assert action is GestureAction.EMIT_PULSE
        assert broadcaster.pulse_count == 1

    def test_first_wave_after_enable_with_boot_clock_timestamps(self, proximity_filter, gesture_config, sensor, broadcaster):
        configure(gesture_config, handwave=True)
        proximity_filter.test_and_enable()

        sensor.near(3600 * SECOND_NS)
        sensor.far(3600 * SECOND_NS + SECOND_NS // 2)

        assert broadcaster.pulse_count == 1

    def test_short_cover_after_long_far_period_is_a_wave(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, handwave=True)

        proximity_filter.on_sample(FAR, 0)
        proximity_filter.on_sample(NEAR, 30 * SECOND_NS)
        action = proximity_filter.on_sample(FAR, 30 * SECOND_NS + SECOND_NS // 2)

        assert action is GestureAction.EMIT_PULSE

    def test_short_cover_after_long_far_period_is_not_pocket(self, proximity_filter, gesture_config, broadcaster):
        configure(gesture_config, pocket=True)

        proximity_filter.on_sample(FAR, 0)
        proximity_filter.on_sample(NEAR, 5 * SECOND_NS)
        action = proximity_filter.on_sample(FAR, 5 * SECOND_NS + SECOND_NS // 2)

        assert action is GestureAction.NONE
        assert broadcaster.pulse_count == 0

    def test_repeated_near_readings_shorten_the_dwell(self, proximity_filter, gesture_config):
        configure(gesture_config, pocket=True)

        proximity_filter.on_sample(NEAR, 0)
        proximity_filter.on_sample(NEAR, 2 * SECOND_NS)
        action = proximity_filter.on_sample(FAR, 2 * SECOND_NS + 100_000_000)

        # Covered for 2.1s, but only 0.1s since the last near reading.
        assert action is GestureAction.NONE


# ===========================================================================
# Activation gate
# ===========================================================================

class TestActivation:
    def test_stays_idle_with_nothing_enabled(self, proximity_filter, sensor):
        assert proximity_filter.test_and_enable() is False
        assert proximity_filter.is_active is False
        assert sensor.listener_count == 0

    @pytest.mark.parametrize("handwave,pocket", [(True, False), (False, True), (True, True)])
    def test_gesture_with_doze_enabled_subscribes(self, proximity_filter, gesture_config, sensor, handwave, pocket):
        configure(gesture_config, handwave=handwave, pocket=pocket)

        assert proximity_filter.test_and_enable() is True
        assert sensor.listener_count == 1

    def test_gesture_without_doze_stays_idle(self, proximity_filter, gesture_config, sensor, doze_flag):
        configure(gesture_config, handwave=True, pocket=True)
        doze_flag["enabled"] = False

        assert proximity_filter.test_and_enable() is False
        assert sensor.listener_count == 0

    def test_proximity_wake_ignores_doze_flag(self, proximity_filter, gesture_config, sensor, doze_flag):
        configure(gesture_config, proximity_wake=True)
        doze_flag["enabled"] = False

        assert proximity_filter.test_and_enable() is True
        assert sensor.listener_count == 1

    def test_enable_twice_registers_once(self, proximity_filter, gesture_config, sensor):
        configure(gesture_config, handwave=True)

        proximity_filter.test_and_enable()
        proximity_filter.test_and_enable()

        assert sensor.registrations == 1
        assert sensor.listener_count == 1

    def test_disable_unsubscribes_and_is_repeatable(self, proximity_filter, gesture_config, sensor):
        configure(gesture_config, handwave=True)
        proximity_filter.test_and_enable()

        proximity_filter.disable()
        proximity_filter.disable()

        assert proximity_filter.is_active is False
        assert sensor.listener_count == 0

    def test_enable_starts_a_fresh_state(self, proximity_filter, gesture_config):
        configure(gesture_config, handwave=True)
        proximity_filter.on_sample(NEAR, 7 * SECOND_NS)
        assert proximity_filter.state.was_near is True

        proximity_filter.test_and_enable()

        assert proximity_filter.state == ProximityState()

    def test_sensor_events_reach_filter_only_while_active(self, proximity_filter, gesture_config, sensor, broadcaster):
        configure(gesture_config, handwave=True)

        sensor.near(0)
        sensor.far(SECOND_NS // 2)
        assert broadcaster.pulse_count == 0

        proximity_filter.test_and_enable()
        sensor.near(SECOND_NS)
        sensor.far(SECOND_NS + SECOND_NS // 2)
        assert broadcaster.pulse_count == 1

        proximity_filter.disable()
        sensor.near(3 * SECOND_NS)
        sensor.far(3 * SECOND_NS + 1)
        assert broadcaster.pulse_count == 1


# ===========================================================================
# Simulated noisy traces
# ===========================================================================

class TestSimulatedTraces:
    def test_quick_wave_trace_pulses_once_for_handwave(self, proximity_filter, gesture_config, sensor, broadcaster):
        configure(gesture_config, handwave=True)
        proximity_filter.test_and_enable()

        trace = generate_cover_trace(
            start_ns=7200 * SECOND_NS, far_seconds=1.0, cover_seconds=0.4,
            sample_rate_hz=10.0, jitter_seconds=0.01, seed=7,
        )
        for sample in trace:
            sensor.emit_sample(sample)

        assert broadcaster.pulse_count == 1

    def test_long_cover_trace_pulses_for_pocket_only(self, proximity_filter, gesture_config):
        trace = on_change_only(generate_cover_trace(
            start_ns=7200 * SECOND_NS, far_seconds=1.0, cover_seconds=2.0,
            sample_rate_hz=10.0, jitter_seconds=0.01, seed=7,
        ))

        configure(gesture_config, handwave=True)
        actions = [proximity_filter.process(s) for s in trace]
        assert GestureAction.EMIT_PULSE not in actions

        configure(gesture_config, pocket=True)
        proximity_filter.test_and_enable()
        actions = [proximity_filter.process(s) for s in trace]
        assert actions.count(GestureAction.EMIT_PULSE) == 1

    def test_periodic_near_reports_read_as_a_wave(self, proximity_filter, gesture_config):
        trace = generate_cover_trace(
            start_ns=0, far_seconds=1.0, cover_seconds=2.0,
            sample_rate_hz=10.0, jitter_seconds=0.01, seed=7,
        )

        configure(gesture_config, pocket=True)
        assert GestureAction.EMIT_PULSE not in [proximity_filter.process(s) for s in trace]

        configure(gesture_config, handwave=True)
        proximity_filter.test_and_enable()
        actions = [proximity_filter.process(s) for s in trace]
        assert actions.count(GestureAction.EMIT_PULSE) == 1
