"""
Shared fixtures for the proximity doze test suite.
"""

from __future__ import annotations

import logging
import os

import pytest

from proximity_doze.config.settings import get_settings, get_test_settings
from proximity_doze.core.gesture_config import GestureConfig
from proximity_doze.core.proximity_filter import ProximityFilter
from proximity_doze.core.radio import RadioController
from proximity_doze.core.radio_scheduler import ScreenTransitionScheduler
from proximity_doze.hardware.pulse_broadcaster import PulseBroadcaster
from proximity_doze.testing.simulated import (
    ManualAlarmScheduler,
    SimulatedPowerController,
    SimulatedProximitySensor,
    SimulatedRadio,
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep host DOZE_* variables and .env files out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith("DOZE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    logging.getLogger("proximity_doze").setLevel(logging.NOTSET)
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return get_test_settings()


@pytest.fixture
def alarms():
    return ManualAlarmScheduler()


@pytest.fixture
def sensor():
    return SimulatedProximitySensor(max_range=5.0)


@pytest.fixture
def power():
    return SimulatedPowerController(interactive=False)


@pytest.fixture
def radio():
    return SimulatedRadio(enabled=True)


@pytest.fixture
def broadcaster():
    return PulseBroadcaster()


@pytest.fixture
def gesture_config():
    return GestureConfig()


@pytest.fixture
def doze_flag():
    """Mutable doze feature flag: flip ``doze_flag["enabled"]`` in a test."""
    return {"enabled": True}


@pytest.fixture
def proximity_filter(sensor, gesture_config, broadcaster, power, alarms, doze_flag):
    return ProximityFilter(
        sensor=sensor,
        config=gesture_config,
        pulse_emitter=broadcaster,
        power=power,
        is_doze_enabled=lambda: doze_flag["enabled"],
        clock_ns=alarms.clock_ns,
    )


@pytest.fixture
def scheduler(proximity_filter, radio, alarms):
    return ScreenTransitionScheduler(
        proximity_filter=proximity_filter,
        radio=RadioController(radio),
        alarms=alarms,
        clock_ns=alarms.clock_ns,
    )
