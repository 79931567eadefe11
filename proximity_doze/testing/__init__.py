"""
Testing utilities for the proximity doze daemon.

Simulated ports for development and tests. Do NOT wire these into a
production service unless the simulated radio backend was explicitly chosen.
"""

from .simulated import (
    ManualAlarmScheduler,
    SimulatedPowerController,
    SimulatedProximitySensor,
    SimulatedRadio,
    generate_cover_trace,
    on_change_only,
)

__all__ = [
    "ManualAlarmScheduler",
    "SimulatedPowerController",
    "SimulatedProximitySensor",
    "SimulatedRadio",
    "generate_cover_trace",
    "on_change_only",
]
