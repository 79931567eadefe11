"""
Proximity Doze
==============

Daemon component that turns proximity sensor events into always-on-display
doze pulses (hand wave and pocket gestures) and power-cycles the wireless
radio around screen off/on transitions.

Example usage:
    >>> from proximity_doze.config.settings import get_test_settings
    >>> from proximity_doze.services import DozeService
    >>> from proximity_doze.testing import (
    ...     ManualAlarmScheduler, SimulatedPowerController,
    ...     SimulatedProximitySensor, SimulatedRadio,
    ... )
    >>> from proximity_doze.hardware import PulseBroadcaster
    >>>
    >>> alarms = ManualAlarmScheduler()
    >>> service = DozeService(
    ...     get_test_settings(), SimulatedProximitySensor(),
    ...     SimulatedPowerController(), SimulatedRadio(), alarms,
    ...     PulseBroadcaster(), clock_ns=alarms.clock_ns,
    ... )
    >>> service.start()

For CLI usage:
    $ proximity-doze config
    $ proximity-doze replay trace.txt --hand-wave
    $ proximity-doze toggle-radio --seconds 20

License: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Package metadata
__title__ = "proximity-doze"
__description__ = "Proximity gesture doze pulses and screen-off radio scheduling"

# Version info tuple
__version_info__ = tuple(int(x) for x in __version__.split('.'))

from proximity_doze.config.settings import Settings, get_settings
from proximity_doze.core import (
    GestureAction,
    GestureConfig,
    ProximityFilter,
    RadioController,
    RadioToggle,
    ScreenTransitionScheduler,
)
from proximity_doze.services import DozeService

__all__ = [
    '__version__',
    '__version_info__',
    'Settings',
    'get_settings',
    'GestureAction',
    'GestureConfig',
    'ProximityFilter',
    'RadioController',
    'RadioToggle',
    'ScreenTransitionScheduler',
    'DozeService',
]
