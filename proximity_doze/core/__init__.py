"""
Core package for the proximity doze daemon
"""

from .gesture_config import (
    GESTURE_HAND_WAVE_KEY,
    GESTURE_POCKET_KEY,
    PROXIMITY_WAKE_KEY,
    GestureConfig,
)
from .ports import (
    AlarmSchedulerPort,
    PowerPort,
    PreferenceStorePort,
    ProximitySensorPort,
    PulseEmitterPort,
    RadioControlError,
    RadioPort,
    RadioState,
    ScreenEvent,
)
from .proximity_filter import (
    POCKET_DELTA_NS,
    GestureAction,
    ProximityFilter,
    ProximityState,
    SensorSample,
)
from .radio import RadioController
from .radio_scheduler import (
    RADIO_RESTORE_TOKEN,
    RadioRestoreTask,
    ScreenTransitionScheduler,
)
from .radio_toggle import RadioToggle

__all__ = [
    'GESTURE_HAND_WAVE_KEY',
    'GESTURE_POCKET_KEY',
    'PROXIMITY_WAKE_KEY',
    'GestureConfig',
    'AlarmSchedulerPort',
    'PowerPort',
    'PreferenceStorePort',
    'ProximitySensorPort',
    'PulseEmitterPort',
    'RadioControlError',
    'RadioPort',
    'RadioState',
    'ScreenEvent',
    'POCKET_DELTA_NS',
    'GestureAction',
    'ProximityFilter',
    'ProximityState',
    'SensorSample',
    'RadioController',
    'RADIO_RESTORE_TOKEN',
    'RadioRestoreTask',
    'ScreenTransitionScheduler',
    'RadioToggle',
]
