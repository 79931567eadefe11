"""
Host adapters for the doze ports
"""

from .alarm_scheduler import ThreadingAlarmScheduler
from .nmcli_radio import NmcliRadio
from .pulse_broadcaster import DOZE_PULSE_ACTION, PulseBroadcaster

__all__ = [
    'ThreadingAlarmScheduler',
    'NmcliRadio',
    'DOZE_PULSE_ACTION',
    'PulseBroadcaster',
]
