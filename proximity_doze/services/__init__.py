"""
Services package for the proximity doze daemon
"""

from .doze_service import DozeService, create_radio_port
from .preference_store import InMemoryPreferenceStore

__all__ = [
    'DozeService',
    'create_radio_port',
    'InMemoryPreferenceStore',
]
