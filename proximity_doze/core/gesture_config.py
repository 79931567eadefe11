"""
Gesture mode toggles read by the proximity filter on every sample.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from proximity_doze.core.ports import PreferenceStorePort

logger = logging.getLogger(__name__)

GESTURE_HAND_WAVE_KEY = "gesture_hand_wave"
GESTURE_POCKET_KEY = "gesture_pocket"
PROXIMITY_WAKE_KEY = "proximity_wake_enable"

GESTURE_KEYS = (GESTURE_HAND_WAVE_KEY, GESTURE_POCKET_KEY, PROXIMITY_WAKE_KEY)


class GestureConfig:
    """
    Three independent boolean switches: hand wave, pocket and proximity wake.

    Each field is replaced by a single attribute assignment, so a reader sees
    either the old or the new value of that field. There is no cross-field
    transaction; the fields are independent policy switches.
    """

    def __init__(
        self,
        handwave_enabled: bool = False,
        pocket_enabled: bool = False,
        proximity_wake_enabled: bool = False,
    ) -> None:
        self.handwave_enabled = handwave_enabled
        self.pocket_enabled = pocket_enabled
        self.proximity_wake_enabled = proximity_wake_enabled
        self._store: Optional[PreferenceStorePort] = None

    @classmethod
    def from_store(cls, store: PreferenceStorePort) -> "GestureConfig":
        config = cls()
        config.load(store)
        return config

    def load(self, store: PreferenceStorePort) -> None:
        """Read all three toggles from *store* (missing keys default to off)."""
        self.handwave_enabled = store.get_bool(GESTURE_HAND_WAVE_KEY, False)
        self.pocket_enabled = store.get_bool(GESTURE_POCKET_KEY, False)
        self.proximity_wake_enabled = store.get_bool(PROXIMITY_WAKE_KEY, False)
        logger.debug("Loaded gesture preferences: %s", self.as_dict())

    def on_preference_changed(self, key: str, value: bool) -> None:
        """Apply one pushed change. Unrelated keys are ignored."""
        if key == GESTURE_HAND_WAVE_KEY:
            self.handwave_enabled = bool(value)
        elif key == GESTURE_POCKET_KEY:
            self.pocket_enabled = bool(value)
        elif key == PROXIMITY_WAKE_KEY:
            self.proximity_wake_enabled = bool(value)
        else:
            return
        logger.debug("Gesture preference %s changed to %s", key, bool(value))

    def attach(self, store: PreferenceStorePort) -> None:
        """Load from *store* and follow its change notifications."""
        self.detach()
        self.load(store)
        store.register_listener(self.on_preference_changed)
        self._store = store

    def detach(self) -> None:
        if self._store is not None:
            self._store.unregister_listener(self.on_preference_changed)
            self._store = None

    @property
    def any_gesture_enabled(self) -> bool:
        """True if hand wave or pocket is on (proximity wake not included)."""
        return self.handwave_enabled or self.pocket_enabled

    def as_dict(self) -> Dict[str, bool]:
        return {
            GESTURE_HAND_WAVE_KEY: self.handwave_enabled,
            GESTURE_POCKET_KEY: self.pocket_enabled,
            PROXIMITY_WAKE_KEY: self.proximity_wake_enabled,
        }

    def __repr__(self) -> str:
        return (
            f"GestureConfig(handwave={self.handwave_enabled}, "
            f"pocket={self.pocket_enabled}, "
            f"proximity_wake={self.proximity_wake_enabled})"
        )
