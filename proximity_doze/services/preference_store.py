"""
In-memory boolean preference store with change listeners.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Mapping, Optional

from proximity_doze.core.ports import PreferenceListener

logger = logging.getLogger(__name__)


class InMemoryPreferenceStore:
    """
    Thread-safe key/value store for boolean preferences.

    Listeners are called with ``(key, value)`` after every effective change,
    outside the store lock.
    """

    def __init__(self, initial: Optional[Mapping[str, bool]] = None) -> None:
        self._values: Dict[str, bool] = dict(initial or {})
        self._listeners: List[PreferenceListener] = []
        self._lock = threading.Lock()

    def get_bool(self, key: str, default: bool = False) -> bool:
        with self._lock:
            return bool(self._values.get(key, default))

    def set_bool(self, key: str, value: bool) -> None:
        value = bool(value)
        with self._lock:
            if self._values.get(key) == value:
                return
            self._values[key] = value
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(key, value)
            except Exception:
                logger.exception("Preference listener failed for %s", key)

    def register_listener(self, listener: PreferenceListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unregister_listener(self, listener: PreferenceListener) -> None:
        with self._lock:
            self._listeners = [l for l in self._listeners if l != listener]

    def snapshot(self) -> Dict[str, bool]:
        with self._lock:
            return dict(self._values)
