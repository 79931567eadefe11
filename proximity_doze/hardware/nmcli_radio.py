"""
WiFi radio control through NetworkManager's ``nmcli``.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List

from proximity_doze.core.ports import RadioControlError, RadioState

logger = logging.getLogger(__name__)


class NmcliRadio:
    """
    Radio port backed by ``nmcli radio wifi``.

    Parameters
    ----------
    timeout : float
        Seconds to wait for each ``nmcli`` call (default 5).
    executable : str
        Name or path of the nmcli binary.
    """

    def __init__(self, timeout: float = 5.0, executable: str = "nmcli") -> None:
        self._timeout = timeout
        self._executable = executable

    def get_state(self) -> RadioState:
        output = self._run(["radio", "wifi"]).strip().lower()
        if output == "enabled":
            return RadioState.ENABLED
        if output == "disabled":
            return RadioState.DISABLED
        logger.warning("Unexpected nmcli radio state: %r", output)
        return RadioState.UNKNOWN

    def set_enabled(self, enabled: bool) -> None:
        self._run(["radio", "wifi", "on" if enabled else "off"])
        logger.debug("nmcli radio wifi %s", "on" if enabled else "off")

    def _run(self, args: List[str]) -> str:
        cmd = [self._executable, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise RadioControlError(
                f"{self._executable} not found. This radio backend requires NetworkManager; "
                f"use the simulated backend instead."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise RadioControlError(
                f"'{' '.join(cmd)}' timed out after {self._timeout}s"
            ) from exc

        if result.returncode != 0:
            raise RadioControlError(
                f"'{' '.join(cmd)}' failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout

    def __repr__(self) -> str:
        return f"NmcliRadio(executable={self._executable!r}, timeout={self._timeout})"
