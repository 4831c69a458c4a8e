"""Rate limiting for certificate endpoint refetches.

A token carrying an unknown ``kid`` forces a refetch of Google's key set.
Without a limit, a stream of tokens with random kids would turn every request
into an outbound call. RefreshGate lets one refetch through per window and
logs once the number of turned-away refetches reaches the alert threshold.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Final

logger = logging.getLogger(__name__)

_DEFAULT_INTERVAL: Final[float] = 10
"""Default window length in seconds."""

_DEFAULT_ALERT_THRESHOLD: Final[int] = 5
"""Default number of denials in one window before logging a warning."""


class RefreshGate:
    """Thread-safe one-per-window limiter for key set refetches.

    Args:
        min_interval: Window length in seconds. Must be positive.
        alert_threshold: Denials within one window before a warning is logged.

    Raises:
        ValueError: If either setting is out of range.
    """

    def __init__(
        self,
        min_interval: float = _DEFAULT_INTERVAL,
        alert_threshold: int = _DEFAULT_ALERT_THRESHOLD,
    ) -> None:
        if min_interval <= 0:
            raise ValueError(f"min_interval must be positive, got {min_interval}")
        if alert_threshold < 1:
            raise ValueError(f"alert_threshold must be at least 1, got {alert_threshold}")

        self._window = min_interval
        self._alert_threshold = alert_threshold
        self._lock = threading.Lock()
        self._opened_at: float | None = None
        self._denied = 0

    @property
    def denied_attempts(self) -> int:
        """Denials since the last allowed refetch."""
        with self._lock:
            return self._denied

    def allow(self) -> bool:
        """Claim the current window for a refetch.

        Returns:
            True when no refetch happened in the last ``min_interval``
            seconds. The window then restarts and the denial count resets.
        """
        with self._lock:
            now = time.time()
            window_open = self._opened_at is not None and now - self._opened_at < self._window
            if not window_open:
                self._opened_at = now
                self._denied = 0
                return True

            self._denied += 1
            if self._denied == self._alert_threshold:
                logger.warning(
                    "Certificate refetch throttled %d times within %.0fs",
                    self._denied,
                    self._window,
                )
            return False
