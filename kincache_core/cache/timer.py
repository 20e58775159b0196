"""KinCache Timer - Cancellable Fixed-Interval Background Task.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Runs a function every ``interval`` seconds on a daemon thread.

    The first run happens one interval after ``start``. Exceptions from
    the function are logged and the schedule continues.

    Example:
        timer = PeriodicTimer("cleanup", 60.0, cache.cleanup)
        timer.start()
        ...
        timer.cancel()
    """

    def __init__(self, name: str, interval: float, func: Callable[[], None]):
        """Initialize timer.

        Args:
            name: Thread name
            interval: Seconds between runs
            func: Function to run
        """
        self.name = name
        self.interval = interval
        self.func = func
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        """Check if the timer thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the schedule. No-op if already running."""
        if self._thread is not None:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self.name)
        self._thread.start()

    def cancel(self, timeout: float = 5.0) -> None:
        """Stop the schedule and wait for the thread to exit."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.func()
            except Exception as e:
                logger.error(f"{self.name} error: {e}")

    def __repr__(self) -> str:
        return f"PeriodicTimer(name={self.name!r}, interval={self.interval}, running={self.is_running})"


__all__ = ["PeriodicTimer"]
