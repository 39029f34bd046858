"""
Debounced layout re-planning on container resize.

Hosts report every intermediate size while a container is being dragged;
only the size that stays put for ``delay`` seconds triggers a new layout
pass.
"""

import threading
import time
from typing import Callable, Optional, Tuple

from src.chart_engine.core import settings
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

ResizeCallback = Callable[[float, float], None]


class ResizeDebouncer:
    """
    Coalesces bursts of resize notifications into one callback.

    Two ways of driving it:
    - Polling (default): the host calls ``poll()`` from its own loop
    - Scheduled (``schedule=True``): a ``threading.Timer`` fires the callback

    Example:
        >>> sizes = []
        >>> now = [0.0]
        >>> debouncer = ResizeDebouncer(lambda w, h: sizes.append((w, h)),
        ...                             delay=0.25, clock=lambda: now[0])
        >>> debouncer.notify(400, 300); debouncer.notify(420, 300)
        >>> now[0] = 0.3
        >>> debouncer.poll()
        True
        >>> sizes
        [(420, 300)]
    """

    def __init__(
        self,
        callback: ResizeCallback,
        delay: float = settings.DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        schedule: bool = False,
    ):
        """
        Args:
            callback: Called with (width, height) once the size settles
            delay: Quiet period in seconds
            clock: Monotonic clock
            schedule: Fire automatically from a timer thread

        Raises:
            ValueError: If delay is negative
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")

        self.callback = callback
        self.delay = delay
        self.clock = clock
        self.schedule = schedule

        self._pending: Optional[Tuple[float, float]] = None
        self._last_notified: float = 0.0
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """True when a size is waiting to be delivered."""
        return self._pending is not None

    def notify(self, width: float, height: float) -> None:
        """Record the latest container size and restart the quiet period."""
        with self._lock:
            self._pending = (width, height)
            self._last_notified = self.clock()

            if self.schedule:
                if self._timer is not None:
                    self._timer.cancel()
                self._timer = threading.Timer(self.delay, self.flush)
                self._timer.daemon = True
                self._timer.start()

    def poll(self) -> bool:
        """
        Deliver the pending size if the quiet period has elapsed.

        Returns:
            True when the callback fired
        """
        with self._lock:
            if self._pending is None:
                return False
            if self.clock() - self._last_notified < self.delay:
                return False
            size = self._take()

        self._fire(size)
        return True

    def flush(self) -> bool:
        """
        Deliver the pending size immediately.

        Returns:
            True when the callback fired
        """
        with self._lock:
            if self._pending is None:
                return False
            size = self._take()

        self._fire(size)
        return True

    def cancel(self) -> None:
        """Drop the pending size without firing."""
        with self._lock:
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _take(self) -> Tuple[float, float]:
        size = self._pending
        self._pending = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        return size

    def _fire(self, size: Tuple[float, float]) -> None:
        width, height = size
        logger.debug(f"[ResizeDebouncer] Size settled at {width}x{height}")
        self.callback(width, height)


__all__ = ["ResizeDebouncer", "ResizeCallback"]
