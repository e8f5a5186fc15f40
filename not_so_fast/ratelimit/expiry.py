"""
One-shot expiry timers for namespace buckets.
"""

import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Hashable, Optional, Tuple

from not_so_fast.logging import get_logger


ExpiryCallback = Callable[[Hashable, Any], None]


class ExpiryScheduler:
    """Fires ``callback(key, token)`` once, ``delay_seconds`` after ``schedule``.

    Every timer of a scheduler shares the same delay, so deadlines are
    monotonic in arrival order and a FIFO queue drained by one daemon worker
    replaces a thread (or heap entry) per timer. The worker starts on the
    first pending timer and exits once the queue is empty.
    """

    def __init__(self, delay_seconds: float, callback: ExpiryCallback, name: str = "default"):
        self.delay_seconds = delay_seconds
        self.name = name
        self._callback = callback
        self._pending: Deque[Tuple[float, Hashable, Any]] = deque()
        self._condition = threading.Condition()
        self._worker: Optional[threading.Thread] = None
        self.logger = get_logger(f"not_so_fast.expiry.{name}")

    def schedule(self, key: Hashable, token: Any = None) -> None:
        """Arm a one-shot timer for ``key``."""
        with self._condition:
            # Deadline taken under the lock keeps the queue ordered
            self._pending.append((time.monotonic() + self.delay_seconds, key, token))
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._run,
                    name=f"not-so-fast-expiry-{self.name}",
                    daemon=True
                )
                self._worker.start()

    def pending(self) -> int:
        """Number of armed timers."""
        with self._condition:
            return len(self._pending)

    def _run(self) -> None:
        while True:
            with self._condition:
                if not self._pending:
                    self._worker = None
                    return
                deadline, key, token = self._pending[0]
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    self._condition.wait(remaining)
                    continue
                self._pending.popleft()

            try:
                self._callback(key, token)
            except Exception as e:
                self.logger.error("Expiry callback error", key=str(key), error=str(e))
