"""
Rate limiting for the Taskboard API
Sliding-window attempt counter shared by request handlers
"""
import math
import threading
from collections import defaultdict, deque
from datetime import datetime, timedelta
from typing import Deque, Dict

from .errors import RateLimitExceededException
from .timeutils import utcnow


class SlidingWindowLimiter:
    """
    In-process limiter allowing max_attempts per key inside a rolling window.

    State lives in this process only; each worker keeps its own window.
    """

    def __init__(self, max_attempts: int = 10, window_seconds: int = 60):
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)
        self._attempts: Dict[str, Deque[datetime]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        """
        Record an attempt for key.

        Raises:
            RateLimitExceededException: If key already used up its window;
                the rejected attempt is not recorded
        """
        now = utcnow()
        with self._lock:
            attempts = self._attempts[key]
            while attempts and attempts[0] <= now - self.window:
                attempts.popleft()

            if len(attempts) >= self.max_attempts:
                remaining = attempts[0] + self.window - now
                raise RateLimitExceededException(max(1, math.ceil(remaining.total_seconds())))

            attempts.append(now)

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()


__all__ = ["SlidingWindowLimiter"]
