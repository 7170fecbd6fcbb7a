"""Work queue of PodSet keys.

The queue hands each key to at most one worker at a time. A key added while a
worker processes it is marked dirty and handed out again once the worker calls
done(), so a change is never lost and a PodSet is never reconciled twice in
parallel. Adds can be delayed, either by a fixed amount or by a per-key
exponential backoff that grows with consecutive failures.
"""

import heapq
import itertools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Hashable

logger = logging.getLogger(__name__)

MAX_BACKOFF_EXPONENT = 64


class WorkQueue:
    """Thread-safe, de-duplicating work queue with per-key serialization."""

    def __init__(
        self,
        base_delay: float = 0.5,
        max_delay: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the queue.

        Args:
            base_delay: Delay of the first rate-limited add of a key.
            max_delay: Upper bound of the rate-limited delay.
            clock: Monotonic clock, in seconds.
        """
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: deque[Hashable] = deque()
        # Keys waiting to be processed, including dirty keys still being processed
        self._dirty: set[Hashable] = set()
        self._processing: set[Hashable] = set()
        self._delayed: list[tuple[float, int, Hashable]] = []
        self._sequence = itertools.count()
        self._failures: dict[Hashable, int] = {}
        self._shutting_down = False

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    def add(self, key: Hashable) -> None:
        """Add a key, unless it is already waiting."""
        with self._cond:
            self._add_locked(key)

    def _add_locked(self, key: Hashable) -> None:
        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        if key in self._processing:
            # Handed out again by done()
            return
        self._queue.append(key)
        self._cond.notify()

    def add_after(self, key: Hashable, delay: float) -> None:
        """Add a key once a delay has elapsed.

        Args:
            key: The key to add.
            delay: Delay in seconds. Zero or less adds immediately.
        """
        if delay <= 0:
            self.add(key)
            return
        with self._cond:
            if self._shutting_down:
                return
            heapq.heappush(self._delayed, (self._clock() + delay, next(self._sequence), key))
            self._cond.notify()

    def backoff_delay(self, failures: int) -> float:
        """Delay applied after a number of consecutive failures, capped at max_delay."""
        # The delay reaches its cap long before 2 ** failures overflows a float
        if failures >= MAX_BACKOFF_EXPONENT:
            return self.max_delay
        return min(self.base_delay * (2 ** failures), self.max_delay)

    def add_rate_limited(self, key: Hashable) -> float:
        """Add a key after its current backoff delay and increase the backoff.

        Returns:
            The delay applied.
        """
        with self._cond:
            failures = self._failures.get(key, 0)
            self._failures[key] = failures + 1
        delay = self.backoff_delay(failures)
        self.add_after(key, delay)
        return delay

    def forget(self, key: Hashable) -> None:
        """Reset the backoff of a key."""
        with self._cond:
            self._failures.pop(key, None)

    def num_requeues(self, key: Hashable) -> int:
        """Number of consecutive rate-limited adds of a key."""
        with self._cond:
            return self._failures.get(key, 0)

    def _promote_due_locked(self) -> None:
        now = self._clock()
        while self._delayed and self._delayed[0][0] <= now:
            _, _, key = heapq.heappop(self._delayed)
            self._add_locked(key)

    def get(self, timeout: float | None = None) -> Hashable | None:
        """Take the next key to process.

        The caller must call done() with the key once processing is over.

        Args:
            timeout: Seconds to wait for a key. None waits until a key is
                available or the queue is shut down.

        Returns:
            The key, or None on timeout or shutdown.
        """
        deadline = None if timeout is None else self._clock() + timeout
        with self._cond:
            while True:
                self._promote_due_locked()
                if self._queue:
                    key = self._queue.popleft()
                    self._dirty.discard(key)
                    self._processing.add(key)
                    return key
                if self._shutting_down:
                    return None

                wait = None
                if self._delayed:
                    wait = max(self._delayed[0][0] - self._clock(), 0)
                if deadline is not None:
                    remaining = deadline - self._clock()
                    if remaining <= 0:
                        return None
                    wait = remaining if wait is None else min(wait, remaining)
                self._cond.wait(wait)

    def done(self, key: Hashable) -> None:
        """Mark a key as processed, handing it out again if it was re-added meanwhile."""
        with self._cond:
            self._processing.discard(key)
            if key in self._dirty:
                self._queue.append(key)
                self._cond.notify()

    def shut_down(self) -> None:
        """Stop accepting keys and wake up all waiting workers."""
        with self._cond:
            self._shutting_down = True
            self._delayed.clear()
            self._cond.notify_all()
        logger.debug("Work queue shut down")
