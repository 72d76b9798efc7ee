################################################################################
# File Name: scheduler.py
# Purpose/Description: Cancelable recurring poll timer with dynamic cadence
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | cancel(wait=False) for callers holding the tick lock
# ================================================================================
################################################################################
"""
Cancelable recurring poll timer.

Each call to schedule() replaces the running timer with a new one and bumps
the generation counter. Ticks carry the generation that produced them so the
consumer can drop ticks from a timer that was cancelled or replaced while the
tick was in flight.

Usage:
    from telemetry.scheduler import PollScheduler

    def onTick(generation):
        events.put(TelemetryEvent(TelemetryEventType.POLL_TICK, generation=generation))

    scheduler = PollScheduler(onTick)
    scheduler.schedule(30)
    scheduler.schedule(10)   # cadence change: old timer cancelled
    scheduler.cancel()
"""

import logging
import threading
from typing import Callable, Optional

from .types import MIN_POLLING_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class PollScheduler:
    """
    Recurring timer with at most one active schedule.

    The timer thread waits on an Event rather than sleeping, so cancel()
    takes effect immediately. With wait=False a callback already running
    may still finish after cancel() returns; its generation is no longer
    current, so consumers that check isCurrent() drop it.
    """

    def __init__(
        self,
        callback: Callable[[int], None],
        name: str = "PollScheduler",
    ):
        """
        Initialize the scheduler.

        Args:
            callback: Called with the timer generation on every tick
            name: Thread name prefix
        """
        self._callback = callback
        self._name = name
        self._lock = threading.Lock()
        self._generation = 0
        self._interval: Optional[float] = None
        self._stopEvent: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def schedule(self, intervalSeconds: float) -> int:
        """
        Start (or restart) the recurring timer.

        Args:
            intervalSeconds: Seconds between ticks (minimum 1)

        Returns:
            Generation of the new timer
        """
        interval = max(MIN_POLLING_INTERVAL_SECONDS, intervalSeconds)

        with self._lock:
            self._cancelLocked()
            self._generation += 1
            generation = self._generation
            stopEvent = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(generation, stopEvent, interval),
                name=f"{self._name}-{generation}",
                daemon=True,
            )
            self._interval = interval
            self._stopEvent = stopEvent
            self._thread = thread
            thread.start()

        logger.debug(f"Poll timer scheduled | interval={interval}s, generation={generation}")
        return generation

    def cancel(self, wait: bool = True) -> None:
        """
        Cancel the active timer. Safe to call when nothing is scheduled.

        Args:
            wait: Join the timer thread (up to 1s). Pass False when holding a
                lock that the tick callback may be waiting on.
        """
        with self._lock:
            thread = self._cancelLocked()

        if thread is None:
            return

        if wait and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug("Poll timer cancelled")

    def _cancelLocked(self) -> Optional[threading.Thread]:
        """
        Stop the current timer. Caller must hold the lock.

        Returns:
            The stopped timer thread, or None if nothing was scheduled
        """
        if self._stopEvent is None:
            return None

        self._stopEvent.set()
        thread = self._thread
        self._stopEvent = None
        self._thread = None
        self._interval = None
        # Invalidate ticks already in flight from the cancelled timer
        self._generation += 1
        return thread

    def _run(self, generation: int, stopEvent: threading.Event, interval: float) -> None:
        """Timer thread body."""
        while not stopEvent.wait(timeout=interval):
            if not self.isCurrent(generation):
                return
            try:
                self._callback(generation)
            except Exception as e:
                logger.error(f"Error in poll timer callback: {e}")

    def isCurrent(self, generation: Optional[int]) -> bool:
        """
        Check whether a tick generation belongs to the active timer.

        Args:
            generation: Generation carried by a tick

        Returns:
            True if the timer that produced the tick is still active
        """
        with self._lock:
            return self._stopEvent is not None and generation == self._generation

    @property
    def isActive(self) -> bool:
        """True while a timer is scheduled."""
        with self._lock:
            return self._stopEvent is not None

    @property
    def interval(self) -> Optional[float]:
        """Interval of the active timer in seconds, or None."""
        with self._lock:
            return self._interval

    @property
    def generation(self) -> int:
        """Current generation counter."""
        with self._lock:
            return self._generation
