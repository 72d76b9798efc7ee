################################################################################
# File Name: publisher.py
# Purpose/Description: Debounced publisher of derived state to a document sink
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Ignore debounce timers superseded by a later submit
# ================================================================================
################################################################################
"""
Debounced sync publisher.

Every submit() replaces the pending snapshot and restarts the debounce timer;
when the timer fires the latest snapshot is written once. A burst of N
submits inside the window therefore produces exactly one write carrying the
last values.

Publishing is fire-and-forget: failures are logged through handleError and
counted, never retried and never raised back to the monitor.

Usage:
    from sync.publisher import DebouncedPublisher

    publisher = DebouncedPublisher(sink, identityProvider, debounceSeconds=1.0)
    publisher.attach(monitor)

    # On shutdown
    publisher.close()
"""

import functools
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from common.error_handler import handleError
from identity.provider import IdentityProvider
from telemetry.types import DerivedState

from .exceptions import SyncConfigurationError
from .sinks import DocumentSink
from .types import DEFAULT_DEBOUNCE_SECONDS, PublisherStats, PublishResult, SyncRecord

logger = logging.getLogger(__name__)


def utcNow() -> datetime:
    return datetime.now(timezone.utc)


class DebouncedPublisher:
    """
    Coalesces derived-state snapshots and writes one record per quiet window.

    The timer factory is called as timerFactory(interval, function) and must
    return an object with start() and cancel(), like threading.Timer.

    Example:
        publisher = DebouncedPublisher(LoggingSink(), StaticIdentityProvider('dev-1'))
        publisher.submit(monitor.getDerivedState())
    """

    def __init__(
        self,
        sink: DocumentSink,
        identityProvider: IdentityProvider,
        debounceSeconds: float = DEFAULT_DEBOUNCE_SECONDS,
        timerFactory: Callable[[float, Callable[[], None]], Any] = threading.Timer,
        clock: Callable[[], datetime] = utcNow,
    ):
        """
        Initialize the publisher.

        Args:
            sink: Document sink to write to
            identityProvider: Source of the device id and name
            debounceSeconds: Quiet window before a write
            timerFactory: Creates the debounce timer
            clock: UTC clock for record timestamps

        Raises:
            SyncConfigurationError: If debounceSeconds is negative
        """
        if debounceSeconds < 0:
            raise SyncConfigurationError(
                "Debounce window must not be negative",
                details={'debounceSeconds': debounceSeconds}
            )

        self._sink = sink
        self._identityProvider = identityProvider
        self._debounceSeconds = debounceSeconds
        self._timerFactory = timerFactory
        self._clock = clock

        self._lock = threading.Lock()
        self._pending: Optional[DerivedState] = None
        self._timer: Optional[Any] = None
        self._timerGeneration = 0
        self._closed = False
        self._stats = PublisherStats()

    def attach(self, monitor: Any) -> None:
        """
        Subscribe to a TelemetryMonitor's state changes.

        Args:
            monitor: Object with onStateChange(callback)
        """
        monitor.onStateChange(self.submit)

    def submit(self, state: DerivedState) -> None:
        """
        Schedule a snapshot for publishing.

        Does not block: only replaces the pending snapshot and restarts the
        debounce timer.

        Args:
            state: Derived state snapshot
        """
        with self._lock:
            if self._closed:
                logger.debug("Publisher closed, dropping snapshot")
                return

            self._stats.submitted += 1
            if self._pending is not None:
                self._stats.coalesced += 1
            self._pending = replace(state)

            if self._timer is not None:
                self._timer.cancel()
            self._timerGeneration += 1
            timer = self._timerFactory(
                self._debounceSeconds,
                functools.partial(self._onTimer, self._timerGeneration)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _onTimer(self, generation: int) -> None:
        # cancel() cannot stop a timer whose callback has already started
        with self._lock:
            if generation != self._timerGeneration:
                logger.debug("Superseded debounce timer fired, ignoring")
                return
            state = self._takePendingLocked()

        if state is not None:
            self._publish(state)

    def flush(self) -> Optional[PublishResult]:
        """
        Write the pending snapshot now.

        Returns:
            PublishResult, or None if nothing was pending
        """
        with self._lock:
            state = self._takePendingLocked()

        if state is None:
            return None

        return self._publish(state)

    def _takePendingLocked(self) -> Optional[DerivedState]:
        state = self._pending
        self._pending = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        return state

    def _publish(self, state: DerivedState) -> PublishResult:
        deviceId = ''
        try:
            deviceId = self._identityProvider.getDeviceId()
            record = SyncRecord.fromDerivedState(
                state,
                deviceId=deviceId,
                deviceName=self._identityProvider.getDeviceName(),
                timestamp=self._clock(),
            )
            result = self._sink.write(deviceId, record.toDict())

        except Exception as e:
            handleError(e, context={'operation': 'publish'}, reraise=False)
            with self._lock:
                self._stats.failed += 1
            return PublishResult(success=False, documentId=deviceId, error=str(e))

        with self._lock:
            self._stats.published += 1
            self._stats.lastPublishTime = datetime.now()

        logger.debug(
            f"Published sync record | level={state.batteryLevel:.2f}, "
            f"estimate={state.estimatedTimeToFull}"
        )
        return result

    def close(self, flush: bool = True) -> None:
        """
        Stop publishing.

        Args:
            flush: Write the pending snapshot before closing
        """
        if flush:
            self.flush()

        with self._lock:
            self._closed = True
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        self._sink.close()
        logger.info("Sync publisher closed")

    @property
    def hasPending(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def debounceSeconds(self) -> float:
        return self._debounceSeconds

    def getStats(self) -> PublisherStats:
        """Copy of the publisher statistics."""
        with self._lock:
            return replace(self._stats)

    def getStatus(self) -> Dict[str, Any]:
        """
        Get current publisher status.

        Returns:
            Dictionary with status information
        """
        with self._lock:
            return {
                'sink': type(self._sink).__name__,
                'debounceSeconds': self._debounceSeconds,
                'pending': self._pending is not None,
                'closed': self._closed,
                'stats': self._stats.toDict(),
            }
