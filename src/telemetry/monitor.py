################################################################################
# File Name: monitor.py
# Purpose/Description: Telemetry state machine and charge-time tracking
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Poll timer cancelled without join under the monitor lock
# ================================================================================
################################################################################
"""
Telemetry monitor module.

Provides:
- Charge state tracking (idle, charging, full, unavailable)
- Time-to-full estimation from a bounded sample history
- Dynamic poll cadence (fast while charging, normal otherwise, halted when full)
- Latched thermal-critical alert with explicit acknowledgement
- Change notification to subscribers (presentation, sync publisher)
- Statistics tracking

Features:
- Source events and poll ticks are posted into a single-consumer queue and
  handled one at a time by a worker thread
- Every handler runs under one lock, so derived state has a single owner
- Unavailable readings degrade to a label instead of raising

Usage:
    from telemetry.monitor import TelemetryMonitor

    monitor = TelemetryMonitor(source, chargingPollIntervalSeconds=10)
    monitor.onStateChange(lambda state: print(state.estimatedTimeToFull))
    monitor.start()

    # Presentation
    state = monitor.getDerivedState()
    if state.criticalAlertActive:
        monitor.acknowledgeCriticalAlert()

    # On shutdown
    monitor.stop()
"""

import logging
import queue
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .estimator import describeEstimate, estimateTimeToFull
from .exceptions import TelemetryConfigurationError
from .history import HistoryBuffer
from .scheduler import PollScheduler
from .source import SampleSource
from .types import (
    DEFAULT_CHARGING_POLL_INTERVAL_SECONDS,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_IDLE_POLL_INTERVAL_SECONDS,
    DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
    FULL_CHARGE_LEVEL,
    LABEL_CALCULATING,
    LABEL_FULL_CHARGE,
    LABEL_LEVEL_UNAVAILABLE,
    LABEL_NOT_CHARGING,
    MIN_POLLING_INTERVAL_SECONDS,
    SOURCE_EVENT_TYPES,
    UNAVAILABLE_LEVEL,
    BatteryState,
    DerivedState,
    MonitorState,
    Sample,
    TelemetryEvent,
    TelemetryEventType,
    TelemetryStats,
    ThermalLevel,
)

logger = logging.getLogger(__name__)


class TelemetryMonitor:
    """
    Turns raw battery/thermal samples into stable derived state.

    Owns the DerivedState and the HistoryBuffer. Sample source events and
    poll ticks become TelemetryEvents; dispatch() routes each one to its
    handler, and subscribers see the resulting state before dispatch returns.

    Example:
        monitor = TelemetryMonitor(SimulatedSampleSource())
        monitor.onStateChange(publisher.submit)
        monitor.onCriticalAlert(lambda level: logger.warning("Overheating"))
        monitor.start()

        # In shutdown
        monitor.stop()
    """

    def __init__(
        self,
        source: SampleSource,
        historyCapacity: int = DEFAULT_HISTORY_CAPACITY,
        chargingPollIntervalSeconds: float = DEFAULT_CHARGING_POLL_INTERVAL_SECONDS,
        idlePollIntervalSeconds: float = DEFAULT_IDLE_POLL_INTERVAL_SECONDS,
        minimumEstimateWindowSeconds: float = DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
        enabled: bool = True,
        synchronous: bool = False,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the telemetry monitor.

        Args:
            source: Sample source providing battery/thermal readings and events
            historyCapacity: Samples kept for estimation (default 5)
            chargingPollIntervalSeconds: Poll cadence while charging (default 10s)
            idlePollIntervalSeconds: Poll cadence otherwise (default 30s)
            minimumEstimateWindowSeconds: Sample span required for an estimate
            enabled: Whether monitoring is enabled
            synchronous: Dispatch events on the posting thread instead of
                the worker thread. Poll ticks then run on the timer thread
                and wait for the monitor lock; a tick already waiting when
                polling is cancelled or replaced is dropped as stale once it
                gets the lock.
            clock: Monotonic clock for sample timestamps (default time.monotonic)

        Raises:
            TelemetryConfigurationError: If the estimate window is negative
                or the history capacity is too small
        """
        if minimumEstimateWindowSeconds < 0:
            raise TelemetryConfigurationError(
                "Minimum estimate window must not be negative",
                details={'minimumEstimateWindowSeconds': minimumEstimateWindowSeconds}
            )

        self._source = source
        self._chargingPollIntervalSeconds = max(
            MIN_POLLING_INTERVAL_SECONDS, chargingPollIntervalSeconds
        )
        self._idlePollIntervalSeconds = max(MIN_POLLING_INTERVAL_SECONDS, idlePollIntervalSeconds)
        self._minimumEstimateWindowSeconds = minimumEstimateWindowSeconds
        self._enabled = enabled
        self._synchronous = synchronous
        self._clock = clock or time.monotonic

        # State
        self._history = HistoryBuffer(historyCapacity)
        self._derived = DerivedState()
        self._phase = MonitorState.IDLE
        self._running = False
        self._stats = TelemetryStats()

        # Callbacks
        self._onStateChangeCallbacks: List[Callable[[DerivedState], None]] = []
        self._onCriticalAlertCallbacks: List[Callable[[ThermalLevel], None]] = []

        # Source subscriptions (removed on stop)
        self._unsubscribers: List[Callable[[], None]] = []

        # Event queue and worker
        self._events: queue.Queue = queue.Queue()
        self._workerThread: Optional[threading.Thread] = None

        # Poll timer
        self._scheduler = PollScheduler(self._onPollTimer, name="TelemetryMonitor-Poll")

        # Single owner of all state mutation
        self._lock = threading.RLock()

    # ================================================================================
    # Lifecycle
    # ================================================================================

    def start(self) -> bool:
        """
        Start monitoring.

        Enables the source, subscribes to its event streams, reads the
        current charge and thermal state, starts normal-cadence polling and
        performs one immediate capture-and-estimate cycle.

        Returns:
            True if running, False if monitoring is disabled
        """
        with self._lock:
            if self._running:
                return True

            if not self._enabled:
                logger.info("Telemetry monitoring disabled, not starting")
                return False

            self._running = True
            self._events = queue.Queue()

            self._source.setMonitoringEnabled(True)
            for eventType in SOURCE_EVENT_TYPES:
                self._unsubscribers.append(
                    self._source.subscribe(eventType, self._makeSourceCallback(eventType))
                )

            before = self._snapshot()

            batteryState = self._readBatteryState()
            self._derived.batteryState = batteryState
            self._derived.isCharging = batteryState == BatteryState.CHARGING
            self._derived.estimatedTimeToFull = (
                LABEL_CALCULATING if self._derived.isCharging else LABEL_NOT_CHARGING
            )
            self._phase = MonitorState.CHARGING if self._derived.isCharging else MonitorState.IDLE

            self._applyThermalLocked()
            self._scheduler.schedule(self._idlePollIntervalSeconds)
            self._applyLevelLocked(self._readBatteryLevel())

            self._notifyIfChanged(before)

            if not self._synchronous:
                self._workerThread = threading.Thread(
                    target=self._workerLoop,
                    args=(self._events,),
                    daemon=True,
                    name="TelemetryMonitor-Worker",
                )
                self._workerThread.start()

            logger.info(
                f"Telemetry monitor started | state={self._derived.batteryState.value}, "
                f"level={self._derived.batteryLevel:.2f}, "
                f"charging_interval={self._chargingPollIntervalSeconds}s, "
                f"idle_interval={self._idlePollIntervalSeconds}s"
            )
            return True

    def stop(self) -> None:
        """
        Stop monitoring.

        Cancels the poll timer, unsubscribes from every source stream, clears
        source monitoring and stops the worker. Events posted afterwards are
        dropped.
        """
        with self._lock:
            if not self._running:
                return

            self._running = False
            self._scheduler.cancel(wait=False)

            for unsubscribe in self._unsubscribers:
                unsubscribe()
            self._unsubscribers.clear()

            try:
                self._source.setMonitoringEnabled(False)
            except Exception as e:
                logger.error(f"Error disabling source monitoring: {e}")

            worker = self._workerThread
            self._workerThread = None
            self._events.put(None)

        # Worker may be waiting on the lock, so join outside it
        if worker is not None and worker.is_alive() and worker is not threading.current_thread():
            worker.join(timeout=2.0)

        logger.info("Telemetry monitor stopped")

    def isRunning(self) -> bool:
        """Check if the monitor is running."""
        return self._running

    def setEnabled(self, enabled: bool) -> None:
        """
        Enable or disable monitoring.

        Args:
            enabled: True to enable, False to disable
        """
        self._enabled = enabled

    # ================================================================================
    # Event Dispatch
    # ================================================================================

    def post(self, event: TelemetryEvent) -> None:
        """
        Queue an event for the worker.

        Does not block. Events posted while stopped are dropped.

        Args:
            event: Event to handle
        """
        if not self._running:
            logger.debug(f"Monitor not running, dropping {event.eventType.value}")
            return

        if self._synchronous:
            self.dispatch(event)
        else:
            self._events.put(event)

    def dispatch(self, event: TelemetryEvent) -> None:
        """
        Handle one event synchronously.

        Args:
            event: Event to handle
        """
        with self._lock:
            if not self._running:
                logger.debug(f"Monitor not running, dropping {event.eventType.value}")
                return

            if event.eventType == TelemetryEventType.POLL_TICK:
                if not self._scheduler.isCurrent(event.generation):
                    self._stats.staleTicksDiscarded += 1
                    logger.debug(f"Discarding stale poll tick | generation={event.generation}")
                    return

            before = self._snapshot()
            self._stats.eventsProcessed += 1
            self._stats.lastEventTime = datetime.now()

            if event.eventType == TelemetryEventType.CHARGE_STATE_CHANGED:
                self._handleChargeStateLocked()
            elif event.eventType == TelemetryEventType.THERMAL_CHANGED:
                self._applyThermalLocked()
            else:
                self._applyLevelLocked(self._readBatteryLevel())

            self._notifyIfChanged(before)

    def handleChargeStateChanged(self) -> None:
        """Re-read the charge state and apply the transition."""
        self.dispatch(TelemetryEvent(TelemetryEventType.CHARGE_STATE_CHANGED))

    def handleLevelChanged(self) -> None:
        """Re-read the level, record it and update the estimate."""
        self.dispatch(TelemetryEvent(TelemetryEventType.LEVEL_CHANGED))

    def handleThermalChanged(self) -> None:
        """Re-read the thermal level and latch the alert if critical."""
        self.dispatch(TelemetryEvent(TelemetryEventType.THERMAL_CHANGED))

    def captureCurrentLevel(self) -> None:
        """
        Immediate capture-and-estimate cycle.

        Each call appends at most one sample, so two calls with no new
        samples in between leave the estimate unchanged.
        """
        self.dispatch(TelemetryEvent(TelemetryEventType.LEVEL_CHANGED))

    def acknowledgeCriticalAlert(self) -> bool:
        """
        Clear the latched thermal-critical alert.

        Returns:
            True if an active alert was cleared
        """
        with self._lock:
            if not self._running or not self._derived.criticalAlertActive:
                return False

            before = self._snapshot()
            self._derived.criticalAlertActive = False
            logger.info("Critical thermal alert acknowledged")
            self._notifyIfChanged(before)
            return True

    def _makeSourceCallback(self, eventType: TelemetryEventType) -> Callable[[], None]:
        """Build a source subscriber that posts the given event type."""
        def callback() -> None:
            self.post(TelemetryEvent(eventType))
        return callback

    def _onPollTimer(self, generation: int) -> None:
        """Poll scheduler tick (timer thread)."""
        self.post(TelemetryEvent(TelemetryEventType.POLL_TICK, generation=generation))

    def _workerLoop(self, events: queue.Queue) -> None:
        """Single consumer of the event queue."""
        logger.debug("Telemetry worker started")

        while True:
            event = events.get()
            if event is None:
                break
            try:
                self.dispatch(event)
            except Exception as e:
                logger.error(f"Error handling {event.eventType.value}: {e}", exc_info=True)

        logger.debug("Telemetry worker stopped")

    # ================================================================================
    # Transition Handlers (caller holds the lock)
    # ================================================================================

    def _handleChargeStateLocked(self) -> None:
        """Apply a charge-state transition."""
        batteryState = self._readBatteryState()
        level = self._readBatteryLevel()
        previousState = self._derived.batteryState
        self._derived.batteryState = batteryState

        if previousState != batteryState:
            logger.info(f"Battery state: {previousState.value} -> {batteryState.value}")

        if batteryState == BatteryState.FULL or level >= FULL_CHARGE_LEVEL:
            if level >= 0:
                self._derived.batteryLevel = min(level, FULL_CHARGE_LEVEL)
            self._enterFullLocked()
            return

        if batteryState == BatteryState.CHARGING:
            if self._phase != MonitorState.CHARGING:
                self._stats.chargeSessions += 1
            self._history.clear()
            self._derived.isCharging = True
            self._derived.estimatedTimeToFull = LABEL_CALCULATING
            self._phase = MonitorState.CHARGING
            self._scheduler.schedule(self._chargingPollIntervalSeconds)
            # First sample of the new session
            self._applyLevelLocked(level)
            return

        self._derived.isCharging = False
        self._derived.estimatedTimeToFull = LABEL_NOT_CHARGING
        self._history.clear()
        self._phase = MonitorState.IDLE
        if level >= 0:
            self._derived.batteryLevel = level
        self._scheduler.schedule(self._idlePollIntervalSeconds)

    def _applyLevelLocked(self, level: float) -> None:
        """
        Apply a level reading (level change, poll tick or capture).

        Args:
            level: Charge fraction, negative when unavailable
        """
        if level < 0:
            self._derived.batteryLevel = 0.0
            self._derived.estimatedTimeToFull = LABEL_LEVEL_UNAVAILABLE
            self._phase = MonitorState.UNAVAILABLE
            self._stats.unavailableReadings += 1
            logger.warning("Battery level unavailable")
            return

        self._derived.batteryLevel = min(level, FULL_CHARGE_LEVEL)

        if self._derived.batteryState == BatteryState.FULL or level >= FULL_CHARGE_LEVEL:
            self._enterFullLocked()
            return

        # Polling stays halted after full until the next charge-state transition
        self._phase = MonitorState.CHARGING if self._derived.isCharging else MonitorState.IDLE

        if self._derived.isCharging:
            self._history.record(Sample(level=level, timestamp=self._clock()))
            self._stats.samplesRecorded += 1

        estimate = estimateTimeToFull(
            self._history,
            self._derived.isCharging,
            self._minimumEstimateWindowSeconds,
        )
        self._derived.estimatedTimeToFull = describeEstimate(estimate)
        logger.debug(
            f"Level update | level={level:.3f}, samples={len(self._history)}, "
            f"estimate={self._derived.estimatedTimeToFull}"
        )

    def _enterFullLocked(self) -> None:
        """Full handling: stop tracking charge and halt polling."""
        if self._phase != MonitorState.FULL:
            self._stats.fullChargeTransitions += 1
            logger.info("Battery full, polling halted")

        self._derived.isCharging = False
        self._derived.estimatedTimeToFull = LABEL_FULL_CHARGE
        self._history.clear()
        # A tick may be blocked on self._lock, so never join the timer here
        self._scheduler.cancel(wait=False)
        self._phase = MonitorState.FULL

    def _applyThermalLocked(self) -> None:
        """Store the thermal level and latch the alert on critical."""
        thermalLevel = self._readThermalLevel()
        if thermalLevel is None:
            return

        previous = self._derived.thermalLevel
        self._derived.thermalLevel = thermalLevel
        if previous != thermalLevel:
            logger.info(
                f"Thermal level: {previous.value if previous else 'unknown'} -> "
                f"{thermalLevel.value}"
            )

        if thermalLevel == ThermalLevel.CRITICAL and not self._derived.criticalAlertActive:
            self._derived.criticalAlertActive = True
            self._stats.criticalAlerts += 1
            logger.warning("Thermal state critical, alert raised")
            self._triggerCriticalAlertCallbacks(thermalLevel)

    # ================================================================================
    # Source Readers
    # ================================================================================

    def _readBatteryLevel(self) -> float:
        """Read the level, returning the sentinel on failure."""
        try:
            return float(self._source.getBatteryLevel())
        except Exception as e:
            logger.error(f"Error reading battery level: {e}")
            return UNAVAILABLE_LEVEL

    def _readBatteryState(self) -> BatteryState:
        """Read the charge state, returning UNKNOWN on failure."""
        try:
            return self._source.getBatteryState()
        except Exception as e:
            logger.error(f"Error reading battery state: {e}")
            return BatteryState.UNKNOWN

    def _readThermalLevel(self) -> Optional[ThermalLevel]:
        """Read the thermal level, returning None on failure."""
        try:
            return self._source.getThermalLevel()
        except Exception as e:
            logger.error(f"Error reading thermal level: {e}")
            return None

    # ================================================================================
    # Callbacks
    # ================================================================================

    def onStateChange(self, callback: Callable[[DerivedState], None]) -> None:
        """
        Register a callback for derived state changes.

        The callback receives a copy of the new state and runs on the
        dispatching thread before the handler returns, so it must not block.

        Args:
            callback: Function called with the new DerivedState
        """
        self._onStateChangeCallbacks.append(callback)

    def onCriticalAlert(self, callback: Callable[[ThermalLevel], None]) -> None:
        """
        Register a callback for the thermal-critical alert.

        Called once each time the alert latches.

        Args:
            callback: Function called with the thermal level
        """
        self._onCriticalAlertCallbacks.append(callback)

    def _snapshot(self) -> DerivedState:
        return replace(self._derived)

    def _notifyIfChanged(self, before: DerivedState) -> None:
        """Send a snapshot to subscribers if the derived state changed."""
        if self._derived == before:
            return

        snapshot = self._snapshot()
        for callback in list(self._onStateChangeCallbacks):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Error in state change callback: {e}")

    def _triggerCriticalAlertCallbacks(self, thermalLevel: ThermalLevel) -> None:
        for callback in list(self._onCriticalAlertCallbacks):
            try:
                callback(thermalLevel)
            except Exception as e:
                logger.error(f"Error in critical alert callback: {e}")

    # ================================================================================
    # State Access
    # ================================================================================

    def getDerivedState(self) -> DerivedState:
        """Snapshot of the derived state."""
        with self._lock:
            return self._snapshot()

    def isCharging(self) -> bool:
        with self._lock:
            return self._derived.isCharging

    def getBatteryLevel(self) -> float:
        with self._lock:
            return self._derived.batteryLevel

    def getEstimatedTimeToFull(self) -> str:
        with self._lock:
            return self._derived.estimatedTimeToFull

    def getThermalLevel(self) -> Optional[ThermalLevel]:
        with self._lock:
            return self._derived.thermalLevel

    def isCriticalAlertActive(self) -> bool:
        with self._lock:
            return self._derived.criticalAlertActive

    def getHistory(self) -> List[Sample]:
        """Copy of the sample history, oldest first."""
        with self._lock:
            return self._history.samples()

    def getState(self) -> MonitorState:
        """Current phase, or STOPPED when not running."""
        with self._lock:
            return self._phase if self._running else MonitorState.STOPPED

    def getPollInterval(self) -> Optional[float]:
        """Active poll interval in seconds, or None when polling is halted."""
        return self._scheduler.interval

    def getStats(self) -> TelemetryStats:
        """Copy of the monitor statistics."""
        with self._lock:
            return replace(self._stats)

    def getStatus(self) -> Dict[str, Any]:
        """
        Get current monitor status.

        Returns:
            Dictionary with status information
        """
        with self._lock:
            return {
                'state': self.getState().value,
                'enabled': self._enabled,
                'derived': self._derived.toDict(),
                'historySize': len(self._history),
                'historyCapacity': self._history.capacity,
                'pollIntervalSeconds': self.getPollInterval(),
                'chargingPollIntervalSeconds': self._chargingPollIntervalSeconds,
                'idlePollIntervalSeconds': self._idlePollIntervalSeconds,
                'stats': self._stats.toDict(),
            }
