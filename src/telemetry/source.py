################################################################################
# File Name: source.py
# Purpose/Description: Abstract sample source for battery and thermal events
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# ================================================================================
################################################################################
"""
Sample source interface.

A sample source answers battery/thermal queries and emits change events on
three subscribable streams (charge state, level, thermal). Events are only
emitted while monitoring is enabled; the monitor enables it on start and
clears it on stop.

Usage:
    class MySource(SampleSource):
        def getBatteryLevel(self) -> float: ...
        def getBatteryState(self) -> BatteryState: ...
        def getThermalLevel(self) -> ThermalLevel: ...

    source = MySource()
    unsubscribe = source.subscribe(TelemetryEventType.LEVEL_CHANGED, onLevel)
    source.setMonitoringEnabled(True)
    ...
    unsubscribe()
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List

from .exceptions import TelemetryConfigurationError
from .types import SOURCE_EVENT_TYPES, BatteryState, TelemetryEventType, ThermalLevel

logger = logging.getLogger(__name__)


class SampleSource(ABC):
    """
    Base class for battery/thermal sample sources.

    Subclasses implement the three readers and call _emit() when they detect
    a change. Subscription bookkeeping and the monitoring toggle live here.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[TelemetryEventType, List[Callable[[], None]]] = {
            eventType: [] for eventType in SOURCE_EVENT_TYPES
        }
        self._subscriberLock = threading.Lock()
        self._monitoringEnabled = False

    # ================================================================================
    # Readers
    # ================================================================================

    @abstractmethod
    def getBatteryLevel(self) -> float:
        """
        Read the battery level.

        Returns:
            Charge fraction in [0, 1], or a negative value when unavailable

        Raises:
            SampleSourceError: If the reading fails
        """

    @abstractmethod
    def getBatteryState(self) -> BatteryState:
        """
        Read the charge state.

        Raises:
            SampleSourceError: If the reading fails
        """

    @abstractmethod
    def getThermalLevel(self) -> ThermalLevel:
        """
        Read the thermal level.

        Raises:
            SampleSourceError: If the reading fails
        """

    # ================================================================================
    # Monitoring Toggle
    # ================================================================================

    @property
    def monitoringEnabled(self) -> bool:
        """True while a monitor is consuming events."""
        return self._monitoringEnabled

    def setMonitoringEnabled(self, enabled: bool) -> None:
        """
        Enable or disable event emission.

        Subclasses that need to start or stop hardware watchers override
        this and call super().

        Args:
            enabled: True when a monitor starts, False when it stops
        """
        self._monitoringEnabled = enabled
        logger.debug(f"{type(self).__name__} monitoring {'enabled' if enabled else 'disabled'}")

    # ================================================================================
    # Subscriptions
    # ================================================================================

    def subscribe(
        self,
        eventType: TelemetryEventType,
        callback: Callable[[], None]
    ) -> Callable[[], None]:
        """
        Subscribe to one event stream.

        Args:
            eventType: CHARGE_STATE_CHANGED, LEVEL_CHANGED or THERMAL_CHANGED
            callback: Called with no arguments when the event fires

        Returns:
            Function that removes the subscription

        Raises:
            TelemetryConfigurationError: If eventType is not a source event
        """
        if eventType not in self._subscribers:
            raise TelemetryConfigurationError(
                f"Sample sources do not emit {eventType.value}",
                details={'eventType': eventType.value}
            )

        with self._subscriberLock:
            self._subscribers[eventType].append(callback)

        def unsubscribe() -> None:
            with self._subscriberLock:
                if callback in self._subscribers[eventType]:
                    self._subscribers[eventType].remove(callback)

        return unsubscribe

    def subscriberCount(self, eventType: TelemetryEventType) -> int:
        """Number of callbacks registered for a stream."""
        with self._subscriberLock:
            return len(self._subscribers.get(eventType, []))

    def _emit(self, eventType: TelemetryEventType) -> None:
        """
        Notify subscribers of an event.

        Args:
            eventType: Stream to notify
        """
        if not self._monitoringEnabled:
            return

        with self._subscriberLock:
            callbacks = list(self._subscribers.get(eventType, []))

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in {eventType.value} subscriber: {e}")
