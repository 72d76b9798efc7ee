################################################################################
# File Name: types.py
# Purpose/Description: Telemetry types, enums, dataclasses, and constants
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
Telemetry types, enums, and dataclasses.

This module contains all type definitions for battery and thermal telemetry:
- BatteryState enum for the charge state reported by the sample source
- ThermalLevel enum for the ordered thermal pressure levels
- MonitorState enum for the telemetry monitor phase
- EstimateKind enum and ChargeEstimate dataclass for estimator results
- Sample dataclass for a single (level, timestamp) observation
- DerivedState dataclass for the user-presentable monitor state
- TelemetryEventType enum and TelemetryEvent dataclass for dispatch
- TelemetryStats dataclass for monitor statistics

All types have zero project dependencies (stdlib only) to avoid circular imports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# ================================================================================
# Telemetry Constants
# ================================================================================

# Number of samples kept while charging
DEFAULT_HISTORY_CAPACITY = 5

# Smallest history that can produce an estimate
MIN_HISTORY_CAPACITY = 2

# Poll cadence while charging (responsive estimation)
DEFAULT_CHARGING_POLL_INTERVAL_SECONDS = 10

# Poll cadence otherwise
DEFAULT_IDLE_POLL_INTERVAL_SECONDS = 30

# Minimum polling interval (1 second)
MIN_POLLING_INTERVAL_SECONDS = 1

# Oldest-to-newest span required before an estimate is produced
DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS = 60

# Level at or above which the battery is treated as full
FULL_CHARGE_LEVEL = 1.0

# Level reported by a source that cannot read the battery
UNAVAILABLE_LEVEL = -1.0

# Display labels
LABEL_FULL_CHARGE = "Full Charge"
LABEL_NOT_CHARGING = "Not Charging"
LABEL_CALCULATING = "Calculating..."
LABEL_LEVEL_UNAVAILABLE = "Battery Level Unavailable"

# Wire value for a thermal level that has never been read
THERMAL_STATE_UNKNOWN = "unknown"


# ================================================================================
# Source Enums
# ================================================================================

class BatteryState(Enum):
    """
    Charge state reported by the sample source.

    Values:
        UNKNOWN: Source cannot determine the state
        UNPLUGGED: Running on battery
        CHARGING: Connected to power and charging
        FULL: Connected to power and fully charged
    """

    UNKNOWN = "unknown"
    UNPLUGGED = "unplugged"
    CHARGING = "charging"
    FULL = "full"


class ThermalLevel(Enum):
    """
    Ordered thermal pressure level.

    Values:
        NOMINAL: Within normal limits
        FAIR: Slightly elevated
        SERIOUS: High, performance may be reduced
        CRITICAL: Significantly impacting the device
    """

    NOMINAL = "nominal"
    FAIR = "fair"
    SERIOUS = "serious"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        """Numeric severity (0 = nominal, 3 = critical)."""
        return _THERMAL_SEVERITY[self]

    def __lt__(self, other: 'ThermalLevel') -> bool:
        if not isinstance(other, ThermalLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: 'ThermalLevel') -> bool:
        if not isinstance(other, ThermalLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: 'ThermalLevel') -> bool:
        if not isinstance(other, ThermalLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: 'ThermalLevel') -> bool:
        if not isinstance(other, ThermalLevel):
            return NotImplemented
        return self.severity >= other.severity


_THERMAL_SEVERITY = {
    ThermalLevel.NOMINAL: 0,
    ThermalLevel.FAIR: 1,
    ThermalLevel.SERIOUS: 2,
    ThermalLevel.CRITICAL: 3,
}


# ================================================================================
# Monitor Enums
# ================================================================================

class MonitorState(Enum):
    """
    Phase of the telemetry monitor.

    Values:
        STOPPED: Monitor is not running
        IDLE: Unplugged or unknown charge state, normal polling
        CHARGING: Actively charging, fast polling
        FULL: Fully charged, polling halted
        UNAVAILABLE: Last level reading was unavailable
    """

    STOPPED = "stopped"
    IDLE = "idle"
    CHARGING = "charging"
    FULL = "full"
    UNAVAILABLE = "unavailable"


class EstimateKind(Enum):
    """Kind of charge estimate produced by the estimator."""

    NOT_CHARGING = "not_charging"
    FULL = "full"
    STILL_CALCULATING = "still_calculating"
    ESTIMATE = "estimate"


class TelemetryEventType(Enum):
    """
    Events handled by the telemetry monitor.

    The first three are emitted by sample sources; POLL_TICK comes from the
    monitor's own poll scheduler.
    """

    CHARGE_STATE_CHANGED = "charge_state_changed"
    LEVEL_CHANGED = "level_changed"
    THERMAL_CHANGED = "thermal_changed"
    POLL_TICK = "poll_tick"


# Event types a sample source may emit
SOURCE_EVENT_TYPES = (
    TelemetryEventType.CHARGE_STATE_CHANGED,
    TelemetryEventType.LEVEL_CHANGED,
    TelemetryEventType.THERMAL_CHANGED,
)


# ================================================================================
# Data Classes
# ================================================================================

@dataclass(frozen=True)
class Sample:
    """
    One battery level observation.

    Attributes:
        level: Charge fraction in [0, 1], negative when unavailable
        timestamp: Monotonic time of the reading in seconds
    """

    level: float
    timestamp: float

    @property
    def isAvailable(self) -> bool:
        """True if the level is a real reading rather than the sentinel."""
        return self.level >= 0


@dataclass(frozen=True)
class ChargeEstimate:
    """
    Result of a time-to-full estimate.

    Attributes:
        kind: Symbolic result kind
        seconds: Estimated seconds to full (ESTIMATE only)
    """

    kind: EstimateKind
    seconds: float | None = None

    @classmethod
    def notCharging(cls) -> 'ChargeEstimate':
        return cls(EstimateKind.NOT_CHARGING)

    @classmethod
    def full(cls) -> 'ChargeEstimate':
        return cls(EstimateKind.FULL)

    @classmethod
    def stillCalculating(cls) -> 'ChargeEstimate':
        return cls(EstimateKind.STILL_CALCULATING)

    @classmethod
    def fromSeconds(cls, seconds: float) -> 'ChargeEstimate':
        return cls(EstimateKind.ESTIMATE, seconds)

    @property
    def hasEstimate(self) -> bool:
        return self.kind == EstimateKind.ESTIMATE


@dataclass
class DerivedState:
    """
    User-presentable telemetry state owned by the monitor.

    Attributes:
        batteryLevel: Charge fraction in [0, 1] (0 when unavailable)
        batteryState: Last charge state read from the source
        isCharging: True while actively charging and not yet full
        estimatedTimeToFull: Display string for the time-to-full estimate
        thermalLevel: Last thermal level read (None until first read)
        criticalAlertActive: Latched thermal-critical alert
    """

    batteryLevel: float = 0.0
    batteryState: BatteryState = BatteryState.UNKNOWN
    isCharging: bool = False
    estimatedTimeToFull: str = LABEL_CALCULATING
    thermalLevel: ThermalLevel | None = None
    criticalAlertActive: bool = False

    @property
    def thermalStateName(self) -> str:
        """Wire name of the thermal level."""
        if self.thermalLevel is None:
            return THERMAL_STATE_UNKNOWN
        return self.thermalLevel.value

    def toDict(self) -> dict[str, Any]:
        """
        Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the state
        """
        return {
            'batteryLevel': self.batteryLevel,
            'batteryState': self.batteryState.value,
            'isCharging': self.isCharging,
            'estimatedTimeToFull': self.estimatedTimeToFull,
            'thermalState': self.thermalStateName,
            'criticalAlertActive': self.criticalAlertActive,
        }


@dataclass(frozen=True)
class TelemetryEvent:
    """
    A discrete message for the monitor's event queue.

    Attributes:
        eventType: What happened
        timestamp: When the event was posted
        generation: Poll scheduler generation (POLL_TICK only)
    """

    eventType: TelemetryEventType
    timestamp: datetime = field(default_factory=datetime.now)
    generation: int | None = None


@dataclass
class TelemetryStats:
    """
    Statistics about telemetry monitoring.

    Attributes:
        eventsProcessed: Events handled by dispatch
        samplesRecorded: Samples appended to the history buffer
        unavailableReadings: Level reads that returned the sentinel or failed
        chargeSessions: Transitions into charging
        fullChargeTransitions: Times full handling ran from a non-full phase
        criticalAlerts: Times the critical alert latched
        staleTicksDiscarded: Poll ticks ignored because their timer was replaced
        lastEventTime: When the most recent event was handled
    """

    eventsProcessed: int = 0
    samplesRecorded: int = 0
    unavailableReadings: int = 0
    chargeSessions: int = 0
    fullChargeTransitions: int = 0
    criticalAlerts: int = 0
    staleTicksDiscarded: int = 0
    lastEventTime: datetime | None = None

    def toDict(self) -> dict[str, Any]:
        """
        Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the statistics
        """
        return {
            'eventsProcessed': self.eventsProcessed,
            'samplesRecorded': self.samplesRecorded,
            'unavailableReadings': self.unavailableReadings,
            'chargeSessions': self.chargeSessions,
            'fullChargeTransitions': self.fullChargeTransitions,
            'criticalAlerts': self.criticalAlerts,
            'staleTicksDiscarded': self.staleTicksDiscarded,
            'lastEventTime': self.lastEventTime.isoformat() if self.lastEventTime else None,
        }
