################################################################################
# File Name: types.py
# Purpose/Description: Sync record and publisher statistics types
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
Sync types.

Contains:
- Defaults for the debounce window and the Firestore endpoint
- SyncRecord: the outbound per-device document
- PublishResult: outcome of one sink write
- PublisherStats: debounced publisher counters
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from telemetry.types import DerivedState

# ================================================================================
# Constants
# ================================================================================

DEFAULT_DEBOUNCE_SECONDS = 1.0
DEFAULT_FIRESTORE_BASE_URL = 'https://firestore.googleapis.com/v1'
DEFAULT_FIRESTORE_COLLECTION = 'devices'
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0

# Wire field names, in document order
FIELD_DEVICE_ID = 'deviceID'
FIELD_DEVICE_NAME = 'deviceName'
FIELD_TIMESTAMP = 'timestamp'
FIELD_BATTERY_LEVEL = 'batteryLevel'
FIELD_IS_CHARGING = 'isCharging'
FIELD_BATTERY_STATE = 'batteryState'
FIELD_ESTIMATED_TIME_TO_FULL = 'estimatedTimeToFull'
FIELD_THERMAL_STATE = 'thermalState'

RECORD_FIELDS = (
    FIELD_DEVICE_ID,
    FIELD_DEVICE_NAME,
    FIELD_TIMESTAMP,
    FIELD_BATTERY_LEVEL,
    FIELD_IS_CHARGING,
    FIELD_BATTERY_STATE,
    FIELD_ESTIMATED_TIME_TO_FULL,
    FIELD_THERMAL_STATE,
)


# ================================================================================
# Data Classes
# ================================================================================

@dataclass(frozen=True)
class SyncRecord:
    """
    One per-device telemetry document.

    Attributes:
        deviceId: Stable device identifier (document key)
        deviceName: Human-readable device name
        timestamp: UTC time the record was built
        batteryLevel: Charge fraction in [0, 1]
        isCharging: True while actively charging
        batteryState: Charge state name
        estimatedTimeToFull: Display string for the estimate
        thermalState: Thermal level name, or 'unknown'
    """

    deviceId: str
    deviceName: str
    timestamp: datetime
    batteryLevel: float
    isCharging: bool
    batteryState: str
    estimatedTimeToFull: str
    thermalState: str

    @classmethod
    def fromDerivedState(
        cls,
        state: DerivedState,
        deviceId: str,
        deviceName: str,
        timestamp: datetime,
    ) -> 'SyncRecord':
        """
        Build a record from a monitor snapshot.

        Args:
            state: Derived state snapshot
            deviceId: Device identifier
            deviceName: Device name
            timestamp: UTC timestamp for the record
        """
        return cls(
            deviceId=deviceId,
            deviceName=deviceName,
            timestamp=timestamp,
            batteryLevel=float(state.batteryLevel),
            isCharging=state.isCharging,
            batteryState=state.batteryState.value,
            estimatedTimeToFull=state.estimatedTimeToFull,
            thermalState=state.thermalStateName,
        )

    def toDict(self) -> dict[str, Any]:
        """
        Convert to the wire document.

        Returns:
            Dictionary keyed by wire field names
        """
        return {
            FIELD_DEVICE_ID: self.deviceId,
            FIELD_DEVICE_NAME: self.deviceName,
            FIELD_TIMESTAMP: self.timestamp,
            FIELD_BATTERY_LEVEL: self.batteryLevel,
            FIELD_IS_CHARGING: self.isCharging,
            FIELD_BATTERY_STATE: self.batteryState,
            FIELD_ESTIMATED_TIME_TO_FULL: self.estimatedTimeToFull,
            FIELD_THERMAL_STATE: self.thermalState,
        }


@dataclass(frozen=True)
class PublishResult:
    """
    Outcome of one sink write.

    Attributes:
        success: True if the document was written
        documentId: Document key
        statusCode: HTTP status, when the sink speaks HTTP
        error: Error message on failure
    """

    success: bool
    documentId: str
    statusCode: int | None = None
    error: str | None = None


@dataclass
class PublisherStats:
    """
    Statistics about the debounced publisher.

    Attributes:
        submitted: Snapshots submitted
        published: Records written successfully
        failed: Writes that raised
        coalesced: Snapshots replaced by a newer one before the timer fired
        lastPublishTime: When the most recent successful write finished
    """

    submitted: int = 0
    published: int = 0
    failed: int = 0
    coalesced: int = 0
    lastPublishTime: datetime | None = None

    def toDict(self) -> dict[str, Any]:
        """
        Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the statistics
        """
        return {
            'submitted': self.submitted,
            'published': self.published,
            'failed': self.failed,
            'coalesced': self.coalesced,
            'lastPublishTime': self.lastPublishTime.isoformat() if self.lastPublishTime else None,
        }
