################################################################################
# File Name: __init__.py
# Purpose/Description: Telemetry subpackage for battery charge and thermal tracking
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial subpackage creation
# ================================================================================
################################################################################
"""
Telemetry Subpackage.

This subpackage contains the charge monitoring core:
- Sample source interface for battery/thermal readings and events
- Bounded sample history and time-to-full estimator
- Cancelable poll scheduler
- Telemetry state machine owning the derived state

Exports:
    Types and Constants:
        - BatteryState, ThermalLevel, MonitorState, EstimateKind,
          TelemetryEventType: Enums
        - Sample, ChargeEstimate, DerivedState, TelemetryEvent,
          TelemetryStats: Dataclasses
        - Constants for defaults and display labels

    Exceptions:
        - TelemetryError: Base telemetry exception
        - TelemetryConfigurationError: Telemetry configuration error
        - SampleSourceError: Sample source read error

    Classes:
        - SampleSource: Abstract sample source
        - HistoryBuffer: Bounded sample window
        - PollScheduler: Cancelable recurring timer
        - TelemetryMonitor: Telemetry state machine

    Functions:
        - estimateTimeToFull, formatDuration, describeEstimate
        - createTelemetryMonitorFromConfig, getTelemetryConfig,
          isTelemetryEnabled, getDefaultTelemetryConfig, validateTelemetryConfig
"""

from .estimator import describeEstimate, estimateTimeToFull, formatDuration
from .exceptions import SampleSourceError, TelemetryConfigurationError, TelemetryError
from .helpers import (
    createTelemetryMonitorFromConfig,
    getDefaultTelemetryConfig,
    getTelemetryConfig,
    isTelemetryEnabled,
    validateTelemetryConfig,
)
from .history import HistoryBuffer
from .monitor import TelemetryMonitor
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
    MIN_HISTORY_CAPACITY,
    MIN_POLLING_INTERVAL_SECONDS,
    SOURCE_EVENT_TYPES,
    THERMAL_STATE_UNKNOWN,
    UNAVAILABLE_LEVEL,
    BatteryState,
    ChargeEstimate,
    DerivedState,
    EstimateKind,
    MonitorState,
    Sample,
    TelemetryEvent,
    TelemetryEventType,
    TelemetryStats,
    ThermalLevel,
)

__all__ = [
    # Types
    'BatteryState',
    'ThermalLevel',
    'MonitorState',
    'EstimateKind',
    'TelemetryEventType',
    'Sample',
    'ChargeEstimate',
    'DerivedState',
    'TelemetryEvent',
    'TelemetryStats',
    # Constants
    'DEFAULT_HISTORY_CAPACITY',
    'MIN_HISTORY_CAPACITY',
    'DEFAULT_CHARGING_POLL_INTERVAL_SECONDS',
    'DEFAULT_IDLE_POLL_INTERVAL_SECONDS',
    'MIN_POLLING_INTERVAL_SECONDS',
    'DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS',
    'FULL_CHARGE_LEVEL',
    'UNAVAILABLE_LEVEL',
    'LABEL_FULL_CHARGE',
    'LABEL_NOT_CHARGING',
    'LABEL_CALCULATING',
    'LABEL_LEVEL_UNAVAILABLE',
    'THERMAL_STATE_UNKNOWN',
    'SOURCE_EVENT_TYPES',
    # Exceptions
    'TelemetryError',
    'TelemetryConfigurationError',
    'SampleSourceError',
    # Classes
    'SampleSource',
    'HistoryBuffer',
    'PollScheduler',
    'TelemetryMonitor',
    # Functions
    'estimateTimeToFull',
    'formatDuration',
    'describeEstimate',
    'createTelemetryMonitorFromConfig',
    'getTelemetryConfig',
    'isTelemetryEnabled',
    'getDefaultTelemetryConfig',
    'validateTelemetryConfig',
]
