################################################################################
# File Name: helpers.py
# Purpose/Description: Telemetry configuration helpers and factory functions
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
Telemetry configuration helpers and factory functions.

This module provides helper functions for working with the telemetry monitor:
- Factory function to create a monitor from configuration
- Configuration extraction, defaults and validation
- Enabled check

Usage:
    from telemetry.helpers import createTelemetryMonitorFromConfig

    monitor = createTelemetryMonitorFromConfig(config, source)
"""

import logging
from typing import Any

from .exceptions import TelemetryConfigurationError
from .monitor import TelemetryMonitor
from .source import SampleSource
from .types import (
    DEFAULT_CHARGING_POLL_INTERVAL_SECONDS,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_IDLE_POLL_INTERVAL_SECONDS,
    DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
    MIN_HISTORY_CAPACITY,
    MIN_POLLING_INTERVAL_SECONDS,
)

logger = logging.getLogger(__name__)


def createTelemetryMonitorFromConfig(
    config: dict[str, Any],
    source: SampleSource,
) -> TelemetryMonitor:
    """
    Create a TelemetryMonitor from configuration.

    Args:
        config: Configuration dictionary with 'telemetry' section
        source: Sample source the monitor consumes

    Returns:
        Configured TelemetryMonitor instance

    Raises:
        TelemetryConfigurationError: If the configuration is invalid
    """
    validateTelemetryConfig(config)
    telemetryConfig = getTelemetryConfig(config)

    enabled = telemetryConfig.get('enabled', True)
    historyCapacity = telemetryConfig.get('historyCapacity', DEFAULT_HISTORY_CAPACITY)
    chargingPollIntervalSeconds = telemetryConfig.get(
        'chargingPollIntervalSeconds', DEFAULT_CHARGING_POLL_INTERVAL_SECONDS
    )
    idlePollIntervalSeconds = telemetryConfig.get(
        'idlePollIntervalSeconds', DEFAULT_IDLE_POLL_INTERVAL_SECONDS
    )
    minimumEstimateWindowSeconds = telemetryConfig.get(
        'minimumEstimateWindowSeconds', DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS
    )

    monitor = TelemetryMonitor(
        source=source,
        historyCapacity=historyCapacity,
        chargingPollIntervalSeconds=chargingPollIntervalSeconds,
        idlePollIntervalSeconds=idlePollIntervalSeconds,
        minimumEstimateWindowSeconds=minimumEstimateWindowSeconds,
        enabled=enabled,
    )

    logger.info(
        f"TelemetryMonitor created from config | enabled={enabled}, "
        f"history={historyCapacity}, charging={chargingPollIntervalSeconds}s, "
        f"idle={idlePollIntervalSeconds}s, window={minimumEstimateWindowSeconds}s"
    )

    return monitor


def getTelemetryConfig(config: dict[str, Any]) -> dict[str, Any]:
    """
    Get telemetry configuration section.

    Args:
        config: Configuration dictionary

    Returns:
        Telemetry configuration section
    """
    return config.get('telemetry', {})


def isTelemetryEnabled(config: dict[str, Any]) -> bool:
    """
    Check if telemetry monitoring is enabled in config.

    Args:
        config: Configuration dictionary

    Returns:
        True if telemetry monitoring is enabled
    """
    return config.get('telemetry', {}).get('enabled', True)


def getDefaultTelemetryConfig() -> dict[str, Any]:
    """
    Get default telemetry configuration.

    Returns:
        Dictionary with default telemetry settings
    """
    return {
        'enabled': True,
        'historyCapacity': DEFAULT_HISTORY_CAPACITY,
        'chargingPollIntervalSeconds': DEFAULT_CHARGING_POLL_INTERVAL_SECONDS,
        'idlePollIntervalSeconds': DEFAULT_IDLE_POLL_INTERVAL_SECONDS,
        'minimumEstimateWindowSeconds': DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
    }


def validateTelemetryConfig(config: dict[str, Any]) -> bool:
    """
    Validate telemetry configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid

    Raises:
        TelemetryConfigurationError: If configuration is invalid
    """
    telemetryConfig = getTelemetryConfig(config)

    historyCapacity = telemetryConfig.get('historyCapacity', DEFAULT_HISTORY_CAPACITY)
    chargingPollIntervalSeconds = telemetryConfig.get(
        'chargingPollIntervalSeconds', DEFAULT_CHARGING_POLL_INTERVAL_SECONDS
    )
    idlePollIntervalSeconds = telemetryConfig.get(
        'idlePollIntervalSeconds', DEFAULT_IDLE_POLL_INTERVAL_SECONDS
    )
    minimumEstimateWindowSeconds = telemetryConfig.get(
        'minimumEstimateWindowSeconds', DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS
    )

    if not isinstance(historyCapacity, int) or historyCapacity < MIN_HISTORY_CAPACITY:
        raise TelemetryConfigurationError(
            f"History capacity must be an integer of at least {MIN_HISTORY_CAPACITY}: "
            f"{historyCapacity}",
            details={'historyCapacity': historyCapacity}
        )

    if chargingPollIntervalSeconds < MIN_POLLING_INTERVAL_SECONDS:
        raise TelemetryConfigurationError(
            f"Charging poll interval must be at least 1 second: {chargingPollIntervalSeconds}",
            details={'chargingPollIntervalSeconds': chargingPollIntervalSeconds}
        )

    if idlePollIntervalSeconds < MIN_POLLING_INTERVAL_SECONDS:
        raise TelemetryConfigurationError(
            f"Idle poll interval must be at least 1 second: {idlePollIntervalSeconds}",
            details={'idlePollIntervalSeconds': idlePollIntervalSeconds}
        )

    if minimumEstimateWindowSeconds < 0:
        raise TelemetryConfigurationError(
            f"Minimum estimate window must not be negative: {minimumEstimateWindowSeconds}",
            details={'minimumEstimateWindowSeconds': minimumEstimateWindowSeconds}
        )

    return True
