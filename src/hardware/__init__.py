################################################################################
# File Name: __init__.py
# Purpose/Description: Hardware package initialization for Linux sysfs sources
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
Hardware package for reading real battery and thermal data.

This package provides:
- Platform detection (isLinux, findBatteryName, hasSysfsBattery, getPlatformInfo)
- Sysfs sample source (SysfsSampleSource)

All modules gracefully handle systems without a battery by returning safe
defaults or logging warnings.

Usage:
    from hardware import hasSysfsBattery, SysfsSampleSource

    if hasSysfsBattery():
        source = SysfsSampleSource()
"""

from .platform_utils import (
    findBatteryName,
    getPlatformInfo,
    hasSysfsBattery,
    isLinux,
)
from .sysfs_source import (
    DEFAULT_CRITICAL_CELSIUS,
    DEFAULT_FAIR_CELSIUS,
    DEFAULT_SERIOUS_CELSIUS,
    DEFAULT_WATCH_INTERVAL_SECONDS,
    SysfsSampleSource,
    createSysfsSourceFromConfig,
)

__all__ = [
    'isLinux',
    'findBatteryName',
    'hasSysfsBattery',
    'getPlatformInfo',
    'SysfsSampleSource',
    'createSysfsSourceFromConfig',
    'DEFAULT_FAIR_CELSIUS',
    'DEFAULT_SERIOUS_CELSIUS',
    'DEFAULT_CRITICAL_CELSIUS',
    'DEFAULT_WATCH_INTERVAL_SECONDS',
]
