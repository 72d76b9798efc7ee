################################################################################
# File Name: platform_utils.py
# Purpose/Description: Platform detection utilities for battery-backed Linux hosts
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
Platform detection utilities for battery-backed Linux hosts.

This module provides functions to detect whether the code is running on a
Linux system that exposes a battery through sysfs, and to gather platform
information. It handles graceful fallback on systems without one.

Usage:
    from hardware.platform_utils import findBatteryName, getPlatformInfo

    batteryName = findBatteryName()
    if batteryName is None:
        # Fall back to the simulated source
        ...

    info = getPlatformInfo()
    print(f"Running on {info['os']} ({info['architecture']})")
"""

import logging
import os
import platform
from typing import Any

logger = logging.getLogger(__name__)

# Kernel power supply class directory
POWER_SUPPLY_ROOT = '/sys/class/power_supply'

# Kernel thermal class directory
THERMAL_ROOT = '/sys/class/thermal'

# Value of power_supply/<name>/type for batteries
BATTERY_SUPPLY_TYPE = 'Battery'


def isLinux() -> bool:
    """True when running on Linux."""
    return platform.system() == 'Linux'


def findBatteryName(powerSupplyRoot: str = POWER_SUPPLY_ROOT) -> str | None:
    """
    Find the first power supply of type Battery.

    Args:
        powerSupplyRoot: Power supply class directory

    Returns:
        Supply name (e.g., 'BAT0') or None if no battery is exposed

    Example:
        >>> findBatteryName()
        'BAT0'
    """
    try:
        if not os.path.isdir(powerSupplyRoot):
            return None

        for name in sorted(os.listdir(powerSupplyRoot)):
            typePath = os.path.join(powerSupplyRoot, name, 'type')
            try:
                with open(typePath) as f:
                    supplyType = f.read().strip()
            except OSError:
                continue

            if supplyType == BATTERY_SUPPLY_TYPE:
                logger.debug(f"Detected battery power supply: {name}")
                return name

        return None

    except OSError as e:
        logger.debug(f"Could not scan power supplies: {e}")
        return None


def hasSysfsBattery(powerSupplyRoot: str = POWER_SUPPLY_ROOT) -> bool:
    """
    Detect whether a battery is exposed through sysfs.

    Returns False gracefully on non-Linux systems.
    """
    if not isLinux():
        return False
    return findBatteryName(powerSupplyRoot) is not None


def getPlatformInfo() -> dict[str, Any]:
    """
    Get platform information.

    Returns:
        Dictionary with keys:
            - os: Operating system name (e.g., 'Linux', 'Darwin')
            - architecture: CPU architecture (e.g., 'aarch64', 'x86_64')
            - hostname: Network node name
            - batteryName: sysfs battery name or None
            - hasBattery: Boolean indicating a sysfs battery is present
    """
    try:
        batteryName = findBatteryName() if isLinux() else None

        return {
            'os': platform.system(),
            'architecture': platform.machine(),
            'hostname': platform.node(),
            'batteryName': batteryName,
            'hasBattery': batteryName is not None,
        }

    except Exception as e:
        # Graceful fallback on any error
        logger.warning(f"Error getting platform info: {e}")
        return {
            'os': 'Unknown',
            'architecture': 'Unknown',
            'hostname': '',
            'batteryName': None,
            'hasBattery': False,
        }
