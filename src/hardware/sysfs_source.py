################################################################################
# File Name: sysfs_source.py
# Purpose/Description: Linux sysfs battery and thermal sample source
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
Linux sysfs sample source.

Reads the battery from the kernel power supply class and the hottest thermal
zone from the thermal class:

    /sys/class/power_supply/<battery>/capacity   integer percent
    /sys/class/power_supply/<battery>/status     Charging, Discharging, Full, ...
    /sys/class/thermal/thermal_zone*/temp        millidegrees Celsius

The kernel does not push changes to user space through these files, so a
watcher thread re-reads them while monitoring is enabled and emits an event
for each value that changed.

Usage:
    from hardware.sysfs_source import SysfsSampleSource

    source = SysfsSampleSource(batteryName='BAT0')
    level = source.getBatteryLevel()      # 0.0 - 1.0
    state = source.getBatteryState()      # BatteryState.CHARGING
"""

import glob
import logging
import os
import threading
from typing import Any, Callable, Dict, Optional

from telemetry.exceptions import SampleSourceError, TelemetryConfigurationError
from telemetry.source import SampleSource
from telemetry.types import (
    UNAVAILABLE_LEVEL,
    BatteryState,
    TelemetryEventType,
    ThermalLevel,
)

from .platform_utils import POWER_SUPPLY_ROOT, THERMAL_ROOT, findBatteryName

logger = logging.getLogger(__name__)

# ================================================================================
# Constants
# ================================================================================

DEFAULT_FAIR_CELSIUS = 45.0
DEFAULT_SERIOUS_CELSIUS = 60.0
DEFAULT_CRITICAL_CELSIUS = 80.0
DEFAULT_WATCH_INTERVAL_SECONDS = 5.0

MILLIDEGREES_PER_DEGREE = 1000.0
PERCENT = 100.0

# power_supply status strings
STATUS_MAP = {
    'Charging': BatteryState.CHARGING,
    'Full': BatteryState.FULL,
    'Discharging': BatteryState.UNPLUGGED,
    'Not charging': BatteryState.UNPLUGGED,
}


class SysfsSampleSource(SampleSource):
    """
    Sample source backed by Linux sysfs.

    A missing battery directory reads as an unavailable level; malformed
    contents raise SampleSourceError.

    Example:
        source = SysfsSampleSource()
        monitor = TelemetryMonitor(source)
        monitor.start()     # starts the watcher thread
    """

    def __init__(
        self,
        batteryName: Optional[str] = None,
        powerSupplyRoot: str = POWER_SUPPLY_ROOT,
        thermalRoot: str = THERMAL_ROOT,
        fairCelsius: float = DEFAULT_FAIR_CELSIUS,
        seriousCelsius: float = DEFAULT_SERIOUS_CELSIUS,
        criticalCelsius: float = DEFAULT_CRITICAL_CELSIUS,
        watchIntervalSeconds: float = DEFAULT_WATCH_INTERVAL_SECONDS,
    ):
        """
        Initialize the sysfs source.

        Args:
            batteryName: power_supply entry to read (auto-detected when None)
            powerSupplyRoot: Power supply class directory
            thermalRoot: Thermal class directory
            fairCelsius: Temperature at which the level becomes FAIR
            seriousCelsius: Temperature at which the level becomes SERIOUS
            criticalCelsius: Temperature at which the level becomes CRITICAL
            watchIntervalSeconds: Seconds between watcher reads

        Raises:
            TelemetryConfigurationError: If thresholds are not ascending or
                the watch interval is not positive
        """
        super().__init__()

        if not fairCelsius < seriousCelsius < criticalCelsius:
            raise TelemetryConfigurationError(
                "Thermal thresholds must be ascending (fair < serious < critical)",
                details={
                    'fairCelsius': fairCelsius,
                    'seriousCelsius': seriousCelsius,
                    'criticalCelsius': criticalCelsius,
                }
            )
        if watchIntervalSeconds <= 0:
            raise TelemetryConfigurationError(
                "Watch interval must be positive",
                details={'watchIntervalSeconds': watchIntervalSeconds}
            )

        self._powerSupplyRoot = powerSupplyRoot
        self._thermalRoot = thermalRoot
        self._batteryName = batteryName or findBatteryName(powerSupplyRoot)
        self._fairCelsius = fairCelsius
        self._seriousCelsius = seriousCelsius
        self._criticalCelsius = criticalCelsius
        self._watchIntervalSeconds = watchIntervalSeconds

        # Watcher state
        self._watchThread: Optional[threading.Thread] = None
        self._stopEvent = threading.Event()
        self._lastLevel: Optional[float] = None
        self._lastState: Optional[BatteryState] = None
        self._lastThermal: Optional[ThermalLevel] = None

        if self._batteryName is None:
            logger.warning(f"No battery found under {powerSupplyRoot}")
        else:
            logger.debug(
                f"SysfsSampleSource initialized: battery={self._batteryName}, "
                f"thresholds={fairCelsius}/{seriousCelsius}/{criticalCelsius}C"
            )

    # ================================================================================
    # Readers
    # ================================================================================

    def getBatteryLevel(self) -> float:
        """
        Read the battery capacity as a fraction.

        Returns:
            Charge fraction in [0, 1], or -1.0 if no battery is exposed

        Raises:
            SampleSourceError: If the capacity file is malformed
        """
        raw = self._readBatteryAttribute('capacity')
        if raw is None:
            return UNAVAILABLE_LEVEL

        try:
            percent = float(raw)
        except ValueError as e:
            raise SampleSourceError(
                f"Malformed battery capacity: {raw!r}",
                details={'battery': self._batteryName}
            ) from e

        return max(0.0, min(percent, PERCENT)) / PERCENT

    def getBatteryState(self) -> BatteryState:
        """Read the battery status, UNKNOWN for unrecognized values."""
        raw = self._readBatteryAttribute('status')
        if raw is None:
            return BatteryState.UNKNOWN
        return STATUS_MAP.get(raw, BatteryState.UNKNOWN)

    def getThermalLevel(self) -> ThermalLevel:
        """
        Map the hottest thermal zone to a ThermalLevel.

        Raises:
            SampleSourceError: If no thermal zone can be read
        """
        return self.classifyTemperature(self.readMaxTemperature())

    def readMaxTemperature(self) -> float:
        """
        Read the hottest thermal zone.

        Returns:
            Temperature in degrees Celsius

        Raises:
            SampleSourceError: If no thermal zone can be read
        """
        temperatures = []
        for path in sorted(glob.glob(os.path.join(self._thermalRoot, 'thermal_zone*', 'temp'))):
            try:
                with open(path) as f:
                    temperatures.append(float(f.read().strip()) / MILLIDEGREES_PER_DEGREE)
            except (OSError, ValueError) as e:
                logger.debug(f"Skipping thermal zone {path}: {e}")

        if not temperatures:
            raise SampleSourceError(
                "No readable thermal zones",
                details={'thermalRoot': self._thermalRoot}
            )

        return max(temperatures)

    def classifyTemperature(self, celsius: float) -> ThermalLevel:
        """
        Map a temperature to a ThermalLevel using the configured thresholds.

        Args:
            celsius: Temperature in degrees Celsius
        """
        if celsius >= self._criticalCelsius:
            return ThermalLevel.CRITICAL
        if celsius >= self._seriousCelsius:
            return ThermalLevel.SERIOUS
        if celsius >= self._fairCelsius:
            return ThermalLevel.FAIR
        return ThermalLevel.NOMINAL

    def _readBatteryAttribute(self, attribute: str) -> Optional[str]:
        """
        Read one battery attribute file.

        Returns:
            Stripped contents, or None if no battery is exposed

        Raises:
            SampleSourceError: If the file exists but cannot be read
        """
        if self._batteryName is None:
            return None

        path = os.path.join(self._powerSupplyRoot, self._batteryName, attribute)
        if not os.path.exists(path):
            return None

        try:
            with open(path) as f:
                return f.read().strip()
        except OSError as e:
            raise SampleSourceError(
                f"Failed to read {path}: {e}",
                details={'path': path}
            ) from e

    # ================================================================================
    # Watcher
    # ================================================================================

    def setMonitoringEnabled(self, enabled: bool) -> None:
        """Start or stop the watcher thread with monitoring."""
        super().setMonitoringEnabled(enabled)
        if enabled:
            self._startWatcher()
        else:
            self._stopWatcher()

    def _startWatcher(self) -> None:
        if self._watchThread is not None and self._watchThread.is_alive():
            return

        self._lastLevel = self._safeRead(self.getBatteryLevel)
        self._lastState = self._safeRead(self.getBatteryState)
        self._lastThermal = self._safeRead(self.getThermalLevel)

        self._stopEvent.clear()
        self._watchThread = threading.Thread(
            target=self._watchLoop,
            name="SysfsSourceWatcher",
            daemon=True,
        )
        self._watchThread.start()
        logger.info(f"Sysfs watcher started with interval={self._watchIntervalSeconds}s")

    def _stopWatcher(self) -> None:
        if self._watchThread is None:
            return

        self._stopEvent.set()
        if self._watchThread.is_alive() and self._watchThread is not threading.current_thread():
            self._watchThread.join(timeout=5.0)
        self._watchThread = None
        logger.info("Sysfs watcher stopped")

    def _watchLoop(self) -> None:
        """Background watcher loop."""
        while not self._stopEvent.wait(timeout=self._watchIntervalSeconds):
            self.checkForChanges()

    def checkForChanges(self) -> None:
        """
        Re-read every value and emit an event for each one that changed.

        Called by the watcher thread; public so it can be driven directly.
        """
        state = self._safeRead(self.getBatteryState)
        if state is not None and state != self._lastState:
            self._lastState = state
            self._emit(TelemetryEventType.CHARGE_STATE_CHANGED)

        level = self._safeRead(self.getBatteryLevel)
        if level is not None and level != self._lastLevel:
            self._lastLevel = level
            self._emit(TelemetryEventType.LEVEL_CHANGED)

        thermal = self._safeRead(self.getThermalLevel)
        if thermal is not None and thermal != self._lastThermal:
            self._lastThermal = thermal
            self._emit(TelemetryEventType.THERMAL_CHANGED)

    def _safeRead(self, reader: Callable[[], Any]) -> Any:
        try:
            return reader()
        except SampleSourceError as e:
            logger.debug(f"Watcher read failed: {e}")
            return None

    # ================================================================================
    # Properties
    # ================================================================================

    @property
    def batteryName(self) -> Optional[str]:
        return self._batteryName

    @property
    def isWatching(self) -> bool:
        return self._watchThread is not None and self._watchThread.is_alive()

    def getStatus(self) -> Dict[str, Any]:
        """Source configuration and watcher state."""
        return {
            'batteryName': self._batteryName,
            'powerSupplyRoot': self._powerSupplyRoot,
            'thermalRoot': self._thermalRoot,
            'thresholds': {
                'fair': self._fairCelsius,
                'serious': self._seriousCelsius,
                'critical': self._criticalCelsius,
            },
            'watchIntervalSeconds': self._watchIntervalSeconds,
            'watching': self.isWatching,
            'monitoringEnabled': self.monitoringEnabled,
        }

    def close(self) -> None:
        """Stop the watcher thread."""
        self._stopWatcher()

    def __enter__(self) -> 'SysfsSampleSource':
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - stop the watcher."""
        self.close()


def createSysfsSourceFromConfig(config: Dict[str, Any]) -> SysfsSampleSource:
    """
    Create a SysfsSampleSource from configuration.

    Args:
        config: Configuration dictionary with 'source.sysfs' section

    Returns:
        Configured SysfsSampleSource
    """
    sysfsConfig = config.get('source', {}).get('sysfs', {})
    thresholds = sysfsConfig.get('thermalThresholdsCelsius', {})

    return SysfsSampleSource(
        batteryName=sysfsConfig.get('batteryName'),
        powerSupplyRoot=sysfsConfig.get('powerSupplyRoot', POWER_SUPPLY_ROOT),
        thermalRoot=sysfsConfig.get('thermalRoot', THERMAL_ROOT),
        fairCelsius=thresholds.get('fair', DEFAULT_FAIR_CELSIUS),
        seriousCelsius=thresholds.get('serious', DEFAULT_SERIOUS_CELSIUS),
        criticalCelsius=thresholds.get('critical', DEFAULT_CRITICAL_CELSIUS),
        watchIntervalSeconds=sysfsConfig.get(
            'watchIntervalSeconds', DEFAULT_WATCH_INTERVAL_SECONDS
        ),
    )
