################################################################################
# File Name: simulated_source.py
# Purpose/Description: Simulated battery/thermal sample source
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
Simulated sample source for testing without battery hardware.

Provides:
- Settable battery level, charge state and thermal level that emit events
- Physics-free charge model: step() advances the level at a fixed rate
- Optional background driver thread for --simulate runs

Usage:
    from simulator.simulated_source import SimulatedSampleSource

    source = SimulatedSampleSource(initialLevel=0.5, chargeRatePerMinute=0.01)
    source.setBatteryState(BatteryState.CHARGING)
    source.step(60)      # level now 0.51, LEVEL_CHANGED emitted

    # Background driver (simulated time runs at real time * timeScale)
    source.startDriver(tickSeconds=1.0, timeScale=60.0)
    ...
    source.stopDriver()
"""

import logging
import threading
from typing import Any, Dict, Optional

from telemetry.exceptions import TelemetryConfigurationError
from telemetry.source import SampleSource
from telemetry.types import (
    FULL_CHARGE_LEVEL,
    BatteryState,
    TelemetryEventType,
    ThermalLevel,
)

logger = logging.getLogger(__name__)

# ================================================================================
# Defaults
# ================================================================================

DEFAULT_INITIAL_LEVEL = 0.5
DEFAULT_CHARGE_RATE_PER_MINUTE = 0.01
DEFAULT_DRAIN_RATE_PER_MINUTE = 0.0
DEFAULT_DRIVER_TICK_SECONDS = 1.0
DEFAULT_TIME_SCALE = 1.0

SECONDS_PER_MINUTE = 60.0


class SimulatedSampleSource(SampleSource):
    """
    In-memory sample source.

    Setters emit the matching event only when the value actually changes.
    A failure can be injected per reader with setReadFailure(), which makes
    that reader raise the given exception.

    Example:
        source = SimulatedSampleSource()
        monitor = TelemetryMonitor(source)
        monitor.start()
        source.setBatteryState(BatteryState.CHARGING)
    """

    def __init__(
        self,
        initialLevel: float = DEFAULT_INITIAL_LEVEL,
        initialState: BatteryState = BatteryState.UNPLUGGED,
        initialThermal: ThermalLevel = ThermalLevel.NOMINAL,
        chargeRatePerMinute: float = DEFAULT_CHARGE_RATE_PER_MINUTE,
        drainRatePerMinute: float = DEFAULT_DRAIN_RATE_PER_MINUTE,
    ):
        """
        Initialize the simulated source.

        Args:
            initialLevel: Starting charge fraction (negative means unavailable)
            initialState: Starting charge state
            initialThermal: Starting thermal level
            chargeRatePerMinute: Level gained per simulated minute while charging
            drainRatePerMinute: Level lost per simulated minute while unplugged

        Raises:
            TelemetryConfigurationError: If a rate is negative
        """
        super().__init__()

        if chargeRatePerMinute < 0 or drainRatePerMinute < 0:
            raise TelemetryConfigurationError(
                "Simulated charge and drain rates must not be negative",
                details={
                    'chargeRatePerMinute': chargeRatePerMinute,
                    'drainRatePerMinute': drainRatePerMinute,
                }
            )

        self._level = initialLevel
        self._state = initialState
        self._thermal = initialThermal
        self._chargeRatePerMinute = chargeRatePerMinute
        self._drainRatePerMinute = drainRatePerMinute
        self._readFailures: Dict[str, Exception] = {}
        self._lock = threading.Lock()

        # Driver thread
        self._driverThread: Optional[threading.Thread] = None
        self._driverStopEvent = threading.Event()

    # ================================================================================
    # Readers
    # ================================================================================

    def getBatteryLevel(self) -> float:
        self._raiseInjected('level')
        with self._lock:
            return self._level

    def getBatteryState(self) -> BatteryState:
        self._raiseInjected('state')
        with self._lock:
            return self._state

    def getThermalLevel(self) -> ThermalLevel:
        self._raiseInjected('thermal')
        with self._lock:
            return self._thermal

    def _raiseInjected(self, reader: str) -> None:
        error = self._readFailures.get(reader)
        if error is not None:
            raise error

    # ================================================================================
    # Setters
    # ================================================================================

    def setBatteryLevel(self, level: float) -> None:
        """
        Set the battery level and emit LEVEL_CHANGED.

        Args:
            level: Charge fraction, or negative for unavailable
        """
        with self._lock:
            changed = level != self._level
            self._level = level
        if changed:
            self._emit(TelemetryEventType.LEVEL_CHANGED)

    def setBatteryState(self, state: BatteryState) -> None:
        """
        Set the charge state and emit CHARGE_STATE_CHANGED.

        Args:
            state: New charge state
        """
        with self._lock:
            changed = state != self._state
            self._state = state
        if changed:
            logger.info(f"Simulated battery state: {state.value}")
            self._emit(TelemetryEventType.CHARGE_STATE_CHANGED)

    def setThermalLevel(self, thermal: ThermalLevel) -> None:
        """
        Set the thermal level and emit THERMAL_CHANGED.

        Args:
            thermal: New thermal level
        """
        with self._lock:
            changed = thermal != self._thermal
            self._thermal = thermal
        if changed:
            logger.info(f"Simulated thermal level: {thermal.value}")
            self._emit(TelemetryEventType.THERMAL_CHANGED)

    def setReadFailure(self, reader: str, error: Optional[Exception]) -> None:
        """
        Inject (or clear) a read failure.

        Args:
            reader: 'level', 'state' or 'thermal'
            error: Exception to raise, or None to clear
        """
        if reader not in ('level', 'state', 'thermal'):
            raise ValueError(f"Unknown reader: {reader}")
        if error is None:
            self._readFailures.pop(reader, None)
        else:
            self._readFailures[reader] = error

    # ================================================================================
    # Simulation
    # ================================================================================

    def step(self, elapsedSeconds: float) -> None:
        """
        Advance the simulation.

        While charging the level rises at chargeRatePerMinute; at 1.0 the
        state flips to FULL. While unplugged it falls at drainRatePerMinute.

        Args:
            elapsedSeconds: Simulated seconds since the last step
        """
        if elapsedSeconds <= 0:
            return

        with self._lock:
            if self._level < 0:
                return
            state = self._state
            level = self._level

        minutes = elapsedSeconds / SECONDS_PER_MINUTE

        if state == BatteryState.CHARGING:
            newLevel = min(FULL_CHARGE_LEVEL, level + self._chargeRatePerMinute * minutes)
            self.setBatteryLevel(newLevel)
            if newLevel >= FULL_CHARGE_LEVEL:
                self.setBatteryState(BatteryState.FULL)
        elif state == BatteryState.UNPLUGGED and self._drainRatePerMinute > 0:
            self.setBatteryLevel(max(0.0, level - self._drainRatePerMinute * minutes))

    def startDriver(
        self,
        tickSeconds: float = DEFAULT_DRIVER_TICK_SECONDS,
        timeScale: float = DEFAULT_TIME_SCALE,
    ) -> None:
        """
        Start a background thread that calls step() periodically.

        Args:
            tickSeconds: Real seconds between steps
            timeScale: Simulated seconds per real second

        Raises:
            RuntimeError: If the driver is already running
        """
        if self.isDriverRunning:
            raise RuntimeError("Simulation driver is already running")

        self._driverStopEvent.clear()
        self._driverThread = threading.Thread(
            target=self._driverLoop,
            args=(tickSeconds, timeScale),
            name="SimulatedSourceDriver",
            daemon=True,
        )
        self._driverThread.start()
        logger.info(f"Simulation driver started | tick={tickSeconds}s, timeScale={timeScale}x")

    def stopDriver(self) -> None:
        """Stop the driver thread. Safe to call when it is not running."""
        if self._driverThread is None:
            return

        self._driverStopEvent.set()
        if self._driverThread.is_alive():
            self._driverThread.join(timeout=5.0)
        self._driverThread = None
        logger.info("Simulation driver stopped")

    @property
    def isDriverRunning(self) -> bool:
        return self._driverThread is not None and self._driverThread.is_alive()

    def _driverLoop(self, tickSeconds: float, timeScale: float) -> None:
        while not self._driverStopEvent.wait(timeout=tickSeconds):
            try:
                self.step(tickSeconds * timeScale)
            except Exception as e:
                logger.error(f"Error in simulation step: {e}")

    def getStatus(self) -> Dict[str, Any]:
        """Current simulated values."""
        with self._lock:
            return {
                'level': self._level,
                'state': self._state.value,
                'thermal': self._thermal.value,
                'chargeRatePerMinute': self._chargeRatePerMinute,
                'drainRatePerMinute': self._drainRatePerMinute,
                'driverRunning': self.isDriverRunning,
                'monitoringEnabled': self.monitoringEnabled,
            }


def createSimulatedSourceFromConfig(config: Dict[str, Any]) -> SimulatedSampleSource:
    """
    Create a SimulatedSampleSource from configuration.

    Args:
        config: Configuration dictionary with 'source.simulated' section

    Returns:
        Configured SimulatedSampleSource
    """
    simConfig = config.get('source', {}).get('simulated', {})

    initialState = BatteryState(simConfig.get('initialState', BatteryState.UNPLUGGED.value))
    initialThermal = ThermalLevel(simConfig.get('initialThermal', ThermalLevel.NOMINAL.value))

    return SimulatedSampleSource(
        initialLevel=simConfig.get('initialLevel', DEFAULT_INITIAL_LEVEL),
        initialState=initialState,
        initialThermal=initialThermal,
        chargeRatePerMinute=simConfig.get('chargeRatePerMinute', DEFAULT_CHARGE_RATE_PER_MINUTE),
        drainRatePerMinute=simConfig.get('drainRatePerMinute', DEFAULT_DRAIN_RATE_PER_MINUTE),
    )
