################################################################################
# File Name: orchestrator.py
# Purpose/Description: Charge monitor application orchestrator
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
Charge monitor orchestrator.

This module provides the ChargeMonitorOrchestrator class that manages the
lifecycle of the charge monitor components:
- Sample source (simulated or sysfs)
- Identity provider
- Debounced sync publisher
- Telemetry monitor

Components are started in dependency order and stopped in reverse. The
first SIGINT/SIGTERM requests a graceful shutdown; a second forces exit.

Usage:
    from orchestrator import createOrchestratorFromConfig

    orchestrator = createOrchestratorFromConfig(config, simulate=True)
    orchestrator.registerSignalHandlers()
    try:
        orchestrator.start()
        orchestrator.runLoop()
    finally:
        exitCode = orchestrator.stop()
        orchestrator.restoreSignalHandlers()
"""

import logging
import signal
import sys
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from common.error_handler import ErrorCollector
from hardware.sysfs_source import createSysfsSourceFromConfig
from identity.provider import IdentityProvider, createIdentityProviderFromConfig
from simulator.simulated_source import (
    DEFAULT_DRIVER_TICK_SECONDS,
    DEFAULT_TIME_SCALE,
    SimulatedSampleSource,
    createSimulatedSourceFromConfig,
)
from sync.helpers import createPublisherFromConfig
from sync.publisher import DebouncedPublisher
from telemetry.exceptions import TelemetryConfigurationError
from telemetry.helpers import createTelemetryMonitorFromConfig
from telemetry.monitor import TelemetryMonitor
from telemetry.source import SampleSource
from telemetry.types import DerivedState, ThermalLevel

logger = logging.getLogger(__name__)


# ================================================================================
# Constants
# ================================================================================

SOURCE_TYPE_SIMULATED = 'simulated'
SOURCE_TYPE_SYSFS = 'sysfs'

DEFAULT_STATUS_LOG_INTERVAL = 60.0
DEFAULT_LOOP_SLEEP_INTERVAL = 0.5

# Exit codes
EXIT_CODE_CLEAN = 0
EXIT_CODE_FORCED = 1
EXIT_CODE_ERROR = 2


class ShutdownState(Enum):
    """States for shutdown handling."""
    RUNNING = "running"
    SHUTDOWN_REQUESTED = "shutdown_requested"
    FORCE_EXIT = "force_exit"


class OrchestratorError(Exception):
    """Raised when the orchestrator cannot start its components."""

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message)
        self.component = component


# ================================================================================
# Source Factory
# ================================================================================

def createSampleSourceFromConfig(config: Dict[str, Any], simulate: bool = False) -> SampleSource:
    """
    Create the sample source named by 'source.type'.

    Args:
        config: Configuration dictionary with 'source' section
        simulate: Force the simulated source

    Returns:
        SimulatedSampleSource or SysfsSampleSource

    Raises:
        TelemetryConfigurationError: If the source type is unknown
    """
    sourceType = SOURCE_TYPE_SIMULATED if simulate else config.get('source', {}).get(
        'type', SOURCE_TYPE_SIMULATED
    )

    if sourceType == SOURCE_TYPE_SIMULATED:
        return createSimulatedSourceFromConfig(config)
    if sourceType == SOURCE_TYPE_SYSFS:
        return createSysfsSourceFromConfig(config)

    raise TelemetryConfigurationError(
        f"Unknown sample source type: {sourceType}",
        details={'type': sourceType}
    )


# ================================================================================
# ChargeMonitorOrchestrator Class
# ================================================================================

class ChargeMonitorOrchestrator:
    """
    Central orchestrator for the charge monitor.

    Startup Order:
    1. source
    2. identityProvider
    3. publisher
    4. monitor (publisher attached, then started)
    5. simulation driver (simulated source with autoDrive only)

    Shutdown Order (reverse):
    1. simulation driver
    2. monitor
    3. publisher (pending record flushed)
    4. source

    Example:
        orchestrator = ChargeMonitorOrchestrator(config, simulate=True)
        orchestrator.start()
        orchestrator.runLoop()
        orchestrator.stop()
    """

    def __init__(
        self,
        config: Dict[str, Any],
        simulate: bool = False,
        dryRun: bool = False,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Validated configuration dictionary
            simulate: Use the simulated sample source
            dryRun: Log sync records instead of writing them
        """
        self._config = config
        self._simulate = simulate
        self._dryRun = dryRun
        self._running = False
        self._shutdownState = ShutdownState.RUNNING
        self._exitCode = EXIT_CODE_CLEAN

        # Components
        self._source: Optional[SampleSource] = None
        self._identityProvider: Optional[IdentityProvider] = None
        self._publisher: Optional[DebouncedPublisher] = None
        self._monitor: Optional[TelemetryMonitor] = None

        telemetryConfig = config.get('telemetry', {})
        self._statusLogInterval = telemetryConfig.get(
            'statusLogIntervalSeconds', DEFAULT_STATUS_LOG_INTERVAL
        )
        self._loopSleepInterval = DEFAULT_LOOP_SLEEP_INTERVAL
        self._startTime: Optional[datetime] = None
        self._criticalAlertCount = 0

        # Signal handling
        self._originalSigintHandler: Any = None
        self._originalSigtermHandler: Any = None

    # ================================================================================
    # Properties
    # ================================================================================

    @property
    def source(self) -> Optional[SampleSource]:
        return self._source

    @property
    def identityProvider(self) -> Optional[IdentityProvider]:
        return self._identityProvider

    @property
    def publisher(self) -> Optional[DebouncedPublisher]:
        return self._publisher

    @property
    def monitor(self) -> Optional[TelemetryMonitor]:
        return self._monitor

    @property
    def exitCode(self) -> int:
        return self._exitCode

    @property
    def shutdownState(self) -> ShutdownState:
        return self._shutdownState

    def isRunning(self) -> bool:
        return self._running

    # ================================================================================
    # Signal Handling
    # ================================================================================

    def registerSignalHandlers(self) -> None:
        """
        Register SIGINT/SIGTERM handlers for graceful shutdown.

        First signal requests shutdown, second signal forces immediate exit.
        """
        self._originalSigintHandler = signal.signal(signal.SIGINT, self._handleShutdownSignal)
        if hasattr(signal, 'SIGTERM'):
            self._originalSigtermHandler = signal.signal(
                signal.SIGTERM, self._handleShutdownSignal
            )
        logger.debug("Signal handlers registered")

    def restoreSignalHandlers(self) -> None:
        """Restore the original signal handlers."""
        if self._originalSigintHandler is not None:
            signal.signal(signal.SIGINT, self._originalSigintHandler)
            self._originalSigintHandler = None
        if self._originalSigtermHandler is not None and hasattr(signal, 'SIGTERM'):
            signal.signal(signal.SIGTERM, self._originalSigtermHandler)
            self._originalSigtermHandler = None
        logger.debug("Signal handlers restored")

    def _handleShutdownSignal(self, signum: int, frame: Optional[Any]) -> None:
        try:
            signalName = signal.Signals(signum).name
        except ValueError:
            signalName = str(signum)

        if self._shutdownState == ShutdownState.SHUTDOWN_REQUESTED:
            logger.warning(f"Received second signal ({signalName}), forcing immediate exit")
            self._shutdownState = ShutdownState.FORCE_EXIT
            self._exitCode = EXIT_CODE_FORCED
            sys.exit(EXIT_CODE_FORCED)

        logger.info(f"Received signal {signalName}, initiating shutdown")
        self._shutdownState = ShutdownState.SHUTDOWN_REQUESTED

    def requestShutdown(self) -> None:
        """Ask runLoop() to exit after the current iteration."""
        if self._shutdownState == ShutdownState.RUNNING:
            self._shutdownState = ShutdownState.SHUTDOWN_REQUESTED

    # ================================================================================
    # Lifecycle
    # ================================================================================

    def start(self) -> None:
        """
        Create and start all components in dependency order.

        Raises:
            OrchestratorError: If a component fails to start; components
                already started are stopped again
        """
        logger.info("Starting ChargeMonitorOrchestrator...")
        startTime = time.time()
        component = 'source'

        try:
            self._source = createSampleSourceFromConfig(self._config, simulate=self._simulate)
            logger.info(f"Sample source created | type={type(self._source).__name__}")

            component = 'identityProvider'
            self._identityProvider = createIdentityProviderFromConfig(self._config)

            component = 'publisher'
            self._publisher = createPublisherFromConfig(
                self._config, self._identityProvider, dryRun=self._dryRun
            )

            component = 'monitor'
            self._monitor = createTelemetryMonitorFromConfig(self._config, self._source)
            self._publisher.attach(self._monitor)
            self._monitor.onStateChange(self._handleStateChange)
            self._monitor.onCriticalAlert(self._handleCriticalAlert)
            self._monitor.start()

            component = 'simulationDriver'
            self._startSimulationDriver()

        except KeyboardInterrupt:
            logger.warning("Startup aborted by user (Ctrl+C)")
            self._shutdownAllComponents()
            raise

        except Exception as e:
            logger.error(f"Failed to start {component}: {e}")
            self._shutdownAllComponents()
            raise OrchestratorError(f"Failed to start {component}: {e}", component) from e

        self._running = True
        self._startTime = datetime.now()
        logger.info(
            f"ChargeMonitorOrchestrator started | startup_time={time.time() - startTime:.2f}s"
        )

    def stop(self) -> int:
        """
        Stop all components in reverse order.

        Returns:
            Exit code: 0 for clean shutdown, non-zero for forced/error
        """
        if not self._running:
            logger.debug("Orchestrator not running, nothing to stop")
            return self._exitCode

        logger.info("Stopping ChargeMonitorOrchestrator...")
        startTime = time.time()

        if self._shutdownState == ShutdownState.FORCE_EXIT:
            logger.warning("Force exit requested, skipping graceful shutdown")
            self._running = False
            self._exitCode = EXIT_CODE_FORCED
            return self._exitCode

        if self._shutdownAllComponents() and self._exitCode == EXIT_CODE_CLEAN:
            self._exitCode = EXIT_CODE_ERROR
        self._running = False

        logger.info(
            f"ChargeMonitorOrchestrator stopped | "
            f"shutdown_time={time.time() - startTime:.2f}s | exit_code={self._exitCode}"
        )
        return self._exitCode

    def _startSimulationDriver(self) -> None:
        if not isinstance(self._source, SimulatedSampleSource):
            return

        simConfig = self._config.get('source', {}).get('simulated', {})
        if not simConfig.get('autoDrive', True):
            return

        self._source.startDriver(
            tickSeconds=simConfig.get('tickSeconds', DEFAULT_DRIVER_TICK_SECONDS),
            timeScale=simConfig.get('timeScale', DEFAULT_TIME_SCALE),
        )

    def _shutdownAllComponents(self) -> bool:
        """
        Stop whatever was started, in reverse order.

        Returns:
            True if any component failed to stop
        """
        collector = ErrorCollector()

        if isinstance(self._source, SimulatedSampleSource):
            try:
                self._source.stopDriver()
            except Exception as e:
                collector.add(e, component='simulationDriver')

        if self._monitor is not None:
            try:
                self._monitor.stop()
            except Exception as e:
                collector.add(e, component='monitor')

        if self._publisher is not None:
            try:
                self._publisher.close()
            except Exception as e:
                collector.add(e, component='publisher')

        closeSource = getattr(self._source, 'close', None)
        if closeSource is not None:
            try:
                closeSource()
            except Exception as e:
                collector.add(e, component='source')

        if collector.hasErrors():
            collector.report()
        return collector.hasErrors()

    # ================================================================================
    # Main Loop
    # ================================================================================

    def runLoop(self) -> None:
        """
        Run until a shutdown is requested, logging status periodically.

        Should be called after start() and before stop().
        """
        if not self._running:
            logger.warning("Cannot run loop - orchestrator not started")
            return

        logger.info(f"Entering main loop | status_interval={self._statusLogInterval}s")
        lastStatusTime = time.monotonic()

        try:
            while self._running and self._shutdownState == ShutdownState.RUNNING:
                try:
                    now = time.monotonic()
                    if now - lastStatusTime >= self._statusLogInterval:
                        self._logStatus()
                        lastStatusTime = now

                    time.sleep(self._loopSleepInterval)

                except Exception as e:
                    logger.error(f"Error in main loop iteration: {e}", exc_info=True)
                    time.sleep(self._loopSleepInterval)

        except KeyboardInterrupt:
            logger.info("Main loop interrupted by user")

        finally:
            self._logStatus()
            if self._startTime is not None:
                uptime = (datetime.now() - self._startTime).total_seconds()
                logger.info(f"Main loop exited | uptime={uptime:.1f}s")

    def _logStatus(self) -> None:
        if self._monitor is None:
            return
        state = self._monitor.getDerivedState()
        logger.info(
            f"Status | level={state.batteryLevel:.0%}, state={state.batteryState.value}, "
            f"estimate={state.estimatedTimeToFull}, thermal={state.thermalStateName}, "
            f"alert={state.criticalAlertActive}"
        )

    # ================================================================================
    # Component Callbacks
    # ================================================================================

    def _handleStateChange(self, state: DerivedState) -> None:
        logger.debug(
            f"Derived state changed | level={state.batteryLevel:.3f}, "
            f"estimate={state.estimatedTimeToFull}"
        )

    def _handleCriticalAlert(self, thermalLevel: ThermalLevel) -> None:
        self._criticalAlertCount += 1
        logger.warning(
            f"CRITICAL THERMAL ALERT | thermal={thermalLevel.value} - "
            f"device is overheating, unplug the charger"
        )

    def acknowledgeCriticalAlert(self) -> bool:
        """Clear the monitor's latched thermal alert."""
        if self._monitor is None:
            return False
        return self._monitor.acknowledgeCriticalAlert()

    # ================================================================================
    # Status
    # ================================================================================

    def getStatus(self) -> Dict[str, Any]:
        """
        Get orchestrator and component status.

        Returns:
            Dictionary with status information
        """
        uptime = (
            (datetime.now() - self._startTime).total_seconds()
            if self._startTime else 0.0
        )
        sourceStatus = getattr(self._source, 'getStatus', None)

        return {
            'running': self._running,
            'shutdownState': self._shutdownState.value,
            'simulate': self._simulate,
            'dryRun': self._dryRun,
            'uptimeSeconds': round(uptime, 1),
            'criticalAlerts': self._criticalAlertCount,
            'source': sourceStatus() if sourceStatus else None,
            'monitor': self._monitor.getStatus() if self._monitor else None,
            'publisher': self._publisher.getStatus() if self._publisher else None,
        }


def createOrchestratorFromConfig(
    config: Dict[str, Any],
    simulate: bool = False,
    dryRun: bool = False,
) -> ChargeMonitorOrchestrator:
    """
    Create a ChargeMonitorOrchestrator from configuration.

    Args:
        config: Validated configuration dictionary
        simulate: Use the simulated sample source
        dryRun: Log sync records instead of writing them

    Returns:
        Configured orchestrator (not started)
    """
    return ChargeMonitorOrchestrator(config=config, simulate=simulate, dryRun=dryRun)
