################################################################################
# File Name: conftest.py
# Purpose/Description: Pytest fixtures and configuration
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Charge monitor fixtures (fake clock, fake timers)
# ================================================================================
################################################################################

"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all test files automatically.

Usage:
    def test_something(simulatedSource, syncMonitor, fakeClock):
        simulatedSource.setBatteryState(BatteryState.CHARGING)
        fakeClock.advance(120)
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import pytest

# Add src to path for imports
srcPath = Path(__file__).parent.parent / 'src'
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

from identity.provider import StaticIdentityProvider
from simulator.simulated_source import SimulatedSampleSource
from telemetry.monitor import TelemetryMonitor
from telemetry.types import BatteryState, ThermalLevel

TEST_DEVICE_ID = 'f47ac10b-58cc-4372-a567-0e02b2c3d479'
TEST_DEVICE_NAME = 'test-device'


# ================================================================================
# Time Fixtures
# ================================================================================

class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    """Stand-in for threading.Timer that fires only when told to."""

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.function()


class FakeTimerFactory:
    """Records every FakeTimer it creates."""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]

    def activeTimers(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]


@pytest.fixture
def fakeClock() -> FakeClock:
    """Provide a hand-advanced monotonic clock."""
    return FakeClock()


@pytest.fixture
def fakeTimerFactory() -> FakeTimerFactory:
    """Provide a timer factory whose timers never fire on their own."""
    return FakeTimerFactory()


# ================================================================================
# Component Fixtures
# ================================================================================

@pytest.fixture
def simulatedSource() -> SimulatedSampleSource:
    """
    Provide an unplugged simulated battery at 50%.

    Returns:
        SimulatedSampleSource with nominal thermal level
    """
    return SimulatedSampleSource(
        initialLevel=0.5,
        initialState=BatteryState.UNPLUGGED,
        initialThermal=ThermalLevel.NOMINAL,
    )


@pytest.fixture
def syncMonitor(
    simulatedSource: SimulatedSampleSource,
    fakeClock: FakeClock,
) -> Generator[TelemetryMonitor, None, None]:
    """
    Provide a synchronous monitor over the simulated source.

    Events are dispatched on the calling thread. The monitor is not started;
    it is stopped after the test.
    """
    monitor = TelemetryMonitor(
        simulatedSource,
        historyCapacity=5,
        chargingPollIntervalSeconds=10,
        idlePollIntervalSeconds=30,
        minimumEstimateWindowSeconds=60,
        synchronous=True,
        clock=fakeClock,
    )
    yield monitor
    monitor.stop()


@pytest.fixture
def staticIdentity() -> StaticIdentityProvider:
    """Provide a fixed device identity."""
    return StaticIdentityProvider(TEST_DEVICE_ID, TEST_DEVICE_NAME)


@pytest.fixture
def identityStorePath(tmp_path: Path) -> Path:
    """Path for a device identifier file that does not exist yet."""
    return tmp_path / 'identity' / 'device_id'


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture
def sampleConfig(tmp_path: Path) -> Dict[str, Any]:
    """
    Provide a complete charge monitor configuration.

    Returns:
        Dictionary with test configuration values
    """
    return {
        'application': {
            'name': 'TestChargeMonitor',
            'version': '1.0.0',
        },
        'logging': {
            'level': 'DEBUG',
            'maskIdentifiers': True,
        },
        'telemetry': {
            'enabled': True,
            'historyCapacity': 5,
            'chargingPollIntervalSeconds': 10,
            'idlePollIntervalSeconds': 30,
            'minimumEstimateWindowSeconds': 60,
            'statusLogIntervalSeconds': 60,
        },
        'source': {
            'type': 'simulated',
            'simulated': {
                'initialLevel': 0.5,
                'initialState': 'charging',
                'initialThermal': 'nominal',
                'chargeRatePerMinute': 0.01,
                'autoDrive': False,
            },
        },
        'identity': {
            'storePath': str(tmp_path / 'device_id'),
            'deviceName': TEST_DEVICE_NAME,
        },
        'sync': {
            'enabled': False,
            'debounceSeconds': 1.0,
            'firestore': {
                'projectId': 'test-project',
                'collection': 'devices',
                'apiKey': 'AIzaTestKey1234567890',
            },
        },
    }


@pytest.fixture
def minimalConfig() -> Dict[str, Any]:
    """
    Provide minimal configuration for testing defaults.

    Returns:
        Dictionary with minimal configuration
    """
    return {
        'application': {
            'name': 'MinimalApp'
        }
    }


# ================================================================================
# Environment Fixtures
# ================================================================================

@pytest.fixture
def envVars() -> Generator[Dict[str, str], None, None]:
    """
    Set up test environment variables.

    Yields:
        Dictionary of environment variables that were set

    Automatically cleans up after test.
    """
    testVars = {
        'FIRESTORE_PROJECT_ID': 'env-project',
        'FIRESTORE_API_KEY': 'AIzaEnvKey0987654321',
        'SYNC_ENABLED': 'true',
    }

    originalVars = {}
    for key in testVars:
        originalVars[key] = os.environ.get(key)
        os.environ[key] = testVars[key]

    yield testVars

    for key, value in originalVars.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def cleanEnv() -> Generator[None, None, None]:
    """
    Ensure clean environment with no test variables.

    Removes variables used by the config placeholders, restores after.
    """
    varsToRemove = [
        'FIRESTORE_PROJECT_ID', 'FIRESTORE_API_KEY', 'FIRESTORE_AUTH_TOKEN',
        'SYNC_ENABLED', 'LOG_LEVEL', 'CHARGE_SOURCE_TYPE',
        'TEST_VAR'  # Used by test_secrets_loader
    ]

    saved = {}
    for var in varsToRemove:
        saved[var] = os.environ.pop(var, None)

    yield

    for var, value in saved.items():
        os.environ.pop(var, None)
        if value is not None:
            os.environ[var] = value


# ================================================================================
# File System Fixtures
# ================================================================================

@pytest.fixture
def tempConfigFile(tmp_path: Path, sampleConfig: Dict[str, Any]) -> Path:
    """
    Create temporary config file for testing.

    Args:
        tmp_path: Pytest temp directory fixture
        sampleConfig: Sample configuration fixture

    Returns:
        Path to temporary config file
    """
    import json

    configFile = tmp_path / 'config.json'
    with open(configFile, 'w') as f:
        json.dump(sampleConfig, f)

    return configFile


@pytest.fixture
def fakeSysfs(tmp_path: Path) -> Dict[str, Path]:
    """
    Build a fake sysfs tree with one AC adapter, one battery and two zones.

    Returns:
        Dictionary with 'powerSupplyRoot', 'thermalRoot' and 'battery' paths
    """
    powerSupplyRoot = tmp_path / 'power_supply'
    thermalRoot = tmp_path / 'thermal'

    adapter = powerSupplyRoot / 'AC'
    adapter.mkdir(parents=True)
    (adapter / 'type').write_text('Mains\n')

    battery = powerSupplyRoot / 'BAT0'
    battery.mkdir()
    (battery / 'type').write_text('Battery\n')
    (battery / 'capacity').write_text('42\n')
    (battery / 'status').write_text('Charging\n')

    for index, milliC in enumerate((38000, 41500)):
        zone = thermalRoot / f'thermal_zone{index}'
        zone.mkdir(parents=True)
        (zone / 'temp').write_text(f'{milliC}\n')

    return {
        'powerSupplyRoot': powerSupplyRoot,
        'thermalRoot': thermalRoot,
        'battery': battery,
    }


# ================================================================================
# Utility Fixtures
# ================================================================================

@pytest.fixture
def assertNoLogs(caplog: pytest.LogCaptureFixture) -> Generator[None, None, None]:
    """
    Assert that no error logs were emitted during test.

    Usage:
        def test_something(assertNoLogs):
            # Test code here
            # Will fail if any ERROR logs are emitted
    """
    yield

    errors = [r for r in caplog.records if r.levelname == 'ERROR']
    assert len(errors) == 0, f"Unexpected error logs: {[r.message for r in errors]}"


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
