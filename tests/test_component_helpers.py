################################################################################
# File Name: test_component_helpers.py
# Purpose/Description: Tests for telemetry and sync config helpers
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
Tests for the telemetry.helpers and sync.helpers factory functions.

Run with:
    pytest tests/test_component_helpers.py -v
"""

import pytest

from sync.exceptions import SyncConfigurationError
from sync.helpers import (
    createPublisherFromConfig,
    createSinkFromConfig,
    getDefaultSyncConfig,
    isSyncEnabled,
    validateSyncConfig,
)
from sync.sinks import FirestoreRestSink, LoggingSink
from telemetry.exceptions import TelemetryConfigurationError
from telemetry.helpers import (
    createTelemetryMonitorFromConfig,
    getDefaultTelemetryConfig,
    isTelemetryEnabled,
    validateTelemetryConfig,
)


# ================================================================================
# Telemetry Helpers
# ================================================================================

class TestTelemetryHelpers:
    """Tests for telemetry config helpers."""

    def test_getDefaultTelemetryConfig_values(self):
        defaults = getDefaultTelemetryConfig()

        assert defaults['historyCapacity'] == 5
        assert defaults['chargingPollIntervalSeconds'] == 10
        assert defaults['idlePollIntervalSeconds'] == 30
        assert defaults['minimumEstimateWindowSeconds'] == 60

    def test_isTelemetryEnabled_missingSection_defaultsTrue(self):
        assert isTelemetryEnabled({}) is True

    def test_validateTelemetryConfig_defaults_valid(self):
        assert validateTelemetryConfig({'telemetry': getDefaultTelemetryConfig()}) is True

    @pytest.mark.parametrize('key, value', [
        ('historyCapacity', 1),
        ('historyCapacity', 2.5),
        ('chargingPollIntervalSeconds', 0),
        ('idlePollIntervalSeconds', 0.5),
        ('minimumEstimateWindowSeconds', -1),
    ])
    def test_validateTelemetryConfig_invalid_raisesError(self, key, value):
        with pytest.raises(TelemetryConfigurationError):
            validateTelemetryConfig({'telemetry': {key: value}})

    def test_createTelemetryMonitorFromConfig_usesSettings(self, sampleConfig, simulatedSource):
        """
        Given: A config with a history capacity of 3
        When: A monitor is created
        Then: It uses the configured capacity and is not started
        """
        sampleConfig['telemetry']['historyCapacity'] = 3

        monitor = createTelemetryMonitorFromConfig(sampleConfig, simulatedSource)

        status = monitor.getStatus()
        assert status['historyCapacity'] == 3
        assert status['chargingPollIntervalSeconds'] == 10
        assert monitor.isRunning() is False

    def test_createTelemetryMonitorFromConfig_disabled_doesNotStart(self, sampleConfig, simulatedSource):
        sampleConfig['telemetry']['enabled'] = False

        monitor = createTelemetryMonitorFromConfig(sampleConfig, simulatedSource)

        assert monitor.start() is False


# ================================================================================
# Sync Helpers
# ================================================================================

class TestSyncHelpers:
    """Tests for sync config helpers."""

    def test_isSyncEnabled_missingSection_defaultsFalse(self):
        assert isSyncEnabled({}) is False

    def test_getDefaultSyncConfig_disabled(self):
        defaults = getDefaultSyncConfig()

        assert defaults['enabled'] is False
        assert defaults['debounceSeconds'] == 1.0
        assert defaults['firestore']['collection'] == 'devices'

    def test_validateSyncConfig_enabledWithoutProject_raisesError(self):
        with pytest.raises(SyncConfigurationError):
            validateSyncConfig({'sync': {'enabled': True, 'firestore': {}}})

    def test_validateSyncConfig_disabledWithoutProject_valid(self):
        assert validateSyncConfig({'sync': {'enabled': False}}) is True

    def test_validateSyncConfig_negativeDebounce_raisesError(self):
        with pytest.raises(SyncConfigurationError):
            validateSyncConfig({'sync': {'debounceSeconds': -0.5}})

    def test_createSinkFromConfig_disabled_returnsLoggingSink(self, sampleConfig):
        assert isinstance(createSinkFromConfig(sampleConfig), LoggingSink)

    def test_createSinkFromConfig_enabled_returnsFirestoreSink(self, sampleConfig):
        sampleConfig['sync']['enabled'] = True

        sink = createSinkFromConfig(sampleConfig)

        try:
            assert isinstance(sink, FirestoreRestSink)
            assert '/projects/test-project/' in sink.documentUrl('x')
        finally:
            sink.close()

    def test_createSinkFromConfig_dryRun_returnsLoggingSink(self, sampleConfig):
        """
        Given: Sync enabled
        When: The sink is created for a dry run
        Then: The logging sink is used
        """
        sampleConfig['sync']['enabled'] = True

        assert isinstance(createSinkFromConfig(sampleConfig, dryRun=True), LoggingSink)

    def test_createPublisherFromConfig_usesDebounce(self, sampleConfig, staticIdentity):
        sampleConfig['sync']['debounceSeconds'] = 2.5

        publisher = createPublisherFromConfig(sampleConfig, staticIdentity)

        assert publisher.debounceSeconds == 2.5
        assert publisher.getStatus()['sink'] == 'LoggingSink'
