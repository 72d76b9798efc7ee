################################################################################
# File Name: test_error_handler.py
# Purpose/Description: Tests for error handling and classification
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | HTTP status classification, retry tests removed
# 2026-10-19    | M. Cornelison | Sync and telemetry errors in the common hierarchy
# ================================================================================
################################################################################

"""
Tests for the error_handler module.

Run with:
    pytest tests/test_error_handler.py -v
"""

import logging

import pytest

from common.error_handler import (
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorCollector,
    RetryableError,
    classifyError,
    classifyHttpStatus,
    handleError,
)
from sync.exceptions import SyncConfigurationError, SyncError, SyncPublishError
from telemetry.exceptions import (
    SampleSourceError,
    TelemetryConfigurationError,
    TelemetryError,
)


class TestErrorCategories:
    """Tests for error classification."""

    @pytest.mark.parametrize('error,expected', [
        (RetryableError("Network timeout"), ErrorCategory.RETRYABLE),
        (ConfigurationError("Bad field"), ErrorCategory.CONFIGURATION),
        (DataError("Bad record"), ErrorCategory.DATA),
    ])
    def test_classifyError_customErrors_useOwnCategory(self, error, expected):
        assert classifyError(error) == expected

    def test_classifyError_standardTimeoutError_returnsRetryable(self):
        """
        Given: Standard timeout exception
        When: classifyError() is called
        Then: Returns RETRYABLE category
        """
        assert classifyError(TimeoutError("Connection timed out")) == ErrorCategory.RETRYABLE

    def test_classifyError_connectionError_returnsRetryable(self):
        assert classifyError(ConnectionError("Connection refused")) == ErrorCategory.RETRYABLE

    def test_classifyError_unknownError_returnsSystem(self):
        assert classifyError(RuntimeError("Something unexpected")) == ErrorCategory.SYSTEM

    def test_classifyError_emptyMessage_returnsSystem(self):
        assert classifyError(Exception("")) == ErrorCategory.SYSTEM

    def test_classifyError_rateLimitInMessage_returnsRetryable(self):
        assert classifyError(Exception("API rate limit exceeded")) == ErrorCategory.RETRYABLE

    def test_classifyError_wrappedConnectionError_returnsRetryable(self):
        """
        Given: A generic error raised from a ConnectionError
        When: classifyError() is called
        Then: The cause makes it RETRYABLE
        """
        try:
            try:
                raise ConnectionError("refused")
            except ConnectionError as e:
                raise RuntimeError("Publish failed") from e
        except RuntimeError as wrapped:
            error = wrapped

        assert classifyError(error) == ErrorCategory.RETRYABLE


class TestHttpStatusClassification:
    """Tests for classification of HTTP failures."""

    @pytest.mark.parametrize('statusCode,expected', [
        (401, ErrorCategory.AUTHENTICATION),
        (403, ErrorCategory.AUTHENTICATION),
        (408, ErrorCategory.RETRYABLE),
        (429, ErrorCategory.RETRYABLE),
        (500, ErrorCategory.RETRYABLE),
        (503, ErrorCategory.RETRYABLE),
        (400, ErrorCategory.DATA),
        (404, ErrorCategory.DATA),
        (302, ErrorCategory.SYSTEM),
    ])
    def test_classifyHttpStatus(self, statusCode, expected):
        assert classifyHttpStatus(statusCode) == expected

    def test_classifyError_publishErrorWithStatus_usesStatus(self):
        """
        Given: A SyncPublishError carrying statusCode 403
        When: classifyError() is called
        Then: Returns AUTHENTICATION rather than the retryable default
        """
        error = SyncPublishError("Firestore returned HTTP 403", details={'statusCode': 403})

        assert classifyError(error) == ErrorCategory.AUTHENTICATION
        assert error.toDict()['category'] == 'auth'

    @pytest.mark.parametrize('details,expected', [
        ({}, ErrorCategory.RETRYABLE),
        ({'statusCode': 503}, ErrorCategory.RETRYABLE),
        ({'statusCode': 400}, ErrorCategory.DATA),
        ({'statusCode': '403'}, ErrorCategory.RETRYABLE),
    ])
    def test_classifyError_publishError_categoryFollowsStatus(self, details, expected):
        assert classifyError(SyncPublishError("Publish failed", details=details)) == expected


class TestHandleError:
    """Tests for handleError function."""

    def test_handleError_withReraise_raisesError(self):
        with pytest.raises(ConfigurationError):
            handleError(ConfigurationError("Test error"), reraise=True)

    def test_handleError_withoutReraise_returnsDetails(self):
        """
        Given: Error and reraise=False
        When: handleError() is called
        Then: Returns error details
        """
        result = handleError(DataError("Invalid data"), reraise=False)

        assert result['type'] == 'DataError'
        assert result['category'] == 'data'
        assert 'Invalid data' in result['message']

    def test_handleError_withContext_includesContext(self, caplog):
        with caplog.at_level(logging.WARNING, logger='common.error_handler'):
            result = handleError(
                RetryableError("timeout"), context={'operation': 'publish'}, reraise=False
            )

        assert result['context'] == {'operation': 'publish'}
        assert 'operation=publish' in caplog.text

    def test_handleError_authError_logsAsError(self, caplog):
        with caplog.at_level(logging.ERROR, logger='common.error_handler'):
            handleError(
                SyncPublishError("rejected", details={'statusCode': 401}), reraise=False
            )

        assert 'Authentication error: rejected' in caplog.text


class TestErrorCollector:
    """Tests for ErrorCollector class."""

    def test_errorCollector_addErrors_collectsAll(self):
        collector = ErrorCollector()

        collector.add(ValueError("Error 1"), component='monitor')
        collector.add(ValueError("Error 2"), component='publisher')

        assert collector.count() == 2
        assert collector.hasErrors() is True

    def test_errorCollector_hasErrors_returnsFalseWhenEmpty(self):
        assert ErrorCollector().hasErrors() is False

    def test_errorCollector_storesCategoryAndContext(self):
        collector = ErrorCollector()

        collector.add(ConnectionError("refused"), component='publisher')

        assert collector.errors[0]['category'] == 'retryable'
        assert collector.errors[0]['context'] == {'component': 'publisher'}

    def test_errorCollector_report_logsEachError(self, caplog):
        """
        Given: Collector with two errors
        When: report() is called
        Then: A summary line and one line per error are logged
        """
        collector = ErrorCollector()
        collector.add(RuntimeError("stop failed"), component='monitor')
        collector.add(RuntimeError("close failed"), component='publisher')

        with caplog.at_level(logging.ERROR, logger='common.error_handler'):
            collector.report()

        assert 'Collected 2 errors' in caplog.text
        assert 'component=monitor' in caplog.text
        assert 'close failed' in caplog.text

    def test_errorCollector_clear_removesAllErrors(self):
        collector = ErrorCollector()
        collector.add(ValueError("Error"))

        collector.clear()

        assert collector.count() == 0


class TestCustomExceptions:
    """Tests for custom exception classes."""

    def test_retryableError_toDict_returnsCorrectStructure(self):
        error = RetryableError("Connection timeout", details={'host': 'example.com'})

        result = error.toDict()

        assert result == {
            'type': 'RetryableError',
            'category': 'retryable',
            'message': 'Connection timeout',
            'details': {'host': 'example.com'},
        }

    def test_baseError_keepsDetailsOutOfMessage(self):
        error = ConfigurationError("Bad field")

        assert error.message == 'Bad field'
        assert error.details == {}


class TestComponentExceptions:
    """Tests for the sync and telemetry errors built on the common hierarchy."""

    @pytest.mark.parametrize('error,expected', [
        (TelemetryConfigurationError("bad interval"), ErrorCategory.CONFIGURATION),
        (SyncConfigurationError("no project"), ErrorCategory.CONFIGURATION),
        (SampleSourceError("capacity unreadable"), ErrorCategory.DATA),
        (SyncPublishError("timed out"), ErrorCategory.RETRYABLE),
    ])
    def test_componentErrors_classifyByKind(self, error, expected):
        assert classifyError(error) == expected

    def test_componentErrors_catchableAsCommonTypes(self):
        """
        Given: Errors raised by sync and telemetry components
        When: Caught by their common base classes
        Then: Each matches both its package base and its category class
        """
        assert isinstance(TelemetryConfigurationError("x"), TelemetryError)
        assert isinstance(TelemetryConfigurationError("x"), ConfigurationError)
        assert isinstance(SyncConfigurationError("x"), SyncError)
        assert isinstance(SyncConfigurationError("x"), ConfigurationError)
        assert isinstance(SampleSourceError("x"), DataError)
        assert isinstance(SyncPublishError("x"), RetryableError)

    def test_componentErrors_strIncludesDetails(self):
        error = SampleSourceError("capacity unreadable", details={'path': '/sys/x'})

        assert str(error) == "capacity unreadable | details={'path': '/sys/x'}"
        assert str(SyncError("plain")) == 'plain'

    def test_handleError_publishAuthFailure_logsAsAuthentication(self, caplog):
        """
        Given: A publish failure with HTTP 401
        When: handleError() is called without reraise
        Then: It logs an authentication error and reports the auth category
        """
        error = SyncPublishError("Firestore returned HTTP 401", details={'statusCode': 401})

        with caplog.at_level(logging.ERROR, logger='common.error_handler'):
            result = handleError(error, context={'operation': 'publish'}, reraise=False)

        assert result['category'] == 'auth'
        assert 'Authentication error' in caplog.text
