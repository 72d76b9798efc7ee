################################################################################
# File Name: test_document_sinks.py
# Purpose/Description: Tests for the Firestore REST and logging sinks
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
Tests for document sinks.

The Firestore sink is exercised with a mocked requests session; no network
access is needed.

Run with:
    pytest tests/test_document_sinks.py -v
"""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from common.error_handler import ErrorCategory, classifyError
from sync.exceptions import SyncConfigurationError, SyncPublishError
from sync.sinks import FirestoreRestSink, LoggingSink, formatTimestamp, toFirestoreValue

DEVICE_ID = 'f47ac10b-58cc-4372-a567-0e02b2c3d479'


@pytest.fixture
def mockSession():
    session = MagicMock(spec=requests.Session)
    response = MagicMock()
    response.status_code = 200
    response.text = '{}'
    session.patch.return_value = response
    return session


@pytest.fixture
def sink(mockSession):
    return FirestoreRestSink(
        projectId='charge-project',
        collection='devices',
        apiKey='AIzaTestKey',
        authToken='token-123',
        session=mockSession,
    )


class TestFirestoreValues:
    """Tests for typed value conversion."""

    @pytest.mark.parametrize('value, expected', [
        (None, {'nullValue': None}),
        (True, {'booleanValue': True}),
        (7, {'integerValue': '7'}),
        (0.42, {'doubleValue': 0.42}),
        ('8 min', {'stringValue': '8 min'}),
    ])
    def test_toFirestoreValue_scalars(self, value, expected):
        assert toFirestoreValue(value) == expected

    def test_toFirestoreValue_boolNotInteger(self):
        """
        Given: False (an int subclass)
        When: Converted
        Then: Encoded as booleanValue, not integerValue
        """
        assert toFirestoreValue(False) == {'booleanValue': False}

    def test_toFirestoreValue_nested(self):
        result = toFirestoreValue({'levels': [1, 0.5]})

        assert result == {'mapValue': {'fields': {'levels': {'arrayValue': {'values': [
            {'integerValue': '1'}, {'doubleValue': 0.5}
        ]}}}}}

    def test_toFirestoreValue_unsupported_raisesTypeError(self):
        with pytest.raises(TypeError):
            toFirestoreValue(object())

    def test_formatTimestamp_convertsToUtc(self):
        eastern = timezone(timedelta(hours=-4))
        value = datetime(2026, 10, 19, 8, 30, 0, tzinfo=eastern)

        assert formatTimestamp(value) == '2026-10-19T12:30:00.000000Z'

    def test_formatTimestamp_naive_treatedAsUtc(self):
        assert formatTimestamp(datetime(2026, 1, 2, 3, 4, 5)) == '2026-01-02T03:04:05.000000Z'


class TestFirestoreRestSink:
    """Tests for the Firestore REST sink."""

    def test_init_missingProject_raisesError(self):
        with pytest.raises(SyncConfigurationError):
            FirestoreRestSink(projectId='')

    def test_init_nonPositiveTimeout_raisesError(self):
        with pytest.raises(SyncConfigurationError):
            FirestoreRestSink(projectId='p', timeoutSeconds=0)

    def test_documentUrl_escapesDocumentId(self, sink):
        url = sink.documentUrl('a/b c')

        assert url == (
            'https://firestore.googleapis.com/v1/projects/charge-project/'
            'databases/(default)/documents/devices/a%2Fb%20c'
        )

    def test_write_patchWithUpdateMask(self, sink, mockSession):
        """
        Given: A record with two fields
        When: write() is called
        Then: A PATCH is sent with one updateMask.fieldPaths per field,
              the API key, the bearer token and typed values
        """
        result = sink.write(DEVICE_ID, {'batteryLevel': 0.5, 'isCharging': True})

        assert result.success is True
        assert result.statusCode == 200
        args, kwargs = mockSession.patch.call_args
        assert args[0].endswith(f'/documents/devices/{DEVICE_ID}')
        assert kwargs['params'] == [
            ('updateMask.fieldPaths', 'batteryLevel'),
            ('updateMask.fieldPaths', 'isCharging'),
            ('key', 'AIzaTestKey'),
        ]
        assert kwargs['headers']['Authorization'] == 'Bearer token-123'
        assert kwargs['json'] == {'fields': {
            'batteryLevel': {'doubleValue': 0.5},
            'isCharging': {'booleanValue': True},
        }}
        assert kwargs['timeout'] == 10.0

    def test_write_noCredentials_omitsKeyAndAuthorization(self, mockSession):
        sink = FirestoreRestSink(projectId='p', session=mockSession)

        sink.write(DEVICE_ID, {'batteryLevel': 0.5})

        kwargs = mockSession.patch.call_args[1]
        assert ('key', None) not in kwargs['params']
        assert all(name != 'key' for name, _ in kwargs['params'])
        assert 'Authorization' not in kwargs['headers']

    def test_write_httpError_raisesWithStatus(self, sink, mockSession):
        """
        Given: Firestore answers 403
        When: write() is called
        Then: SyncPublishError carries the status and classifies as auth
        """
        mockSession.patch.return_value.status_code = 403
        mockSession.patch.return_value.text = 'PERMISSION_DENIED'

        with pytest.raises(SyncPublishError) as excInfo:
            sink.write(DEVICE_ID, {'batteryLevel': 0.5})

        assert excInfo.value.details['statusCode'] == 403
        assert classifyError(excInfo.value) == ErrorCategory.AUTHENTICATION

    def test_write_transportError_wrapsException(self, sink, mockSession):
        mockSession.patch.side_effect = requests.ConnectionError("no route")

        with pytest.raises(SyncPublishError) as excInfo:
            sink.write(DEVICE_ID, {'batteryLevel': 0.5})

        assert isinstance(excInfo.value.__cause__, requests.ConnectionError)
        assert classifyError(excInfo.value) == ErrorCategory.RETRYABLE

    def test_close_injectedSession_notClosed(self, sink, mockSession):
        sink.close()

        mockSession.close.assert_not_called()


class TestLoggingSink:
    """Tests for the logging sink."""

    def test_write_logsAndKeepsDocument(self, caplog):
        sink = LoggingSink()
        timestamp = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

        with caplog.at_level(logging.INFO, logger='sync.sinks'):
            result = sink.write(DEVICE_ID, {'batteryLevel': 0.5, 'timestamp': timestamp})

        assert result.success is True
        assert sink.writeCount == 1
        assert sink.lastDocument['timestamp'] == '2026-10-19T12:00:00.000000Z'
        assert 'Sync record' in caplog.text
