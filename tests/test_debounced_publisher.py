################################################################################
# File Name: test_debounced_publisher.py
# Purpose/Description: Tests for the debounced sync publisher
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Superseded timer callback regression test
# ================================================================================
################################################################################

"""
Tests for DebouncedPublisher.

Timers come from the fakeTimerFactory fixture and only fire when a test
calls fire(), so debounce windows are deterministic.

Run with:
    pytest tests/test_debounced_publisher.py -v
"""

import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from sync.exceptions import SyncConfigurationError, SyncPublishError
from sync.publisher import DebouncedPublisher
from sync.sinks import LoggingSink
from sync.types import PublishResult
from telemetry.types import BatteryState, DerivedState, ThermalLevel

FIXED_TIME = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def makeState(level: float, estimate: str = '8 min') -> DerivedState:
    return DerivedState(
        batteryLevel=level,
        batteryState=BatteryState.CHARGING,
        isCharging=True,
        estimatedTimeToFull=estimate,
        thermalLevel=ThermalLevel.FAIR,
    )


@pytest.fixture
def mockSink():
    sink = MagicMock()
    sink.write.return_value = PublishResult(success=True, documentId='doc')
    return sink


@pytest.fixture
def publisher(mockSink, staticIdentity, fakeTimerFactory):
    return DebouncedPublisher(
        mockSink,
        staticIdentity,
        debounceSeconds=1.0,
        timerFactory=fakeTimerFactory,
        clock=lambda: FIXED_TIME,
    )


class TestDebouncedPublisher:
    """Tests for debounce and publish behaviour."""

    def test_init_negativeDebounce_raisesError(self, mockSink, staticIdentity):
        with pytest.raises(SyncConfigurationError):
            DebouncedPublisher(mockSink, staticIdentity, debounceSeconds=-1)

    def test_submit_startsDaemonTimer(self, publisher, fakeTimerFactory, mockSink):
        """
        Given: A publisher
        When: A state is submitted
        Then: A daemon timer is started with the debounce window and nothing is written yet
        """
        publisher.submit(makeState(0.5))

        timer = fakeTimerFactory.last
        assert timer.started is True
        assert timer.daemon is True
        assert timer.interval == 1.0
        assert publisher.hasPending is True
        mockSink.write.assert_not_called()

    def test_burst_writesOnceWithLastValues(self, publisher, fakeTimerFactory, mockSink):
        """
        Given: Five submissions inside one debounce window
        When: The window elapses
        Then: Exactly one write carries the last submitted values
        """
        for level in (0.50, 0.51, 0.52, 0.53, 0.54):
            publisher.submit(makeState(level))

        assert len(fakeTimerFactory.activeTimers()) == 1
        fakeTimerFactory.last.fire()

        mockSink.write.assert_called_once()
        documentId, fields = mockSink.write.call_args[0]
        assert fields['batteryLevel'] == pytest.approx(0.54)
        assert publisher.getStats().coalesced == 4
        assert publisher.getStats().published == 1

    def test_cancelledTimer_doesNotWrite(self, publisher, fakeTimerFactory, mockSink):
        publisher.submit(makeState(0.5))
        firstTimer = fakeTimerFactory.last
        publisher.submit(makeState(0.6))

        firstTimer.fire()

        mockSink.write.assert_not_called()

    def test_supersededTimerCallbackRunning_doesNotFlushEarly(
        self, publisher, fakeTimerFactory, mockSink
    ):
        """
        Given: A first timer whose callback is already running when a second submit arrives
        When: The first callback completes, then the second timer fires
        Then: Only the second timer writes, carrying the latest values
        """
        publisher.submit(makeState(0.5))
        firstCallback = fakeTimerFactory.last.function
        publisher.submit(makeState(0.6))

        # Calls past the cancel check, as a thread already inside its callback would
        firstCallback()

        mockSink.write.assert_not_called()
        assert publisher.hasPending is True

        fakeTimerFactory.last.fire()

        mockSink.write.assert_called_once()
        assert mockSink.write.call_args[0][1]['batteryLevel'] == pytest.approx(0.6)
        assert publisher.getStats().published == 1

    def test_publish_recordFields(self, publisher, fakeTimerFactory, mockSink):
        """
        Given: A submitted state
        When: The timer fires
        Then: The document is keyed by device id and carries the wire fields
        """
        publisher.submit(makeState(0.42, estimate='1 hr 12 min'))

        fakeTimerFactory.last.fire()

        documentId, fields = mockSink.write.call_args[0]
        assert documentId == 'f47ac10b-58cc-4372-a567-0e02b2c3d479'
        assert fields == {
            'deviceID': 'f47ac10b-58cc-4372-a567-0e02b2c3d479',
            'deviceName': 'test-device',
            'timestamp': FIXED_TIME,
            'batteryLevel': 0.42,
            'isCharging': True,
            'batteryState': 'charging',
            'estimatedTimeToFull': '1 hr 12 min',
            'thermalState': 'fair',
        }

    def test_publish_unknownThermal_sendsUnknown(self, publisher, fakeTimerFactory, mockSink):
        publisher.submit(DerivedState())

        fakeTimerFactory.last.fire()

        assert mockSink.write.call_args[0][1]['thermalState'] == 'unknown'

    def test_publish_sinkFails_countedNotRaised(self, publisher, fakeTimerFactory, mockSink):
        """
        Given: A sink that rejects the write
        When: The timer fires
        Then: The failure is counted and nothing is raised
        """
        mockSink.write.side_effect = SyncPublishError(
            "Firestore returned HTTP 503", details={'statusCode': 503}
        )
        publisher.submit(makeState(0.5))

        fakeTimerFactory.last.fire()

        stats = publisher.getStats()
        assert stats.failed == 1
        assert stats.published == 0

    def test_publish_failure_nextSubmitStillPublishes(self, publisher, fakeTimerFactory, mockSink):
        mockSink.write.side_effect = [SyncPublishError("down"), PublishResult(True, 'doc')]
        publisher.submit(makeState(0.5))
        fakeTimerFactory.last.fire()

        publisher.submit(makeState(0.6))
        fakeTimerFactory.last.fire()

        assert mockSink.write.call_count == 2
        assert publisher.getStats().published == 1

    def test_submit_storesCopy(self, publisher, fakeTimerFactory, mockSink):
        state = makeState(0.5)
        publisher.submit(state)
        state.batteryLevel = 0.9

        fakeTimerFactory.last.fire()

        assert mockSink.write.call_args[0][1]['batteryLevel'] == 0.5

    def test_flush_nothingPending_returnsNone(self, publisher, mockSink):
        assert publisher.flush() is None
        mockSink.write.assert_not_called()

    def test_flush_pending_writesImmediately(self, publisher, fakeTimerFactory, mockSink):
        publisher.submit(makeState(0.5))

        result = publisher.flush()

        assert result.success is True
        assert fakeTimerFactory.last.cancelled is True
        assert publisher.hasPending is False

    def test_close_flushesAndClosesSink(self, publisher, mockSink):
        publisher.submit(makeState(0.5))

        publisher.close()

        mockSink.write.assert_called_once()
        mockSink.close.assert_called_once()

    def test_close_withoutFlush_dropsPending(self, publisher, mockSink):
        publisher.submit(makeState(0.5))

        publisher.close(flush=False)

        mockSink.write.assert_not_called()

    def test_submit_afterClose_isDropped(self, publisher, fakeTimerFactory):
        publisher.close()

        publisher.submit(makeState(0.5))

        assert fakeTimerFactory.timers == []
        assert publisher.getStats().submitted == 0

    def test_attach_subscribesToMonitor(self, publisher):
        monitor = MagicMock()

        publisher.attach(monitor)

        monitor.onStateChange.assert_called_once_with(publisher.submit)


@pytest.mark.integration
class TestDebouncedPublisherRealTimer:
    """Debounce with threading.Timer."""

    def test_burst_realTimer_singleWrite(self, staticIdentity):
        written = threading.Event()
        sink = LoggingSink()
        originalWrite = sink.write

        def write(documentId, fields):
            result = originalWrite(documentId, fields)
            written.set()
            return result

        sink.write = write
        publisher = DebouncedPublisher(sink, staticIdentity, debounceSeconds=0.05)

        for level in (0.1, 0.2, 0.3):
            publisher.submit(makeState(level))

        assert written.wait(timeout=2.0)
        publisher.close(flush=False)
        assert sink.writeCount == 1
        assert sink.lastDocument['batteryLevel'] == 0.3
