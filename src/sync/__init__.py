################################################################################
# File Name: __init__.py
# Purpose/Description: Sync subpackage for publishing telemetry to a document store
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial subpackage creation
# ================================================================================
################################################################################
"""
Sync Subpackage.

Exports:
    Types:
        - SyncRecord: Outbound per-device document
        - PublishResult: Outcome of one write
        - PublisherStats: Publisher counters

    Exceptions:
        - SyncError: Base sync exception
        - SyncConfigurationError: Sync configuration error
        - SyncPublishError: Document write failure

    Classes:
        - DocumentSink: Abstract upsert target
        - FirestoreRestSink: Firestore REST API sink
        - LoggingSink: Log-only sink
        - DebouncedPublisher: Coalescing publisher

    Helper Functions:
        - createPublisherFromConfig, createSinkFromConfig, getSyncConfig,
          isSyncEnabled, getDefaultSyncConfig, validateSyncConfig
"""

from .exceptions import SyncConfigurationError, SyncError, SyncPublishError
from .helpers import (
    createPublisherFromConfig,
    createSinkFromConfig,
    getDefaultSyncConfig,
    getSyncConfig,
    isSyncEnabled,
    validateSyncConfig,
)
from .publisher import DebouncedPublisher
from .sinks import (
    DocumentSink,
    FirestoreRestSink,
    LoggingSink,
    formatTimestamp,
    toFirestoreValue,
)
from .types import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_FIRESTORE_BASE_URL,
    DEFAULT_FIRESTORE_COLLECTION,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    RECORD_FIELDS,
    PublisherStats,
    PublishResult,
    SyncRecord,
)

__all__ = [
    # Types
    'SyncRecord',
    'PublishResult',
    'PublisherStats',
    'RECORD_FIELDS',
    'DEFAULT_DEBOUNCE_SECONDS',
    'DEFAULT_FIRESTORE_BASE_URL',
    'DEFAULT_FIRESTORE_COLLECTION',
    'DEFAULT_REQUEST_TIMEOUT_SECONDS',
    # Exceptions
    'SyncError',
    'SyncConfigurationError',
    'SyncPublishError',
    # Classes
    'DocumentSink',
    'FirestoreRestSink',
    'LoggingSink',
    'DebouncedPublisher',
    # Functions
    'toFirestoreValue',
    'formatTimestamp',
    'createPublisherFromConfig',
    'createSinkFromConfig',
    'getSyncConfig',
    'isSyncEnabled',
    'getDefaultSyncConfig',
    'validateSyncConfig',
]
