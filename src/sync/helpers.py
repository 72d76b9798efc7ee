################################################################################
# File Name: helpers.py
# Purpose/Description: Sync configuration helpers and factory functions
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
Sync configuration helpers and factory functions.

Usage:
    from sync.helpers import createPublisherFromConfig

    publisher = createPublisherFromConfig(config, identityProvider)
    publisher.attach(monitor)
"""

import logging
from typing import Any

from identity.provider import IdentityProvider

from .exceptions import SyncConfigurationError
from .publisher import DebouncedPublisher
from .sinks import DocumentSink, FirestoreRestSink, LoggingSink
from .types import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_FIRESTORE_BASE_URL,
    DEFAULT_FIRESTORE_COLLECTION,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


def getSyncConfig(config: dict[str, Any]) -> dict[str, Any]:
    """
    Get sync configuration section.

    Args:
        config: Configuration dictionary

    Returns:
        Sync configuration section
    """
    return config.get('sync', {})


def isSyncEnabled(config: dict[str, Any]) -> bool:
    """
    Check if remote sync is enabled in config.

    Args:
        config: Configuration dictionary

    Returns:
        True if records are written to Firestore
    """
    return config.get('sync', {}).get('enabled', False)


def getDefaultSyncConfig() -> dict[str, Any]:
    """
    Get default sync configuration.

    Returns:
        Dictionary with default sync settings
    """
    return {
        'enabled': False,
        'debounceSeconds': DEFAULT_DEBOUNCE_SECONDS,
        'firestore': {
            'projectId': '',
            'collection': DEFAULT_FIRESTORE_COLLECTION,
            'apiKey': '',
            'authToken': '',
            'baseUrl': DEFAULT_FIRESTORE_BASE_URL,
            'timeoutSeconds': DEFAULT_REQUEST_TIMEOUT_SECONDS,
        },
    }


def validateSyncConfig(config: dict[str, Any]) -> bool:
    """
    Validate sync configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid

    Raises:
        SyncConfigurationError: If configuration is invalid
    """
    syncConfig = getSyncConfig(config)
    firestoreConfig = syncConfig.get('firestore', {})

    debounceSeconds = syncConfig.get('debounceSeconds', DEFAULT_DEBOUNCE_SECONDS)
    if debounceSeconds < 0:
        raise SyncConfigurationError(
            f"Debounce window must not be negative: {debounceSeconds}",
            details={'debounceSeconds': debounceSeconds}
        )

    timeoutSeconds = firestoreConfig.get('timeoutSeconds', DEFAULT_REQUEST_TIMEOUT_SECONDS)
    if timeoutSeconds <= 0:
        raise SyncConfigurationError(
            f"Request timeout must be positive: {timeoutSeconds}",
            details={'timeoutSeconds': timeoutSeconds}
        )

    if syncConfig.get('enabled', False):
        if not firestoreConfig.get('projectId'):
            raise SyncConfigurationError(
                "sync.firestore.projectId is required when sync is enabled"
            )
        if not firestoreConfig.get('collection', DEFAULT_FIRESTORE_COLLECTION):
            raise SyncConfigurationError(
                "sync.firestore.collection must not be empty"
            )

    return True


def createSinkFromConfig(config: dict[str, Any], dryRun: bool = False) -> DocumentSink:
    """
    Create the document sink from configuration.

    Args:
        config: Configuration dictionary with 'sync' section
        dryRun: Force the logging sink

    Returns:
        FirestoreRestSink when sync is enabled, LoggingSink otherwise
    """
    if dryRun or not isSyncEnabled(config):
        logger.info("Sync disabled, records will be logged only")
        return LoggingSink()

    firestoreConfig = getSyncConfig(config).get('firestore', {})
    return FirestoreRestSink(
        projectId=firestoreConfig.get('projectId', ''),
        collection=firestoreConfig.get('collection', DEFAULT_FIRESTORE_COLLECTION),
        apiKey=firestoreConfig.get('apiKey') or None,
        authToken=firestoreConfig.get('authToken') or None,
        baseUrl=firestoreConfig.get('baseUrl', DEFAULT_FIRESTORE_BASE_URL),
        timeoutSeconds=firestoreConfig.get('timeoutSeconds', DEFAULT_REQUEST_TIMEOUT_SECONDS),
    )


def createPublisherFromConfig(
    config: dict[str, Any],
    identityProvider: IdentityProvider,
    dryRun: bool = False,
) -> DebouncedPublisher:
    """
    Create a DebouncedPublisher from configuration.

    Args:
        config: Configuration dictionary with 'sync' section
        identityProvider: Source of the device id and name
        dryRun: Force the logging sink

    Returns:
        Configured DebouncedPublisher instance

    Raises:
        SyncConfigurationError: If the configuration is invalid
    """
    validateSyncConfig(config)

    debounceSeconds = getSyncConfig(config).get('debounceSeconds', DEFAULT_DEBOUNCE_SECONDS)
    sink = createSinkFromConfig(config, dryRun=dryRun)
    publisher = DebouncedPublisher(sink, identityProvider, debounceSeconds=debounceSeconds)

    logger.info(
        f"DebouncedPublisher created from config | sink={type(sink).__name__}, "
        f"debounce={debounceSeconds}s"
    )

    return publisher
