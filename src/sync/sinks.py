################################################################################
# File Name: sinks.py
# Purpose/Description: Document-store sinks for per-device sync records
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
Document sinks.

A sink upserts one document per device. Writes merge into the existing
document so fields written by other clients survive.

Sinks:
- FirestoreRestSink: Firestore REST API (PATCH with updateMask)
- LoggingSink: writes the document to the log only

Usage:
    from sync.sinks import FirestoreRestSink

    sink = FirestoreRestSink(projectId='my-project', collection='devices')
    result = sink.write(deviceId, record.toDict())
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .exceptions import SyncConfigurationError, SyncPublishError
from .types import (
    DEFAULT_FIRESTORE_BASE_URL,
    DEFAULT_FIRESTORE_COLLECTION,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    PublishResult,
)

logger = logging.getLogger(__name__)


class DocumentSink(ABC):
    """Upsert target for per-device documents."""

    @abstractmethod
    def write(self, documentId: str, fields: Dict[str, Any]) -> PublishResult:
        """
        Merge fields into the document with the given id.

        Args:
            documentId: Document key
            fields: Field values keyed by wire name

        Returns:
            PublishResult for a successful write

        Raises:
            SyncPublishError: If the write fails
        """

    def close(self) -> None:
        """Release any held resources."""


# ================================================================================
# Firestore REST
# ================================================================================

def formatTimestamp(value: datetime) -> str:
    """
    Format a datetime as an RFC 3339 UTC timestamp.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def toFirestoreValue(value: Any) -> Dict[str, Any]:
    """
    Convert a Python value to a Firestore typed value.

    Args:
        value: str, bool, int, float, datetime, None, list or dict

    Returns:
        Firestore Value JSON object

    Raises:
        TypeError: If the value type is not supported
    """
    # bool before int: bool is an int subclass
    if value is None:
        return {'nullValue': None}
    if isinstance(value, bool):
        return {'booleanValue': value}
    if isinstance(value, int):
        return {'integerValue': str(value)}
    if isinstance(value, float):
        return {'doubleValue': value}
    if isinstance(value, str):
        return {'stringValue': value}
    if isinstance(value, datetime):
        return {'timestampValue': formatTimestamp(value)}
    if isinstance(value, (list, tuple)):
        return {'arrayValue': {'values': [toFirestoreValue(v) for v in value]}}
    if isinstance(value, dict):
        return {'mapValue': {'fields': {k: toFirestoreValue(v) for k, v in value.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(value).__name__}")


class FirestoreRestSink(DocumentSink):
    """
    Writes documents through the Firestore REST API.

    Each write is a PATCH on the document path with one updateMask.fieldPaths
    query parameter per field, which creates the document if missing and
    merges otherwise.

    Example:
        sink = FirestoreRestSink('my-project', apiKey=os.environ['FIRESTORE_API_KEY'])
        sink.write('f47ac10b-...', {'batteryLevel': 0.42})
    """

    def __init__(
        self,
        projectId: str,
        collection: str = DEFAULT_FIRESTORE_COLLECTION,
        apiKey: Optional[str] = None,
        authToken: Optional[str] = None,
        baseUrl: str = DEFAULT_FIRESTORE_BASE_URL,
        timeoutSeconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the sink.

        Args:
            projectId: Google Cloud project id
            collection: Collection holding one document per device
            apiKey: Web API key sent as the 'key' query parameter
            authToken: OAuth/ID token sent as a bearer token
            baseUrl: Firestore REST root (override for the emulator)
            timeoutSeconds: Request timeout
            session: requests session (created when None)

        Raises:
            SyncConfigurationError: If projectId or collection is empty
        """
        if not projectId:
            raise SyncConfigurationError("Firestore projectId is required")
        if not collection:
            raise SyncConfigurationError("Firestore collection is required")
        if timeoutSeconds <= 0:
            raise SyncConfigurationError(
                "Request timeout must be positive",
                details={'timeoutSeconds': timeoutSeconds}
            )

        self._projectId = projectId
        self._collection = collection
        self._apiKey = apiKey or None
        self._authToken = authToken or None
        self._baseUrl = baseUrl.rstrip('/')
        self._timeoutSeconds = timeoutSeconds
        self._session = session or requests.Session()
        self._ownsSession = session is None

        logger.debug(
            f"FirestoreRestSink initialized: project={projectId}, collection={collection}, "
            f"apiKey={'set' if self._apiKey else 'unset'}, "
            f"authToken={'set' if self._authToken else 'unset'}"
        )

    def documentUrl(self, documentId: str) -> str:
        """Full REST URL of a document."""
        return (
            f"{self._baseUrl}/projects/{self._projectId}/databases/(default)/documents/"
            f"{quote(self._collection, safe='/')}/{quote(documentId, safe='')}"
        )

    def buildRequest(
        self,
        documentId: str,
        fields: Dict[str, Any],
    ) -> Tuple[str, List[Tuple[str, str]], Dict[str, str], Dict[str, Any]]:
        """
        Build the PATCH request parts.

        Returns:
            Tuple of (url, query params, headers, JSON body)
        """
        params = [('updateMask.fieldPaths', name) for name in fields]
        if self._apiKey:
            params.append(('key', self._apiKey))

        headers = {'Content-Type': 'application/json'}
        if self._authToken:
            headers['Authorization'] = f"Bearer {self._authToken}"

        body = {'fields': {name: toFirestoreValue(value) for name, value in fields.items()}}
        return self.documentUrl(documentId), params, headers, body

    def write(self, documentId: str, fields: Dict[str, Any]) -> PublishResult:
        url, params, headers, body = self.buildRequest(documentId, fields)

        try:
            response = self._session.patch(
                url,
                params=params,
                json=body,
                headers=headers,
                timeout=self._timeoutSeconds,
            )
        except requests.RequestException as e:
            raise SyncPublishError(
                f"Firestore request failed: {e}",
                details={'documentId': documentId}
            ) from e

        if not 200 <= response.status_code < 300:
            raise SyncPublishError(
                f"Firestore returned HTTP {response.status_code}",
                details={
                    'documentId': documentId,
                    'statusCode': response.status_code,
                    'body': response.text[:200],
                }
            )

        logger.debug(f"Firestore document written | status={response.status_code}")
        return PublishResult(
            success=True,
            documentId=documentId,
            statusCode=response.status_code,
        )

    def close(self) -> None:
        """Close the session if this sink created it."""
        if self._ownsSession:
            self._session.close()


# ================================================================================
# Logging
# ================================================================================

class LoggingSink(DocumentSink):
    """
    Writes documents to the log.

    Used when sync is disabled or for dry runs; keeps the last document
    written for inspection.
    """

    def __init__(self, level: int = logging.INFO):
        self._level = level
        self.writeCount = 0
        self.lastDocument: Optional[Dict[str, Any]] = None

    def write(self, documentId: str, fields: Dict[str, Any]) -> PublishResult:
        document = {
            name: formatTimestamp(value) if isinstance(value, datetime) else value
            for name, value in fields.items()
        }
        self.writeCount += 1
        self.lastDocument = document
        logger.log(self._level, f"Sync record | {document}")
        return PublishResult(success=True, documentId=documentId)
