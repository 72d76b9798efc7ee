################################################################################
# File Name: provider.py
# Purpose/Description: Stable per-device identifier providers
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
Device identity providers.

The device identifier keys the remote sync document, so it must survive
restarts. FileIdentityProvider keeps it in a small owner-only file; when the
file is missing, unreadable or malformed a new UUID4 is generated and written
back. A write failure is logged and the in-memory identifier is used for the
rest of the session.

Usage:
    from identity.provider import FileIdentityProvider

    provider = FileIdentityProvider('~/.charge_monitor/device_id')
    provider.getDeviceId()      # 'f47ac10b-58cc-4372-a567-0e02b2c3d479'
    provider.getDeviceName()    # 'kitchen-pi'
"""

import logging
import os
import platform
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_STORE_PATH = '~/.charge_monitor/device_id'
DEFAULT_DEVICE_NAME = 'unknown-device'
IDENTITY_FILE_MODE = 0o600
IDENTITY_DIR_MODE = 0o700


def getDefaultDeviceName() -> str:
    """Host name of this machine, or a placeholder when it is unset."""
    return platform.node() or DEFAULT_DEVICE_NAME


def isValidDeviceId(value: str) -> bool:
    """
    Check that a stored identifier is a canonical UUID string.

    Args:
        value: Candidate identifier
    """
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


class IdentityProvider(ABC):
    """Source of the device identifier and display name."""

    @abstractmethod
    def getDeviceId(self) -> str:
        """Stable identifier for this device."""

    @abstractmethod
    def getDeviceName(self) -> str:
        """Human-readable device name."""


class StaticIdentityProvider(IdentityProvider):
    """Serves a configured identifier (tests, fleet-provisioned devices)."""

    def __init__(self, deviceId: str, deviceName: Optional[str] = None):
        if not deviceId:
            raise ValueError("deviceId must not be empty")
        self._deviceId = deviceId
        self._deviceName = deviceName or getDefaultDeviceName()

    def getDeviceId(self) -> str:
        return self._deviceId

    def getDeviceName(self) -> str:
        return self._deviceName


class FileIdentityProvider(IdentityProvider):
    """
    Identifier persisted in a local file.

    The identifier is loaded lazily on first use and cached. Never raises
    from getDeviceId(): any storage problem yields a fresh identifier.

    Example:
        provider = FileIdentityProvider('/var/lib/charge-monitor/device_id')
        deviceId = provider.getDeviceId()
    """

    def __init__(
        self,
        storePath: str = DEFAULT_IDENTITY_STORE_PATH,
        deviceName: Optional[str] = None,
    ):
        """
        Initialize the provider.

        Args:
            storePath: File holding the identifier (~ is expanded)
            deviceName: Display name (defaults to the host name)
        """
        self._storePath = os.path.expanduser(storePath)
        self._deviceName = deviceName or getDefaultDeviceName()
        self._deviceId: Optional[str] = None
        self._persisted = False
        self._lock = threading.Lock()

    @property
    def storePath(self) -> str:
        return self._storePath

    @property
    def isPersisted(self) -> bool:
        """True once the identifier is known to be on disk."""
        return self._persisted

    def getDeviceId(self) -> str:
        with self._lock:
            if self._deviceId is None:
                self._deviceId = self._loadOrCreate()
            return self._deviceId

    def getDeviceName(self) -> str:
        return self._deviceName

    def _loadOrCreate(self) -> str:
        stored = self._readStored()
        if stored is not None:
            self._persisted = True
            logger.debug(f"Loaded device identifier from {self._storePath}")
            return stored

        deviceId = str(uuid.uuid4())
        self._persisted = self._writeStored(deviceId)
        logger.info(
            f"Generated new device identifier | persisted={self._persisted}, "
            f"path={self._storePath}"
        )
        return deviceId

    def _readStored(self) -> Optional[str]:
        try:
            with open(self._storePath, encoding='utf-8') as f:
                value = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read device identifier: {e}")
            return None

        if not isValidDeviceId(value):
            logger.warning(f"Malformed device identifier in {self._storePath}, regenerating")
            return None

        return value

    def _writeStored(self, deviceId: str) -> bool:
        try:
            directory = os.path.dirname(self._storePath)
            if directory:
                os.makedirs(directory, mode=IDENTITY_DIR_MODE, exist_ok=True)

            fd = os.open(
                self._storePath,
                os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
                IDENTITY_FILE_MODE,
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(deviceId + '\n')
            # O_CREAT mode does not apply to an existing file
            os.chmod(self._storePath, IDENTITY_FILE_MODE)
            return True

        except OSError as e:
            logger.error(f"Could not persist device identifier: {e}")
            return False


def createIdentityProviderFromConfig(config: Dict[str, Any]) -> IdentityProvider:
    """
    Create an IdentityProvider from configuration.

    A configured 'identity.deviceId' wins over the file store.

    Args:
        config: Configuration dictionary with 'identity' section

    Returns:
        StaticIdentityProvider or FileIdentityProvider
    """
    identityConfig = config.get('identity', {})
    deviceName = identityConfig.get('deviceName') or None

    deviceId = identityConfig.get('deviceId')
    if deviceId:
        logger.info("Using configured device identifier")
        return StaticIdentityProvider(deviceId, deviceName)

    storePath = identityConfig.get('storePath', DEFAULT_IDENTITY_STORE_PATH)
    return FileIdentityProvider(storePath, deviceName)
