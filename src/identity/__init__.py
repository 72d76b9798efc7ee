################################################################################
# File Name: __init__.py
# Purpose/Description: Identity subpackage for the stable device identifier
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
Identity Subpackage.

Exports:
    - IdentityProvider: Abstract identity provider
    - FileIdentityProvider: Identifier persisted in an owner-only file
    - StaticIdentityProvider: Configured identifier
    - createIdentityProviderFromConfig: Factory from 'identity' config
    - getDefaultDeviceName, isValidDeviceId: Helpers
"""

from .provider import (
    DEFAULT_DEVICE_NAME,
    DEFAULT_IDENTITY_STORE_PATH,
    FileIdentityProvider,
    IdentityProvider,
    StaticIdentityProvider,
    createIdentityProviderFromConfig,
    getDefaultDeviceName,
    isValidDeviceId,
)

__all__ = [
    'IdentityProvider',
    'FileIdentityProvider',
    'StaticIdentityProvider',
    'createIdentityProviderFromConfig',
    'getDefaultDeviceName',
    'isValidDeviceId',
    'DEFAULT_DEVICE_NAME',
    'DEFAULT_IDENTITY_STORE_PATH',
]
