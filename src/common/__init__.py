################################################################################
# File Name: __init__.py
# Purpose/Description: Common utilities package initialization
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Export identifier masking and error collector
# ================================================================================
################################################################################

"""
Common utilities package.

Shared functionality used across the charge monitor:
- Configuration validation and loading
- Secrets management
- Logging configuration with identifier masking
- Error handling

Usage:
    from common.config_validator import ConfigValidator
    from common.secrets_loader import loadConfigWithSecrets
    from common.logging_config import setupLogging
    from common.error_handler import handleError
"""

from .config_validator import ConfigValidationError, ConfigValidator
from .error_handler import (
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorCollector,
    RetryableError,
    classifyError,
    handleError,
)
from .logging_config import IdentifierMaskingFilter, getLogger, maskIdentifiers, setupLogging
from .secrets_loader import loadConfigWithSecrets

__all__ = [
    'ConfigValidator',
    'ConfigValidationError',
    'loadConfigWithSecrets',
    'getLogger',
    'setupLogging',
    'IdentifierMaskingFilter',
    'maskIdentifiers',
    'ErrorCategory',
    'ErrorCollector',
    'RetryableError',
    'ConfigurationError',
    'DataError',
    'classifyError',
    'handleError',
]
