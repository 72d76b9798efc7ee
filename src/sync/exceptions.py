################################################################################
# File Name: exceptions.py
# Purpose/Description: Sync publisher exceptions
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Built on the common error hierarchy
# ================================================================================
################################################################################
"""
Sync exceptions.

Exception hierarchy:
    BaseError (common.error_handler)
    └── SyncError
        ├── SyncConfigurationError (also ConfigurationError)
        └── SyncPublishError (also RetryableError)
"""

from common.error_handler import (
    BaseError,
    ConfigurationError,
    ErrorCategory,
    RetryableError,
    classifyHttpStatus,
)


class SyncError(BaseError):
    """
    Base exception for sync errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context as a dictionary
    """

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message


class SyncConfigurationError(SyncError, ConfigurationError):
    """
    Error in sync configuration.

    Raised for a missing project id or collection, or a bad debounce window.
    """
    pass


class SyncPublishError(SyncError, RetryableError):
    """
    Error writing a record to the document store.

    Raised by sinks on transport failure or a non-2xx response. The
    publisher logs it and counts it; it never reaches the monitor.

    Transport failures carry no status and are retryable. When
    details['statusCode'] holds the HTTP status, the category follows it,
    so a rejected credential logs as an authentication error.
    """

    @property
    def category(self) -> ErrorCategory:
        statusCode = self.details.get('statusCode')
        if isinstance(statusCode, int):
            return classifyHttpStatus(statusCode)
        return ErrorCategory.RETRYABLE
