################################################################################
# File Name: error_handler.py
# Purpose/Description: Centralized error handling with classification
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | HTTP status classification, dropped retry decorator
# 2026-10-19    | M. Cornelison | Dropped unused error classes and formatError
# ================================================================================
################################################################################

"""
Error handling module.

Provides centralized error handling with:
- Custom exception classes by error type
- Error classification (retryable, auth, config, data, system)
- HTTP status classification for errors raised by HTTP clients
- Structured error reporting and collection

Usage:
    from common.error_handler import handleError, ErrorCollector

    try:
        sink.write(deviceId, fields)
    except Exception as e:
        handleError(e, context={'operation': 'publish'}, reraise=False)
"""

import logging
import traceback
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for classification."""
    RETRYABLE = 'retryable'       # Transient, a later attempt may succeed
    AUTHENTICATION = 'auth'       # Credentials rejected
    CONFIGURATION = 'config'      # Config errors, fail fast
    DATA = 'data'                 # Data validation, log and skip
    SYSTEM = 'system'             # Unexpected errors


# ================================================================================
# Custom Exception Classes
# ================================================================================

class BaseError(Exception):
    """Base exception for all custom errors."""

    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def toDict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'type': self.__class__.__name__,
            'category': self.category.value,
            'message': self.message,
            'details': self.details
        }


class RetryableError(BaseError):
    """Error that may succeed later (network timeout, rate limit, etc.)."""
    category = ErrorCategory.RETRYABLE


class ConfigurationError(BaseError):
    """Configuration validation failure."""
    category = ErrorCategory.CONFIGURATION


class DataError(BaseError):
    """Data validation or processing error."""
    category = ErrorCategory.DATA


# ================================================================================
# Error Classification
# ================================================================================

def classifyHttpStatus(statusCode: int) -> ErrorCategory:
    """
    Classify an HTTP failure status.

    Args:
        statusCode: HTTP status code of a failed request

    Returns:
        AUTHENTICATION for 401/403, RETRYABLE for 408/429/5xx, DATA for
        other 4xx, SYSTEM otherwise
    """
    if statusCode in (401, 403):
        return ErrorCategory.AUTHENTICATION
    if statusCode in (408, 429) or 500 <= statusCode < 600:
        return ErrorCategory.RETRYABLE
    if 400 <= statusCode < 500:
        return ErrorCategory.DATA
    return ErrorCategory.SYSTEM


def classifyError(error: Exception) -> ErrorCategory:
    """
    Classify an error into a category.

    Args:
        error: Exception to classify

    Returns:
        ErrorCategory for the error
    """
    if isinstance(error, BaseError):
        return error.category

    # Walk the cause chain so wrapped transport errors classify as transient
    cause = error.__cause__
    errorTypes = [type(error).__name__.lower()]
    if cause is not None:
        errorTypes.append(type(cause).__name__.lower())
    errorMessage = str(error).lower()

    if any(term in name for name in errorTypes for term in ['timeout', 'connection', 'network']):
        return ErrorCategory.RETRYABLE

    if 'rate limit' in errorMessage:
        return ErrorCategory.RETRYABLE

    if any(term in errorMessage for term in ['unauthorized', 'forbidden', 'authenticat']):
        return ErrorCategory.AUTHENTICATION

    if any(term in errorMessage for term in ['config', 'missing', 'required']):
        return ErrorCategory.CONFIGURATION

    if any(term in errorMessage for term in ['validation', 'invalid', 'malformed', 'parse']):
        return ErrorCategory.DATA

    return ErrorCategory.SYSTEM


# ================================================================================
# Error Handling
# ================================================================================

def handleError(
    error: Exception,
    context: dict[str, Any] | None = None,
    reraise: bool = True
) -> dict[str, Any]:
    """
    Handle an error with logging and classification.

    Args:
        error: Exception that occurred
        context: Additional context information
        reraise: Whether to re-raise the exception

    Returns:
        Error details dictionary

    Raises:
        The original exception if reraise is True
    """
    category = classifyError(error)
    context = context or {}

    errorDetails = {
        'type': type(error).__name__,
        'category': category.value,
        'message': str(error),
        'context': context,
        'traceback': traceback.format_exc()
    }

    contextStr = f" | {' '.join(f'{k}={v}' for k, v in context.items())}" if context else ''

    if category == ErrorCategory.CONFIGURATION:
        logger.error(f"Configuration error: {error}{contextStr}")
    elif category == ErrorCategory.AUTHENTICATION:
        logger.error(f"Authentication error: {error}{contextStr}")
    elif category == ErrorCategory.DATA:
        logger.warning(f"Data error: {error}{contextStr}")
    elif category == ErrorCategory.RETRYABLE:
        logger.warning(f"Transient error: {error}{contextStr}")
    else:
        logger.error(f"Error: {error}{contextStr}", exc_info=True)

    if reraise:
        raise error

    return errorDetails


class ErrorCollector:
    """
    Collects errors so a multi-step operation can finish before reporting.

    Example:
        collector = ErrorCollector()
        for component in components:
            try:
                component.stop()
            except Exception as e:
                collector.add(e, component=component.name)

        if collector.hasErrors():
            collector.report()
    """

    def __init__(self):
        self.errors: list[dict[str, Any]] = []

    def add(self, error: Exception, **context: Any) -> None:
        """Add an error to the collection."""
        self.errors.append({
            'error': error,
            'category': classifyError(error).value,
            'message': str(error),
            'context': context
        })

    def hasErrors(self) -> bool:
        return len(self.errors) > 0

    def count(self) -> int:
        return len(self.errors)

    def report(self) -> None:
        """Log all collected errors."""
        if not self.errors:
            return

        logger.error(f"Collected {len(self.errors)} errors:")
        for i, err in enumerate(self.errors, 1):
            contextStr = ' '.join(f'{k}={v}' for k, v in err['context'].items())
            logger.error(f"  {i}. [{err['category']}] {err['message']} {contextStr}".rstrip())

    def clear(self) -> None:
        self.errors.clear()
