################################################################################
# File Name: logging_config.py
# Purpose/Description: Structured logging configuration with identifier masking
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Identifier masking for device ids, API keys, tokens
# 2026-10-19    | M. Cornelison | Removed unused context logging helpers
# ================================================================================
################################################################################

"""
Logging configuration module.

Provides structured logging with:
- Configurable log levels
- Console and file output
- Masking of device identifiers and credentials
- Consistent pipe-delimited formatting

Usage:
    from common.logging_config import setupLogging, getLogger

    setupLogging(level='INFO', logFile='logs/charge_monitor.log')
    logger = getLogger(__name__)
    logger.info("Monitor started | interval=30")
"""

import logging
import re
import sys
from pathlib import Path
from typing import Any

# Default log format
DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s | %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Leading characters of a device id left visible for correlation
VISIBLE_ID_PREFIX = 8

# Applied in order; each entry is (pattern, replacement)
MASKING_RULES: list[tuple[re.Pattern, Any]] = [
    # Bearer tokens in headers or messages
    (re.compile(r'(Bearer\s+)[A-Za-z0-9\-._~+/]+=*'), r'\1[TOKEN_MASKED]'),
    # Google API keys
    (re.compile(r'\bAIza[0-9A-Za-z\-_]{35}\b'), '[API_KEY_MASKED]'),
    # key= query parameters in logged URLs
    (re.compile(r'([?&]key=)[^&\s]+'), r'\1[API_KEY_MASKED]'),
    # Device identifiers (UUIDs)
    (
        re.compile(
            r'\b([0-9a-fA-F]{8})-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b'
        ),
        r'\1-[ID_MASKED]',
    ),
]


def maskIdentifiers(message: str) -> str:
    """
    Mask device identifiers and credentials in a string.

    Args:
        message: Text to mask

    Returns:
        Text with identifiers and credentials masked

    Example:
        >>> maskIdentifiers('Authorization: Bearer abc.def')
        'Authorization: Bearer [TOKEN_MASKED]'
    """
    for pattern, replacement in MASKING_RULES:
        message = pattern.sub(replacement, message)
    return message


class IdentifierMaskingFilter(logging.Filter):
    """
    Logging filter that masks identifiers in log messages.

    Masks:
    - Device UUIDs (first 8 hex digits kept)
    - Google API keys and key= URL parameters
    - Bearer tokens

    %-style arguments are merged into the message first so values passed
    as arguments are masked too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask identifiers in the log record.

        Args:
            record: Log record to filter

        Returns:
            True (always allows record, but modifies it)
        """
        if isinstance(record.msg, str):
            if record.args:
                # A bad format string is left for the handler to report
                try:
                    merged = record.getMessage()
                except (TypeError, ValueError):
                    merged = None
                if merged is not None:
                    record.msg, record.args = merged, None
            record.msg = maskIdentifiers(record.msg)

        return True


def setupLogging(
    level: str = 'INFO',
    logFormat: str | None = None,
    logFile: str | None = None,
    enableMasking: bool = True
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        logFormat: Custom format string
        logFile: Optional file path for log output
        enableMasking: Whether to mask identifiers and credentials

    Returns:
        Root logger instance
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(getattr(logging, level.upper(), logging.INFO))
    rootLogger.handlers.clear()

    formatter = logging.Formatter(
        fmt=logFormat or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if logFile:
        Path(logFile).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logFile, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        if enableMasking:
            handler.addFilter(IdentifierMaskingFilter())
        rootLogger.addHandler(handler)

    rootLogger.info(f"Logging configured | level={level}, file={logFile or 'none'}")

    return rootLogger


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
