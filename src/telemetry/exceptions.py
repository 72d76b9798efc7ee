################################################################################
# File Name: exceptions.py
# Purpose/Description: Telemetry monitoring exceptions
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
Telemetry monitoring exceptions.

The monitor itself never raises across its boundary while running; these are
raised for invalid configuration and by sample sources that cannot read.

Exception hierarchy:
    BaseError (common.error_handler)
    └── TelemetryError
        ├── TelemetryConfigurationError (also ConfigurationError)
        └── SampleSourceError (also DataError)
"""

from common.error_handler import BaseError, ConfigurationError, DataError


class TelemetryError(BaseError):
    """
    Base exception for telemetry errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context as a dictionary
    """

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message


class TelemetryConfigurationError(TelemetryError, ConfigurationError):
    """
    Error in telemetry configuration.

    Raised for invalid intervals, history capacity, or source settings.
    """
    pass


class SampleSourceError(TelemetryError, DataError):
    """
    Error reading from a sample source.

    Raised by sources when the underlying battery or thermal reading fails.
    The monitor catches it and degrades to an unavailable reading.
    """
    pass
