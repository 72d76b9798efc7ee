################################################################################
# File Name: history.py
# Purpose/Description: Bounded FIFO window of recent battery samples
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
Bounded history of battery samples used for charge-rate estimation.

The buffer keeps samples in insertion order and evicts the oldest once the
capacity is exceeded. It does not reorder or reject out-of-order timestamps.

Usage:
    from telemetry.history import HistoryBuffer

    history = HistoryBuffer(capacity=5)
    history.record(Sample(level=0.50, timestamp=time.monotonic()))
    oldest, newest = history.first(), history.last()
"""

from collections import deque
from typing import Iterator, List, Optional

from .exceptions import TelemetryConfigurationError
from .types import DEFAULT_HISTORY_CAPACITY, MIN_HISTORY_CAPACITY, Sample


class HistoryBuffer:
    """
    Insertion-ordered, fixed-capacity window of samples.

    Example:
        history = HistoryBuffer()
        for sample in samples:
            history.record(sample)
        len(history)  # never more than history.capacity
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        """
        Initialize the buffer.

        Args:
            capacity: Maximum number of samples kept (minimum 2)

        Raises:
            TelemetryConfigurationError: If capacity is below the minimum
        """
        if capacity < MIN_HISTORY_CAPACITY:
            raise TelemetryConfigurationError(
                f"History capacity must be at least {MIN_HISTORY_CAPACITY}",
                details={'capacity': capacity}
            )
        self._samples: deque[Sample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of samples kept."""
        return self._samples.maxlen or 0

    def record(self, sample: Sample) -> None:
        """Append a sample, evicting the oldest beyond capacity."""
        self._samples.append(sample)

    def clear(self) -> None:
        """Remove all samples."""
        self._samples.clear()

    def first(self) -> Optional[Sample]:
        """Oldest sample, or None if empty."""
        return self._samples[0] if self._samples else None

    def last(self) -> Optional[Sample]:
        """Newest sample, or None if empty."""
        return self._samples[-1] if self._samples else None

    def isEmpty(self) -> bool:
        return not self._samples

    def samples(self) -> List[Sample]:
        """Copy of the samples, oldest first."""
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(list(self._samples))

    def __repr__(self) -> str:
        return f"HistoryBuffer(capacity={self.capacity}, size={len(self)})"
