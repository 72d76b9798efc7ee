################################################################################
# File Name: estimator.py
# Purpose/Description: Time-to-full charge estimation and duration formatting
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
Charge estimator.

Estimates the seconds remaining until the battery is full from the samples in
a HistoryBuffer. The rate is taken across the whole window (oldest to newest)
rather than averaged over consecutive pairs, which smooths the noise that
irregular poll intervals introduce.

Usage:
    from telemetry.estimator import describeEstimate, estimateTimeToFull

    estimate = estimateTimeToFull(history, isCharging=True)
    label = describeEstimate(estimate)   # e.g. "1 hr 12 min"
"""

import logging
import math
from typing import Optional

from .history import HistoryBuffer
from .types import (
    DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
    FULL_CHARGE_LEVEL,
    LABEL_CALCULATING,
    LABEL_FULL_CHARGE,
    LABEL_NOT_CHARGING,
    ChargeEstimate,
    EstimateKind,
)

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60
MINUTES_PER_HOUR = 60


def estimateTimeToFull(
    history: HistoryBuffer,
    isCharging: bool,
    minimumWindowSeconds: float = DEFAULT_MINIMUM_ESTIMATE_WINDOW_SECONDS,
) -> ChargeEstimate:
    """
    Estimate the time until the battery is full.

    Args:
        history: Samples collected during the current charge session
        isCharging: Whether the device is actively charging
        minimumWindowSeconds: Oldest-to-newest span required for an estimate

    Returns:
        ChargeEstimate (NOT_CHARGING, FULL, STILL_CALCULATING or ESTIMATE)

    Example:
        # 0.50 -> 0.60 over 120s leaves 0.40 at 0.10/120s per second
        estimateTimeToFull(history, True).seconds  # 480.0
    """
    if not isCharging:
        return ChargeEstimate.notCharging()

    first = history.first()
    last = history.last()
    if first is None or last is None:
        return ChargeEstimate.stillCalculating()

    if last.level >= FULL_CHARGE_LEVEL:
        return ChargeEstimate.full()

    if len(history) < 2:
        return ChargeEstimate.stillCalculating()

    deltaLevel = last.level - first.level
    deltaTime = last.timestamp - first.timestamp

    # Short windows and flat/negative deltas are jitter, not a rate
    if deltaTime <= minimumWindowSeconds or deltaLevel <= 0:
        logger.debug(
            f"Insufficient charge window | deltaLevel={deltaLevel:.4f}, "
            f"deltaTime={deltaTime:.1f}s"
        )
        return ChargeEstimate.stillCalculating()

    rate = deltaLevel / deltaTime
    if rate <= 0:
        return ChargeEstimate.stillCalculating()

    remainingSeconds = (FULL_CHARGE_LEVEL - last.level) / rate
    logger.debug(
        f"Charge estimate | rate={rate:.6f}/s, remaining={remainingSeconds:.0f}s"
    )
    return ChargeEstimate.fromSeconds(remainingSeconds)


def formatDuration(seconds: float) -> Optional[str]:
    """
    Format seconds as a short "H hr M min" string.

    Only hours and minutes are shown, rounded to the nearest minute. A zero
    part is dropped when the other part is present.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string, or None if the value cannot be formatted

    Example:
        formatDuration(480)    # "8 min"
        formatDuration(5400)   # "1 hr 30 min"
        formatDuration(3600)   # "1 hr"
    """
    if seconds is None or math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return None

    totalMinutes = int(math.floor(seconds / SECONDS_PER_MINUTE + 0.5))
    hours, minutes = divmod(totalMinutes, MINUTES_PER_HOUR)

    if hours and minutes:
        return f"{hours} hr {minutes} min"
    if hours:
        return f"{hours} hr"
    return f"{minutes} min"


def describeEstimate(estimate: ChargeEstimate) -> str:
    """
    Map an estimate to its display string.

    Args:
        estimate: Estimator result

    Returns:
        "Full Charge", "Not Charging", "Calculating..." or a formatted duration
    """
    if estimate.kind == EstimateKind.FULL:
        return LABEL_FULL_CHARGE
    if estimate.kind == EstimateKind.NOT_CHARGING:
        return LABEL_NOT_CHARGING
    if estimate.kind == EstimateKind.ESTIMATE and estimate.seconds is not None:
        return formatDuration(estimate.seconds) or LABEL_CALCULATING
    return LABEL_CALCULATING
