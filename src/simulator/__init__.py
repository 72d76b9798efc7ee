################################################################################
# File Name: __init__.py
# Purpose/Description: Simulator subpackage for hardware-free charge monitoring
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
Simulator Subpackage.

Exports:
    - SimulatedSampleSource: Settable in-memory sample source with charge model
    - createSimulatedSourceFromConfig: Factory from 'source.simulated' config
"""

from .simulated_source import (
    DEFAULT_CHARGE_RATE_PER_MINUTE,
    DEFAULT_DRAIN_RATE_PER_MINUTE,
    DEFAULT_DRIVER_TICK_SECONDS,
    DEFAULT_INITIAL_LEVEL,
    DEFAULT_TIME_SCALE,
    SimulatedSampleSource,
    createSimulatedSourceFromConfig,
)

__all__ = [
    'SimulatedSampleSource',
    'createSimulatedSourceFromConfig',
    'DEFAULT_INITIAL_LEVEL',
    'DEFAULT_CHARGE_RATE_PER_MINUTE',
    'DEFAULT_DRAIN_RATE_PER_MINUTE',
    'DEFAULT_DRIVER_TICK_SECONDS',
    'DEFAULT_TIME_SCALE',
]
