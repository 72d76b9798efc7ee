################################################################################
# File Name: __init__.py
# Purpose/Description: Main application package initialization
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Charge monitor package layout
# ================================================================================
################################################################################

"""
Charge monitor application.

This package contains the application source code organized as:
- common/: Shared utilities (config, logging, errors)
- telemetry/: Sample sources, history, estimator and the telemetry monitor
- simulator/: Simulated battery for tests and --simulate
- hardware/: Linux sysfs battery and thermal source
- identity/: Stable device identifier
- sync/: Debounced publisher and document sinks

Entry point: main.py
"""

__version__ = '1.0.0'
