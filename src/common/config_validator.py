################################################################################
# File Name: config_validator.py
# Purpose/Description: Configuration validation with required fields and defaults
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Charge monitor defaults and field type checks
# ================================================================================
################################################################################

"""
Configuration validation module.

Validates the charge monitor configuration:
- Required field checking
- Default value application (dot-notation keys)
- Field type checking
- Clear error messages for missing/invalid fields

Usage:
    from common.config_validator import ConfigValidator

    validator = ConfigValidator()
    config = validator.validate(rawConfig)
    config['telemetry']['chargingPollIntervalSeconds']  # 10 unless overridden
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        missingFields: Optional[List[str]] = None,
        invalidFields: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.missingFields = missingFields or []
        self.invalidFields = invalidFields or []


REQUIRED_KEYS: List[str] = [
    'application.name',
]

DEFAULTS: Dict[str, Any] = {
    'application.name': 'ChargeMonitor',
    'application.version': '1.0.0',
    'logging.level': 'INFO',
    'logging.file': None,
    'logging.maskIdentifiers': True,
    'telemetry.enabled': True,
    'telemetry.historyCapacity': 5,
    'telemetry.chargingPollIntervalSeconds': 10,
    'telemetry.idlePollIntervalSeconds': 30,
    'telemetry.minimumEstimateWindowSeconds': 60,
    'telemetry.statusLogIntervalSeconds': 60,
    'source.type': 'simulated',
    'source.simulated.initialLevel': 0.5,
    'source.simulated.initialState': 'unplugged',
    'source.simulated.initialThermal': 'nominal',
    'source.simulated.chargeRatePerMinute': 0.01,
    'source.simulated.drainRatePerMinute': 0.0,
    'source.simulated.autoDrive': True,
    'source.simulated.tickSeconds': 1.0,
    'source.simulated.timeScale': 1.0,
    'source.sysfs.powerSupplyRoot': '/sys/class/power_supply',
    'source.sysfs.thermalRoot': '/sys/class/thermal',
    'source.sysfs.watchIntervalSeconds': 5.0,
    'source.sysfs.thermalThresholdsCelsius.fair': 45.0,
    'source.sysfs.thermalThresholdsCelsius.serious': 60.0,
    'source.sysfs.thermalThresholdsCelsius.critical': 80.0,
    'identity.storePath': '~/.charge_monitor/device_id',
    'sync.enabled': False,
    'sync.debounceSeconds': 1.0,
    'sync.firestore.collection': 'devices',
    'sync.firestore.baseUrl': 'https://firestore.googleapis.com/v1',
    'sync.firestore.timeoutSeconds': 10.0,
}

# Expected types for fields that must not silently carry the wrong kind of value
FIELD_TYPES: Dict[str, Tuple[type, ...]] = {
    'telemetry.enabled': (bool,),
    'telemetry.historyCapacity': (int,),
    'telemetry.chargingPollIntervalSeconds': (int, float),
    'telemetry.idlePollIntervalSeconds': (int, float),
    'telemetry.minimumEstimateWindowSeconds': (int, float),
    'source.type': (str,),
    'sync.enabled': (bool,),
    'sync.debounceSeconds': (int, float),
    'sync.firestore.timeoutSeconds': (int, float),
}


class ConfigValidator:
    """
    Validates configuration dictionaries.

    Attributes:
        requiredKeys: Required configuration keys (dot notation)
        defaults: Default values for optional fields (dot notation)
        fieldTypes: Expected types per key (dot notation)
    """

    def __init__(
        self,
        requiredKeys: Optional[List[str]] = None,
        defaults: Optional[Dict[str, Any]] = None,
        fieldTypes: Optional[Dict[str, Tuple[type, ...]]] = None
    ):
        """
        Initialize the validator.

        Args:
            requiredKeys: Required keys in dot notation (e.g., 'application.name')
            defaults: Default values in dot notation
            fieldTypes: Expected types in dot notation
        """
        self.requiredKeys = REQUIRED_KEYS if requiredKeys is None else requiredKeys
        self.defaults = DEFAULTS if defaults is None else defaults
        self.fieldTypes = FIELD_TYPES if fieldTypes is None else fieldTypes

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and complete configuration.

        Defaults are applied before the required check, so a required key
        with a default is only missing when it is explicitly empty.

        Args:
            config: Raw configuration dictionary

        Returns:
            Validated configuration with defaults applied

        Raises:
            ConfigValidationError: If required fields are missing or a
                field has the wrong type
        """
        config = self._applyDefaults(config)

        missingFields = self._validateRequired(config)
        if missingFields:
            raise ConfigValidationError(
                f"Missing required configuration fields: {', '.join(missingFields)}",
                missingFields=missingFields
            )

        invalidFields = self._validateTypes(config)
        if invalidFields:
            raise ConfigValidationError(
                f"Invalid configuration field types: {', '.join(invalidFields)}",
                invalidFields=invalidFields
            )

        logger.info("Configuration validated successfully")
        return config

    def _validateRequired(self, config: Dict[str, Any]) -> List[str]:
        return [key for key in self.requiredKeys if not self.getNestedValue(config, key)]

    def _validateTypes(self, config: Dict[str, Any]) -> List[str]:
        invalid = []
        for key, expected in self.fieldTypes.items():
            value = self.getNestedValue(config, key)
            if value is None:
                continue
            # bool is an int subclass; only accept it where bool is expected
            if isinstance(value, bool) and bool not in expected:
                invalid.append(key)
            elif not isinstance(value, expected):
                invalid.append(key)
        return invalid

    def _applyDefaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        for key, defaultValue in self.defaults.items():
            if not self._hasNestedKey(config, key):
                self._setNestedValue(config, key, defaultValue)
                logger.debug(f"Applied default for {key}: {defaultValue}")

        return config

    def getNestedValue(self, config: Dict[str, Any], key: str) -> Any:
        """
        Get a value from a nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-notation key (e.g., 'sync.firestore.projectId')

        Returns:
            Value if found, None otherwise
        """
        value: Any = config
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return None
        return value

    def _hasNestedKey(self, config: Dict[str, Any], key: str) -> bool:
        value: Any = config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return False
            value = value[part]
        return True

    def _setNestedValue(self, config: Dict[str, Any], key: str, value: Any) -> None:
        parts = key.split('.')
        current = config

        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def validateField(
        self,
        config: Dict[str, Any],
        key: str,
        expectedType: type,
        allowNone: bool = False
    ) -> bool:
        """
        Validate a specific field's type.

        Args:
            config: Configuration dictionary
            key: Dot-notation key to validate
            expectedType: Expected Python type
            allowNone: Whether None is acceptable

        Returns:
            True if valid, False otherwise
        """
        value = self.getNestedValue(config, key)

        if value is None:
            return allowNone

        return isinstance(value, expectedType)


def validateConfig(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate configuration with the charge monitor defaults.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If validation fails
    """
    return ConfigValidator().validate(config)
