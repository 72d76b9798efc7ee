################################################################################
# File Name: secrets_loader.py
# Purpose/Description: Secure loading and resolution of environment variables
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Typed placeholder values for non-string settings
# 2026-10-19    | M. Cornelison | Removed getSecret
# ================================================================================
################################################################################

"""
Secrets management module.

Loads the charge monitor configuration and fills in secrets from the
environment:
- Loads variables from a .env file without overriding the real environment
- Resolves ${VAR_NAME} and ${VAR_NAME:default} placeholders
- A value that is exactly one placeholder is converted to bool/int/float
  when the resolved text looks like one, so "${SYNC_ENABLED:false}" becomes
  False rather than the string "false"
- Never logs secret values

Usage:
    from common.secrets_loader import loadConfigWithSecrets

    config = loadConfigWithSecrets('src/charge_config.json', envPath='.env')
    apiKey = config['sync']['firestore']['apiKey']
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ${VAR_NAME} or ${VAR_NAME:default}
PLACEHOLDER_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

_INT_PATTERN = re.compile(r'^-?\d+$')
_FLOAT_PATTERN = re.compile(r'^-?\d+\.\d*$|^-?\d*\.\d+$')


def loadEnvFile(envPath: Optional[str] = None) -> Dict[str, str]:
    """
    Load environment variables from a .env file.

    Lines are KEY=VALUE; blank lines and # comments are skipped and matching
    surrounding quotes are removed. Existing environment variables win.

    Args:
        envPath: Path to .env file (default: .env in the working directory)

    Returns:
        Names of the variables that were set, mapped to '[LOADED]'
    """
    envFile = Path(envPath or '.env')
    loadedVars: Dict[str, str] = {}

    if not envFile.exists():
        logger.debug(f".env file not found at {envFile}")
        return loadedVars

    try:
        with open(envFile, encoding='utf-8') as f:
            for lineNum, rawLine in enumerate(f, 1):
                line = rawLine.strip()
                if not line or line.startswith('#'):
                    continue

                if line.startswith('export '):
                    line = line[len('export '):].lstrip()

                key, sep, value = line.partition('=')
                if not sep:
                    logger.warning(f"Invalid line {lineNum} in .env: missing '='")
                    continue

                key = key.strip()
                value = value.strip()
                if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                if key not in os.environ:
                    os.environ[key] = value
                    loadedVars[key] = '[LOADED]'

        logger.info(f"Loaded {len(loadedVars)} variables from {envFile}")

    except OSError as e:
        logger.error(f"Error loading .env file: {e}")

    return loadedVars


def resolveSecrets(config: Any) -> Any:
    """
    Recursively resolve placeholders in configuration.

    Args:
        config: Configuration value (dict, list, str, or other)

    Returns:
        Configuration with placeholders resolved
    """
    if isinstance(config, dict):
        return {key: resolveSecrets(value) for key, value in config.items()}

    if isinstance(config, list):
        return [resolveSecrets(item) for item in config]

    if isinstance(config, str):
        resolved = _resolveString(config)
        if PLACEHOLDER_PATTERN.fullmatch(config) and resolved != config:
            return _coerceScalar(resolved)
        return resolved

    return config


def _resolveString(value: str) -> str:
    def replacer(match: re.Match) -> str:
        varName = match.group(1)
        defaultValue = match.group(2)

        envValue = os.environ.get(varName)
        if envValue is not None:
            logger.debug(f"Resolved {varName} from environment")
            return envValue
        if defaultValue is not None:
            logger.debug(f"Using default for {varName}")
            return defaultValue

        logger.warning(f"Environment variable {varName} not set and no default")
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replacer, value)


def _coerceScalar(value: str) -> Any:
    """Convert 'true'/'false'/numbers to their Python types."""
    lowered = value.strip().lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    if _INT_PATTERN.match(value.strip()):
        return int(value)
    if _FLOAT_PATTERN.match(value.strip()):
        return float(value)
    return value


def loadConfigWithSecrets(
    configPath: str,
    envPath: Optional[str] = None
) -> Dict[str, Any]:
    """
    Load the configuration file and resolve all placeholders.

    Args:
        configPath: Path to configuration JSON file
        envPath: Optional path to .env file

    Returns:
        Configuration dictionary with secrets resolved

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file is invalid JSON
    """
    loadEnvFile(envPath)

    configFile = Path(configPath)
    if not configFile.exists():
        raise FileNotFoundError(f"Configuration file not found: {configPath}")

    logger.info(f"Loading configuration from {configPath}")

    with open(configFile, encoding='utf-8') as f:
        config = json.load(f)

    config = resolveSecrets(config)

    logger.info("Configuration loaded and secrets resolved")
    return config


def maskSecret(value: Optional[str], showChars: int = 4) -> str:
    """
    Mask a secret value for display.

    Args:
        value: Secret value to mask
        showChars: Number of characters to show at start

    Returns:
        Masked string (e.g., "AIza***...")
    """
    if not value:
        return '[EMPTY]'

    if len(value) <= showChars:
        return '*' * len(value)

    return value[:showChars] + '*' * (len(value) - showChars)
