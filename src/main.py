################################################################################
# File Name: main.py
# Purpose/Description: Charge monitor entry point
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | M. Cornelison | Charge monitor workflow, dry run logs sync records
# ================================================================================
################################################################################

"""
Charge monitor entry point.

This module provides the command line entry point with:
- CLI argument parsing
- Configuration loading and validation
- Logging setup from the 'logging' config section
- Workflow orchestration with graceful SIGINT/SIGTERM shutdown
- Exit codes

Usage:
    python src/main.py --help
    python src/main.py --config path/to/config.json
    python src/main.py --simulate --dry-run
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Resolve project paths relative to this script (not CWD)
srcPath = Path(__file__).resolve().parent
projectRoot = srcPath.parent
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

DEFAULT_CONFIG = str(srcPath / 'charge_config.json')
DEFAULT_ENV = str(projectRoot / '.env')

from common.config_validator import ConfigValidationError, ConfigValidator
from common.error_handler import ConfigurationError, handleError
from common.logging_config import getLogger, setupLogging
from common.secrets_loader import loadConfigWithSecrets, maskSecret

__version__ = '1.0.0'

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_UNKNOWN_ERROR = 3


def parseArgs(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Battery charge monitor with time-to-full estimation and cloud sync',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py                      Run with default config
  python main.py --config my.json     Run with custom config
  python main.py --simulate           Use the simulated battery
  python main.py --dry-run            Log sync records instead of writing them
  python main.py --verbose            Run with debug logging
        '''
    )

    parser.add_argument(
        '--config', '-c',
        default=DEFAULT_CONFIG,
        help='Path to configuration file (default: src/charge_config.json)'
    )

    parser.add_argument(
        '--env-file', '-e',
        default=DEFAULT_ENV,
        help='Path to environment file (default: .env)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Log sync records instead of sending them to Firestore'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    parser.add_argument(
        '--simulate', '-s',
        action='store_true',
        help='Use the simulated battery instead of the system battery'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def loadConfiguration(
    configPath: str,
    envPath: Optional[str] = None
) -> Dict[str, Any]:
    """
    Load and validate configuration.

    Args:
        configPath: Path to configuration file
        envPath: Path to environment file

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    logger = getLogger(__name__)

    try:
        config = loadConfigWithSecrets(configPath, envPath)
        config = ConfigValidator().validate(config)

        logger.info(f"Configuration loaded from {configPath}")
        return config

    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {e}") from e
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        raise ConfigurationError(f"Configuration file is not valid JSON: {e}") from e
    except ConfigValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def applyLoggingConfig(config: Dict[str, Any], verbose: bool = False) -> None:
    """
    Reconfigure logging from the 'logging' section.

    Args:
        config: Validated configuration dictionary
        verbose: Force DEBUG level
    """
    loggingConfig = config.get('logging', {})
    setupLogging(
        level='DEBUG' if verbose else loggingConfig.get('level', 'INFO'),
        logFile=loggingConfig.get('file'),
        enableMasking=loggingConfig.get('maskIdentifiers', True),
    )


def logSyncSettings(config: Dict[str, Any], dryRun: bool) -> None:
    """Log the sync target with credentials masked."""
    logger = getLogger(__name__)
    syncConfig = config.get('sync', {})
    firestoreConfig = syncConfig.get('firestore', {})

    if dryRun:
        logger.info("DRY RUN MODE - sync records will be logged, not sent")
    elif not syncConfig.get('enabled', False):
        logger.info("Cloud sync disabled - sync records will be logged")
        return

    logger.info(
        f"Sync target | project={firestoreConfig.get('projectId') or '[NOT SET]'}, "
        f"collection={firestoreConfig.get('collection')}, "
        f"apiKey={maskSecret(firestoreConfig.get('apiKey'))}, "
        f"authToken={maskSecret(firestoreConfig.get('authToken'))}"
    )


def runWorkflow(
    config: Dict[str, Any],
    dryRun: bool = False,
    simulate: bool = False
) -> int:
    """
    Run the charge monitor until shutdown.

    Registers signal handlers before starting the orchestrator and restores
    them afterwards.

    Args:
        config: Validated configuration dictionary
        dryRun: If True, sync records are logged instead of sent
        simulate: If True, use the simulated battery

    Returns:
        Exit code: 0 for clean shutdown, non-zero for errors
    """
    from orchestrator import createOrchestratorFromConfig

    logger = getLogger(__name__)
    logSyncSettings(config, dryRun)

    orchestrator = createOrchestratorFromConfig(config, simulate=simulate, dryRun=dryRun)
    orchestrator.registerSignalHandlers()

    try:
        orchestrator.start()
        orchestrator.runLoop()
        exitCode = orchestrator.stop()

    except KeyboardInterrupt:
        logger.warning("Startup interrupted by user")
        exitCode = orchestrator.stop()

    except Exception as e:
        logger.error(f"Workflow error: {e}")
        exitCode = orchestrator.stop()
        if exitCode == EXIT_SUCCESS:
            exitCode = EXIT_RUNTIME_ERROR

    finally:
        orchestrator.restoreSignalHandlers()

    logger.info("Workflow completed")
    return exitCode


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parseArgs(argv)

    setupLogging(level='DEBUG' if args.verbose else 'INFO')
    logger = getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Charge monitor starting...")
    if args.simulate:
        logger.info("*** Running with SIMULATED battery ***")
    logger.info("=" * 60)

    try:
        config = loadConfiguration(args.config, args.env_file)
        applyLoggingConfig(config, verbose=args.verbose)

        exitCode = runWorkflow(
            config,
            dryRun=args.dry_run,
            simulate=args.simulate
        )

        if exitCode == EXIT_SUCCESS:
            logger.info("Charge monitor completed successfully")
        else:
            logger.warning(f"Charge monitor completed with exit code {exitCode}")

        return exitCode

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    except KeyboardInterrupt:
        logger.warning("Charge monitor interrupted by user")
        return EXIT_RUNTIME_ERROR

    except Exception as e:
        handleError(e, reraise=False)
        return EXIT_UNKNOWN_ERROR

    finally:
        logger.info("=" * 60)
        logger.info("Charge monitor finished")
        logger.info("=" * 60)


if __name__ == '__main__':
    sys.exit(main())
