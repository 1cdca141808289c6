"""Command-line entry point for packaging a Vnite plugin.

The dispatcher runs this module as a child process
(``python -m vnite_sdk.plugin_system.cli``); it can also be used directly
through the ``vnite-plugin-pack`` console script.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from vnite_sdk.core.config_manager import DEFAULT_CONFIG_FILE, ConfigManager
from vnite_sdk.core.logging_manager import LoggingManager, get_logger
from vnite_sdk.plugin_system.package import PluginPackager

logger = get_logger('vnite_sdk.plugin_system.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vnite-plugin-sdk pack',
        description='Package a Vnite plugin project as a .vnpkg file',
    )
    parser.add_argument('path', nargs='?', default='.', help='Plugin project directory (default: current directory)')
    parser.add_argument('--config', help=f'Path to a configuration file (default: <path>/{DEFAULT_CONFIG_FILE})')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log debug information to stderr')
    return parser


def package_command(args: argparse.Namespace) -> int:
    """Handle the pack command.

    Args:
        args: Command-line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging_manager: Optional[LoggingManager] = None
    try:
        project_root = Path(args.path)
        config_path = Path(args.config) if args.config else project_root / DEFAULT_CONFIG_FILE

        config_manager = ConfigManager(config_path=config_path, config_required=bool(args.config))
        config_manager.initialize()

        logging_manager = LoggingManager(config_manager)
        logging_manager.initialize()
        if args.verbose:
            logging_manager.set_level('debug')

        packager = PluginPackager(project_root, settings=config_manager.packaging_settings())
        packager.pack()
        return 0

    except Exception as e:
        if logging_manager is not None and logging_manager.initialized:
            logger.debug('Packaging failed', exc_info=True)
        print(f'Packaging failed: {e}', file=sys.stderr)
        return 1

    finally:
        if logging_manager is not None:
            logging_manager.shutdown()


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the pack command.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    return package_command(parser.parse_args(args))


if __name__ == '__main__':
    sys.exit(main())
