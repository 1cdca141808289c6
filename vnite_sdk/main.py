"""Vnite plugin SDK command-line interface.

Resolves a subcommand and runs it as a child process that shares this
process's standard streams and working directory.
"""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Dict, List, Optional

from vnite_sdk.utils.exceptions import VniteError

HELP_TOKENS = ('help', '--help', '-h')

COMMAND_MODULES: Dict[str, str] = {
    'pack': 'vnite_sdk.plugin_system.cli',
}

SCAFFOLD_COMMAND = 'npm create @vnite/plugin'

USAGE = f"""
Vnite Plugin SDK CLI

Usage:
  vnite-plugin-sdk <command> [options]

Commands:
  pack [path]      Package plugin as .vnpkg file
  help             Show help information

Examples:
  vnite-plugin-sdk pack ./my-plugin
  vnite-plugin-sdk help

Create new plugin:
  {SCAFFOLD_COMMAND} [my-plugin]
"""


class CommandError(VniteError):
    """Exception raised when a subcommand cannot be run or fails."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message, details={'exit_code': exit_code})
        self.exit_code = exit_code


def show_help() -> None:
    print(USAGE)


def run_module(module: str, args: Optional[List[str]] = None) -> None:
    """Run a Python module as a child process and wait for it.

    The child inherits stdin, stdout, stderr and the working directory.

    Args:
        module: Dotted module name run with ``python -m``
        args: Arguments passed to the module

    Raises:
        CommandError: If the child cannot be started or exits non-zero
    """
    try:
        completed = subprocess.run(
            [sys.executable, '-m', module, *(args or [])],
            cwd=os.getcwd(),
        )
    except OSError as e:
        raise CommandError(str(e)) from e

    if completed.returncode != 0:
        # Negative codes mean the child was killed by a signal
        exit_code = completed.returncode if completed.returncode > 0 else 1
        raise CommandError(f'exit code: {completed.returncode}', exit_code=exit_code)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line interface.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args[0] in HELP_TOKENS:
        show_help()
        return 0

    command, command_args = args[0], args[1:]
    module = COMMAND_MODULES.get(command)
    if module is None:
        print(f'Unknown command: {command}', file=sys.stderr)
        print(f'Use "{SCAFFOLD_COMMAND}" to create a new plugin')
        print('Run "vnite-plugin-sdk help" to see available commands')
        return 1

    try:
        run_module(module, command_args)
    except CommandError as e:
        print(f'Command execution failed: {e}', file=sys.stderr)
        return e.exit_code

    return 0


if __name__ == '__main__':
    sys.exit(main())
