"""
CLI Error Handling
==================

Provides consistent error handling and exit codes for the command-line tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    DISASSEMBLY_ERROR = 1  # Strategy or code-resolution failure
    INVALID_ARGS = 2       # Invalid arguments, missing files, unknown symbols
    INTERNAL_ERROR = 3     # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Strategy")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from bytepeek.errors import BytepeekError, StrategyUnknown, SymbolNotFound

    if isinstance(error, (SymbolNotFound, StrategyUnknown)):
        # The user named something that does not exist
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, BytepeekError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.DISASSEMBLY_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
