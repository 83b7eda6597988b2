"""
bytepeek - Python Bytecode Disassembler Command-Line Interface
==============================================================

Resolves a function, method or class by name and prints its bytecode as a
comment-prefixed listing.

Usage Examples
--------------
Disassemble a function:
    $ bytepeek json:dumps

Choose a strategy:
    $ bytepeek json.decoder:JSONDecoder.decode --strategy dis

Disassemble a compiled file:
    $ bytepeek build/mod.cpython-312.pyc --raw

List strategies and whether they can run:
    $ bytepeek --list-strategies

Output to file:
    $ bytepeek mypkg.models:Order -o order.txt

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click

from bytepeek import __version__
from bytepeek.cli.errors import handle_cli_exception
from bytepeek.config import DisassemblerConfig
from bytepeek.disassembler import Disassembler
from bytepeek.errors import CodeUnreadable, NoStrategyAvailable
from bytepeek.locators import COMPILED_SUFFIX, PYC_HEADER_SIZE, load_pyc
from bytepeek.references import Symbol


# =============================================================================
# Helpers
# =============================================================================

def read_raw(path: Path) -> bytes:
    """
    Read a --raw target, validating and dropping a ``.pyc`` header.

    A file is treated as compiled when it has a ``.pyc`` suffix or starts
    with a pyc-style magic (two version bytes then ``\\r\\n``). Anything else
    is passed to the strategy untouched.

    Raises:
        CodeUnreadable: the header is truncated, from another interpreter
            version, or not followed by a code object
    """
    data = path.read_bytes()
    if path.suffix != COMPILED_SUFFIX and data[2:4] != b"\r\n":
        return data
    try:
        load_pyc(data)
    except (ValueError, EOFError, TypeError) as e:
        raise CodeUnreadable(path.name, location=str(path), reason=str(e)) from e
    return data[PYC_HEADER_SIZE:]


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("target", required=False)
@click.option(
    "-s", "--strategy",
    type=str,
    default=None,
    help="Disassembly strategy to use (default: first available)",
)
@click.option(
    "--raw",
    is_flag=True,
    help="Treat TARGET as a file of marshalled code or a .pyc file",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "--list-strategies",
    is_flag=True,
    help="List registered strategies and exit",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="bytepeek")
def main(
    target: Optional[str],
    strategy: Optional[str],
    raw: bool,
    output: Optional[Path],
    list_strategies: bool,
    verbose: bool,
) -> None:
    """
    Disassemble Python bytecode.

    TARGET names a function, method or class, either as "module:Qual.name"
    or as a dotted path. With --raw, TARGET is a file instead.

    Examples:

        # Disassemble a library function
        bytepeek json:dumps

        # Disassemble a class body with the in-process disassembler
        bytepeek json.decoder:JSONDecoder --strategy dis

        # Hex dump of a compiled file
        bytepeek mod.pyc --raw --strategy hex
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if target is None and not list_strategies:
        raise click.UsageError("Missing argument 'TARGET'.")

    config = DisassemblerConfig.from_env()
    if strategy:
        config.strategy = strategy

    try:
        disassembler = Disassembler.from_config(config)

        if list_strategies:
            for entry in disassembler.strategies():
                state = "available" if entry.is_callable() else "unavailable"
                click.echo(f"{entry.name:<10} {state:<12} {entry.description}")
            return

        if raw:
            reference = read_raw(Path(target))
        else:
            # Resolve names relative to the working directory, as `python -m` does
            if os.getcwd() not in sys.path:
                sys.path.insert(0, os.getcwd())
            reference = Symbol(target)

        text = disassembler.disassemble(reference)
        if text is None:
            raise NoStrategyAvailable(disassembler.registry.names())

    except Exception as e:
        handle_cli_exception(e, verbose)

    active = disassembler.active
    if verbose:
        click.echo(f"Target: {target}", err=True)
        click.echo(f"Strategy: {active.name if active else 'none'}", err=True)

    result = f"; Disassembly of {target}\n{text}"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        except IOError as e:
            click.echo(f"Error writing {output}: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result, nl=False)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
