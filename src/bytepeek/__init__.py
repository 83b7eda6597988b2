"""
bytepeek - Bytecode Introspection for Python Callables
======================================================

bytepeek finds the compiled code behind a function, method or class and
renders it as text through an interchangeable disassembly strategy.

Main Components
---------------
- **Disassembler**: the entry point; resolve, disassemble, format
- **Resolver**: finds the marshalled code for a reference, whether it lives
  in memory, behind a module loader, in a zip archive or in a ``.pyc`` file
- **StrategyRegistry**: named byte-to-text strategies with fallback order
- **CodeCache / capture**: records class-body code as modules are imported

Quick Start
-----------
    >>> import bytepeek
    >>> print(bytepeek.disassemble("json:dumps", strategy="dis"))

Custom strategies:
    >>> from bytepeek import Disassembler
    >>> d = Disassembler()
    >>> d.registry.register("size", lambda data: f"{len(data)} bytes")
    >>> d.disassemble(len, strategy="size")

Or use the command-line tool:
    $ bytepeek json:dumps --strategy dis

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

from bytepeek.bytestream import drain
from bytepeek.cache import CodeCache, capture
from bytepeek.config import DisassemblerConfig
from bytepeek.disassembler import Disassembler, disassemble
from bytepeek.errors import (
    BytepeekError,
    StrategyError,
    StrategyUnknown,
    StrategyUnavailable,
    NoStrategyAvailable,
    ToolError,
    ResolutionError,
    SymbolNotFound,
    CodeUnreadable,
    FieldNotFound,
)
from bytepeek.fields import read_private_field, write_private_field
from bytepeek.formatter import format_listing
from bytepeek.host import CodeUnit, CPythonIntrospection, HostIntrospection
from bytepeek.references import CodeReference, RefKind, Symbol, classify
from bytepeek.registry import Strategy, StrategyRegistry
from bytepeek.resolver import CodeOrigin, InterpretedSource, Resolver
from bytepeek.strategies import ExternalToolStrategy, default_registry

__all__ = [
    # Version
    "__version__",
    # Service
    "Disassembler",
    "disassemble",
    "DisassemblerConfig",
    # Strategies
    "Strategy",
    "StrategyRegistry",
    "ExternalToolStrategy",
    "default_registry",
    # Resolution
    "Resolver",
    "CodeOrigin",
    "InterpretedSource",
    "CodeReference",
    "RefKind",
    "Symbol",
    "classify",
    "CodeUnit",
    "HostIntrospection",
    "CPythonIntrospection",
    "CodeCache",
    "capture",
    # Utilities
    "drain",
    "format_listing",
    "read_private_field",
    "write_private_field",
    # Errors
    "BytepeekError",
    "StrategyError",
    "StrategyUnknown",
    "StrategyUnavailable",
    "NoStrategyAvailable",
    "ToolError",
    "ResolutionError",
    "SymbolNotFound",
    "CodeUnreadable",
    "FieldNotFound",
]
