"""
bytepeek Error Hierarchy
========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from BytepeekError, allowing callers to catch all
bytepeek errors with a single except clause if desired.

Exception Hierarchy
-------------------
BytepeekError (base)
├── StrategyError (strategy registry)
│   ├── StrategyUnknown - no strategy registered under that name
│   ├── StrategyUnavailable - registered, but its backing tool is missing
│   ├── NoStrategyAvailable - no registered strategy is callable
│   └── ToolError - the external disassembler failed
├── ResolutionError (code-source resolution)
│   ├── SymbolNotFound - a symbol does not name an importable object
│   └── CodeUnreadable - bytes could not be read from any code origin
└── FieldNotFound - reflective field lookup failed

Error messages name the thing that failed and, for resolution errors, the
code origin and location that were attempted:
    cannot read code for 'pkg.mod:Outer' via archive member (/x/app.zip:pkg/mod.pyc): bad magic

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BytepeekError(Exception):
    """
    Base exception for all bytepeek errors.

        try:
            text = disassemble(my_function)
        except BytepeekError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Strategy Exceptions
# =============================================================================

class StrategyError(BytepeekError):
    """
    Base exception for strategy registry errors.

    Attributes:
        name: The strategy name involved (None for unnamed selection)
    """

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class StrategyUnknown(StrategyError):
    """No strategy is registered under the requested name."""

    def __init__(self, name: str, known: Optional[list[str]] = None):
        self.known = list(known or [])
        message = f"unknown disassembly strategy '{name}'"
        if self.known:
            message += f" (registered: {', '.join(self.known)})"
        super().__init__(message, name)


class StrategyUnavailable(StrategyError):
    """
    The strategy is registered but cannot be called right now.

    Typically the external tool backing it is not installed or not on PATH.
    Availability is probed on every selection, so installing the tool later
    in the process lifetime makes the strategy selectable again.
    """

    def __init__(self, name: str):
        super().__init__(f"disassembly strategy '{name}' is not available", name)


class NoStrategyAvailable(StrategyError):
    """
    None of the registered strategies is callable.

    Unnamed selection only logs a warning for this condition; this exception
    is raised by StrategyRegistry.require() for callers that cannot proceed
    without output.
    """

    def __init__(self, known: Optional[list[str]] = None):
        self.known = list(known or [])
        message = "no suitable disassembly strategy"
        if self.known:
            message += f" (tried: {', '.join(self.known)})"
        super().__init__(message)


class ToolError(StrategyError):
    """
    The external disassembler tool failed.

    Attributes:
        command: The command line that was executed
        stderr: Captured standard error output (may be empty)
        return_code: Process exit status (None if it never ran or timed out)
    """

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        command: Optional[list[str]] = None,
        stderr: str = "",
        return_code: Optional[int] = None,
    ):
        self.command = list(command or [])
        self.stderr = stderr
        self.return_code = return_code
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message, name)


# =============================================================================
# Resolution Exceptions
# =============================================================================

class ResolutionError(BytepeekError):
    """Base exception for errors while turning a reference into bytes."""
    pass


class SymbolNotFound(ResolutionError):
    """A symbol does not name an importable object."""

    def __init__(self, symbol: str, reason: str = ""):
        self.symbol = symbol
        message = f"cannot resolve symbol '{symbol}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CodeUnreadable(ResolutionError):
    """
    Compiled bytes could not be read for a code unit.

    Attributes:
        unit: Display name of the code unit ("module:qualname")
        origin: The code origin that was attempted (None if none applied)
        location: The path, archive member or loader that was read
        reason: Underlying failure description
    """

    def __init__(
        self,
        unit: str,
        origin=None,
        location: Optional[str] = None,
        reason: str = "",
    ):
        self.unit = unit
        self.origin = origin
        self.location = location
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"cannot read code for '{self.unit}'"]
        if self.origin is not None:
            parts.append(f" via {self.origin}")
        if self.location:
            parts.append(f" ({self.location})")
        if self.reason:
            parts.append(f": {self.reason}")
        return "".join(parts)


# =============================================================================
# Reflection Exceptions
# =============================================================================

class FieldNotFound(BytepeekError):
    """
    A reflective field lookup found no attribute of that name.

    This indicates a structural mismatch with the expected runtime internals
    and should not occur with a supported interpreter version.
    """

    def __init__(self, owner: type, name: str):
        self.owner = owner
        self.field_name = name
        super().__init__(
            f"no field '{name}' on {owner.__module__}.{owner.__qualname__}"
        )
