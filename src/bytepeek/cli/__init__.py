"""
bytepeek Command-Line Interface
===============================

- **bytepeek**: disassemble a function, method or class by name, or a
  compiled buffer read from a file

The tool is a Click-based CLI application with help and error reporting
shared through cli.errors.
"""

__all__ = ["main"]
