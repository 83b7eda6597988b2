"""
Code References
===============

A code reference is anything a caller may hand to the disassembler: a
function, a method, a class, a symbol naming one of those, or a raw byte
buffer. classify() tags the value with its RefKind once, and the resolver
dispatches on that tag.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import functools
import types
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class RefKind(Enum):
    """Kinds of code reference, in classification order."""
    RAW_BYTES = auto()    # Already a marshalled code buffer
    SYMBOL = auto()       # Dotted name of an importable object
    CLASS = auto()        # A class; its body is a compiled unit
    METHOD = auto()       # Bound method, classmethod, staticmethod
    COMPILED = auto()     # Python function with a code object
    INTERPRETED = auto()  # Callable with a source body but no code object
    NATIVE = auto()       # Implemented in C, no bytecode
    OTHER = auto()        # Anything else; resolution will fail


class Symbol(str):
    """
    A name to be resolved to an object before disassembly.

    Accepts both ``"pkg.mod:Outer.method"`` and ``"pkg.mod.function"``.
    Plain strings passed to the disassembler are treated as symbols too.
    """

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


NATIVE_TYPES = (
    types.BuiltinFunctionType,
    types.BuiltinMethodType,
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    types.MethodDescriptorType,
    types.ClassMethodDescriptorType,
)

METHOD_TYPES = (
    types.MethodType,
    classmethod,
    staticmethod,
    functools.singledispatchmethod,
)


@dataclass(frozen=True)
class CodeReference:
    """A value tagged with its RefKind."""
    kind: RefKind
    value: Any


def classify(value: Any) -> CodeReference:
    """Tag ``value`` with its RefKind."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        kind = RefKind.RAW_BYTES
    elif isinstance(value, str):
        kind = RefKind.SYMBOL
    elif isinstance(value, type):
        kind = RefKind.CLASS
    elif isinstance(value, METHOD_TYPES):
        kind = RefKind.METHOD
    elif isinstance(value, types.FunctionType):
        kind = RefKind.COMPILED
    elif callable(value) and hasattr(value, "__source__"):
        kind = RefKind.INTERPRETED
    elif isinstance(value, NATIVE_TYPES):
        kind = RefKind.NATIVE
    else:
        kind = RefKind.OTHER
    return CodeReference(kind, value)
