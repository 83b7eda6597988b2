"""
Host Introspection
==================

The resolver never pokes at interpreter objects directly. It asks a
HostIntrospection provider for everything it needs (the code object behind
a function, the function behind a method, the loader and origin of a
module) so tests can substitute a provider with canned answers.

CPythonIntrospection is the real provider. It reads runtime internals
through the reflective field accessor, which bypasses proxies and
``__getattr__`` hooks that could otherwise hand back a stand-in value.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import ast
import functools
import logging
import pkgutil
import sys
import types
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from bytepeek.errors import SymbolNotFound
from bytepeek.fields import read_private_field

logger = logging.getLogger(__name__)


class UnitKind(Enum):
    FUNCTION = auto()
    CLASS = auto()


@dataclass(frozen=True)
class CodeUnit:
    """
    Identity of one compiled unit.

    Attributes:
        module: Defining module name
        qualname: Qualified name inside the module
        kind: Function or class body
        firstlineno: First source line, when known
    """
    module: str
    qualname: str
    kind: UnitKind
    firstlineno: Optional[int] = None

    @property
    def key(self) -> tuple[str, str]:
        return self.module, self.qualname

    def __str__(self) -> str:
        return f"{self.module}:{self.qualname}"


@dataclass(frozen=True)
class ModuleSource:
    """Where a module's code came from."""
    name: str
    loader: Any
    origin: Optional[str]
    is_package: bool = False


class HostIntrospection:
    """
    Interface the resolver uses to query the running interpreter.

    Subclasses implement every method; the base class raises
    NotImplementedError.
    """

    def resolve_symbol(self, name: str) -> Any:
        raise NotImplementedError

    def function_of(self, method: Any) -> Any:
        """The function object behind a method-like value."""
        raise NotImplementedError

    def unwrap_generic(self, function: Any) -> Any:
        """The default implementation of a generic function, else ``function``."""
        raise NotImplementedError

    def interpreted_body(self, value: Any) -> str:
        raise NotImplementedError

    def code_of(self, function: Any) -> Optional[types.CodeType]:
        raise NotImplementedError

    def unit_of(self, value: Any) -> Optional[CodeUnit]:
        raise NotImplementedError

    def module_source(self, module: str) -> Optional[ModuleSource]:
        raise NotImplementedError


class CPythonIntrospection(HostIntrospection):
    """HostIntrospection backed by the running CPython interpreter."""

    def resolve_symbol(self, name: str) -> Any:
        try:
            return pkgutil.resolve_name(name)
        except (ImportError, AttributeError, ValueError) as e:
            raise SymbolNotFound(name, str(e)) from e

    def function_of(self, method: Any) -> Any:
        if isinstance(method, functools.singledispatchmethod):
            return read_private_field(functools.singledispatchmethod, "dispatcher", method)
        return read_private_field(type(method), "__func__", method)

    def unwrap_generic(self, function: Any) -> Any:
        while _is_singledispatch(function):
            registry = read_private_field(types.FunctionType, "registry", function)
            implementation = registry[object]
            if implementation is function:
                break
            logger.debug(f"Unwrapped generic function {function.__qualname__}")
            function = implementation
        return function

    def interpreted_body(self, value: Any) -> str:
        source = value.__source__
        if isinstance(source, ast.AST):
            return ast.unparse(source)
        return str(source)

    def code_of(self, function: Any) -> Optional[types.CodeType]:
        if not isinstance(function, types.FunctionType):
            return None
        return read_private_field(types.FunctionType, "__code__", function)

    def unit_of(self, value: Any) -> Optional[CodeUnit]:
        if isinstance(value, type):
            return CodeUnit(
                value.__module__,
                value.__qualname__,
                UnitKind.CLASS,
                getattr(value, "__firstlineno__", None),
            )
        code = self.code_of(value)
        if code is None:
            return None
        return CodeUnit(
            value.__module__ or "__main__",
            value.__qualname__,
            UnitKind.FUNCTION,
            code.co_firstlineno,
        )

    def module_source(self, module: str) -> Optional[ModuleSource]:
        loaded = sys.modules.get(module)
        spec = getattr(loaded, "__spec__", None)
        if spec is None:
            return None
        return ModuleSource(
            name=spec.name,
            loader=spec.loader,
            origin=spec.origin if spec.has_location else None,
            is_package=spec.submodule_search_locations is not None,
        )


def _is_singledispatch(value: Any) -> bool:
    return (
        isinstance(value, types.FunctionType)
        and callable(getattr(value, "dispatch", None))
        and isinstance(getattr(value, "registry", None), Mapping)
    )
