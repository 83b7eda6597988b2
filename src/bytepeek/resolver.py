"""
Code-Source Resolver
====================

Turns a code reference into the marshalled bytes of its compiled unit.

Resolution happens in two stages. First the reference is normalised to a
function or class: symbols are imported, methods give up their function,
generic functions give up their default implementation. Then the bytes are
extracted from the first code origin that applies:

1. IN_MEMORY - a buffer attached in the CodeCache, or the code object the
   function carries with it
2. LOADER_QUERY - the module's loader answers ``get_code()`` directly
3. ARCHIVE_MEMBER - the module came from a zip archive or a loose ``.pyc``
   file; the member is read and the unit located inside it
4. RESOURCE - the conventional compiled-resource files beside the source

The loader query is preferred over archive reconstruction whenever both
apply, since rebuilding a path can diverge from what the loader actually
executed. The origin is worked out again on every call.

Interpreted callables have no compiled unit. They resolve to an
InterpretedSource carrying their source body instead of raising.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import marshal
import zipfile
from dataclasses import dataclass
from enum import Enum
from types import CodeType
from typing import Any, Optional, Union

from bytepeek.cache import CodeCache
from bytepeek.errors import CodeUnreadable
from bytepeek.host import CodeUnit, CPythonIntrospection, HostIntrospection, ModuleSource
from bytepeek.locators import archive_locator, find_code, load_pyc, resource_locators
from bytepeek.references import CodeReference, RefKind, classify

logger = logging.getLogger(__name__)


class CodeOrigin(Enum):
    """Where a unit's bytes were (or were attempted to be) read from."""
    IN_MEMORY = "in-memory code"
    LOADER_QUERY = "loader query"
    ARCHIVE_MEMBER = "archive member"
    RESOURCE = "compiled resource"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InterpretedSource:
    """
    Result for a callable that has no bytecode.

    Attributes:
        name: Display name of the callable
        body: Rendered source body
    """
    name: str
    body: str

    @property
    def text(self) -> str:
        return f"{self.name} is interpreted; no bytecode to disassemble.\nSource:\n{self.body}"

    def __str__(self) -> str:
        return self.text


Resolution = Union[bytes, InterpretedSource]


class Resolver:
    """
    Resolves code references to byte buffers.

    Args:
        host: Interpreter introspection provider
        cache: Side table consulted before the live code object
    """

    def __init__(
        self,
        host: Optional[HostIntrospection] = None,
        cache: Optional[CodeCache] = None,
    ):
        self.host = host if host is not None else CPythonIntrospection()
        self.cache = cache if cache is not None else CodeCache()

    # -------------------------------------------------------------------------
    # Normalisation
    # -------------------------------------------------------------------------

    def normalize(self, reference: CodeReference) -> CodeReference:
        """Reduce a reference to a function, class or terminal kind."""
        match reference.kind:
            case RefKind.SYMBOL:
                bound = self.host.resolve_symbol(reference.value)
                if isinstance(bound, str):
                    # A name bound to a string is data, not another symbol
                    return CodeReference(RefKind.OTHER, bound)
                return self.normalize(classify(bound))
            case RefKind.METHOD:
                return self.normalize(classify(self.host.function_of(reference.value)))
            case RefKind.COMPILED:
                unwrapped = self.host.unwrap_generic(reference.value)
                if unwrapped is reference.value:
                    return reference
                return self.normalize(classify(unwrapped))
            case _:
                return reference

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, reference: Any) -> Resolution:
        """
        Return the compiled bytes for ``reference``.

        Raises:
            SymbolNotFound: a symbol does not name an importable object
            CodeUnreadable: no code origin produced the unit's bytes
        """
        ref = self.normalize(classify(reference))

        match ref.kind:
            case RefKind.RAW_BYTES:
                return bytes(ref.value)
            case RefKind.INTERPRETED:
                name = getattr(ref.value, "__qualname__", type(ref.value).__qualname__)
                return InterpretedSource(name, self.host.interpreted_body(ref.value))
            case RefKind.NATIVE:
                raise CodeUnreadable(_display_name(ref.value), reason="implemented natively, no bytecode")
            case RefKind.OTHER:
                raise CodeUnreadable(_display_name(ref.value), reason="not a function, method or class")
            case RefKind.COMPILED | RefKind.CLASS:
                return self._extract(ref.value)
            case _:
                raise CodeUnreadable(_display_name(ref.value), reason=f"unexpected reference kind {ref.kind.name}")

    def origin_of(self, reference: Any) -> Optional[CodeOrigin]:
        """Return the origin resolve() would read ``reference`` from, or None."""
        ref = self.normalize(classify(reference))
        if ref.kind not in (RefKind.COMPILED, RefKind.CLASS):
            return None
        unit = self.host.unit_of(ref.value)
        if unit is None:
            return None
        found = self._locate(unit, ref.value)
        return found[0] if found else None

    def _extract(self, value: Any) -> bytes:
        unit = self.host.unit_of(value)
        if unit is None:
            raise CodeUnreadable(_display_name(value), reason="no code unit")

        found = self._locate(unit, value)
        if found is None:
            raise CodeUnreadable(str(unit), reason="no code origin available")

        origin, data = found
        logger.debug(f"Read {len(data)} bytes for {unit} via {origin}")
        return data

    def _locate(self, unit: CodeUnit, value: Any) -> Optional[tuple[CodeOrigin, bytes]]:
        """Return (origin, bytes) from the first viable origin, in priority order."""
        data = self.cache.lookup(unit)
        if data is not None:
            return CodeOrigin.IN_MEMORY, data

        code = self.host.code_of(value)
        if code is not None:
            return CodeOrigin.IN_MEMORY, marshal.dumps(code)

        source = self.host.module_source(unit.module)
        if source is None:
            logger.debug(f"No module source for {unit}")
            return None

        data = self._from_loader(unit, source)
        if data is not None:
            return CodeOrigin.LOADER_QUERY, data

        data = self._from_archive(unit, source)
        if data is not None:
            return CodeOrigin.ARCHIVE_MEMBER, data

        data = self._from_resource(unit, source)
        if data is not None:
            return CodeOrigin.RESOURCE, data

        return None

    # -------------------------------------------------------------------------
    # Code Origins
    # -------------------------------------------------------------------------

    def _from_loader(self, unit: CodeUnit, source: ModuleSource) -> Optional[bytes]:
        get_code = getattr(source.loader, "get_code", None)
        if not callable(get_code):
            return None
        location = type(source.loader).__qualname__
        try:
            module_code = get_code(source.name)
        except ImportError as e:
            logger.debug(f"Loader {location} cannot supply {source.name}: {e}")
            return None
        except (OSError, ValueError, EOFError, SyntaxError) as e:
            raise CodeUnreadable(str(unit), CodeOrigin.LOADER_QUERY, location, str(e)) from e
        if module_code is None:
            return None
        return self._unit_bytes(unit, module_code, CodeOrigin.LOADER_QUERY, location)

    def _from_archive(self, unit: CodeUnit, source: ModuleSource) -> Optional[bytes]:
        locator = archive_locator(source.origin)
        if locator is None:
            return None
        module_code = self._read_pyc(unit, locator, CodeOrigin.ARCHIVE_MEMBER)
        return self._unit_bytes(unit, module_code, CodeOrigin.ARCHIVE_MEMBER, str(locator))

    def _from_resource(self, unit: CodeUnit, source: ModuleSource) -> Optional[bytes]:
        for locator in resource_locators(source.name, source.origin, source.is_package):
            if not locator.exists():
                logger.debug(f"No compiled resource at {locator}")
                continue
            module_code = self._read_pyc(unit, locator, CodeOrigin.RESOURCE)
            return self._unit_bytes(unit, module_code, CodeOrigin.RESOURCE, str(locator))
        return None

    def _read_pyc(self, unit: CodeUnit, locator, origin: CodeOrigin) -> CodeType:
        try:
            return load_pyc(locator.read())
        except (OSError, KeyError, ValueError, EOFError, TypeError, zipfile.BadZipFile) as e:
            raise CodeUnreadable(str(unit), origin, str(locator), str(e)) from e

    def _unit_bytes(
        self,
        unit: CodeUnit,
        module_code: CodeType,
        origin: CodeOrigin,
        location: str,
    ) -> bytes:
        code = find_code(module_code, unit.qualname, unit.firstlineno)
        if code is None and unit.firstlineno is not None:
            # Source edited since the unit was compiled; fall back to the name.
            code = find_code(module_code, unit.qualname)
        if code is None:
            raise CodeUnreadable(str(unit), origin, location, f"no code object named '{unit.qualname}'")
        return marshal.dumps(code)


def _display_name(value: Any) -> str:
    module = getattr(value, "__module__", None)
    qualname = getattr(value, "__qualname__", None)
    if module and qualname:
        return f"{module}:{qualname}"
    return repr(value)
