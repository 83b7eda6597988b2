"""
Compile-Time Code Cache
=======================

A side table of compiled units captured as they are defined.

The interpreter keeps a function's code object alive on the function, but a
class body's code object is discarded once the class has been created. To
disassemble classes without going back to disk, capture() installs an
import hook that records every code object of each module it executes:

    >>> cache = CodeCache()
    >>> with capture(cache):
    ...     import mypkg.models
    >>> disassembler = Disassembler.from_config(cache=cache)
    >>> print(disassembler.disassemble(mypkg.models.Order))

Entries are keyed by (module name, qualified name) and hold marshalled code.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import contextlib
import importlib.abc
import importlib.machinery
import logging
import marshal
import sys
import threading
from types import CodeType
from typing import Any, Iterator, Optional

from bytepeek.host import CodeUnit
from bytepeek.locators import code_qualname, iter_code

logger = logging.getLogger(__name__)


class CodeCache:
    """Thread-safe map of (module, qualname) to marshalled code."""

    def __init__(self):
        self._units: dict[tuple[str, str], bytes] = {}
        self._lock = threading.Lock()

    def store(self, module: str, qualname: str, data: bytes) -> None:
        with self._lock:
            self._units[(module, qualname)] = bytes(data)

    def attach(self, target: Any, data: bytes) -> None:
        """
        Attach a byte buffer to a function, class or CodeUnit.

        Later resolutions of ``target`` return ``data`` without consulting
        any loader.
        """
        module, qualname = _key_of(target)
        self.store(module, qualname, data)
        logger.debug(f"Attached {len(data)} bytes to {module}:{qualname}")

    def lookup(self, unit: CodeUnit) -> Optional[bytes]:
        """Return the buffer recorded for ``unit``, or None."""
        with self._lock:
            return self._units.get(unit.key)

    def record_module(self, module: str, code: CodeType) -> int:
        """
        Record every function and class body nested in a module code object.

        When several definitions share a qualified name the first one wins.

        Returns:
            Number of units recorded
        """
        found: dict[tuple[str, str], bytes] = {}
        for nested in iter_code(code):
            if nested is code:
                continue
            found.setdefault((module, code_qualname(nested)), marshal.dumps(nested))
        with self._lock:
            self._units.update(found)
        logger.debug(f"Recorded {len(found)} code units from {module}")
        return len(found)

    def clear(self) -> None:
        with self._lock:
            self._units.clear()

    def __contains__(self, key: tuple[str, str]) -> bool:
        with self._lock:
            return key in self._units

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)


def _key_of(target: Any) -> tuple[str, str]:
    if isinstance(target, CodeUnit):
        return target.key
    return target.__module__, target.__qualname__


# =============================================================================
# Import Hook
# =============================================================================

class CapturingLoader(importlib.abc.Loader):
    """Wraps a loader and records each module's code before executing it."""

    def __init__(self, inner, cache: CodeCache):
        self._inner = inner
        self._cache = cache

    def create_module(self, spec):
        return self._inner.create_module(spec)

    def exec_module(self, module) -> None:
        code = self._inner.get_code(module.__name__)
        if code is None:
            self._inner.exec_module(module)
            return
        self._cache.record_module(module.__name__, code)
        exec(code, module.__dict__)

    def get_code(self, fullname: str) -> Optional[CodeType]:
        return self._inner.get_code(fullname)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._inner, name)


class CapturingFinder(importlib.abc.MetaPathFinder):
    """Path-based finder whose loaders feed a CodeCache."""

    def __init__(self, cache: CodeCache):
        self.cache = cache

    def find_spec(self, fullname, path, target=None):
        spec = importlib.machinery.PathFinder.find_spec(fullname, path, target)
        if spec is None or not hasattr(spec.loader, "get_code"):
            return spec
        spec.loader = CapturingLoader(spec.loader, self.cache)
        return spec


@contextlib.contextmanager
def capture(cache: Optional[CodeCache] = None) -> Iterator[CodeCache]:
    """
    Record the code of every module imported inside the ``with`` block.

    Modules already present in ``sys.modules`` are not re-imported and so
    are not captured.
    """
    if cache is None:
        cache = CodeCache()
    finder = CapturingFinder(cache)
    sys.meta_path.insert(0, finder)
    try:
        yield cache
    finally:
        sys.meta_path.remove(finder)
