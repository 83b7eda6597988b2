"""
Code-Unit Locators
==================

Helpers for finding the compiled bytes of a code unit outside the running
interpreter: inside a zip archive, in a loose ``.pyc`` file, or in the
conventional compiled-resource locations beside a module's source.

CPython stores one code object per module. Functions and class bodies are
nested code objects in its ``co_consts``; find_code() walks that tree to
pick out a single unit by qualified name.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import importlib.util
import logging
import marshal
import zipfile
from dataclasses import dataclass
from pathlib import Path
from types import CodeType
from typing import Iterator, Optional, Union

from bytepeek.bytestream import drain

logger = logging.getLogger(__name__)

# magic (4) + flags (4) + mtime/hash (4) + source size (4)
PYC_HEADER_SIZE = 16
COMPILED_SUFFIX = ".pyc"


# =============================================================================
# Code Object Helpers
# =============================================================================

def code_qualname(code: CodeType) -> str:
    """Qualified name of a code object (``co_name`` before Python 3.11)."""
    return getattr(code, "co_qualname", code.co_name)


def iter_code(root: CodeType) -> Iterator[CodeType]:
    """Yield ``root`` and every code object nested in it, depth first."""
    yield root
    for const in root.co_consts:
        if isinstance(const, CodeType):
            yield from iter_code(const)


def find_code(
    root: CodeType,
    qualname: str,
    firstlineno: Optional[int] = None,
) -> Optional[CodeType]:
    """
    Find the nested code object for ``qualname``.

    When ``firstlineno`` is given it must match too, which separates
    same-named definitions (e.g. a function redefined under a condition).
    Without ``co_qualname`` only the last component of the name can be
    compared.
    """
    has_qualname = hasattr(root, "co_qualname")
    target = qualname if has_qualname else qualname.rpartition(".")[2]
    for code in iter_code(root):
        if code_qualname(code) != target:
            continue
        if firstlineno is not None and code.co_firstlineno != firstlineno:
            continue
        return code
    return None


def load_pyc(data: bytes) -> CodeType:
    """
    Unmarshal the module code object from ``.pyc`` file contents.

    Raises:
        ValueError: the header is short or was written by another
            interpreter version, or the payload is not a code object
    """
    if len(data) < PYC_HEADER_SIZE:
        raise ValueError(f"truncated pyc header ({len(data)} bytes)")
    magic = data[:4]
    if magic != importlib.util.MAGIC_NUMBER:
        raise ValueError(
            f"bad magic {magic.hex()} (expected {importlib.util.MAGIC_NUMBER.hex()})"
        )
    code = marshal.loads(data[PYC_HEADER_SIZE:])
    if not isinstance(code, CodeType):
        raise ValueError(f"pyc payload is {type(code).__name__}, not code")
    return code


def make_pyc(data: bytes) -> bytes:
    """Wrap marshalled code in a minimal header (zero flags, mtime and size)."""
    return importlib.util.MAGIC_NUMBER + bytes(PYC_HEADER_SIZE - 4) + data


# =============================================================================
# Locators
# =============================================================================

@dataclass(frozen=True)
class ArchiveMember:
    """A compiled unit stored as a member of a zip archive."""
    archive: Path
    member: str

    def read(self) -> bytes:
        with zipfile.ZipFile(self.archive) as archive:
            return drain(archive.open(self.member))

    def __str__(self) -> str:
        return f"{self.archive}:{self.member}"


@dataclass(frozen=True)
class LooseFile:
    """A compiled unit stored as an ordinary file on disk."""
    path: Path

    def read(self) -> bytes:
        return drain(open(self.path, "rb"))

    def exists(self) -> bool:
        return self.path.is_file()

    def __str__(self) -> str:
        return str(self.path)


Locator = Union[ArchiveMember, LooseFile]


def archive_locator(origin: Optional[str]) -> Optional[Locator]:
    """
    Build a locator for a module loaded from an archive or a ``.pyc`` file.

    Two layouts are recognised:
    - the origin lies inside a zip archive (``/x/app.zip/pkg/mod.py``): the
      member is the same path with a ``.pyc`` suffix
    - the origin is itself a compiled file on disk (``/x/pkg/mod.pyc``)

    Returns None for ordinary source modules.
    """
    if not origin:
        return None
    path = Path(origin)

    for parent in path.parents:
        if parent.is_file():
            if zipfile.is_zipfile(parent):
                inner = path.relative_to(parent).with_suffix(COMPILED_SUFFIX)
                return ArchiveMember(parent, inner.as_posix())
            return None

    if path.suffix == COMPILED_SUFFIX and path.is_file():
        return LooseFile(path)
    return None


def resource_name(module: str, is_package: bool = False) -> str:
    """
    Conventional compiled-resource name for a module.

        >>> resource_name("pkg.sub.mod")
        'pkg/sub/mod.pyc'
    """
    base = module.replace(".", "/")
    if is_package:
        base += "/__init__"
    return base + COMPILED_SUFFIX


def resource_locators(
    module: str,
    origin: Optional[str],
    is_package: bool = False,
) -> list[LooseFile]:
    """
    Candidate compiled-resource files for a module, most specific first.

    The PEP 3147 cache file (``__pycache__/mod.<tag>.pyc``) comes first,
    then the legacy ``pkg/mod.pyc`` resource under the module's search root.
    """
    if not origin:
        return []
    path = Path(origin)
    candidates = []

    if path.suffix == ".py":
        candidates.append(LooseFile(Path(importlib.util.cache_from_source(str(path)))))

    depth = module.count(".") + (2 if is_package else 1)
    if depth <= len(path.parents):
        root = path.parents[depth - 1]
        candidates.append(LooseFile(root / resource_name(module, is_package)))

    return candidates
