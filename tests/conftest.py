"""
Shared Test Fixtures
====================

Fixtures for writing throwaway modules to disk, importing them, and
removing them from ``sys.modules`` afterwards.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import importlib
import marshal
import sys
import textwrap
from pathlib import Path

import pytest

from bytepeek.fields import clear_field_cache
from bytepeek.locators import make_pyc


@pytest.fixture(autouse=True)
def fresh_field_cache():
    """Each test starts with an empty reflective field cache."""
    clear_field_cache()
    yield
    clear_field_cache()


@pytest.fixture
def module_factory(tmp_path, monkeypatch):
    """
    Fixture: write a module under tmp_path and import it.

    Usage:
        module = module_factory("widgets", "class Widget:\\n    size = 1\\n")
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    created = []

    def make(name: str, source: str):
        path = tmp_path / f"{name}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        importlib.invalidate_caches()
        created.append(name)
        return importlib.import_module(name)

    yield make

    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture
def write_pyc(tmp_path):
    """Fixture: compile source and write it as a .pyc file at a relative path."""

    def write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        code = compile(textwrap.dedent(source), str(path), "exec")
        path.write_bytes(make_pyc(marshal.dumps(code)))
        return path

    return write
