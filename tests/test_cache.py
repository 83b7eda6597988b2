"""
Unit Tests for the Compile-Time Code Cache
==========================================

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import importlib
import marshal
import sys
import textwrap

from bytepeek.cache import CapturingFinder, CodeCache, capture
from bytepeek.host import CodeUnit, UnitKind
from bytepeek.resolver import CodeOrigin, Resolver


def helper():
    return "help"


class TestCodeCache:
    """Tests for CodeCache."""

    def test_attach_and_lookup(self):
        cache = CodeCache()
        cache.attach(helper, b"abc")

        unit = CodeUnit(helper.__module__, helper.__qualname__, UnitKind.FUNCTION)
        assert cache.lookup(unit) == b"abc"
        assert len(cache) == 1

    def test_attach_to_unit(self):
        cache = CodeCache()
        unit = CodeUnit("m", "C", UnitKind.CLASS)
        cache.attach(unit, b"xyz")

        assert ("m", "C") in cache
        assert cache.lookup(unit) == b"xyz"

    def test_lookup_missing(self):
        assert CodeCache().lookup(CodeUnit("m", "f", UnitKind.FUNCTION)) is None

    def test_record_module(self):
        source = textwrap.dedent("""
            def top():
                def inner():
                    pass

            class Box:
                def open(self):
                    pass
        """)
        cache = CodeCache()

        count = cache.record_module("boxes", compile(source, "boxes.py", "exec"))

        assert count == 4
        for qualname in ("top", "top.<locals>.inner", "Box", "Box.open"):
            assert ("boxes", qualname) in cache

    def test_record_module_first_definition_wins(self):
        source = "def twice():\n    return 1\n\ndef twice():\n    return 2\n"
        cache = CodeCache()
        cache.record_module("dupes", compile(source, "dupes.py", "exec"))

        code = marshal.loads(cache.lookup(CodeUnit("dupes", "twice", UnitKind.FUNCTION)))
        assert code.co_firstlineno == 1

    def test_clear(self):
        cache = CodeCache()
        cache.store("m", "f", b"1")
        cache.clear()

        assert len(cache) == 0


class TestCapture:
    """Tests for the capture() import hook."""

    def test_hook_removed_after_block(self):
        with capture() as cache:
            assert any(isinstance(f, CapturingFinder) for f in sys.meta_path)

        assert isinstance(cache, CodeCache)
        assert not any(isinstance(f, CapturingFinder) for f in sys.meta_path)

    def test_captured_class_resolves_in_memory(self, tmp_path, monkeypatch):
        name = "bytepeek_captured_shapes"
        (tmp_path / f"{name}.py").write_text(
            "class Circle:\n    radius = 'captured'\n",
            encoding="utf-8",
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        importlib.invalidate_caches()

        try:
            with capture() as cache:
                module = importlib.import_module(name)

            assert (name, "Circle") in cache
            assert module.Circle.radius == "captured"

            resolver = Resolver(cache=cache)
            data = resolver.resolve(module.Circle)

            assert marshal.loads(data).co_name == "Circle"
            assert resolver.origin_of(module.Circle) is CodeOrigin.IN_MEMORY
        finally:
            sys.modules.pop(name, None)
