"""
Unit Tests for the Reflective Field Accessor
============================================

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import types

import pytest

from bytepeek.errors import FieldNotFound
from bytepeek.fields import (
    FieldHandle,
    read_private_field,
    resolve_field,
    write_private_field,
)


class Vault:
    def __init__(self):
        self.__secret = "hidden"
        self.public = "open"


class Slotted:
    __slots__ = ("_value",)

    def __init__(self, value):
        self._value = value


class Masked(Slotted):
    """Subclass whose property hides the base slot."""

    @property
    def _value(self):
        return "masked"

    @_value.setter
    def _value(self, value):
        Slotted._value.__set__(self, value)


class Proxy:
    def __init__(self):
        self.target = 1

    def __getattr__(self, name):
        return "proxied"


class TestReadPrivateField:
    """Tests for read_private_field()."""

    def test_name_mangled_attribute(self):
        assert read_private_field(Vault, "__secret", Vault()) == "hidden"

    def test_plain_instance_attribute(self):
        assert read_private_field(Vault, "public", Vault()) == "open"

    def test_slot_member(self):
        assert read_private_field(Slotted, "_value", Slotted(7)) == 7

    def test_bypasses_subclass_property(self):
        masked = Masked(7)

        assert masked._value == "masked"
        assert read_private_field(Slotted, "_value", masked) == 7

    def test_function_code(self):
        def sample():
            return 1

        code = read_private_field(types.FunctionType, "__code__", sample)

        assert code is sample.__code__

    def test_missing_field_raises(self):
        with pytest.raises(FieldNotFound) as exc_info:
            read_private_field(Vault, "nothing", Vault())

        assert exc_info.value.field_name == "nothing"
        assert "Vault" in str(exc_info.value)

    def test_getattr_hook_not_consulted(self):
        with pytest.raises(FieldNotFound):
            read_private_field(Proxy, "missing", Proxy())

    def test_cached_instance_field_missing_on_other_instance(self):
        first = Proxy()
        read_private_field(Proxy, "target", first)

        other = Proxy()
        del other.target

        with pytest.raises(FieldNotFound):
            read_private_field(Proxy, "target", other)


class TestWritePrivateField:
    """Tests for write_private_field()."""

    def test_write_mangled_attribute(self):
        vault = Vault()
        write_private_field(Vault, "__secret", vault, "changed")

        assert vault._Vault__secret == "changed"

    def test_write_slot_past_property(self):
        masked = Masked(1)
        write_private_field(Slotted, "_value", masked, 99)

        assert read_private_field(Slotted, "_value", masked) == 99

    def test_write_missing_field_raises(self):
        with pytest.raises(FieldNotFound):
            write_private_field(Vault, "absent", Vault(), 1)


class TestFieldCache:
    """Tests for per-(type, name) handle caching."""

    def test_handle_reused(self):
        vault = Vault()
        first = resolve_field(Vault, "__secret", vault)
        second = resolve_field(Vault, "__secret", Vault())

        assert isinstance(first, FieldHandle)
        assert first is second
        assert first.attribute == "_Vault__secret"

    def test_descriptor_handle_needs_no_instance(self):
        handle = resolve_field(Slotted, "_value")

        assert handle.descriptor is Slotted.__dict__["_value"]
