"""
Reflective Field Accessor
=========================

Reads and writes attributes that normal attribute access would hide or
intercept: private name-mangled attributes, ``__slots__`` members, and
C-level getset fields such as ``function.__code__``.

A field is located by a linear scan of the attributes declared along the
owner type's MRO, then of the instance ``__dict__``. Access goes straight to
the descriptor or the instance dict, so ``__getattr__`` / ``__setattr__``
overrides and proxy objects cannot substitute their own value.

The resolved handle is cached per (type, field name), so repeated reads on
the same type skip the scan.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from bytepeek.errors import FieldNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldHandle:
    """
    A resolved field.

    Attributes:
        owner: The type the lookup was made against
        attribute: The actual attribute name (after name mangling)
        descriptor: The declared data descriptor, or None when the field
            lives in the instance ``__dict__``
    """
    owner: type
    attribute: str
    descriptor: Optional[Any] = None

    def get(self, instance: Any) -> Any:
        if self.descriptor is not None:
            return self.descriptor.__get__(instance, self.owner)
        state = _instance_dict(instance)
        try:
            return state[self.attribute]
        except (KeyError, TypeError):
            raise FieldNotFound(self.owner, self.attribute) from None

    def set(self, instance: Any, value: Any) -> None:
        if self.descriptor is not None:
            self.descriptor.__set__(instance, value)
            return
        state = _instance_dict(instance)
        if state is None or self.attribute not in state:
            raise FieldNotFound(self.owner, self.attribute)
        state[self.attribute] = value


_handles: dict[tuple[type, str], FieldHandle] = {}


def _instance_dict(instance: Any) -> Optional[dict]:
    try:
        return object.__getattribute__(instance, "__dict__")
    except AttributeError:
        return None


def _is_data_descriptor(value: Any) -> bool:
    kind = type(value)
    return hasattr(kind, "__set__") or hasattr(kind, "__delete__")


def _candidate_names(owner: type, name: str) -> list[str]:
    """Return ``name`` plus its mangled spellings for each class in the MRO."""
    names = [name]
    if name.startswith("__") and not name.endswith("__"):
        for klass in owner.__mro__:
            mangled = f"_{klass.__name__.lstrip('_')}{name}"
            if mangled not in names:
                names.append(mangled)
    return names


def resolve_field(owner: type, name: str, instance: Any = None) -> FieldHandle:
    """
    Locate ``name`` on ``owner`` and return a cached handle for it.

    Declared data descriptors win over instance attributes. An instance is
    needed only for fields that live in the instance ``__dict__``.

    Raises:
        FieldNotFound: if neither the type nor the instance has the field
    """
    key = (owner, name)
    handle = _handles.get(key)
    if handle is not None:
        return handle

    candidates = _candidate_names(owner, name)

    for attribute in candidates:
        for klass in owner.__mro__:
            for declared, value in vars(klass).items():
                if declared == attribute and _is_data_descriptor(value):
                    handle = FieldHandle(owner, attribute, value)
                    break
            if handle is not None:
                break
        if handle is not None:
            break

    if handle is None and instance is not None:
        state = _instance_dict(instance)
        if state is not None:
            for attribute in candidates:
                if attribute in state:
                    handle = FieldHandle(owner, attribute)
                    break

    if handle is None:
        raise FieldNotFound(owner, name)

    logger.debug(f"Resolved field {owner.__qualname__}.{name} -> {handle.attribute}")
    _handles[key] = handle
    return handle


def read_private_field(owner: type, name: str, instance: Any) -> Any:
    """Read field ``name`` declared on ``owner`` from ``instance``."""
    return resolve_field(owner, name, instance).get(instance)


def write_private_field(owner: type, name: str, instance: Any, value: Any) -> None:
    """Write ``value`` into field ``name`` declared on ``owner``."""
    resolve_field(owner, name, instance).set(instance, value)


def clear_field_cache() -> None:
    """Forget all cached handles."""
    _handles.clear()
