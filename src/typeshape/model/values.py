# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Classification of runtime values for structural checks.

Sequences are lists and tuples. Objects are mappings, read by key, or
instances of user classes, read by attribute. Strings, bytes, numbers,
booleans, ``None``, :data:`UNDEFINED` and functions are never objects.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from typing import Any

from typeshape.model.format import UNDEFINED

# ###############
# Public Interface
# ###############


def literal_equals(left: Any, right: Any) -> bool:
    """Compare two literal payloads.

    Numbers compare by value across ``int`` and ``float``; strings only equal
    strings; booleans never equal numbers.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return False
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return False


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_object_like(value: Any) -> bool:
    """Return True if *value* can be read member by member."""
    if isinstance(value, Mapping):
        return True
    if value is None or value is UNDEFINED or isinstance(value, _SCALARS) or is_sequence(value):
        return False
    return not (inspect.isroutine(value) or inspect.isclass(value))


def is_instance(value: Any, cls: type) -> bool:
    """Runtime class membership with Python's numeric tower made explicit.

    ``bool`` is not an ``int`` here, ``float`` accepts integers and ``object``
    accepts everything except ``None`` and :data:`UNDEFINED`.
    """
    if value is UNDEFINED:
        return False
    if cls is object:
        return value is not None
    if isinstance(value, bool) and cls in _NUMERIC:
        return False
    if cls is float:
        return isinstance(value, (int, float))
    if cls is complex:
        return isinstance(value, (int, float, complex))
    return isinstance(value, cls)


def has_member(value: Any, name: str) -> bool:
    if isinstance(value, Mapping):
        return name in value
    return hasattr(value, name)


def read_member(value: Any, name: str) -> Any:
    """Return member *name* of *value*, or :data:`UNDEFINED` when it is absent."""
    if isinstance(value, Mapping):
        return value.get(name, UNDEFINED)
    return getattr(value, name, UNDEFINED)


def member_names(value: Any) -> Iterator[str]:
    """Yield the data member names carried by *value* itself."""
    if isinstance(value, Mapping):
        yield from (key for key in value if isinstance(key, str))
        return
    for name in getattr(value, "__dict__", {}):
        if not name.startswith("_"):
            yield name


def describe(value: Any) -> str:
    """Short description of *value* for diagnostics."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "None"
    text = repr(value)
    if len(text) > _MAX_REPR:
        text = text[: _MAX_REPR - 3] + "..."
    return f"{type(value).__name__} {text}"


# ################
# Implementation
# ################

_SCALARS = (bool, int, float, complex, str, bytes, bytearray)
_NUMERIC = (int, float, complex)

_MAX_REPR = 60
