# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for runtime value classification."""

from dataclasses import dataclass

from typeshape.model.format import UNDEFINED
from typeshape.model.values import (
    describe,
    has_member,
    is_instance,
    is_object_like,
    literal_equals,
    member_names,
    read_member,
)

# ###############
# Helpers
# ###############


@dataclass
class _Point:
    x: int
    y: int


# ###############
# Normal Cases
# ###############


def test_literal_equals_families() -> None:
    """Numbers compare across int and float; strings only with strings; booleans never."""
    assert literal_equals(1, 1.0)
    assert literal_equals("a", "a")
    assert not literal_equals("1", 1)
    assert not literal_equals(1, True)
    assert not literal_equals(True, True)


def test_object_like_values() -> None:
    """Mappings and class instances are objects; scalars, sequences and functions are not."""
    assert is_object_like({})
    assert is_object_like(_Point(1, 2))
    for value in (None, UNDEFINED, 1, "s", b"b", True, [], (), len, _Point):
        assert not is_object_like(value)


def test_numeric_tower() -> None:
    """bool is not a number; float accepts int; object rejects None."""
    assert is_instance(1, int)
    assert not is_instance(True, int)
    assert not is_instance(False, float)
    assert is_instance(1, float)
    assert is_instance(1.5, complex)
    assert is_instance(True, bool)
    assert is_instance("s", object)
    assert not is_instance(None, object)
    assert not is_instance(UNDEFINED, object)


def test_member_access_on_mappings_and_objects() -> None:
    """Mappings are read by key, other objects by attribute."""
    point = _Point(1, 2)

    assert has_member({"a": 1}, "a")
    assert not has_member({"a": 1}, "b")
    assert has_member(point, "x")
    assert read_member({"a": 1}, "b") is UNDEFINED
    assert read_member(point, "y") == 2
    assert read_member(point, "z") is UNDEFINED


def test_member_names() -> None:
    """Member names are string keys or public instance attributes."""
    assert list(member_names({"a": 1, 2: 3})) == ["a"]
    assert list(member_names(_Point(1, 2))) == ["x", "y"]


def test_describe_truncates() -> None:
    """Long representations are shortened for diagnostics."""
    assert describe(UNDEFINED) == "undefined"
    assert describe(None) == "None"
    assert describe(1) == "int 1"
    assert describe("x" * 200).endswith("...")
