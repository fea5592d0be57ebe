# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for member and declaration flag parsing."""

from typeshape.model.flags import F_OPTIONAL, F_PROPERTY, F_READONLY, Flags

# ###############
# Normal Cases
# ###############


def test_empty_flags() -> None:
    """Empty and missing flag strings decode to no facets."""
    assert Flags.parse("") == Flags()
    assert Flags.parse(None) == Flags()
    assert str(Flags.parse("")) == ""


def test_parse_sets_facets() -> None:
    """Each character switches on its facet."""
    flags = Flags.parse("P?R")

    assert flags.is_property
    assert flags.is_optional
    assert flags.is_readonly
    assert not flags.is_method


def test_order_does_not_matter() -> None:
    """Flag strings are order independent."""
    assert Flags.parse("?P") == Flags.parse("P?")


def test_unknown_characters_are_ignored() -> None:
    """Characters without a meaning are skipped."""
    assert Flags.parse("xyz?") == Flags.parse("?")


def test_str_is_canonical() -> None:
    """Encoding follows a fixed order regardless of input order."""
    assert str(Flags.parse(F_OPTIONAL + F_PROPERTY + F_READONLY)) == "RP?"


def test_rest_and_accessors() -> None:
    """Rest, accessor and function facets decode from their characters."""
    flags = Flags.parse("3^_F>")
    assert flags.is_rest
    assert flags.is_get_accessor
    assert flags.is_set_accessor
    assert flags.is_function
    assert flags.is_arrow_function


def test_visibility() -> None:
    """Visibility defaults to public."""
    assert Flags.parse("").visibility == "public"
    assert Flags.parse("$").visibility == "public"
    assert Flags.parse("#").visibility == "private"
    assert Flags.parse("@").visibility == "protected"
