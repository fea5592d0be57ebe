# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Decoding of flag strings attached to members, elements and declarations."""

from __future__ import annotations

from dataclasses import dataclass

# ###############
# Public Interface
# ###############

F_READONLY = "R"
F_ABSTRACT = "A"
F_PUBLIC = "$"
F_PRIVATE = "#"
F_PROTECTED = "@"
F_PROPERTY = "P"
F_METHOD = "M"
F_STATIC = "S"
F_CLASS = "C"
F_INTERFACE = "I"
F_FUNCTION = "F"
F_ARROW_FUNCTION = ">"
F_OPTIONAL = "?"
F_REST = "3"
F_ASYNC = "a"
F_EXPORTED = "e"
F_INFERRED = "."
F_GET_ACCESSOR = "^"
F_SET_ACCESSOR = "_"


@dataclass(frozen=True)
class Flags:
    """Boolean facets decoded from a flag string.

    Flag strings are order independent. Characters without a meaning are
    ignored so that newer producers stay readable.
    """

    is_readonly: bool = False
    is_abstract: bool = False
    is_public: bool = False
    is_private: bool = False
    is_protected: bool = False
    is_property: bool = False
    is_method: bool = False
    is_static: bool = False
    is_class: bool = False
    is_interface: bool = False
    is_function: bool = False
    is_arrow_function: bool = False
    is_optional: bool = False
    is_rest: bool = False
    is_async: bool = False
    is_exported: bool = False
    is_inferred: bool = False
    is_get_accessor: bool = False
    is_set_accessor: bool = False

    @classmethod
    def parse(cls, text: str | None) -> Flags:
        """Decode *text* into a :class:`Flags` instance."""
        if not text:
            return _EMPTY
        return cls(**{_FIELD_BY_CHAR[char]: True for char in text if char in _FIELD_BY_CHAR})

    @property
    def visibility(self) -> str:
        """One of ``"private"``, ``"protected"`` or ``"public"`` (the default)."""
        if self.is_private:
            return "private"
        if self.is_protected:
            return "protected"
        return "public"

    def __str__(self) -> str:
        return "".join(char for char, name in _FIELD_BY_CHAR.items() if getattr(self, name))


# ################
# Implementation
# ################

# Declaration order here is the canonical encoding order.
_FIELD_BY_CHAR: dict[str, str] = {
    F_READONLY: "is_readonly",
    F_ABSTRACT: "is_abstract",
    F_PUBLIC: "is_public",
    F_PRIVATE: "is_private",
    F_PROTECTED: "is_protected",
    F_PROPERTY: "is_property",
    F_METHOD: "is_method",
    F_STATIC: "is_static",
    F_CLASS: "is_class",
    F_INTERFACE: "is_interface",
    F_FUNCTION: "is_function",
    F_ARROW_FUNCTION: "is_arrow_function",
    F_OPTIONAL: "is_optional",
    F_REST: "is_rest",
    F_ASYNC: "is_async",
    F_EXPORTED: "is_exported",
    F_INFERRED: "is_inferred",
    F_GET_ACCESSOR: "is_get_accessor",
    F_SET_ACCESSOR: "is_set_accessor",
}

_EMPTY = Flags()
