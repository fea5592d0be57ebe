# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type lookup for declarations through the metadata store."""

from __future__ import annotations

import typing
from typing import Any

from typeshape.model.convert import lazy
from typeshape.model.flags import F_OPTIONAL, F_PROPERTY, F_STATIC
from typeshape.model.format import AliasToken, ClassDescriptor, InterfaceToken, ObjectMember
from typeshape.model.metadata import TYPE_KEY, define_metadata, get_metadata
from typeshape.reflection.refs import TypeRef, resolve, resolve_slot

# ###############
# Public Interface
# ###############


class NoTypeInformationError(LookupError):
    """Raised when a declaration member has neither metadata nor an annotation."""


def reflect(target: Any, prop: str | None = None) -> TypeRef:
    """Return the type recorded for *target*, or for its member *prop*.

    Recorded metadata wins. Without it, a user-defined class is described by
    its annotations (the description is recorded for later lookups), a member
    by its annotation, and any other value is converted directly.

    Raises:
        NoTypeInformationError: If *prop* has no recorded type and no annotation.
    """
    recorded = get_metadata(TYPE_KEY, target, prop) if _is_declaration(target) else None
    if recorded is not None:
        return resolve_slot(recorded)
    if prop is None:
        if isinstance(target, type) and target.__module__ != "builtins":
            descriptor = _describe_class(target)
            define_metadata(TYPE_KEY, lambda: descriptor, target)
            return resolve(descriptor)
        return resolve(target)

    hints = typing.get_type_hints(target) if _has_annotations(target) else {}
    if prop not in hints:
        raise NoTypeInformationError(f"No type information for {getattr(target, '__name__', target)!r}.{prop}")
    return resolve(hints[prop])


# ################
# Implementation
# ################


def _is_declaration(target: Any) -> bool:
    return isinstance(target, (type, InterfaceToken, AliasToken)) or callable(target)


def _has_annotations(target: Any) -> bool:
    return isinstance(target, type) or callable(target) or hasattr(target, "__annotations__")


def _describe_class(cls: type) -> ClassDescriptor:
    members = []
    for name, hint in typing.get_type_hints(cls).items():
        flags = F_PROPERTY
        if typing.get_origin(hint) is typing.ClassVar:
            flags += F_STATIC
        elif hasattr(cls, name):
            flags += F_OPTIONAL
        members.append(ObjectMember(name=name, type=lazy(lambda hint=hint: hint), flags=flags))
    return ClassDescriptor(name=cls.__qualname__, runtime_class=cls, members=members)
