# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Navigable wrappers over descriptors, parameter binding and reflection."""

from typeshape.reflection.binding import EMPTY_BINDINGS, Bindings, bind_parameters, create_type
from typeshape.reflection.identity import lookup_token, register_token
from typeshape.reflection.members import MemberRef, ParameterRef, TupleElementRef
from typeshape.reflection.reflect import NoTypeInformationError, reflect
from typeshape.reflection.refs import (
    AliasRef,
    AnyRef,
    ArrayRef,
    ClassRef,
    EnumRef,
    FalseRef,
    FunctionRef,
    GenericRef,
    InterfaceRef,
    IntersectionRef,
    KindMismatchError,
    LiteralRef,
    MappedRef,
    NeverRef,
    NullRef,
    ObjectRef,
    StructuralRef,
    ThisRef,
    TrueRef,
    TupleRef,
    TypeRef,
    UndefinedRef,
    UnionRef,
    UnknownRef,
    VariableRef,
    VoidRef,
    resolve,
)

__all__ = [
    # Resolution
    "resolve",
    "reflect",
    "NoTypeInformationError",
    "KindMismatchError",
    # Wrappers
    "TypeRef",
    "AnyRef",
    "UnknownRef",
    "VoidRef",
    "UndefinedRef",
    "NullRef",
    "NeverRef",
    "TrueRef",
    "FalseRef",
    "ThisRef",
    "LiteralRef",
    "UnionRef",
    "IntersectionRef",
    "ArrayRef",
    "TupleRef",
    "EnumRef",
    "VariableRef",
    "AliasRef",
    "GenericRef",
    "StructuralRef",
    "ObjectRef",
    "InterfaceRef",
    "ClassRef",
    "MappedRef",
    "FunctionRef",
    "MemberRef",
    "TupleElementRef",
    "ParameterRef",
    # Binding
    "Bindings",
    "EMPTY_BINDINGS",
    "bind_parameters",
    "create_type",
    # Identity
    "register_token",
    "lookup_token",
]
