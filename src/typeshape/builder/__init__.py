# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mutable builders producing immutable descriptors."""

from typeshape.builder.builders import (
    AliasTypeBuilder,
    ArrayTypeBuilder,
    EnumTypeBuilder,
    FunctionTypeBuilder,
    GenericTypeBuilder,
    IncompatibleExtendKindError,
    InterfaceTypeBuilder,
    IntersectionTypeBuilder,
    ObjectLikeTypeBuilder,
    ObjectTypeBuilder,
    TupleTypeBuilder,
    TypeBuilder,
    UnionTypeBuilder,
    VariableTypeBuilder,
)

__all__ = [
    "TypeBuilder",
    "ObjectLikeTypeBuilder",
    "ObjectTypeBuilder",
    "InterfaceTypeBuilder",
    "AliasTypeBuilder",
    "GenericTypeBuilder",
    "VariableTypeBuilder",
    "TupleTypeBuilder",
    "ArrayTypeBuilder",
    "UnionTypeBuilder",
    "IntersectionTypeBuilder",
    "EnumTypeBuilder",
    "FunctionTypeBuilder",
    "IncompatibleExtendKindError",
]
