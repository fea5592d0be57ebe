# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Descriptor data model: tagged type descriptors, flags and value conversion."""

from typeshape.model.format import (
    ANY,
    FALSE,
    NEVER,
    NULL,
    THIS,
    TRUE,
    UNDEFINED,
    UNDEFINED_TYPE,
    UNKNOWN,
    VOID,
    AliasDescriptor,
    AliasToken,
    AnyDescriptor,
    ArrayDescriptor,
    ClassDescriptor,
    Descriptor,
    EnumDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    FalseDescriptor,
    GenericDescriptor,
    InterfaceDescriptor,
    InterfaceToken,
    IntersectionDescriptor,
    LiteralDescriptor,
    MappedDescriptor,
    NeverDescriptor,
    NullDescriptor,
    ObjectDescriptor,
    ObjectMember,
    ThisDescriptor,
    TrueDescriptor,
    TupleDescriptor,
    TupleElement,
    UndefinedDescriptor,
    UnionDescriptor,
    UnknownDescriptor,
    VariableDescriptor,
    VoidDescriptor,
    descriptor_from_dict,
    is_descriptor,
)
from typeshape.model.metadata import FLAGS_KEY, METHODS_KEY, PROPERTIES_KEY, TYPE_KEY, define_metadata, get_metadata, has_metadata
from typeshape.model.convert import MalformedDescriptorError, as_descriptor, force, lazy
from typeshape.model.flags import Flags

__all__ = [
    # Descriptors
    "Descriptor",
    "AnyDescriptor",
    "UnknownDescriptor",
    "VoidDescriptor",
    "UndefinedDescriptor",
    "NullDescriptor",
    "NeverDescriptor",
    "TrueDescriptor",
    "FalseDescriptor",
    "ThisDescriptor",
    "LiteralDescriptor",
    "UnionDescriptor",
    "IntersectionDescriptor",
    "TupleElement",
    "TupleDescriptor",
    "ArrayDescriptor",
    "ObjectMember",
    "ObjectDescriptor",
    "InterfaceToken",
    "InterfaceDescriptor",
    "ClassDescriptor",
    "AliasToken",
    "AliasDescriptor",
    "GenericDescriptor",
    "EnumDescriptor",
    "MappedDescriptor",
    "VariableDescriptor",
    "FunctionParameter",
    "FunctionDescriptor",
    "descriptor_from_dict",
    "is_descriptor",
    # Shared instances
    "ANY",
    "UNKNOWN",
    "VOID",
    "UNDEFINED_TYPE",
    "NULL",
    "NEVER",
    "TRUE",
    "FALSE",
    "THIS",
    "UNDEFINED",
    # Flags
    "Flags",
    # Conversion
    "MalformedDescriptorError",
    "as_descriptor",
    "force",
    "lazy",
    # Metadata
    "TYPE_KEY",
    "FLAGS_KEY",
    "PROPERTIES_KEY",
    "METHODS_KEY",
    "define_metadata",
    "get_metadata",
    "has_metadata",
]
