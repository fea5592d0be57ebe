# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tagged descriptor models describing one type each.

Every descriptor carries a single-character ``tag`` that selects its variant.
Fields that may take part in a cycle (alias targets, generic bases, member
types) hold either a descriptor or a zero-argument thunk returning one, so a
graph can be assembled before all of its parts exist.
"""

from __future__ import annotations

import types
import typing
import uuid
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, TypeAdapter

# ###############
# Public Interface
# ###############

T_ANY = "~"
T_UNKNOWN = "U"
T_VOID = "V"
T_UNDEFINED = "u"
T_NULL = "n"
T_NEVER = "N"
T_TRUE = "1"
T_FALSE = "0"
T_THIS = "t"
T_LITERAL = "l"
T_UNION = "|"
T_INTERSECTION = "&"
T_TUPLE = "T"
T_ARRAY = "["
T_OBJECT = "O"
T_INTERFACE = "I"
T_CLASS = "C"
T_ALIAS = "A"
T_GENERIC = "g"
T_ENUM = "E"
T_MAPPED = "m"
T_VARIABLE = "v"
T_FUNCTION = "F"

# Structural kind reported for each tag.
TYPE_KINDS: dict[str, str] = {
    T_ANY: "any",
    T_UNKNOWN: "unknown",
    T_VOID: "void",
    T_UNDEFINED: "undefined",
    T_NULL: "null",
    T_NEVER: "never",
    T_TRUE: "true",
    T_FALSE: "false",
    T_THIS: "this",
    T_LITERAL: "literal",
    T_UNION: "union",
    T_INTERSECTION: "intersection",
    T_TUPLE: "tuple",
    T_ARRAY: "array",
    T_OBJECT: "object",
    T_INTERFACE: "interface",
    T_CLASS: "class",
    T_ALIAS: "alias",
    T_GENERIC: "generic",
    T_ENUM: "enum",
    T_MAPPED: "mapped",
    T_VARIABLE: "variable",
    T_FUNCTION: "function",
}


class _Undefined:
    """Runtime marker for an absent value, distinct from ``None``."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


def is_thunk(value: object) -> bool:
    """Return True if *value* is a deferred evaluator rather than a type itself.

    Classes and typing constructs such as ``list[int]`` are callable too, but
    they describe types and are never treated as thunks.
    """
    return (
        callable(value)
        and not isinstance(value, (type, _DescriptorBase))
        and typing.get_origin(value) is None
        and not isinstance(value, (types.UnionType, typing.TypeVar))
    )


def _coerce_slot(value: Any) -> Any:
    if isinstance(value, _DescriptorBase) or is_thunk(value):
        return value
    from typeshape.model.convert import as_descriptor

    return as_descriptor(value)


def _check_thunk(value: Any) -> Any:
    if not is_thunk(value):
        raise ValueError(f"expected a zero-argument thunk, got {type(value).__name__}")
    return value


# A type position: a descriptor, or a thunk producing one on demand. Plain
# values (classes, literals, shapes) are converted on construction.
TypeSlot = Annotated[Any, BeforeValidator(_coerce_slot)]

# A deferred type position. Always a thunk, never forced at construction.
Thunk = Annotated[Any, BeforeValidator(_check_thunk)]

LiteralValue = StrictInt | StrictFloat | StrictStr


class _DescriptorBase(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def kind(self) -> str:
        """Structural kind of this descriptor, ignoring alias transparency."""
        return TYPE_KINDS[self.tag]  # type: ignore[attr-defined]


class AnyDescriptor(_DescriptorBase):
    """The top type; every value conforms."""

    tag: Literal["~"] = "~"


class UnknownDescriptor(_DescriptorBase):
    """The safe top type; every value conforms."""

    tag: Literal["U"] = "U"


class VoidDescriptor(_DescriptorBase):
    """The result of a procedure; only the absent value conforms."""

    tag: Literal["V"] = "V"


class UndefinedDescriptor(_DescriptorBase):
    """The absent value."""

    tag: Literal["u"] = "u"


class NullDescriptor(_DescriptorBase):
    """The null value (``None``)."""

    tag: Literal["n"] = "n"


class NeverDescriptor(_DescriptorBase):
    """The bottom type; no value conforms."""

    tag: Literal["N"] = "N"


class TrueDescriptor(_DescriptorBase):
    """The literal ``True``."""

    tag: Literal["1"] = "1"


class FalseDescriptor(_DescriptorBase):
    """The literal ``False``."""

    tag: Literal["0"] = "0"


class ThisDescriptor(_DescriptorBase):
    """The type of the enclosing object, interface or class."""

    tag: Literal["t"] = "t"


class LiteralDescriptor(_DescriptorBase):
    """A number or string literal. Python integers also cover big integers."""

    tag: Literal["l"] = "l"
    value: LiteralValue


class UnionDescriptor(_DescriptorBase):
    """An ordered list of alternatives."""

    tag: Literal["|"] = "|"
    types: list[TypeSlot] = Field(default_factory=list)


class IntersectionDescriptor(_DescriptorBase):
    """An ordered list of types that must all hold."""

    tag: Literal["&"] = "&"
    types: list[TypeSlot] = Field(default_factory=list)


class TupleElement(BaseModel):
    """One positional element of a tuple type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: TypeSlot
    name: str | None = None
    flags: str = ""


class TupleDescriptor(_DescriptorBase):
    """A fixed-shape ordered sequence."""

    tag: Literal["T"] = "T"
    elements: list[TupleElement] = Field(default_factory=list)


class ArrayDescriptor(_DescriptorBase):
    """A homogeneous sequence."""

    tag: Literal["["] = "["
    element: TypeSlot


class ObjectMember(BaseModel):
    """A named member of an object shape, interface or class."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    type: TypeSlot
    flags: str = ""


class ObjectDescriptor(_DescriptorBase):
    """An anonymous object shape. Members keep declaration order."""

    tag: Literal["O"] = "O"
    name: str | None = None
    members: list[ObjectMember] = Field(default_factory=list)


def _new_identity() -> str:
    return uuid.uuid4().hex


class InterfaceToken(BaseModel):
    """Nominal identity of an interface. The identity survives renames."""

    model_config = ConfigDict(frozen=True)

    name: str
    identity: str = Field(default_factory=_new_identity)


class AliasToken(BaseModel):
    """Nominal identity of a type alias."""

    model_config = ConfigDict(frozen=True)

    name: str
    identity: str = Field(default_factory=_new_identity)


class InterfaceDescriptor(_DescriptorBase):
    """A nominal interface with its own members and parent interfaces."""

    tag: Literal["I"] = "I"
    token: InterfaceToken
    members: list[ObjectMember] = Field(default_factory=list)
    extends: list[TypeSlot] = Field(default_factory=list)
    parameters: list[str] = Field(default_factory=list)
    flags: str = ""


class ClassDescriptor(_DescriptorBase):
    """A nominal class, either a Python class or a named declaration without one."""

    tag: Literal["C"] = "C"
    name: str
    runtime_class: type | None = None
    members: list[ObjectMember] = Field(default_factory=list)
    extends: Thunk | None = None
    implements: list[TypeSlot] = Field(default_factory=list)
    parameters: list[str] = Field(default_factory=list)
    flags: str = ""


class AliasDescriptor(_DescriptorBase):
    """A named, structurally transparent type alias."""

    tag: Literal["A"] = "A"
    name: str
    token: AliasToken
    target: Thunk
    parameters: list[str] = Field(default_factory=list)


class GenericDescriptor(_DescriptorBase):
    """Application of a parameterized base type to positional arguments."""

    tag: Literal["g"] = "g"
    base: Thunk
    arguments: list[TypeSlot] = Field(default_factory=list)


class EnumDescriptor(_DescriptorBase):
    """A named set of constant values."""

    tag: Literal["E"] = "E"
    name: str
    values: dict[str, LiteralValue] = Field(default_factory=dict)


class MappedDescriptor(_DescriptorBase):
    """A type computed from a parameterized source type.

    When the producer already expanded the mapping, ``members`` holds the
    resulting shape and is used for structural checks.
    """

    tag: Literal["m"] = "m"
    base: Thunk
    arguments: list[TypeSlot] = Field(default_factory=list)
    members: list[ObjectMember] | None = None


class VariableDescriptor(_DescriptorBase):
    """A type parameter reference, substituted by the binder."""

    tag: Literal["v"] = "v"
    name: str
    declaration: Thunk | None = None


class FunctionParameter(BaseModel):
    """One declared parameter of a function type. Flags mark optional (``?``) and rest (``3``) parameters."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    type: TypeSlot = Field(default_factory=lambda: UnknownDescriptor())
    flags: str = ""


class FunctionDescriptor(_DescriptorBase):
    """A callable with positional parameters and a return type.

    ``parameters`` is None when the signature is left unchecked, as for
    ``Callable[..., R]``.
    """

    tag: Literal["F"] = "F"
    name: str | None = None
    parameters: list[FunctionParameter] | None = Field(default_factory=list)
    returns: TypeSlot = Field(default_factory=lambda: UnknownDescriptor())
    flags: str = ""


Descriptor = Annotated[
    AnyDescriptor
    | UnknownDescriptor
    | VoidDescriptor
    | UndefinedDescriptor
    | NullDescriptor
    | NeverDescriptor
    | TrueDescriptor
    | FalseDescriptor
    | ThisDescriptor
    | LiteralDescriptor
    | UnionDescriptor
    | IntersectionDescriptor
    | TupleDescriptor
    | ArrayDescriptor
    | ObjectDescriptor
    | InterfaceDescriptor
    | ClassDescriptor
    | AliasDescriptor
    | GenericDescriptor
    | EnumDescriptor
    | MappedDescriptor
    | VariableDescriptor
    | FunctionDescriptor,
    Field(discriminator="tag"),
]

DESCRIPTOR_ADAPTER: TypeAdapter[Any] = TypeAdapter(Descriptor)


def is_descriptor(value: object) -> bool:
    """Return True if *value* is one of the descriptor variants."""
    return isinstance(value, _DescriptorBase)


def descriptor_from_dict(data: dict[str, Any]) -> Any:
    """Build the descriptor variant selected by ``data["tag"]``.

    Nested type positions must already be descriptors or thunks.

    Raises:
        pydantic.ValidationError: If the tag is unknown or a field is malformed.
    """
    return DESCRIPTOR_ADAPTER.validate_python(data)


# Shared intrinsic instances. Intrinsics carry no fields, so one of each suffices.
ANY = AnyDescriptor()
UNKNOWN = UnknownDescriptor()
VOID = VoidDescriptor()
UNDEFINED_TYPE = UndefinedDescriptor()
NULL = NullDescriptor()
NEVER = NeverDescriptor()
TRUE = TrueDescriptor()
FALSE = FalseDescriptor()
THIS = ThisDescriptor()
