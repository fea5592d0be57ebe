# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Navigable wrappers around raw descriptors.

:func:`resolve` wraps a descriptor in the :class:`TypeRef` subclass registered
for its tag. Wrappers never mutate the descriptor they hold; children (members,
elements, alias targets) are resolved on first access and cached on the
wrapper. Aliases and bound type variables are transparent: ``kind`` and the
``is_*`` predicates look through them, while :meth:`TypeRef.as_` with
``"alias"`` still reaches the alias itself.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Callable, Hashable, Sequence
from typing import Any, ClassVar, TypeVar

from typeshape.model.convert import as_descriptor, force
from typeshape.model.flags import Flags
from typeshape.model.format import (
    NEVER,
    TYPE_KINDS,
    UNDEFINED,
    AliasDescriptor,
    AliasToken,
    ClassDescriptor,
    EnumDescriptor,
    FunctionDescriptor,
    GenericDescriptor,
    InterfaceDescriptor,
    InterfaceToken,
    MappedDescriptor,
    ObjectDescriptor,
    TupleDescriptor,
    VariableDescriptor,
)
from typeshape.model.values import literal_equals
from typeshape.reflection.binding import (
    EMPTY_BINDINGS,
    Bindings,
    bind_parameters,
    create_type,
    dereference,
    ref_key,
)
from typeshape.reflection.identity import register_token
from typeshape.reflection.members import MemberRef, ParameterRef, TupleElementRef

# ###############
# Public Interface
# ###############

_R = TypeVar("_R", bound="TypeRef")

# Upper bound on alias hops followed in one walk. Self-referential aliases are
# caught by key repetition; this bounds aliases whose arguments grow each hop.
MAX_ALIAS_HOPS = 64

_NOT_GIVEN = object()


class KindMismatchError(TypeError):
    """Raised when a wrapper is downcast to a kind it does not have."""

    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(f"Type of kind '{actual}' cannot be viewed as '{expected}'")
        self.actual = actual
        self.expected = expected


def resolve(target: Any, bindings: Bindings | None = None) -> TypeRef:
    """Wrap *target* in the navigable wrapper for its descriptor tag.

    Args:
        target: A descriptor, an existing wrapper, a builder, or any plain
            value accepted by :func:`~typeshape.model.convert.as_descriptor`.
        bindings: Type parameter bindings in scope where *target* appears.

    Returns:
        The wrapper. Thunks inside the descriptor are not evaluated.
    """
    if isinstance(target, TypeRef):
        if bindings is None:
            return target
        return type(target)(target.descriptor, bindings, arguments=target.arguments)
    descriptor = as_descriptor(target)
    return _REF_TYPES[descriptor.tag](descriptor, bindings)


def resolve_slot(slot: Any, bindings: Bindings | None = None) -> TypeRef:
    """Resolve a descriptor type position, evaluating its thunk if it holds one."""
    return resolve(force(slot), bindings)


class TypeRef:
    """Base wrapper for every descriptor variant."""

    tag: ClassVar[str] = ""
    _kind: ClassVar[str] = ""
    is_nominal: ClassVar[bool] = False
    is_parameterizable: ClassVar[bool] = False

    def __init__(
        self,
        descriptor: Any,
        bindings: Bindings | None = None,
        *,
        alias: AliasRef | None = None,
        arguments: Sequence[TypeRef] = (),
    ) -> None:
        self._descriptor = descriptor
        self._bindings = bindings if bindings is not None else EMPTY_BINDINGS
        self._alias = alias
        self._arguments = tuple(arguments)

    @property
    def descriptor(self) -> Any:
        """The raw descriptor wrapped by this reference."""
        return self._descriptor

    @property
    def bindings(self) -> Bindings:
        return self._bindings

    @property
    def arguments(self) -> tuple[TypeRef, ...]:
        """Type arguments this wrapper was instantiated with."""
        return self._arguments

    @property
    def kind(self) -> str:
        """Structural kind, looking through aliases and bound type variables."""
        return self.unaliased()._kind

    # Navigation ----------------------------------------------------------

    def bound_variable_target(self) -> TypeRef | None:
        """Return the type bound to this wrapper if it is a bound type variable."""
        return None

    def unaliased(self) -> TypeRef:
        """Follow aliases and bound type variables to the first other wrapper.

        The result remembers the outermost alias it was reached through, so
        ``ref.as_("class").as_("alias")`` round-trips. A cyclic alias chain
        unwraps to ``never``.
        """
        cached = self.__dict__.get("_unaliased")
        if cached is not None:
            return cached
        result = self._unwrap()
        self.__dict__["_unaliased"] = result
        return result

    def resolve_type(self) -> TypeRef:
        """Flatten aliases, bound variables and generic applications.

        An alias of an alias of a literal resolves to the literal; a generic
        application of an alias, interface or class resolves to its base with
        the arguments bound.
        """
        ref = self.unaliased()
        seen: set[Hashable] = set()
        while isinstance(ref, GenericRef):
            key = ref_key(ref)
            if key in seen or len(seen) >= MAX_ALIAS_HOPS:
                _log.debug("generic application %s never settles; resolving to never", ref)
                return resolve(NEVER)
            seen.add(key)
            bound = ref.bound()
            if bound is ref:
                break
            ref = bound.unaliased()
        return ref

    def as_(self, kind: str | type[_R]) -> Any:
        """Return this type viewed as *kind*.

        Args:
            kind: A kind name such as ``"union"`` or a :class:`TypeRef` subclass.

        Raises:
            KindMismatchError: If the resolved kind differs from *kind*.
        """
        result = self._downcast(kind)
        if result is None:
            expected = kind if isinstance(kind, str) else kind._kind
            raise KindMismatchError(self.kind, expected)
        return result

    def is_(self, kind: str | type[TypeRef]) -> bool:
        """Return True if :meth:`as_` would succeed for *kind*."""
        return self._downcast(kind) is not None

    def create_type(self, *arguments: Any) -> TypeRef:
        """Bind this alias, interface, class or generic to *arguments*.

        Arguments may be descriptors, wrappers, builders or plain values.
        """
        return create_type(self, *arguments)

    def with_arguments(self, arguments: Sequence[TypeRef]) -> TypeRef:
        raise KindMismatchError(self.kind, "generic")

    def matches_value(self, value: Any, errors: list[str] | None = None, **options: Any) -> bool:
        """Return True if *value* structurally conforms to this type."""
        from typeshape.matching.matcher import matches_value

        return matches_value(self, value, errors=errors, **options)

    def equals(self, other: Any) -> bool:
        """Structural equality. Union order is ignored; nominal types compare by identity."""
        return _equals(self, resolve(other), frozenset())

    def to_descriptor(self) -> Any:
        """Return a descriptor for this type, keeping instantiation arguments."""
        if not self._arguments:
            return self._descriptor
        descriptor = self._descriptor
        return GenericDescriptor(
            base=lambda: descriptor,
            arguments=[arg.to_descriptor() for arg in self._arguments],
        )

    # Predicates ----------------------------------------------------------

    def is_aliased(self) -> bool:
        return isinstance(self, AliasRef) or self._alias is not None

    def is_union(self, predicate: Callable[[TypeRef], bool] | None = None) -> bool:
        ref = self.unaliased()
        return isinstance(ref, UnionRef) and (predicate is None or all(predicate(t) for t in ref.types))

    def is_intersection(self, predicate: Callable[[TypeRef], bool] | None = None) -> bool:
        ref = self.unaliased()
        return isinstance(ref, IntersectionRef) and (predicate is None or all(predicate(t) for t in ref.types))

    def is_array(self, predicate: Callable[[TypeRef], bool] | None = None) -> bool:
        ref = self.unaliased()
        return isinstance(ref, ArrayRef) and (predicate is None or predicate(ref.element_type))

    def is_tuple(self, predicates: Sequence[Callable[[TypeRef], bool]] | None = None) -> bool:
        ref = self.unaliased()
        if not isinstance(ref, TupleRef):
            return False
        if predicates is None:
            return True
        elements = ref.elements
        return len(elements) == len(predicates) and all(p(e.type) for p, e in zip(predicates, elements))

    def is_class(self) -> bool:
        return isinstance(self.unaliased(), ClassRef)

    def is_builtin_class(self, cls: type | None = None) -> bool:
        ref = self.unaliased()
        return isinstance(ref, ClassRef) and ref.is_builtin and (cls is None or ref.runtime_class is cls)

    def is_interface(self) -> bool:
        return isinstance(self.unaliased(), InterfaceRef)

    def is_object(self) -> bool:
        return isinstance(self.unaliased(), ObjectRef)

    def is_structural(self) -> bool:
        """True for object shapes, interfaces, classes and expanded mapped types."""
        ref = self.unaliased()
        return isinstance(ref, StructuralRef) and ref.has_members

    def is_literal(self, value: Any = _NOT_GIVEN) -> bool:
        """True for literal types, optionally only for the literal *value*.

        ``True``, ``False``, ``None`` and :data:`UNDEFINED` select the
        corresponding intrinsic types.
        """
        ref = self.unaliased()
        if value is _NOT_GIVEN:
            return isinstance(ref, (LiteralRef, TrueRef, FalseRef))
        if value is True:
            return isinstance(ref, TrueRef)
        if value is False:
            return isinstance(ref, FalseRef)
        if value is None:
            return isinstance(ref, NullRef)
        if value is UNDEFINED:
            return isinstance(ref, UndefinedRef)
        return isinstance(ref, LiteralRef) and literal_equals(ref.value, value)

    def is_string_literal(self) -> bool:
        ref = self.unaliased()
        return isinstance(ref, LiteralRef) and isinstance(ref.value, str)

    def is_number_literal(self) -> bool:
        ref = self.unaliased()
        return isinstance(ref, LiteralRef) and not isinstance(ref.value, str)

    def is_boolean_literal(self) -> bool:
        return isinstance(self.unaliased(), (TrueRef, FalseRef))

    def is_null(self) -> bool:
        return isinstance(self.unaliased(), NullRef)

    def is_undefined(self) -> bool:
        return isinstance(self.unaliased(), UndefinedRef)

    def is_void(self) -> bool:
        return isinstance(self.unaliased(), VoidRef)

    def is_true(self) -> bool:
        return isinstance(self.unaliased(), TrueRef)

    def is_false(self) -> bool:
        return isinstance(self.unaliased(), FalseRef)

    def is_any(self) -> bool:
        return isinstance(self.unaliased(), AnyRef)

    def is_unknown(self) -> bool:
        return isinstance(self.unaliased(), UnknownRef)

    def is_never(self) -> bool:
        return isinstance(self.unaliased(), NeverRef)

    def is_generic(self) -> bool:
        return isinstance(self.unaliased(), GenericRef)

    def is_enum(self) -> bool:
        return isinstance(self.unaliased(), EnumRef)

    def is_mapped(self) -> bool:
        return isinstance(self.unaliased(), MappedRef)

    def is_variable(self) -> bool:
        return isinstance(self.unaliased(), VariableRef)

    def is_this(self) -> bool:
        return isinstance(self.unaliased(), ThisRef)

    def is_function(self) -> bool:
        return isinstance(self.unaliased(), FunctionRef)

    # Rendering -----------------------------------------------------------

    def __str__(self) -> str:
        return self._render(frozenset())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    def _render(self, seen: frozenset[int]) -> str:
        return self._kind

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return True

    # Internals -----------------------------------------------------------

    def _copy(self: _R, *, alias: AliasRef | None) -> _R:
        return type(self)(self._descriptor, self._bindings, alias=alias, arguments=self._arguments)

    def _downcast(self, kind: str | type[TypeRef]) -> TypeRef | None:
        if kind == "alias" or kind is AliasRef:
            return self if isinstance(self, AliasRef) else self._alias
        ref = self.unaliased()
        if isinstance(kind, str):
            return ref if ref._kind == kind else None
        return ref if isinstance(ref, kind) else None

    def _unwrap(self) -> TypeRef:
        ref: TypeRef = self
        outer = self._alias
        seen: set[Hashable] = set()
        while True:
            if isinstance(ref, AliasRef):
                key = ref_key(ref)
                if key in seen or len(seen) >= MAX_ALIAS_HOPS:
                    if _log.isEnabledFor(logging.DEBUG):
                        _log.debug("alias %s refers to itself; treating it as never", ref.name)
                    return NeverRef(NEVER, alias=outer or ref)
                seen.add(key)
                outer = outer or ref
                ref = ref.target
                continue
            target = ref.bound_variable_target()
            if target is None:
                break
            ref = target
        if ref is self or outer is None or ref._alias is outer:
            return ref
        return ref._copy(alias=outer)


# Intrinsics ----------------------------------------------------------------


def _register(tag: str) -> Callable[[type[_R]], type[_R]]:
    def decorator(cls: type[_R]) -> type[_R]:
        cls.tag = tag
        cls._kind = TYPE_KINDS[tag]
        _REF_TYPES[tag] = cls
        return cls

    return decorator


_REF_TYPES: dict[str, type[TypeRef]] = {}


@_register("~")
class AnyRef(TypeRef):
    pass


@_register("U")
class UnknownRef(TypeRef):
    pass


@_register("V")
class VoidRef(TypeRef):
    pass


@_register("u")
class UndefinedRef(TypeRef):
    pass


@_register("n")
class NullRef(TypeRef):
    pass


@_register("N")
class NeverRef(TypeRef):
    pass


@_register("1")
class TrueRef(TypeRef):
    def _render(self, seen: frozenset[int]) -> str:
        return "true"


@_register("0")
class FalseRef(TypeRef):
    def _render(self, seen: frozenset[int]) -> str:
        return "false"


@_register("t")
class ThisRef(TypeRef):
    """The enclosing object, interface or class type."""

    @property
    def bound(self) -> TypeRef | None:
        return self._bindings.this


@_register("l")
class LiteralRef(TypeRef):
    @property
    def value(self) -> int | float | str:
        return self._descriptor.value  # type: ignore[no-any-return]

    def _render(self, seen: frozenset[int]) -> str:
        return json.dumps(self.value) if isinstance(self.value, str) else repr(self.value)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return literal_equals(self.value, other.value)  # type: ignore[attr-defined]


# Containers ----------------------------------------------------------------


class _CompositeRef(TypeRef):
    _separator: ClassVar[str] = ""

    @functools.cached_property
    def types(self) -> tuple[TypeRef, ...]:
        """Member types in declaration order."""
        return tuple(resolve_slot(slot, self._bindings) for slot in self._descriptor.types)

    def _render(self, seen: frozenset[int]) -> str:
        if id(self._descriptor) in seen:
            return "..."
        inner = seen | {id(self._descriptor)}
        return self._separator.join(_render_nested(t, inner) for t in self.types) or "never"

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        mine, theirs = self.types, other.types  # type: ignore[attr-defined]
        return all(any(_equals(a, b, seen) for b in theirs) for a in mine) and all(
            any(_equals(a, b, seen) for a in mine) for b in theirs
        )


@_register("|")
class UnionRef(_CompositeRef):
    _separator = " | "


@_register("&")
class IntersectionRef(_CompositeRef):
    _separator = " & "


@_register("[")
class ArrayRef(TypeRef):
    @functools.cached_property
    def element_type(self) -> TypeRef:
        return resolve_slot(self._descriptor.element, self._bindings)

    def _render(self, seen: frozenset[int]) -> str:
        if id(self._descriptor) in seen:
            return "..."
        return f"{_render_nested(self.element_type, seen | {id(self._descriptor)})}[]"

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return _equals(self.element_type, other.element_type, seen)  # type: ignore[attr-defined]


@_register("T")
class TupleRef(TypeRef):
    @functools.cached_property
    def elements(self) -> tuple[TupleElementRef, ...]:
        descriptor: TupleDescriptor = self._descriptor
        return tuple(TupleElementRef(element, self._bindings) for element in descriptor.elements)

    def _render(self, seen: frozenset[int]) -> str:
        if id(self._descriptor) in seen:
            return "..."
        inner = seen | {id(self._descriptor)}
        if not self.has_signature:
            return f"(...) => {self.return_type._render(inner)}"
        parts = []
        for element in self.elements:
            text = element.type._render(inner)
            if element.is_rest:
                text = f"...{text}"
            if element.name is not None:
                text = f"{element.name}{'?' if element.is_optional else ''}: {text}"
            elif element.is_optional:
                text = f"{text}?"
            parts.append(text)
        return f"[{', '.join(parts)}]"

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        mine, theirs = self.elements, other.elements  # type: ignore[attr-defined]
        return len(mine) == len(theirs) and all(
            a.name == b.name and a.flags == b.flags and _equals(a.type, b.type, seen) for a, b in zip(mine, theirs)
        )


@_register("E")
class EnumRef(TypeRef):
    @property
    def name(self) -> str:
        return self._descriptor.name  # type: ignore[no-any-return]

    @property
    def values(self) -> dict[str, int | float | str]:
        descriptor: EnumDescriptor = self._descriptor
        return dict(descriptor.values)

    @property
    def value_set(self) -> list[int | float | str]:
        """The distinct enum values in declaration order."""
        result: list[int | float | str] = []
        for value in self._descriptor.values.values():
            if not any(literal_equals(value, seen) for seen in result):
                result.append(value)
        return result

    def _render(self, seen: frozenset[int]) -> str:
        return self.name

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return self.name == other.name and self.values == other.values  # type: ignore[attr-defined]


@_register("F")
class FunctionRef(TypeRef):
    """A callable type. Values are matched by callability and positional arity."""

    @property
    def name(self) -> str | None:
        descriptor: FunctionDescriptor = self._descriptor
        return descriptor.name

    @functools.cached_property
    def parameters(self) -> tuple[ParameterRef, ...]:
        descriptor: FunctionDescriptor = self._descriptor
        return tuple(ParameterRef(parameter, self._bindings) for parameter in descriptor.parameters or ())

    @property
    def has_signature(self) -> bool:
        """False when any positional arguments are accepted unchecked."""
        return self._descriptor.parameters is not None  # type: ignore[no-any-return]

    @functools.cached_property
    def return_type(self) -> TypeRef:
        return resolve_slot(self._descriptor.returns, self._bindings)

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._descriptor.flags)

    @property
    def is_async(self) -> bool:
        return self.flags.is_async

    @property
    def is_variadic(self) -> bool:
        return any(parameter.is_rest for parameter in self.parameters)

    def _render(self, seen: frozenset[int]) -> str:
        if id(self._descriptor) in seen:
            return "function"
        inner = seen | {id(self._descriptor)}
        if not self.has_signature:
            return f"(...) => {self.return_type._render(inner)}"
        parts = []
        for parameter in self.parameters:
            prefix = "..." if parameter.is_rest else ""
            marker = "?" if parameter.is_optional else ""
            parts.append(f"{prefix}{parameter.name}{marker}: {parameter.type._render(inner)}")
        return f"({', '.join(parts)}) => {self.return_type._render(inner)}"

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        mine, theirs = self.parameters, other.parameters  # type: ignore[attr-defined]
        return (
            self.flags == other.flags  # type: ignore[attr-defined]
            and self.has_signature == other.has_signature  # type: ignore[attr-defined]
            and len(mine) == len(theirs)
            and all(a.flags == b.flags and _equals(a.type, b.type, seen) for a, b in zip(mine, theirs))
            and _equals(self.return_type, other.return_type, seen)  # type: ignore[attr-defined]
        )


@_register("v")
class VariableRef(TypeRef):
    """A type parameter. Transparent once bound."""

    @property
    def name(self) -> str:
        return self._descriptor.name  # type: ignore[no-any-return]

    def bound_variable_target(self) -> TypeRef | None:
        return self._bindings.get(self.name)

    @property
    def bound(self) -> TypeRef | None:
        return self.bound_variable_target()

    @functools.cached_property
    def declaration(self) -> TypeRef | None:
        """The declared constraint of the parameter, if any."""
        descriptor: VariableDescriptor = self._descriptor
        if descriptor.declaration is None:
            return None
        return resolve_slot(descriptor.declaration)

    def _render(self, seen: frozenset[int]) -> str:
        return self.name

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return self.name == other.name  # type: ignore[attr-defined]


# Aliases and generics ------------------------------------------------------


@_register("A")
class AliasRef(TypeRef):
    """A named alias. Its ``kind`` is the kind of what it resolves to."""

    is_nominal = True
    is_parameterizable = True

    @property
    def name(self) -> str:
        return self._descriptor.name  # type: ignore[no-any-return]

    @property
    def token(self) -> AliasToken:
        return self._descriptor.token  # type: ignore[no-any-return]

    @property
    def parameters(self) -> list[str]:
        return list(self._descriptor.parameters)

    @functools.cached_property
    def target(self) -> TypeRef:
        """The aliased type, one hop away, with this alias's parameters bound."""
        descriptor: AliasDescriptor = self._descriptor
        bindings = bind_parameters(descriptor.parameters, self._arguments)
        return resolve_slot(descriptor.target, bindings)

    def with_arguments(self, arguments: Sequence[TypeRef]) -> AliasRef:
        return AliasRef(self._descriptor, self._bindings, arguments=arguments)

    def _render(self, seen: frozenset[int]) -> str:
        return _with_args(self.name, self._arguments)


@_register("g")
class GenericRef(TypeRef):
    """Application of a parameterized base type to arguments."""

    @functools.cached_property
    def base_type(self) -> TypeRef:
        descriptor: GenericDescriptor = self._descriptor
        return resolve_slot(descriptor.base)

    @functools.cached_property
    def type_arguments(self) -> tuple[TypeRef, ...]:
        if self._arguments:
            return self._arguments
        descriptor: GenericDescriptor = self._descriptor
        return tuple(dereference(resolve_slot(slot, self._bindings)) for slot in descriptor.arguments)

    def bound(self) -> TypeRef:
        """Return the base type with its parameters bound to the arguments.

        Returns this wrapper unchanged when the base takes no parameters.
        """
        base = self.base_type
        if base.is_parameterizable:
            return base.with_arguments(self.type_arguments)
        return self

    def with_arguments(self, arguments: Sequence[TypeRef]) -> GenericRef:
        return GenericRef(self._descriptor, self._bindings, alias=self._alias, arguments=arguments)

    def _render(self, seen: frozenset[int]) -> str:
        base = self.base_type
        name = getattr(base, "name", None) or base._render(seen)
        return _with_args(name, self.type_arguments, seen)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        theirs = other.type_arguments  # type: ignore[attr-defined]
        return (
            _equals(self.base_type, other.base_type, seen)  # type: ignore[attr-defined]
            and len(self.type_arguments) == len(theirs)
            and all(_equals(a, b, seen) for a, b in zip(self.type_arguments, theirs))
        )


# Structural types ----------------------------------------------------------


class StructuralRef(TypeRef):
    """Common navigation for types with named members."""

    @property
    def has_members(self) -> bool:
        return True

    @functools.cached_property
    def member_bindings(self) -> Bindings:
        """Bindings in effect for member types, with ``this`` set to this type."""
        return self._bindings.with_this(self)

    @functools.cached_property
    def own_members(self) -> list[MemberRef]:
        """Members declared directly on this type, duplicates collapsed (last wins)."""
        merged: dict[str, MemberRef] = {}
        for member in self._declared_members():
            merged[member.name] = MemberRef(member, self.member_bindings)
        return list(merged.values())

    @functools.cached_property
    def members(self) -> list[MemberRef]:
        """Own and inherited members. Own members override inherited ones of the same name."""
        return self._collect_members(frozenset({ref_key(self)}))

    def get_member(self, name: str) -> MemberRef | None:
        for member in self.members:
            if member.name == name:
                return member
        return None

    def get_property(self, name: str) -> MemberRef | None:
        member = self.get_member(name)
        return member if member is not None and not member.is_method else None

    @property
    def properties(self) -> list[MemberRef]:
        return [member for member in self.members if not member.is_method]

    @property
    def methods(self) -> list[MemberRef]:
        return [member for member in self.members if member.is_method]

    def _declared_members(self) -> list[Any]:
        return list(self._descriptor.members)

    def _parents(self) -> list[TypeRef]:
        return []

    def _collect_members(self, visiting: frozenset[Hashable]) -> list[MemberRef]:
        merged: dict[str, MemberRef] = {}
        for parent in self._parents():
            resolved = parent.resolve_type()
            if not isinstance(resolved, StructuralRef):
                continue
            key = ref_key(resolved)
            if key in visiting or len(visiting) >= MAX_ALIAS_HOPS:
                continue
            for member in resolved._collect_members(visiting | {key}):
                merged[member.name] = member
        for member in self.own_members:
            merged[member.name] = member
        return list(merged.values())

    def _render_members(self, seen: frozenset[int]) -> str:
        if id(self._descriptor) in seen:
            return "{...}"
        inner = seen | {id(self._descriptor)}
        parts = [
            f"{member.name}{'?' if member.is_optional else ''}: {member.type._render(inner)}"
            for member in self.own_members
        ]
        return "{ " + "; ".join(parts) + " }" if parts else "{}"

    def _same_members(self, other: StructuralRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        mine, theirs = self.members, other.members
        return len(mine) == len(theirs) and all(
            a.name == b.name and a.flags == b.flags and _equals(a.type, b.type, seen) for a, b in zip(mine, theirs)
        )


@_register("O")
class ObjectRef(StructuralRef):
    """An anonymous object shape."""

    @property
    def name(self) -> str | None:
        descriptor: ObjectDescriptor = self._descriptor
        return descriptor.name

    def _render(self, seen: frozenset[int]) -> str:
        return self._render_members(seen)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return self._same_members(other, seen)  # type: ignore[arg-type]


class _NominalRef(StructuralRef):
    is_nominal = True
    is_parameterizable = True

    @property
    def parameters(self) -> list[str]:
        return list(self._descriptor.parameters)

    @functools.cached_property
    def member_bindings(self) -> Bindings:
        return bind_parameters(self._descriptor.parameters, self._arguments).with_this(self)

    def with_arguments(self, arguments: Sequence[TypeRef]) -> TypeRef:
        return type(self)(self._descriptor, self._bindings, alias=self._alias, arguments=arguments)

    def _same_arguments(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return len(self._arguments) == len(other.arguments) and all(
            _equals(a, b, seen) for a, b in zip(self._arguments, other.arguments)
        )


@_register("I")
class InterfaceRef(_NominalRef):
    """A nominal interface reference."""

    @functools.cached_property
    def token(self) -> InterfaceToken:
        """The canonical token for this interface's identity."""
        descriptor: InterfaceDescriptor = self._descriptor
        return register_token(descriptor.token)

    @property
    def name(self) -> str:
        return self.token.name

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._descriptor.flags)

    @functools.cached_property
    def super(self) -> list[TypeRef]:
        """Parent interfaces, with this interface's parameters bound."""
        descriptor: InterfaceDescriptor = self._descriptor
        return [resolve_slot(slot, self.member_bindings) for slot in descriptor.extends]

    def _parents(self) -> list[TypeRef]:
        return self.super

    def _render(self, seen: frozenset[int]) -> str:
        return _with_args(self.name, self._arguments, seen)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        return self.token.identity == other.token.identity and self._same_arguments(other, seen)  # type: ignore[attr-defined]


@_register("C")
class ClassRef(_NominalRef):
    """A class reference. Python classes are matched by ``isinstance``."""

    @property
    def runtime_class(self) -> type | None:
        descriptor: ClassDescriptor = self._descriptor
        return descriptor.runtime_class

    @property
    def name(self) -> str:
        return self._descriptor.name  # type: ignore[no-any-return]

    @property
    def is_builtin(self) -> bool:
        cls = self.runtime_class
        return cls is not None and cls.__module__ == "builtins"

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._descriptor.flags)

    @property
    def is_abstract(self) -> bool:
        return self.flags.is_abstract

    @property
    def has_members(self) -> bool:
        return bool(self.members)

    @functools.cached_property
    def super(self) -> TypeRef | None:
        descriptor: ClassDescriptor = self._descriptor
        if descriptor.extends is None:
            return None
        return resolve_slot(descriptor.extends, self.member_bindings)

    @functools.cached_property
    def interfaces(self) -> list[TypeRef]:
        descriptor: ClassDescriptor = self._descriptor
        return [resolve_slot(slot, self.member_bindings) for slot in descriptor.implements]

    @functools.cached_property
    def static_members(self) -> list[MemberRef]:
        return [
            MemberRef(member, self.member_bindings) for member in self._descriptor.members if Flags.parse(member.flags).is_static
        ]

    def _declared_members(self) -> list[Any]:
        return [member for member in self._descriptor.members if not Flags.parse(member.flags).is_static]

    def _parents(self) -> list[TypeRef]:
        return [self.super] if self.super is not None else []

    def _render(self, seen: frozenset[int]) -> str:
        return _with_args(self.name, self._arguments, seen)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        mine, theirs = self.runtime_class, other.runtime_class  # type: ignore[attr-defined]
        if mine is not None or theirs is not None:
            same_class = mine is theirs
        else:
            same_class = self._descriptor is other.descriptor
        return same_class and self._same_arguments(other, seen)


@_register("m")
class MappedRef(StructuralRef):
    """A mapped type. Structural only when the producer expanded its members."""

    @functools.cached_property
    def base_type(self) -> TypeRef:
        descriptor: MappedDescriptor = self._descriptor
        return resolve_slot(descriptor.base)

    @functools.cached_property
    def type_arguments(self) -> tuple[TypeRef, ...]:
        descriptor: MappedDescriptor = self._descriptor
        return tuple(dereference(resolve_slot(slot, self._bindings)) for slot in descriptor.arguments)

    @property
    def has_members(self) -> bool:
        return self._descriptor.members is not None

    def _declared_members(self) -> list[Any]:
        return list(self._descriptor.members or [])

    def _render(self, seen: frozenset[int]) -> str:
        if self.has_members:
            return self._render_members(seen)
        name = getattr(self.base_type, "name", None) or self.base_type._render(seen)
        return _with_args(name, self.type_arguments, seen)

    def _same(self, other: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
        theirs = other.type_arguments  # type: ignore[attr-defined]
        return (
            _equals(self.base_type, other.base_type, seen)  # type: ignore[attr-defined]
            and len(self.type_arguments) == len(theirs)
            and all(_equals(a, b, seen) for a, b in zip(self.type_arguments, theirs))
        )


# ################
# Implementation
# ################

_log = logging.getLogger(__name__)


def _equals(a: TypeRef, b: TypeRef, seen: frozenset[tuple[Hashable, Hashable]]) -> bool:
    a, b = a.unaliased(), b.unaliased()
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    pair = (ref_key(a), ref_key(b))
    if pair[0] == pair[1] or pair in seen:
        return True
    return a._same(b, seen | {pair})


def _render_nested(ref: TypeRef, seen: frozenset[int]) -> str:
    text = ref._render(seen)
    if isinstance(ref.unaliased(), (UnionRef, IntersectionRef)) and not ref.is_aliased():
        return f"({text})"
    return text


def _with_args(name: str, arguments: Sequence[TypeRef], seen: frozenset[int] = frozenset()) -> str:
    if not arguments:
        return name
    return f"{name}<{', '.join(arg._render(seen) for arg in arguments)}>"
