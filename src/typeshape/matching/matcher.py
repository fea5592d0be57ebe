# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural matching of runtime values against types.

Termination rests on two guards. Every alias or generic hop taken for one
value is recorded together with its bound arguments; meeting the same hop
again before reaching a member or element of that value means the type
expands into itself, and that path fails. Descending into a member or element
starts a fresh record, so a recursive type still matches finitely nested
values. Independently, a value that contains itself is assumed to match a
structural type it is already being checked against further up. A value
nested into itself under a type that keeps growing its arguments never meets
the same bound type twice, so the number of visits per value and declaration
is capped as well.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Hashable, Mapping
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typeshape.model.format import UNDEFINED
from typeshape.model.values import (
    describe,
    has_member,
    is_instance,
    is_object_like,
    is_sequence,
    literal_equals,
    member_names,
    read_member,
)
from typeshape.reflection.binding import ref_key
from typeshape.reflection.refs import (
    MAX_ALIAS_HOPS,
    AliasRef,
    ArrayRef,
    ClassRef,
    FunctionRef,
    GenericRef,
    MappedRef,
    StructuralRef,
    ThisRef,
    TupleRef,
    TypeRef,
    VariableRef,
    resolve,
)

if TYPE_CHECKING:
    from typeshape.settings.config import MatchConfig

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class MatchOptions:
    """Options for :func:`matches_value`.

    Attributes:
        errors: Sink collecting human-readable diagnostics for non-matches.
        exact_objects: Reject members that the type does not declare.
    """

    errors: list[str] | None = None
    exact_objects: bool = False

    @classmethod
    def from_config(cls, config: MatchConfig, errors: list[str] | None = None) -> MatchOptions:
        return cls(errors=errors, exact_objects=config.exact_objects)


def matches_value(
    type_or_value: Any,
    value: Any,
    *,
    errors: list[str] | None = None,
    exact_objects: bool = False,
    options: MatchOptions | None = None,
) -> bool:
    """Return True if *value* structurally conforms to *type_or_value*.

    Args:
        type_or_value: A wrapper, descriptor, builder or plain value accepted
            by :func:`~typeshape.reflection.refs.resolve`.
        value: The runtime value to check.
        errors: Optional sink for diagnostics. Never used for control flow.
        exact_objects: Reject members the type does not declare.
        options: Full options; overrides *errors* and *exact_objects*.

    Returns:
        Whether the value matches. Non-matches never raise.
    """
    if options is None:
        options = MatchOptions(errors=errors, exact_objects=exact_objects)
    return _Matcher(options).match(resolve(type_or_value), value)


# ################
# Implementation
# ################

_log = logging.getLogger(__name__)

_Hops = frozenset[Hashable]


class _Matcher:
    """Matches one value against one type. Not reusable across calls."""

    def __init__(self, options: MatchOptions) -> None:
        self._errors = options.errors
        self._exact = options.exact_objects
        self._active: set[tuple[Hashable, int]] = set()
        self._depths: dict[tuple[int, int], int] = {}

    def match(self, ref: TypeRef, value: Any) -> bool:
        return self._match(ref, value, "$", frozenset())

    def _match(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        while True:
            if isinstance(ref, (AliasRef, GenericRef)):
                key = ref_key(ref)
                if key in hops or len(hops) >= MAX_ALIAS_HOPS:
                    if _log.isEnabledFor(logging.DEBUG):
                        _log.debug("%s: %s expands into itself; rejecting path", path, ref)
                    return self._fail(path, f"type {ref} expands into itself")
                hops = hops | {key}
                ref = ref.target if isinstance(ref, AliasRef) else self._apply(ref)
            elif isinstance(ref, VariableRef):
                bound = ref.bound
                if bound is None:
                    if ref.declaration is None:
                        return True
                    bound = ref.declaration
                ref = bound
            elif isinstance(ref, ThisRef):
                if ref.bound is None:
                    return is_object_like(value) or self._fail(path, f"expected an object, got {describe(value)}")
                ref = ref.bound
            else:
                break

        if _log.isEnabledFor(logging.DEBUG):
            _log.debug("%s: checking %s against %s", path, describe(value), ref)
        handler = getattr(self, f"_match_{ref.kind}")
        return handler(ref, value, path, hops)  # type: ignore[no-any-return]

    def _apply(self, ref: GenericRef) -> TypeRef:
        bound = ref.bound()
        return ref.base_type if bound is ref else bound

    def _fail(self, path: str, message: str) -> bool:
        if self._errors is not None:
            self._errors.append(f"{path}: {message}")
        return False

    def _fail_nesting(self, ref: TypeRef, value: Any, path: str) -> bool:
        if _log.isEnabledFor(logging.DEBUG):
            _log.debug("%s: %s keeps growing under %s; rejecting path", path, describe(value), ref)
        return self._fail(path, f"{describe(value)} nests into itself too deeply under {ref}")

    def _quietly(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        errors, self._errors = self._errors, None
        try:
            return self._match(ref, value, path, hops)
        finally:
            self._errors = errors

    # Intrinsics ----------------------------------------------------------

    def _match_any(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return True

    _match_unknown = _match_any

    def _match_never(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return self._fail(path, f"no value matches {ref}")

    def _match_void(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return value is UNDEFINED or self._fail(path, f"expected undefined, got {describe(value)}")

    _match_undefined = _match_void

    def _match_null(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return value is None or self._fail(path, f"expected None, got {describe(value)}")

    def _match_true(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return value is True or self._fail(path, f"expected True, got {describe(value)}")

    def _match_false(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return value is False or self._fail(path, f"expected False, got {describe(value)}")

    def _match_literal(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return literal_equals(ref.value, value) or self._fail(path, f"expected {ref}, got {describe(value)}")  # type: ignore[attr-defined]

    def _match_enum(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        if any(literal_equals(member, value) for member in ref.value_set):  # type: ignore[attr-defined]
            return True
        return self._fail(path, f"{describe(value)} is not a value of enum {ref}")

    # Combinators ---------------------------------------------------------

    def _match_union(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        if any(self._quietly(member, value, path, hops) for member in ref.types):  # type: ignore[attr-defined]
            return True
        return self._fail(path, f"{describe(value)} matches no member of {ref}")

    def _match_intersection(self, ref: TypeRef, value: Any, path: str, hops: _Hops) -> bool:
        return all([self._match(member, value, path, hops) for member in ref.types])  # type: ignore[attr-defined]

    # Sequences -----------------------------------------------------------

    def _match_array(self, ref: ArrayRef, value: Any, path: str, hops: _Hops) -> bool:
        if not is_sequence(value):
            return self._fail(path, f"expected a sequence, got {describe(value)}")
        with _Visit(self, ref, value) as visit:
            if visit.revisited:
                return True
            if visit.exhausted:
                return self._fail_nesting(ref, value, path)
            element = ref.element_type
            return all([self._match(element, item, f"{path}[{index}]", frozenset()) for index, item in enumerate(value)])

    def _match_tuple(self, ref: TupleRef, value: Any, path: str, hops: _Hops) -> bool:
        if not is_sequence(value):
            return self._fail(path, f"expected a sequence, got {describe(value)}")
        elements = ref.elements
        fixed = [element for element in elements if not element.is_rest]
        rest = next((element for element in elements if element.is_rest), None)
        required = sum(1 for element in fixed if not element.is_optional)
        if len(value) < required:
            return self._fail(path, f"expected at least {required} element(s), got {len(value)}")
        if rest is None and len(value) > len(fixed):
            return self._fail(path, f"expected at most {len(fixed)} element(s), got {len(value)}")

        with _Visit(self, ref, value) as visit:
            if visit.revisited:
                return True
            if visit.exhausted:
                return self._fail_nesting(ref, value, path)
            results = [
                self._match(element.type, item, f"{path}[{index}]", frozenset())
                for index, (element, item) in enumerate(zip(fixed, value))
            ]
            if rest is not None:
                rest_type = rest.type.unaliased()
                item_type = rest_type.element_type if isinstance(rest_type, ArrayRef) else rest_type
                results.extend(
                    self._match(item_type, item, f"{path}[{index}]", frozenset())
                    for index, item in enumerate(value[len(fixed) :], start=len(fixed))
                )
            return all(results)

    # Structural types ----------------------------------------------------

    def _match_object(self, ref: StructuralRef, value: Any, path: str, hops: _Hops) -> bool:
        if not is_object_like(value):
            return self._fail(path, f"expected {ref}, got {describe(value)}")
        with _Visit(self, ref, value) as visit:
            if visit.revisited:
                return True
            if visit.exhausted:
                return self._fail_nesting(ref, value, path)
            results = [self._match_member(member, value, path) for member in ref.members]
            if self._exact:
                results.extend(
                    self._fail(f"{path}.{name}", f"is not declared on {ref}")
                    for name in member_names(value)
                    if ref.get_member(name) is None
                )
            return all(results)

    _match_interface = _match_object

    def _match_member(self, member: Any, value: Any, path: str) -> bool:
        child = f"{path}.{member.name}"
        if not has_member(value, member.name):
            return member.is_optional or self._fail(child, "required member is missing")
        item = read_member(value, member.name)
        if member.is_method and not member.type.is_function():
            return callable(item) or self._fail(child, f"expected a method, got {describe(item)}")
        return self._match(member.type, item, child, frozenset())

    def _match_mapped(self, ref: MappedRef, value: Any, path: str, hops: _Hops) -> bool:
        if ref.has_members:
            return self._match_object(ref, value, path, hops)
        base = ref.base_type
        target = base.with_arguments(ref.type_arguments) if base.is_parameterizable else base
        return self._match(target, value, path, hops)

    def _match_class(self, ref: ClassRef, value: Any, path: str, hops: _Hops) -> bool:
        cls = ref.runtime_class
        if cls is not None and is_instance(value, cls):
            return self._match_items(ref, value, path) if ref.arguments else True
        if cls is not None and (ref.is_builtin or not ref.has_members):
            return self._fail(path, f"expected {ref}, got {describe(value)}")
        if not ref.has_members:
            return self._fail(path, f"class {ref} declares no members to check")
        return self._match_object(ref, value, path, hops)

    def _match_items(self, ref: ClassRef, value: Any, path: str) -> bool:
        arguments = ref.arguments
        with _Visit(self, ref, value) as visit:
            if visit.revisited:
                return True
            if visit.exhausted:
                return self._fail_nesting(ref, value, path)
            if isinstance(value, Mapping):
                key_type = arguments[0]
                value_type = arguments[1] if len(arguments) > 1 else None
                results = []
                for key, item in value.items():
                    child = f"{path}[{key!r}]"
                    results.append(self._match(key_type, key, child, frozenset()))
                    if value_type is not None:
                        results.append(self._match(value_type, item, child, frozenset()))
                return all(results)
            if is_sequence(value) or isinstance(value, AbstractSet):
                item_type = arguments[0]
                return all([self._match(item_type, item, f"{path}[{index}]", frozenset()) for index, item in enumerate(value)])
        return True

    # Callables -----------------------------------------------------------

    def _match_function(self, ref: FunctionRef, value: Any, path: str, hops: _Hops) -> bool:
        if not callable(value):
            return self._fail(path, f"expected {ref}, got {describe(value)}")
        if not ref.has_signature:
            return True
        try:
            signature = inspect.signature(value)
        except (TypeError, ValueError):
            if _log.isEnabledFor(logging.DEBUG):
                _log.debug("%s: no signature for %s; accepting any callable", path, describe(value))
            return True
        required, total, variadic, keyword_only = _positional_arity(signature)
        declared = [parameter for parameter in ref.parameters if not parameter.is_rest]
        passed = sum(1 for parameter in declared if not parameter.is_optional)
        if keyword_only:
            return self._fail(path, f"requires keyword-only argument(s) {', '.join(keyword_only)}")
        if required > passed:
            return self._fail(path, f"requires {required} positional argument(s), {ref} passes {passed}")
        if not variadic and total < len(declared):
            return self._fail(path, f"accepts {total} positional argument(s), {ref} passes up to {len(declared)}")
        if ref.is_variadic and not variadic:
            return self._fail(path, f"does not accept the variable arguments of {ref}")
        return True


class _Visit:
    """Marks a (type, value) pair as in progress for the duration of a check.

    ``revisited`` is set when the same bound type already holds the value
    further up. ``exhausted`` is set when the value already sits under the same
    declaration :data:`MAX_ALIAS_HOPS` times with differing arguments.
    """

    def __init__(self, matcher: _Matcher, ref: TypeRef, value: Any) -> None:
        self._active = matcher._active
        self._depths = matcher._depths
        self._token = (ref_key(ref), id(value))
        self._shape = (id(ref.descriptor), id(value))
        self.revisited = self._token in self._active
        self.exhausted = not self.revisited and self._depths.get(self._shape, 0) >= MAX_ALIAS_HOPS

    def __enter__(self) -> _Visit:
        if not self.revisited:
            self._active.add(self._token)
            self._depths[self._shape] = self._depths.get(self._shape, 0) + 1
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.revisited:
            return
        self._active.discard(self._token)
        depth = self._depths.pop(self._shape) - 1
        if depth:
            self._depths[self._shape] = depth


def _positional_arity(signature: inspect.Signature) -> tuple[int, int, bool, list[str]]:
    """Return required and total positional counts, ``*args`` presence and required keyword-only names."""
    required = total = 0
    variadic = False
    keyword_only = []
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        elif parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            if parameter.default is inspect.Parameter.empty:
                keyword_only.append(parameter.name)
        elif parameter.kind is not inspect.Parameter.VAR_KEYWORD:
            total += 1
            if parameter.default is inspect.Parameter.empty:
                required += 1
    return required, total, variadic, keyword_only
