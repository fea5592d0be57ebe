# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Positional binding of type parameters to arguments.

Substitution is lexical: every resolved wrapper carries the :class:`Bindings`
in effect where its descriptor appears, and a type variable looks itself up
there when asked for its target. Nothing is expanded ahead of time, so a
self-referential alias such as ``A<T> = A<T>`` only grows one hop per request.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING

from typeshape.model.format import NEVER, ClassDescriptor, LiteralDescriptor

if TYPE_CHECKING:
    from typeshape.reflection.refs import TypeRef

# ###############
# Public Interface
# ###############


class Bindings(Mapping[str, "TypeRef"]):
    """Immutable mapping from parameter names to the types bound to them.

    ``this`` is the structural type that a ``this`` descriptor refers to in
    the current scope, if any.
    """

    def __init__(self, values: Mapping[str, TypeRef] | None = None, this: TypeRef | None = None) -> None:
        self._values: dict[str, TypeRef] = dict(values or {})
        self._this = this

    def __getitem__(self, name: str) -> TypeRef:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}={ref}" for name, ref in self._values.items())
        return f"Bindings({inner})"

    @property
    def this(self) -> TypeRef | None:
        return self._this

    def with_this(self, this: TypeRef) -> Bindings:
        """Return a copy whose ``this`` refers to *this*."""
        return Bindings(self._values, this)

    @functools.cached_property
    def key(self) -> Hashable:
        """Identity of the bound arguments, used by recursion guards."""
        return tuple(sorted((name, ref_key(ref)) for name, ref in self._values.items()))


EMPTY_BINDINGS = Bindings()


def ref_key(ref: TypeRef) -> Hashable:
    """Return a hashable identity for *ref* and the arguments bound into it.

    Classes and literals are keyed by value, so two descriptors for ``int``
    are the same argument. Everything else is keyed by descriptor identity
    together with its bound arguments.
    """
    ref = dereference(ref)
    descriptor = ref.descriptor
    if isinstance(descriptor, ClassDescriptor) and descriptor.runtime_class is not None:
        return ("C", descriptor.runtime_class, tuple(ref_key(arg) for arg in ref.arguments))
    if isinstance(descriptor, LiteralDescriptor):
        family = "s" if isinstance(descriptor.value, str) else "n"
        return ("l", family, descriptor.value)
    if not type(descriptor).model_fields.keys() - {"tag"}:
        return (descriptor.tag,)
    if ref.arguments or ref.is_nominal:
        return (id(descriptor), tuple(ref_key(arg) for arg in ref.arguments))
    return (id(descriptor), ref.bindings.key)


def dereference(ref: TypeRef) -> TypeRef:
    """Follow bound type variables until reaching a type that is not one."""
    while True:
        target = ref.bound_variable_target()
        if target is None:
            return ref
        ref = target


def bind_parameters(parameters: Sequence[str], arguments: Iterable[TypeRef]) -> Bindings:
    """Bind *parameters* positionally to *arguments*.

    Parameters without an argument are bound to ``never``, so an under-applied
    type matches no value. Surplus arguments are dropped.
    """
    from typeshape.reflection.refs import resolve

    args = [dereference(arg) for arg in arguments]
    if len(args) > len(parameters) and _log.isEnabledFor(logging.DEBUG):
        _log.debug("dropping %d surplus type argument(s) for %s", len(args) - len(parameters), list(parameters))
    values: dict[str, TypeRef] = {}
    for index, name in enumerate(parameters):
        if index < len(args):
            values[name] = args[index]
        else:
            if _log.isEnabledFor(logging.DEBUG):
                _log.debug("type parameter %r has no argument; binding it to never", name)
            values[name] = resolve(NEVER)
    return Bindings(values)


def create_type(target: TypeRef, *arguments: object) -> TypeRef:
    """Instantiate an alias, interface, class or generic wrapper with *arguments*.

    The source wrapper is left untouched; a new wrapper is returned. For a
    generic application the new arguments replace the applied ones.
    """
    from typeshape.reflection.refs import resolve

    refs = tuple(resolve(arg) for arg in arguments)
    return target.with_arguments(refs)


# ################
# Implementation
# ################

_log = logging.getLogger(__name__)
