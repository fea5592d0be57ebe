# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Process-wide metadata store keyed by declaration and optional member name.

Producers record a descriptor-producing thunk under ``"rt:t"`` for a
declaration (a class, an interface token, a function) or for one of its
members. The store is never iterated and never invalidated.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable
from typing import Any

from typeshape.model.format import AliasToken, InterfaceToken

# ###############
# Public Interface
# ###############

# Type of a declaration or member: a thunk producing its descriptor.
TYPE_KEY = "rt:t"
# Flag string of a declaration or member.
FLAGS_KEY = "rt:f"
# Property names declared on a declaration, in order.
PROPERTIES_KEY = "rt:P"
# Method names declared on a declaration, in order.
METHODS_KEY = "rt:m"


def define_metadata(key: str, value: Any, target: Hashable, prop: str | None = None) -> None:
    """Record *value* under *key* for *target* (or its member *prop*)."""
    with _LOCK:
        _STORE[(_target_key(target), prop, key)] = value


def get_metadata(key: str, target: Hashable, prop: str | None = None) -> Any:
    """Return the value recorded under *key*, or ``None`` when there is none."""
    return _STORE.get((_target_key(target), prop, key))


def has_metadata(key: str, target: Hashable, prop: str | None = None) -> bool:
    return (_target_key(target), prop, key) in _STORE


# ################
# Implementation
# ################

_LOCK = threading.Lock()
_STORE: dict[tuple[Hashable, str | None, str], Any] = {}


def _target_key(target: Hashable) -> Hashable:
    # Tokens are keyed by identity so that renaming a declaration keeps its metadata.
    if isinstance(target, (InterfaceToken, AliasToken)):
        return ("token", target.identity)
    return target
