# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of descriptor graphs.

Artifacts are compact JSON documents mapping type names to descriptor nodes.
Aliases, interfaces and classes are written once into a ``definitions`` table
and referenced by identity, which is how recursive types survive the trip.
The format is versioned so future schema changes can be detected.
"""

from __future__ import annotations

import importlib
import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from typeshape.model.convert import force, lazy
from typeshape.model.format import (
    T_ALIAS,
    T_ARRAY,
    T_CLASS,
    T_ENUM,
    T_FUNCTION,
    T_GENERIC,
    T_INTERFACE,
    T_INTERSECTION,
    T_LITERAL,
    T_MAPPED,
    T_OBJECT,
    T_TUPLE,
    T_UNION,
    T_VARIABLE,
    TYPE_KINDS,
    FunctionParameter,
    ObjectMember,
    descriptor_from_dict,
    is_thunk,
)
from typeshape.reflection.refs import TypeRef, resolve

# ###############
# Public Interface
# ###############

ARTIFACT_FORMAT_VERSION = "1"


class ArtifactError(ValueError):
    """Raised when an artifact cannot be written or read back."""


def serialize(types: Mapping[str, Any]) -> str:
    """Serialize named types to a compact JSON string.

    Args:
        types: Mapping from names to descriptors, wrappers, builders or any
            value accepted by :func:`~typeshape.model.convert.as_descriptor`.

    Raises:
        ArtifactError: If a type refers to itself without passing through an
            alias, interface or class, or names a class that cannot be imported.
    """
    encoder = _Encoder()
    named = {name: encoder.encode(value) for name, value in types.items()}
    return json.dumps(
        {"v": ARTIFACT_FORMAT_VERSION, "types": named, "definitions": encoder.definitions},
        separators=(",", ":"),
    )


def deserialize(data: str) -> dict[str, TypeRef]:
    """Deserialize named types from a JSON string.

    Every definition is decoded up front, so a malformed artifact fails here
    rather than on first use. Definitions may refer to each other in any order.

    Args:
        data: JSON string produced by :func:`serialize`.

    Returns:
        Mapping from names to resolved types, in artifact order.

    Raises:
        ArtifactError: If the format version is not recognised or the content is malformed.
    """
    try:
        obj = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"Artifact is not valid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise ArtifactError("Artifact must be a JSON object")
    version = obj.get("v")
    if version != ARTIFACT_FORMAT_VERSION:
        raise ArtifactError(f"Unsupported artifact format version: {version!r}")

    named = obj.get("types", {})
    if not isinstance(named, dict):
        raise ArtifactError("'types' must be a JSON object")
    decoder = _Decoder(obj.get("definitions", {}))
    decoder.decode_definitions()
    return {name: resolve(force(decoder.slot(node))) for name, node in named.items()}


def write_artifact(types: Mapping[str, Any], path: Path) -> None:
    """Write an artifact to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(types), encoding="utf-8")


def read_artifact(path: Path) -> dict[str, TypeRef]:
    """Read and deserialize an artifact from *path*."""
    return deserialize(path.read_text(encoding="utf-8"))


# ################
# Implementation
# ################

_NOMINAL_TAGS = frozenset({T_ALIAS, T_INTERFACE, T_CLASS})


class _Encoder:
    def __init__(self) -> None:
        self.definitions: dict[str, Any] = {}
        self._ids: dict[int, str] = {}
        self._active: set[int] = set()

    def encode(self, slot: Any) -> dict[str, Any]:
        descriptor = force(slot)
        if descriptor.tag in _NOMINAL_TAGS and not _is_plain_builtin(descriptor):
            return {"ref": self._define(descriptor)}

        marker = id(descriptor)
        if marker in self._active:
            raise ArtifactError(f"Cannot serialize anonymous recursive {descriptor.kind} type")
        self._active.add(marker)
        try:
            return self._node(descriptor)
        finally:
            self._active.discard(marker)

    def _define(self, descriptor: Any) -> str:
        key = self._ids.get(id(descriptor))
        if key is not None:
            return key
        key = _definition_id(descriptor, len(self._ids))
        self._ids[id(descriptor)] = key
        if key not in self.definitions:
            # Reserve the slot first so that references from inside resolve to it.
            self.definitions[key] = None
            self.definitions[key] = self._node(descriptor)
        return key

    def _node(self, d: Any) -> dict[str, Any]:
        node: dict[str, Any] = {"tag": d.tag}
        tag = d.tag
        if tag == T_LITERAL:
            node["value"] = d.value
        elif tag in (T_UNION, T_INTERSECTION):
            node["types"] = [self.encode(t) for t in d.types]
        elif tag == T_TUPLE:
            node["elements"] = [self._element(e) for e in d.elements]
        elif tag == T_ARRAY:
            node["element"] = self.encode(d.element)
        elif tag == T_OBJECT:
            if d.name is not None:
                node["name"] = d.name
            node["members"] = self._members(d.members)
        elif tag == T_INTERFACE:
            node["token"] = {"name": d.token.name, "identity": d.token.identity}
            node["members"] = self._members(d.members)
            node["extends"] = [self.encode(t) for t in d.extends]
            node["parameters"] = list(d.parameters)
            node["flags"] = d.flags
        elif tag == T_CLASS:
            node["name"] = d.name
            if d.runtime_class is not None:
                node["class"] = _class_path(d.runtime_class)
            node["members"] = self._members(d.members)
            if d.extends is not None:
                node["extends"] = self.encode(d.extends)
            node["implements"] = [self.encode(t) for t in d.implements]
            node["parameters"] = list(d.parameters)
            node["flags"] = d.flags
        elif tag == T_ALIAS:
            node["name"] = d.name
            node["identity"] = d.token.identity
            node["target"] = self.encode(d.target)
            node["parameters"] = list(d.parameters)
        elif tag == T_GENERIC:
            node["base"] = self.encode(d.base)
            node["arguments"] = [self.encode(t) for t in d.arguments]
        elif tag == T_ENUM:
            node["name"] = d.name
            node["values"] = dict(d.values)
        elif tag == T_MAPPED:
            node["base"] = self.encode(d.base)
            node["arguments"] = [self.encode(t) for t in d.arguments]
            node["members"] = None if d.members is None else self._members(d.members)
        elif tag == T_VARIABLE:
            node["name"] = d.name
            if d.declaration is not None:
                node["declaration"] = self.encode(d.declaration)
        elif tag == T_FUNCTION:
            if d.name is not None:
                node["name"] = d.name
            node["parameters"] = None if d.parameters is None else self._members(d.parameters)
            node["returns"] = self.encode(d.returns)
            if d.flags:
                node["flags"] = d.flags
        return node

    def _members(self, members: list[ObjectMember] | list[FunctionParameter]) -> list[dict[str, Any]]:
        result = []
        for member in members:
            entry: dict[str, Any] = {"name": member.name, "type": self.encode(member.type)}
            if member.flags:
                entry["flags"] = member.flags
            result.append(entry)
        return result

    def _element(self, element: Any) -> dict[str, Any]:
        entry: dict[str, Any] = {"type": self.encode(element.type)}
        if element.name is not None:
            entry["name"] = element.name
        if element.flags:
            entry["flags"] = element.flags
        return entry


class _Decoder:
    def __init__(self, definitions: Any) -> None:
        if not isinstance(definitions, dict):
            raise ArtifactError("'definitions' must be a JSON object")
        self._raw: dict[str, Any] = definitions
        self._decoded: dict[str, Any] = {}

    def decode_definitions(self) -> None:
        for key in self._raw:
            self._definition(key)

    def slot(self, node: Any) -> Any:
        """Decode a type position into a descriptor, or a thunk for references."""
        if isinstance(node, dict) and "ref" in node:
            key = node["ref"]
            if not isinstance(key, str) or key not in self._raw:
                raise ArtifactError(f"Dangling definition reference: {key!r}")
            return lazy(lambda: self._definition(key))
        return self._descriptor(node)

    def _deferred(self, node: Any) -> Callable[[], Any]:
        value = self.slot(node)
        return value if is_thunk(value) else lazy(lambda: value)

    def _definition(self, key: str) -> Any:
        if key not in self._decoded:
            self._decoded[key] = self._descriptor(self._raw[key])
        return self._decoded[key]

    def _descriptor(self, node: Any) -> Any:
        if not isinstance(node, dict):
            raise ArtifactError(f"Type node must be a JSON object, got {node!r}")
        tag = node.get("tag")
        if tag not in TYPE_KINDS:
            raise ArtifactError(f"Unknown descriptor tag: {tag!r}")
        try:
            return descriptor_from_dict(self._fields(tag, node))
        except (KeyError, TypeError) as exc:
            raise ArtifactError(f"Malformed {TYPE_KINDS[tag]} node: {exc}") from exc
        except ValidationError as exc:
            raise ArtifactError(f"Malformed {TYPE_KINDS[tag]} node: {exc}") from exc

    def _fields(self, tag: str, node: dict[str, Any]) -> dict[str, Any]:
        data: dict[str, Any] = {"tag": tag}
        if tag == T_LITERAL:
            data["value"] = node["value"]
        elif tag in (T_UNION, T_INTERSECTION):
            data["types"] = [self.slot(t) for t in node.get("types", [])]
        elif tag == T_TUPLE:
            data["elements"] = [
                {"type": self.slot(e["type"]), "name": e.get("name"), "flags": e.get("flags", "")}
                for e in node.get("elements", [])
            ]
        elif tag == T_ARRAY:
            data["element"] = self.slot(node["element"])
        elif tag == T_OBJECT:
            data["name"] = node.get("name")
            data["members"] = self._members(node.get("members", []))
        elif tag == T_INTERFACE:
            data["token"] = node["token"]
            data["members"] = self._members(node.get("members", []))
            data["extends"] = [self.slot(t) for t in node.get("extends", [])]
            data["parameters"] = node.get("parameters", [])
            data["flags"] = node.get("flags", "")
        elif tag == T_CLASS:
            data["name"] = node["name"]
            if "class" in node:
                data["runtime_class"] = _import_class(node["class"])
            data["members"] = self._members(node.get("members", []))
            if "extends" in node:
                data["extends"] = self._deferred(node["extends"])
            data["implements"] = [self.slot(t) for t in node.get("implements", [])]
            data["parameters"] = node.get("parameters", [])
            data["flags"] = node.get("flags", "")
        elif tag == T_ALIAS:
            data["name"] = node["name"]
            data["token"] = {"name": node["name"], "identity": node["identity"]}
            data["target"] = self._deferred(node["target"])
            data["parameters"] = node.get("parameters", [])
        elif tag == T_GENERIC:
            data["base"] = self._deferred(node["base"])
            data["arguments"] = [self.slot(t) for t in node.get("arguments", [])]
        elif tag == T_ENUM:
            data["name"] = node["name"]
            data["values"] = node.get("values", {})
        elif tag == T_MAPPED:
            data["base"] = self._deferred(node["base"])
            data["arguments"] = [self.slot(t) for t in node.get("arguments", [])]
            members = node.get("members")
            data["members"] = None if members is None else self._members(members)
        elif tag == T_VARIABLE:
            data["name"] = node["name"]
            if "declaration" in node:
                data["declaration"] = self._deferred(node["declaration"])
        elif tag == T_FUNCTION:
            data["name"] = node.get("name")
            parameters = node.get("parameters", [])
            data["parameters"] = None if parameters is None else self._members(parameters)
            data["returns"] = self.slot(node["returns"])
            data["flags"] = node.get("flags", "")
        return data

    def _members(self, members: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [{"name": m["name"], "type": self.slot(m["type"]), "flags": m.get("flags", "")} for m in members]


def _is_plain_builtin(descriptor: Any) -> bool:
    if descriptor.tag != T_CLASS or descriptor.runtime_class is None:
        return False
    return descriptor.runtime_class.__module__ == "builtins" and not descriptor.members


def _definition_id(descriptor: Any, index: int) -> str:
    if descriptor.tag in (T_ALIAS, T_INTERFACE):
        return str(descriptor.token.identity)
    if descriptor.runtime_class is not None:
        return _class_path(descriptor.runtime_class)
    return f"{descriptor.name}#{index}"


def _class_path(cls: type) -> str:
    if "<locals>" in cls.__qualname__:
        raise ArtifactError(f"Class {cls.__qualname__} is local to a function and cannot be re-imported")
    return f"{cls.__module__}:{cls.__qualname__}"


def _import_class(path: str) -> type:
    module_name, _, qualname = path.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise ArtifactError(f"Cannot import class {path!r}: {exc}") from exc
    if not isinstance(target, type):
        raise ArtifactError(f"{path!r} does not name a class")
    return target
