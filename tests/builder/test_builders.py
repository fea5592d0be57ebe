# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the descriptor builders."""

import pytest

from typeshape.builder.builders import (
    AliasTypeBuilder,
    ArrayTypeBuilder,
    EnumTypeBuilder,
    FunctionTypeBuilder,
    GenericTypeBuilder,
    IncompatibleExtendKindError,
    InterfaceTypeBuilder,
    IntersectionTypeBuilder,
    ObjectTypeBuilder,
    TupleTypeBuilder,
    TypeBuilder,
    UnionTypeBuilder,
    VariableTypeBuilder,
)
from typeshape.model.format import UNKNOWN, InterfaceDescriptor, ObjectDescriptor
from typeshape.model.metadata import FLAGS_KEY, METHODS_KEY, PROPERTIES_KEY, TYPE_KEY
from typeshape.reflection.reflect import reflect
from typeshape.reflection.refs import resolve

# ###############
# Helpers
# ###############


def _names(builder: TypeBuilder) -> list[str]:
    """Member names of the type a builder produces."""
    return [member.name for member in builder.get_type().unaliased().members]


# ###############
# Base Builder
# ###############


def test_build_is_cached_until_changed() -> None:
    """build() returns the same descriptor until the builder is mutated."""
    builder = ObjectTypeBuilder().add_property("a", int)
    first = builder.build()

    assert builder.build() is first
    builder.add_property("b", str)
    assert builder.build() is not first
    assert first.members[0].name == "a"
    assert len(first.members) == 1


def test_local_metadata_without_token() -> None:
    """Builders without a nominal token keep metadata locally."""
    builder = ObjectTypeBuilder()
    builder.define_metadata("custom", 1)
    builder.define_metadata("custom", 2, "member")

    assert builder.get_token() is None
    assert builder.get_metadata("custom") == 1
    assert builder.get_metadata("custom", "member") == 2
    assert builder.get_metadata("absent") is None


def test_to_descriptor_and_get_type() -> None:
    """Builders convert to descriptors and wrap them for navigation."""
    builder = ObjectTypeBuilder("Named").add_property("a", int)

    assert isinstance(builder.to_descriptor(), ObjectDescriptor)
    assert builder.get_type().is_object()
    assert builder.get_type().name == "Named"


# ###############
# Object Builders
# ###############


def test_duplicate_properties_append() -> None:
    """Adding a property twice keeps both; the last one wins when read."""
    builder = ObjectTypeBuilder().add_property("a", int).add_property("a", str, "?")

    assert len(builder.build().members) == 2
    member = builder.get_type().get_member("a")
    assert member.is_optional
    assert member.type.is_builtin_class(str)


def test_extend_from_object_builder() -> None:
    """Members of another object builder are copied in order."""
    base = ObjectTypeBuilder().add_property("a", int).add_property("b", str, "?")
    builder = ObjectTypeBuilder().extend(base).add_property("c", bool)

    assert _names(builder) == ["a", "b", "c"]
    assert builder.get_type().get_member("b").is_optional


def test_extend_from_object_type() -> None:
    """Object descriptors and wrappers can be extended from."""
    shape = resolve({"x": int})

    assert _names(ObjectTypeBuilder().extend(shape)) == ["x"]
    assert _names(ObjectTypeBuilder().extend(shape.descriptor)) == ["x"]


def test_extend_from_mapping() -> None:
    """Mapping entries shaped {type, flags} become flagged members."""
    builder = ObjectTypeBuilder().extend({"a": int, "b": {"type": str, "flags": "?R"}})
    ref = builder.get_type()

    assert ref.get_member("a").type.is_builtin_class(int)
    assert ref.get_member("b").is_optional
    assert ref.get_member("b").flags.is_readonly


def test_extend_from_interface_builder() -> None:
    """Interface builders are object-like and can be extended from."""
    iface = InterfaceTypeBuilder("I").add_property("a", int)
    assert _names(ObjectTypeBuilder().extend(iface)) == ["a"]


def test_extend_rejects_incompatible_sources() -> None:
    """Non-object-like builders and nominal or non-object types cannot be extended from."""
    interface_ref = InterfaceTypeBuilder("I").get_type()

    with pytest.raises(IncompatibleExtendKindError, match="non-object-like builders"):
        ObjectTypeBuilder().extend(UnionTypeBuilder(int, str))
    with pytest.raises(IncompatibleExtendKindError, match="interface references"):
        ObjectTypeBuilder().extend(interface_ref)
    with pytest.raises(IncompatibleExtendKindError, match="class references"):
        ObjectTypeBuilder().extend(resolve(int))
    with pytest.raises(IncompatibleExtendKindError, match="union types"):
        ObjectTypeBuilder().extend(resolve(int | None))
    with pytest.raises(IncompatibleExtendKindError):
        ObjectTypeBuilder().extend(42)


# ###############
# Interface Builder
# ###############


def test_interface_records_metadata() -> None:
    """Interface builders record declaration and member metadata against their token."""
    builder = InterfaceTypeBuilder("Person").add_property("name", str).add_property("age", int, "?")

    assert builder.get_metadata(PROPERTIES_KEY) == ["name", "age"]
    assert builder.get_metadata(METHODS_KEY) == []
    assert builder.get_metadata(FLAGS_KEY) == "I"
    assert builder.get_metadata(FLAGS_KEY, "name") == "P"
    assert builder.get_metadata(FLAGS_KEY, "age") == "P?"
    assert builder.get_metadata(TYPE_KEY, "name")().runtime_class is str


def test_interface_is_reflected_through_its_token() -> None:
    """The recorded type thunk makes the interface and its members reflectable."""
    builder = InterfaceTypeBuilder("Person").add_property("name", str)

    ref = reflect(builder.get_token())
    assert ref.is_interface()
    assert ref.flags.is_interface
    assert reflect(builder.get_token(), "name").is_builtin_class(str)


def test_interface_token_survives_renames() -> None:
    """Renaming keeps the token identity and metadata."""
    builder = InterfaceTypeBuilder("Before").add_property("a", int)
    identity = builder.get_token().identity

    builder.set_name("After")
    descriptor = builder.build()
    assert isinstance(descriptor, InterfaceDescriptor)
    assert descriptor.token.name == "After"
    assert descriptor.token.identity == identity
    assert builder.get_metadata(PROPERTIES_KEY) == ["a"]


def test_interface_parameters_and_extends() -> None:
    """Generic interfaces bind their parameters, including in parents."""
    parent = InterfaceTypeBuilder("Parent").add_parameters("T").add_property("value", VariableTypeBuilder("T"))
    child = InterfaceTypeBuilder("Child").add_parameters("U").add_extends(GenericTypeBuilder(parent, VariableTypeBuilder("U")))

    bound = child.get_type().create_type(int)
    assert bound.get_member("value").type.is_builtin_class(int)
    assert str(bound) == "Child<int>"


def test_self_referential_interface() -> None:
    """A builder can refer to itself before it is complete."""
    node = InterfaceTypeBuilder("Node")
    node.add_property("value", int).add_property("next", node, "?")

    next_type = node.get_type().get_member("next").type
    assert next_type.is_interface()
    assert next_type.descriptor is node.build()


# ###############
# Alias Builder
# ###############


def test_alias_defaults_to_unknown() -> None:
    """An alias without a target aliases unknown."""
    builder = AliasTypeBuilder("Anything")

    assert builder.get_type().is_unknown()
    assert builder.get_type().as_("alias").name == "Anything"


def test_alias_target_is_lazy() -> None:
    """The aliased type is converted on first resolution."""
    builder = AliasTypeBuilder("Shape").set_aliased_type({"a": int})
    descriptor = builder.build()

    assert descriptor.target() is descriptor.target()
    assert builder.get_type().is_object()
    assert builder.get_type().kind == "object"


def test_generic_alias() -> None:
    """Alias parameters are bound by create_type."""
    box = AliasTypeBuilder("Box").add_parameters("T").set_aliased_type({"value": VariableTypeBuilder("T")})

    bound = box.get_type().create_type(str).unaliased()
    assert bound.get_member("value").type.is_builtin_class(str)
    assert box.get_type().unaliased().get_member("value").type.is_never()


def test_generic_builder() -> None:
    """Generic builders apply a base to arguments."""
    pair = AliasTypeBuilder("Pair").add_parameters("A", "B")
    pair.set_aliased_type(TupleTypeBuilder().push(VariableTypeBuilder("A"), VariableTypeBuilder("B")))
    applied = GenericTypeBuilder().set_base_type(pair).add_arguments(int, str)

    flat = applied.get_type().resolve_type()
    assert flat.is_tuple([lambda t: t.is_builtin_class(int), lambda t: t.is_builtin_class(str)])


def test_generic_builder_requires_base() -> None:
    """A generic builder without a base cannot build."""
    with pytest.raises(ValueError, match="no base type"):
        GenericTypeBuilder().build()


# ###############
# Other Builders
# ###############


def test_tuple_builder() -> None:
    """Tuple builders keep element names and flags."""
    builder = TupleTypeBuilder().push(int).add_element(str, name="label", flags="?")
    builder.add_element(ArrayTypeBuilder(bool), flags="3")
    elements = builder.get_type().elements

    assert [e.name for e in elements] == [None, "label", None]
    assert elements[1].is_optional
    assert elements[2].is_rest
    assert str(builder.get_type()) == "[int, label?: str, ...bool[]]"


def test_array_builder() -> None:
    """Array builders default to unknown elements."""
    builder = ArrayTypeBuilder()
    assert builder.get_type().element_type.is_unknown()

    builder.element_type = int
    assert builder.get_type().is_array(lambda t: t.is_builtin_class(int))
    assert builder.build().element is not UNKNOWN


def test_union_and_intersection_builders() -> None:
    """Composite builders append members in order."""
    union = UnionTypeBuilder(int).push(None, "x")
    intersection = IntersectionTypeBuilder().push({"a": int}, {"b": str})

    assert str(union.get_type()) == 'int | null | "x"'
    assert intersection.get_type().is_intersection(lambda t: t.is_object())


def test_enum_builder() -> None:
    """Enum builders collect named values."""
    builder = EnumTypeBuilder("Level").add_value("LOW", 1).add_value("HIGH", "high")
    ref = builder.get_type()

    assert ref.is_enum()
    assert ref.values == {"LOW": 1, "HIGH": "high"}


def test_variable_builder() -> None:
    """Variable builders carry a name and an optional declaration."""
    builder = VariableTypeBuilder("T").set_type_declaration(int)
    ref = builder.get_type()

    assert ref.is_variable()
    assert ref.name == "T"
    assert ref.declaration.is_builtin_class(int)
    builder.name = "U"
    assert builder.get_type().name == "U"


def test_function_builder() -> None:
    """Function builders collect parameters, a return type and flags."""
    builder = FunctionTypeBuilder("handler").add_parameter("event", str).add_parameter("retries", int, "?")
    builder.set_return_type(bool).add_flag("a").add_flag("a")
    ref = builder.get_type()

    assert ref.is_function()
    assert ref.name == "handler"
    assert [parameter.name for parameter in ref.parameters] == ["event", "retries"]
    assert ref.parameters[1].is_optional
    assert ref.return_type.is_builtin_class(bool)
    assert ref.is_async
    assert builder.build().flags == "a"


def test_function_builder_defaults() -> None:
    """A bare function builder takes no parameters and returns unknown."""
    ref = FunctionTypeBuilder().get_type()

    assert ref.parameters == ()
    assert ref.has_signature
    assert ref.return_type.kind == "unknown"
    assert str(ref) == "() => unknown"
