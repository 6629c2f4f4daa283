from __future__ import annotations

import abc
from typing import Annotated, Any, Literal, Protocol, TypeAlias

from dibind import Expression, Qualifier, Reference
from dibind._internal.markers import qualifier_of, strip_annotated
from dibind._internal.type_checks import (
    annotation_name,
    is_abstract_class,
    is_assignable_class,
    is_assignable_value,
    runtime_class_of,
    union_members,
)


class Database(Protocol):
    def query(self) -> str: ...


class Storage(abc.ABC):
    @abc.abstractmethod
    def read(self) -> bytes: ...


class DiskStorage(Storage):
    def read(self) -> bytes:
        return b""


ReplicaDatabase: TypeAlias = Annotated[Database, Qualifier("replica")]


def test_qualifier_marker_is_value_based_and_hashable() -> None:
    marker = Qualifier("primary")

    assert marker.name == "primary"
    assert marker == Qualifier("primary")
    assert marker != Qualifier("replica")

    mapping = {marker: "database"}
    assert mapping[Qualifier("primary")] == "database"


def test_qualifier_is_read_from_annotated_metadata() -> None:
    assert qualifier_of(ReplicaDatabase) == Qualifier("replica")
    assert qualifier_of(Annotated[Database, "unrelated"]) is None
    assert qualifier_of(Database) is None


def test_strip_annotated_unwraps_nested_metadata() -> None:
    nested = Annotated[Annotated[int, "inner"], "outer"]

    assert strip_annotated(nested) is int
    assert strip_annotated(ReplicaDatabase) is Database
    assert strip_annotated(str) is str


def test_expression_evaluates_against_given_factory() -> None:
    expression = Expression(lambda factory: factory["answer"])

    assert expression.evaluate({"answer": 42}) == 42


def test_reference_names_component() -> None:
    assert Reference("database").name == "database"


def test_runtime_class_of_maps_generics_to_origin() -> None:
    assert runtime_class_of(list[int]) is list
    assert runtime_class_of(None) is type(None)
    assert runtime_class_of(Any) is None
    assert runtime_class_of(int | str) is None
    assert runtime_class_of(Annotated[dict[str, int], "meta"]) is dict


def test_union_members_supports_both_spellings() -> None:
    assert union_members(int | None) == (int, type(None))
    assert union_members(Annotated[str | bytes, "meta"]) == (str, bytes)
    assert union_members(int) is None


def test_abstract_classes_and_protocols_are_abstract() -> None:
    assert is_abstract_class(Storage)
    assert is_abstract_class(Database)
    assert not is_abstract_class(DiskStorage)


def test_value_assignability() -> None:
    assert is_assignable_value(int, 3)
    assert not is_assignable_value(int, "3")
    assert is_assignable_value(int | None, None)
    assert not is_assignable_value(int, None)
    assert is_assignable_value(Any, object())
    assert is_assignable_value(Literal["a", "b"], "a")
    assert not is_assignable_value(Literal["a", "b"], "c")
    assert is_assignable_value(Database, object())


def test_class_assignability() -> None:
    assert is_assignable_class(Storage, DiskStorage)
    assert not is_assignable_class(DiskStorage, Storage)
    assert is_assignable_class(Storage | None, DiskStorage)
    assert not is_assignable_class(Database, DiskStorage)


def test_annotation_names_are_short() -> None:
    assert annotation_name(DiskStorage) == "DiskStorage"
    assert annotation_name(None) == "None"
    assert annotation_name(Annotated[int, "meta"]) == "int"
    assert annotation_name(list[int]) == "list[int]"
