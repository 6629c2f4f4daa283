from __future__ import annotations

from typing import Annotated, Any, Literal

import pytest
from pydantic import BaseModel

from dibind import DIBindTypeMismatchError, Qualifier
from dibind._internal.converter import PydanticTypeConverter


class Settings(BaseModel):
    host: str
    port: int


class Engine:
    pass


@pytest.fixture()
def converter() -> PydanticTypeConverter:
    return PydanticTypeConverter()


def test_matching_instances_are_returned_unchanged(converter: PydanticTypeConverter) -> None:
    engine = Engine()

    assert converter.convert(engine, Engine) is engine


def test_untyped_targets_pass_values_through(converter: PydanticTypeConverter) -> None:
    value = object()

    assert converter.convert(value, Any) is value
    assert converter.convert(value, object) is value


def test_lax_mode_converts_numeric_strings(converter: PydanticTypeConverter) -> None:
    assert converter.convert("5", int) == 5
    assert converter.convert("2.5", float) == 2.5


def test_containers_are_converted_element_wise(converter: PydanticTypeConverter) -> None:
    assert converter.convert(["1", "2"], list[int]) == [1, 2]
    assert converter.convert({"a": "1"}, dict[str, int]) == {"a": 1}


def test_mappings_are_converted_to_models(converter: PydanticTypeConverter) -> None:
    settings = converter.convert({"host": "db", "port": "5432"}, Settings)

    assert settings == Settings(host="db", port=5432)


def test_annotated_targets_ignore_qualifier_metadata(converter: PydanticTypeConverter) -> None:
    assert converter.convert("7", Annotated[int, Qualifier("size")]) == 7


def test_literal_targets_accept_members(converter: PydanticTypeConverter) -> None:
    assert converter.convert("fast", Literal["fast", "slow"]) == "fast"


def test_failed_conversion_raises_type_mismatch(converter: PydanticTypeConverter) -> None:
    with pytest.raises(DIBindTypeMismatchError, match="required type 'int'") as exc_info:
        converter.convert("not a number", int)

    assert exc_info.value.value == "not a number"
    assert exc_info.value.target_type is int


def test_arbitrary_classes_require_instances(converter: PydanticTypeConverter) -> None:
    with pytest.raises(DIBindTypeMismatchError):
        converter.convert("engine", Engine)


def test_adapters_are_reused(converter: PydanticTypeConverter) -> None:
    converter.convert("1", int)
    converter.convert("2", int)

    assert list(converter._adapters) == [int]
