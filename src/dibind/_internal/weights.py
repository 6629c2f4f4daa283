"""Type-difference and assignability weights used to rank candidate executables."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from dibind._internal.markers import strip_annotated
from dibind._internal.type_checks import (
    is_abstract_class,
    is_assignable_value,
    runtime_class_of,
    union_members,
)

MAX_WEIGHT = sys.maxsize
"""Weight of a candidate whose arguments cannot be passed as-is."""

RAW_ARGUMENTS_BONUS = 1024
"""Subtracted from the raw-argument weight so unconverted matches win ties."""

STRICT_CONVERTED_ONLY_PENALTY = 512

_SUPERCLASS_STEP = 2
_ABSTRACT_PARAMETER_STEP = 1


def type_difference_weight(parameter_types: Sequence[Any], arguments: Sequence[Any]) -> int:
    """Sum how far each argument's class is from its parameter annotation.

    An argument of exactly the parameter class costs 0, each superclass step
    between them costs 2 and an abstract parameter class (ABC or Protocol)
    adds 1. Any argument that cannot be passed as-is makes the whole
    candidate cost ``MAX_WEIGHT``.

    Args:
        parameter_types: Parameter annotations in declaration order.
        arguments: One argument per parameter.

    """
    result = 0
    for annotation, argument in zip(parameter_types, arguments, strict=True):
        if not is_assignable_value(annotation, argument):
            return MAX_WEIGHT
        if argument is not None:
            result += _argument_weight(annotation, type(argument))
    return result


def assignability_weight(
    parameter_types: Sequence[Any],
    arguments: Sequence[Any],
    raw_arguments: Sequence[Any],
) -> int:
    """Score a candidate by plain assignability.

    ``MAX_WEIGHT`` rejects the candidate. Converted arguments that fit score
    ``MAX_WEIGHT - 512``; raw arguments that fit as well score
    ``MAX_WEIGHT - 1024``.

    Args:
        parameter_types: Parameter annotations in declaration order.
        arguments: Converted arguments.
        raw_arguments: Arguments before conversion.

    """
    if not all(map(is_assignable_value, parameter_types, arguments)):
        return MAX_WEIGHT
    if not all(map(is_assignable_value, parameter_types, raw_arguments)):
        return MAX_WEIGHT - STRICT_CONVERTED_ONLY_PENALTY
    return MAX_WEIGHT - RAW_ARGUMENTS_BONUS


def _argument_weight(annotation: Any, argument_class: type[Any]) -> int:
    annotation = strip_annotated(annotation)
    members = union_members(annotation)
    if members is not None:
        return min(
            (
                _argument_weight(member, argument_class)
                for member in members
                if _accepts_class(member, argument_class)
            ),
            default=0,
        )
    parameter_class = runtime_class_of(annotation)
    if parameter_class is None:
        return 0

    weight = 0
    for superclass in argument_class.__mro__[1:]:
        if superclass is parameter_class:
            weight += _SUPERCLASS_STEP
            break
        if _is_subclass(superclass, parameter_class):
            weight += _SUPERCLASS_STEP
            continue
        break
    if is_abstract_class(parameter_class):
        weight += _ABSTRACT_PARAMETER_STEP
    return weight


def _accepts_class(annotation: Any, argument_class: type[Any]) -> bool:
    parameter_class = runtime_class_of(annotation)
    return parameter_class is None or _is_subclass(argument_class, parameter_class)


def _is_subclass(cls: type[Any], parameter_class: type[Any]) -> bool:
    try:
        return issubclass(cls, parameter_class)
    except TypeError:
        return False
