from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from dibind._internal.executables import ExecutableDescriptor
from dibind._internal.plan import (
    CachedPlan,
    ConvertedArgument,
    PreparedArgument,
    PreparedPlan,
    ResolvedPlan,
)
from dibind._internal.weights import RAW_ARGUMENTS_BONUS, assignability_weight, type_difference_weight


class ArgumentsHolder:
    """Collect the arguments bound to one candidate executable.

    ``raw_arguments`` hold values before conversion, ``arguments`` what will
    be passed, and ``prepared_arguments`` the cache-safe template used when
    ``resolve_necessary`` is set.
    """

    __slots__ = ("arguments", "prepared_arguments", "raw_arguments", "resolve_necessary")

    def __init__(self, size: int) -> None:
        self.raw_arguments: list[Any] = [None] * size
        self.arguments: list[Any] = [None] * size
        self.prepared_arguments: list[PreparedArgument | None] = [None] * size
        self.resolve_necessary = False

    @classmethod
    def from_explicit(cls, explicit_args: Sequence[Any]) -> ArgumentsHolder:
        """Wrap caller-supplied arguments, which are passed without conversion.

        Args:
            explicit_args: Arguments supplied by the caller.

        """
        holder = cls(len(explicit_args))
        holder.raw_arguments = list(explicit_args)
        holder.arguments = list(explicit_args)
        holder.prepared_arguments = [ConvertedArgument(value) for value in explicit_args]
        return holder

    def type_difference_weight(self, parameter_types: Sequence[Any]) -> int:
        weight = type_difference_weight(parameter_types, self.arguments)
        raw_weight = type_difference_weight(parameter_types, self.raw_arguments) - RAW_ARGUMENTS_BONUS
        return min(raw_weight, weight)

    def assignability_weight(self, parameter_types: Sequence[Any]) -> int:
        return assignability_weight(parameter_types, self.arguments, self.raw_arguments)

    def weight(self, parameter_types: Sequence[Any], *, lenient: bool) -> int:
        """Score the bound arguments; lower is a closer match.

        Args:
            parameter_types: Parameter annotations of the candidate.
            lenient: Use type-difference weights instead of strict assignability.

        """
        if lenient:
            return self.type_difference_weight(parameter_types)
        return self.assignability_weight(parameter_types)

    def to_plan(self, executable: ExecutableDescriptor) -> CachedPlan:
        if not self.resolve_necessary:
            return ResolvedPlan(executable=executable, arguments=tuple(self.arguments))
        template = tuple(
            prepared if prepared is not None else ConvertedArgument(argument)
            for prepared, argument in zip(self.prepared_arguments, self.arguments, strict=True)
        )
        return PreparedPlan(executable=executable, template=template)
