from __future__ import annotations

from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from typing import Any

from dibind._internal.markers import strip_annotated
from dibind._internal.type_checks import is_assignable_value, is_runtime_class, union_members
from dibind.exceptions import DIBindConfigurationError

_NO_CONVERTED_VALUE: Any = object()


@dataclass(eq=False, slots=True)
class ArgumentValue:
    """Hold one declared constructor or factory-method argument.

    ``type`` is a class or a type name string used to match a parameter.
    ``name`` matches a parameter by name. Instances compare by identity so a
    value can be marked as used for one candidate.
    """

    value: Any
    type: Any = None
    name: str | None = None
    source: ArgumentValue | None = field(default=None, repr=False)
    """The declared value this resolved value was produced from."""
    _converted_value: Any = field(default=_NO_CONVERTED_VALUE, repr=False)

    @property
    def converted(self) -> bool:
        return self._converted_value is not _NO_CONVERTED_VALUE

    @property
    def converted_value(self) -> Any:
        return self._converted_value

    def set_converted_value(self, value: Any) -> None:
        """Store the converted form so later resolutions skip conversion.

        Args:
            value: Value already converted to the target parameter type.

        """
        self._converted_value = value

    def resolved(self, value: Any) -> ArgumentValue:
        """Return a copy holding ``value`` whose ``source`` points back at this entry.

        Args:
            value: The resolved form of this entry's value.

        """
        return ArgumentValue(value=value, type=self.type, name=self.name, source=self)

    def matches_type(self, required_type: Any) -> bool:
        """Check whether the declared ``type`` names ``required_type``.

        Args:
            required_type: The parameter annotation to match.

        """
        return matches_type_name(required_type, self.type)


class ConstructorArguments:
    """Hold indexed and generic argument values for one component definition.

    The same class holds the raw declared values of a definition and the
    resolved table built from them for one creation attempt.
    """

    def __init__(self) -> None:
        self._indexed: dict[int, ArgumentValue] = {}
        self._generic: list[ArgumentValue] = []

    def add_indexed(
        self,
        index: int,
        value: Any,
        *,
        type: Any = None,  # noqa: A002
        name: str | None = None,
    ) -> ArgumentValue:
        """Declare a value for the parameter at ``index``.

        Args:
            index: Zero-based parameter position.
            value: Literal value, ``Reference``, ``Expression`` or a container of those.
            type: Optional class or type name the parameter must match.
            name: Optional parameter name the value must match.

        """
        return self.put_indexed(index, ArgumentValue(value=value, type=type, name=name))

    def put_indexed(self, index: int, argument: ArgumentValue) -> ArgumentValue:
        """Store an existing ``ArgumentValue`` at ``index``, replacing any previous one.

        Args:
            index: Zero-based parameter position.
            argument: Argument value to store.

        """
        if index < 0:
            msg = f"Invalid constructor argument index: {index}"
            raise DIBindConfigurationError(msg)
        self._indexed[index] = argument
        return argument

    def add_generic(
        self,
        value: Any,
        *,
        type: Any = None,  # noqa: A002
        name: str | None = None,
    ) -> ArgumentValue:
        """Declare a value matched to parameters by type or name.

        Args:
            value: Literal value, ``Reference``, ``Expression`` or a container of those.
            type: Optional class or type name the parameter must match.
            name: Optional parameter name the value must match.

        """
        return self.put_generic(ArgumentValue(value=value, type=type, name=name))

    def put_generic(self, argument: ArgumentValue) -> ArgumentValue:
        """Append an existing ``ArgumentValue`` to the generic values.

        Args:
            argument: Argument value to store.

        """
        self._generic.append(argument)
        return argument

    @property
    def indexed(self) -> dict[int, ArgumentValue]:
        return dict(self._indexed)

    @property
    def generic(self) -> list[ArgumentValue]:
        return list(self._generic)

    @property
    def argument_count(self) -> int:
        return len(self._indexed) + len(self._generic)

    def is_empty(self) -> bool:
        return not self._indexed and not self._generic

    def argument_value(
        self,
        index: int,
        required_type: Any,
        required_name: str | None,
        used: Collection[ArgumentValue],
    ) -> ArgumentValue | None:
        """Find the value for one parameter, trying the indexed value first.

        The indexed value is accepted only when its declared type and name fit
        the parameter; otherwise the first fitting unused generic value wins.

        Args:
            index: Parameter position.
            required_type: Parameter annotation.
            required_name: Parameter name; empty when names are unknown.
            used: Values already bound to other parameters of the candidate.

        """
        indexed = self._indexed.get(index)
        if (
            indexed is not None
            and (indexed.type is None or indexed.matches_type(required_type))
            and (
                indexed.name is None
                or (required_name is not None and required_name in ("", indexed.name))
            )
        ):
            return indexed
        return self.generic_argument_value(required_type, required_name, used)

    def generic_argument_value(
        self,
        required_type: Any,
        required_name: str | None,
        used: Collection[ArgumentValue],
    ) -> ArgumentValue | None:
        """Find the first unused generic value that fits a parameter.

        Passing ``None`` for both requirements returns the next unused value
        that declares neither a type nor a name.

        Args:
            required_type: Parameter annotation, or ``None`` for no requirement.
            required_name: Parameter name, ``""`` when unknown, ``None`` for no requirement.
            used: Values already bound to other parameters of the candidate.

        """
        for argument in self._generic:
            if argument in used:
                continue
            if argument.name is not None and (
                required_name is None
                or (required_name != "" and required_name != argument.name)
            ):
                continue
            if argument.type is not None and (
                required_type is None or not argument.matches_type(required_type)
            ):
                continue
            if (
                required_type is not None
                and argument.type is None
                and argument.name is None
                and not is_assignable_value(required_type, argument.value)
            ):
                continue
            return argument
        return None

    def all_values(self) -> Iterator[ArgumentValue]:
        yield from self._indexed.values()
        yield from self._generic

    def __len__(self) -> int:
        return self.argument_count

    def __contains__(self, argument: object) -> bool:
        return any(argument is value for value in self.all_values())


def matches_type_name(required_type: Any, declared_type: Any) -> bool:
    """Check whether a declared argument type (class or name) names ``required_type``.

    Names match the class ``__name__``, ``__qualname__`` or ``module.qualname``.

    Args:
        required_type: The parameter annotation.
        declared_type: Class or type name string declared on the argument.

    """
    required_type = strip_annotated(required_type)
    members = union_members(required_type)
    if members is not None:
        return any(matches_type_name(member, declared_type) for member in members)
    if not isinstance(declared_type, str):
        return strip_annotated(declared_type) == required_type
    if not is_runtime_class(required_type):
        return repr(required_type) == declared_type
    return declared_type in (
        required_type.__name__,
        required_type.__qualname__,
        f"{required_type.__module__}.{required_type.__qualname__}",
    )
