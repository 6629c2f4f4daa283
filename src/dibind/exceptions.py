from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dibind._internal.executables import ExecutableDescriptor
    from dibind._internal.injection_point import InjectionPoint


class DIBindError(Exception):
    """Represent a base class for all DIBind-specific failures.

    Catch this type when you want to handle any DIBind error path without
    matching each concrete exception class individually.
    """


class DIBindConfigurationError(DIBindError):
    """Signal a fatal problem with a component definition or its metadata.

    Raised when candidate executables cannot be introspected, when a factory
    component refers back to the definition it should build, when a definition
    declares neither a class nor a factory component, when a factory method is
    annotated ``-> None``, or when declared argument metadata is malformed (for
    example a negative argument index).

    Typical fixes include adding resolvable type annotations, pointing
    ``factory_component`` at another component, and annotating factory methods
    with the type they return.
    """

    def __init__(self, message: str, *, component_name: str | None = None) -> None:
        self.component_name = component_name
        if component_name is not None:
            message = f"Error creating component '{component_name}': {message}"
        super().__init__(message)


class DIBindCreationError(DIBindError):
    """Signal that a component could not be created.

    Base class for failures raised while choosing or invoking a constructor or
    factory method. ``component_name`` names the definition being created and
    ``resource_description`` names where it was declared, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        component_name: str,
        resource_description: str | None = None,
    ) -> None:
        self.component_name = component_name
        self.resource_description = resource_description
        prefix = f"Error creating component '{component_name}'"
        if resource_description:
            prefix = f"{prefix} defined in {resource_description}"
        super().__init__(f"{prefix}: {message}")


class DIBindNoMatchingExecutableError(DIBindCreationError):
    """Signal that no constructor or factory method fits the available arguments.

    Raised when every candidate was rejected for arity or type reasons and no
    more specific binding failure was recorded.

    Typical fixes include declaring index/type/name arguments for simple
    parameters, or registering the dependencies the constructor expects.
    """


class DIBindAmbiguousExecutableError(DIBindCreationError):
    """Signal that several candidates scored equally well.

    Raised for constructors only under strict (non-lenient) resolution, and
    for factory methods whenever two overloads with the same parameter count
    but different parameter types tie.

    Typical fixes include declaring typed or indexed arguments, or switching
    the definition to lenient resolution.
    """

    def __init__(
        self,
        message: str,
        *,
        component_name: str,
        candidates: Sequence[ExecutableDescriptor],
        resource_description: str | None = None,
    ) -> None:
        self.candidates = tuple(candidates)
        described = ", ".join(candidate.describe() for candidate in self.candidates)
        super().__init__(
            f"{message}: [{described}]",
            component_name=component_name,
            resource_description=resource_description,
        )


class DIBindInstantiationError(DIBindCreationError):
    """Signal that the selected executable raised while being invoked.

    The original exception is chained as ``__cause__``.
    """


class DIBindUnsatisfiedDependencyError(DIBindCreationError):
    """Signal that one parameter of a candidate could not be satisfied.

    Raised per candidate while binding arguments: a declared value could not
    be converted to the parameter type, no declared value existed and
    autowiring was disabled, or lookup by type found nothing. Resolution keeps
    trying other candidates and re-raises the last of these only when no
    candidate fits.

    Typical fixes include registering a component of the parameter type or
    declaring an explicit argument value.
    """

    def __init__(
        self,
        message: str,
        *,
        component_name: str,
        injection_point: InjectionPoint | None = None,
        resource_description: str | None = None,
    ) -> None:
        self.injection_point = injection_point
        if injection_point is not None:
            message = f"Unsatisfied dependency expressed through {injection_point.describe()}: {message}"
        super().__init__(
            message,
            component_name=component_name,
            resource_description=resource_description,
        )


class DIBindCircularDependencyError(DIBindCreationError):
    """Signal a cycle between constructor or factory-method dependencies.

    ``chain`` lists the component names in creation order, ending with the
    name that closed the cycle.
    """

    def __init__(self, component_name: str, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__(
            "Requested component is currently in creation: is there an unresolvable "
            f"circular reference? ({' -> '.join(self.chain)})",
            component_name=component_name,
        )


class DIBindTypeMismatchError(DIBindError):
    """Signal that a value has no conversion path to a required type."""

    def __init__(self, value: Any, target_type: Any, reason: str | None = None) -> None:
        self.value = value
        self.target_type = target_type
        msg = (
            f"Cannot convert value of type '{type(value).__qualname__}' "
            f"to required type '{_type_name(target_type)}'"
        )
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DIBindNoSuchDependencyError(DIBindError):
    """Signal that lookup by type found no matching component.

    Typical fixes include registering a component assignable to the requested
    type or declaring an explicit argument.
    """

    def __init__(self, dependency_type: Any, message: str | None = None) -> None:
        self.dependency_type = dependency_type
        msg = f"No qualifying component of type '{_type_name(dependency_type)}' available"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class DIBindNoUniqueDependencyError(DIBindNoSuchDependencyError):
    """Signal that lookup by type found several equally eligible components.

    This failure is never suppressed by empty-collection fallback or by trying
    other candidates.

    Typical fixes include marking one registration ``primary=True`` or
    qualifying the parameter with ``Annotated[T, Qualifier("name")]``.
    """

    def __init__(self, dependency_type: Any, candidate_names: Sequence[str]) -> None:
        self.candidate_names = tuple(candidate_names)
        super().__init__(
            dependency_type,
            f"expected single matching component but found {len(self.candidate_names)}: "
            f"{', '.join(self.candidate_names)}",
        )


class DIBindInjectionPointUnavailableError(DIBindError):
    """Signal that an ``InjectionPoint`` parameter was requested outside a lookup.

    Only components created to satisfy another component's parameter can
    receive the injection point that requested them.
    """


class DIBindComponentNotRegisteredError(DIBindError):
    """Signal that a component name has no definition or instance.

    Raised by ``ComponentFactory.get`` and by ``Reference`` resolution.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No component named '{name}' is registered")


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return repr(annotation)
