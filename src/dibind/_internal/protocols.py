from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from dibind._internal.definitions import ComponentDefinition
    from dibind._internal.executables import ExecutableDescriptor
    from dibind._internal.injection_point import InjectionPoint, ResolutionContext


class DefinitionStore(Protocol):
    """Protocol for the registry of component definitions and instances."""

    def get_definition(self, name: str) -> ComponentDefinition:
        """Return the definition registered under ``name``.

        Args:
            name: Component name.

        """

    def component_type(self, name: str) -> type[Any] | None:
        """Return the type of the component registered under ``name`` without creating it.

        Args:
            name: Component name.

        """

    def get_component(self, name: str, *, context: ResolutionContext) -> Any:
        """Return the component instance registered under ``name``, creating it if needed.

        Args:
            name: Component name.
            context: Resolution context of the current request.

        """


class ValueResolver(Protocol):
    """Protocol for turning declared argument values into concrete objects."""

    def resolve_value(
        self,
        value: Any,
        *,
        component_name: str,
        definition: ComponentDefinition,
        context: ResolutionContext,
    ) -> Any:
        """Resolve references and expressions inside a declared value.

        Args:
            value: Declared value.
            component_name: Name of the component whose argument is resolved.
            definition: Definition of that component.
            context: Resolution context of the current request.

        """


class TypeConverter(Protocol):
    """Protocol for converting values to parameter annotations."""

    def convert(
        self,
        value: Any,
        target_type: Any,
        injection_point: InjectionPoint | None = None,
    ) -> Any:
        """Convert ``value`` to ``target_type`` or raise ``DIBindTypeMismatchError``.

        Args:
            value: Value to convert.
            target_type: Parameter annotation to convert to.
            injection_point: Parameter the value is converted for, if any.

        """


class DependencyLocator(Protocol):
    """Protocol for lookup by type."""

    def resolve_dependency(
        self,
        injection_point: InjectionPoint,
        *,
        requesting_name: str,
        autowired_names: list[str] | None,
        context: ResolutionContext,
    ) -> Any:
        """Return the value for ``injection_point`` looked up by its annotation.

        Raises ``DIBindNoSuchDependencyError`` when nothing matches and
        ``DIBindNoUniqueDependencyError`` when several components match.

        Args:
            injection_point: Parameter being resolved.
            requesting_name: Component being created; never returned for its own parameters.
            autowired_names: Receives the names of the components used, when given.
            context: Resolution context of the current request.

        """


class ParameterNameDiscoverer(Protocol):
    """Protocol for best-effort discovery of parameter names."""

    def parameter_names(self, executable: ExecutableDescriptor) -> Sequence[str] | None:
        """Return parameter names in declaration order, or ``None`` when unknown.

        Args:
            executable: Executable to inspect.

        """


class InstantiationStrategy(Protocol):
    """Protocol for invoking a selected constructor or factory method."""

    def instantiate(
        self,
        executable: ExecutableDescriptor,
        arguments: Sequence[Any],
        factory_instance: Any = None,
    ) -> Any:
        """Invoke ``executable`` with ``arguments`` and return the created instance.

        Args:
            executable: Selected constructor or factory method.
            arguments: Bound arguments in parameter order.
            factory_instance: Factory component for instance factory methods.

        """
