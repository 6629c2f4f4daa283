from __future__ import annotations

import collections.abc
import logging
from collections.abc import Callable, Sequence
from typing import Any, get_origin

from dibind._internal.arguments import ArgumentValue, ConstructorArguments
from dibind._internal.binding import ArgumentsHolder
from dibind._internal.converter import PydanticTypeConverter
from dibind._internal.definitions import ComponentDefinition
from dibind._internal.executables import ExecutableDescriptor, ExecutableKind, ExecutableRegistry
from dibind._internal.injection_point import InjectionPoint, ResolutionContext
from dibind._internal.instantiation import (
    SignatureParameterNameDiscoverer,
    SimpleInstantiationStrategy,
)
from dibind._internal.markers import strip_annotated
from dibind._internal.plan import (
    AutowiredArgument,
    ConvertedArgument,
    DeclaredArgument,
    PreparedPlan,
    ResolvedPlan,
)
from dibind._internal.policies import AutowireMode
from dibind._internal.protocols import (
    DefinitionStore,
    DependencyLocator,
    InstantiationStrategy,
    ParameterNameDiscoverer,
    TypeConverter,
    ValueResolver,
)
from dibind._internal.selection import CandidateSelection
from dibind._internal.type_checks import annotation_name, is_runtime_class, union_members
from dibind.exceptions import (
    DIBindAmbiguousExecutableError,
    DIBindConfigurationError,
    DIBindCreationError,
    DIBindInjectionPointUnavailableError,
    DIBindInstantiationError,
    DIBindNoMatchingExecutableError,
    DIBindNoSuchDependencyError,
    DIBindNoUniqueDependencyError,
    DIBindTypeMismatchError,
    DIBindUnsatisfiedDependencyError,
)

logger = logging.getLogger(__name__)

_EMPTY_ARGUMENTS: tuple[Any, ...] = ()
_EMPTY_CONTAINER_FACTORIES: dict[Any, Callable[[], Any]] = {
    tuple: tuple,
    list: list,
    set: set,
    frozenset: frozenset,
    dict: dict,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}


class ConstructorResolver:
    """Select the constructor or factory method used to create a component.

    For a definition without explicit caller arguments the resolver first
    consults the plan cached on the definition. Otherwise it enumerates the
    candidate executables, resolves the definition's declared arguments once,
    binds every candidate (declared values first, then lookup by type),
    scores the bound candidates and invokes the best one. The winning
    executable and its argument template are cached on the definition so
    repeated creations skip enumeration and scoring.

    Binding failures only reject the candidate they occur in; the last one is
    re-raised when no candidate fits. Ambiguous lookups by type and
    configuration errors propagate immediately.
    """

    def __init__(
        self,
        *,
        definition_store: DefinitionStore,
        value_resolver: ValueResolver,
        dependency_locator: DependencyLocator,
        executable_registry: ExecutableRegistry | None = None,
        type_converter: TypeConverter | None = None,
        parameter_name_discoverer: ParameterNameDiscoverer | None = None,
        instantiation_strategy: InstantiationStrategy | None = None,
    ) -> None:
        self._definition_store = definition_store
        self._value_resolver = value_resolver
        self._dependency_locator = dependency_locator
        self._executable_registry = executable_registry or ExecutableRegistry()
        self._type_converter = type_converter or PydanticTypeConverter()
        self._parameter_name_discoverer = (
            parameter_name_discoverer or SignatureParameterNameDiscoverer()
        )
        self._instantiation_strategy = instantiation_strategy or SimpleInstantiationStrategy()

    # region Constructors
    def autowire_constructor(
        self,
        name: str,
        definition: ComponentDefinition,
        chosen_constructors: Sequence[ExecutableDescriptor] | None = None,
        explicit_args: Sequence[Any] | None = None,
        *,
        context: ResolutionContext | None = None,
    ) -> tuple[Any, ExecutableDescriptor]:
        """Create the component through its best matching constructor.

        Args:
            name: Name of the component being created.
            definition: Definition of the component.
            chosen_constructors: Candidates to use instead of enumerating the class.
                Passing candidates enables autowiring regardless of the definition.
            explicit_args: Caller-supplied arguments. Only constructors with exactly
                this many parameters are considered, and nothing is cached.
            context: Resolution context of the current request.

        Returns:
            The created instance and the constructor used.

        """
        context = context or ResolutionContext()
        if explicit_args is None:
            cached = self._cached_arguments(name, definition, context)
            if cached is not None:
                executable, arguments = cached
                return self._instantiate(name, definition, executable, arguments), executable

        candidates = (
            list(chosen_constructors)
            if chosen_constructors is not None
            else self._constructor_candidates(name, definition)
        )
        if len(candidates) == 1 and explicit_args is None and not definition.has_constructor_arguments():
            unique_candidate = candidates[0]
            if unique_candidate.parameter_count == 0:
                definition.store_plan(ResolvedPlan(executable=unique_candidate, arguments=_EMPTY_ARGUMENTS))
                instance = self._instantiate(name, definition, unique_candidate, _EMPTY_ARGUMENTS)
                return instance, unique_candidate

        autowiring = (
            chosen_constructors is not None
            or definition.autowire_mode is AutowireMode.CONSTRUCTOR
        )
        resolved_values: ConstructorArguments | None = None
        if explicit_args is not None:
            min_argument_count = len(explicit_args)
        else:
            resolved_values = ConstructorArguments()
            min_argument_count = self._resolve_declared_arguments(
                name,
                definition,
                resolved_values,
                context,
            )

        candidates = sort_executables(candidates)
        selection = CandidateSelection()
        causes: list[DIBindUnsatisfiedDependencyError] = []
        for candidate in candidates:
            parameter_count = candidate.parameter_count
            if selection.holder is not None and len(selection.holder.arguments) > parameter_count:
                # Remaining candidates are less greedy than the one already satisfied.
                break
            if parameter_count < min_argument_count:
                continue

            if resolved_values is not None:
                try:
                    holder = self._create_argument_array(
                        name,
                        definition,
                        resolved_values,
                        candidate,
                        autowiring=autowiring,
                        fallback=len(candidates) == 1,
                        context=context,
                    )
                except DIBindUnsatisfiedDependencyError as error:
                    logger.debug("Ignoring constructor %s of component '%s': %s", candidate, name, error)
                    causes.append(error)
                    continue
            else:
                if parameter_count != len(explicit_args or ()):
                    continue
                holder = ArgumentsHolder.from_explicit(explicit_args or ())

            weight = holder.weight(
                candidate.parameter_types,
                lenient=definition.lenient_constructor_resolution,
            )
            selection = selection.offer(candidate, holder, weight)

        if selection.executable is None or selection.holder is None:
            if causes:
                self._raise_last_cause(name, causes)
            target = definition.component_type.__qualname__ if definition.component_type else "?"
            msg = (
                f"Could not resolve matching constructor on class '{target}' "
                "(hint: specify index/type/name arguments for simple parameters to avoid "
                "type ambiguities)"
            )
            raise DIBindNoMatchingExecutableError(
                msg,
                component_name=name,
                resource_description=definition.resource_description,
            )
        if selection.ambiguous and not definition.lenient_constructor_resolution:
            target = definition.component_type.__qualname__ if definition.component_type else "?"
            msg = (
                f"Ambiguous constructor matches found on class '{target}' "
                "(hint: specify index/type/name arguments for simple parameters to avoid "
                "type ambiguities)"
            )
            raise DIBindAmbiguousExecutableError(
                msg,
                component_name=name,
                candidates=selection.tied,
                resource_description=definition.resource_description,
            )

        if explicit_args is None:
            self._store_plan(name, definition, selection.executable, selection.holder)
        arguments = tuple(selection.holder.arguments)
        return self._instantiate(name, definition, selection.executable, arguments), selection.executable

    def _constructor_candidates(
        self,
        name: str,
        definition: ComponentDefinition,
    ) -> list[ExecutableDescriptor]:
        component_type = definition.component_type
        if component_type is None:
            msg = "Component definition declares neither a component class nor a factory component"
            raise DIBindConfigurationError(msg, component_name=name)
        try:
            return self._executable_registry.constructors_of(
                component_type,
                include_non_public=definition.non_public_access_allowed,
            )
        except DIBindConfigurationError as error:
            msg = f"Resolution of declared constructors on class '{component_type.__qualname__}' failed"
            raise DIBindConfigurationError(f"{msg}: {error}", component_name=name) from error

    # endregion Constructors

    # region Factory methods
    def resolve_factory_method(self, definition: ComponentDefinition) -> ExecutableDescriptor | None:
        """Record the unique factory method of ``definition`` without invoking it.

        The method is stored as ``definition.factory_method_to_introspect``. When
        several variants with different parameter types exist, ``None`` is
        recorded instead.

        Args:
            definition: Factory-method definition to inspect.

        """
        if definition.factory_component is not None:
            if definition.factory_component == definition.name:
                msg = "factory component reference points back to the same component definition"
                raise DIBindConfigurationError(msg, component_name=definition.name)
            factory_type = self._definition_store.component_type(definition.factory_component)
            is_static = False
        else:
            factory_type = definition.component_type
            is_static = True
        if factory_type is None:
            msg = "Unresolvable factory class"
            raise DIBindConfigurationError(msg, component_name=definition.name)

        unique_candidate: ExecutableDescriptor | None = None
        for candidate in self._factory_method_candidates(definition.name, definition, factory_type):
            if candidate.is_static != is_static or not definition.is_factory_method(candidate):
                continue
            if unique_candidate is None:
                unique_candidate = candidate
            elif not unique_candidate.has_same_parameter_types(candidate):
                unique_candidate = None
                break
        definition.record_factory_method(unique_candidate)
        return unique_candidate

    def instantiate_using_factory_method(
        self,
        name: str,
        definition: ComponentDefinition,
        explicit_args: Sequence[Any] | None = None,
        *,
        context: ResolutionContext | None = None,
    ) -> tuple[Any, ExecutableDescriptor]:
        """Create the component through its best matching factory method.

        Instance factory methods are invoked on the component named by
        ``definition.factory_component``; otherwise static (or class) methods of
        ``definition.component_type`` are used.

        Args:
            name: Name of the component being created.
            definition: Factory-method definition of the component.
            explicit_args: Caller-supplied arguments. Only methods with exactly
                this many parameters are considered, and nothing is cached.
            context: Resolution context of the current request.

        Returns:
            The created instance and the factory method used.

        """
        context = context or ResolutionContext()
        factory_instance, factory_type, is_static = self._factory_target(name, definition, context)

        if explicit_args is None:
            cached = self._cached_arguments(name, definition, context)
            if cached is not None:
                executable, arguments = cached
                instance = self._instantiate(name, definition, executable, arguments, factory_instance)
                return instance, executable

        candidates: list[ExecutableDescriptor] | None = None
        if definition.is_factory_method_unique and definition.factory_method_to_introspect is not None:
            candidates = [definition.factory_method_to_introspect]
        if candidates is None:
            candidates = [
                candidate
                for candidate in self._factory_method_candidates(name, definition, factory_type)
                if candidate.is_static == is_static and definition.is_factory_method(candidate)
            ]

        if len(candidates) == 1 and explicit_args is None and not definition.has_constructor_arguments():
            unique_candidate = candidates[0]
            if unique_candidate.parameter_count == 0:
                self._check_factory_method_returns(name, definition, factory_type, unique_candidate)
                definition.store_plan(ResolvedPlan(executable=unique_candidate, arguments=_EMPTY_ARGUMENTS))
                instance = self._instantiate(
                    name,
                    definition,
                    unique_candidate,
                    _EMPTY_ARGUMENTS,
                    factory_instance,
                )
                return instance, unique_candidate

        if len(candidates) > 1:
            candidates = sort_executables(candidates)

        autowiring = definition.autowire_mode is AutowireMode.CONSTRUCTOR
        lenient = definition.lenient_constructor_resolution
        resolved_values: ConstructorArguments | None = None
        if explicit_args is not None:
            min_argument_count = len(explicit_args)
        elif definition.has_constructor_arguments():
            resolved_values = ConstructorArguments()
            min_argument_count = self._resolve_declared_arguments(
                name,
                definition,
                resolved_values,
                context,
            )
        else:
            min_argument_count = 0

        selection = CandidateSelection()
        causes: list[DIBindUnsatisfiedDependencyError] = []
        for candidate in candidates:
            parameter_count = candidate.parameter_count
            if parameter_count < min_argument_count:
                continue

            if explicit_args is not None:
                if parameter_count != len(explicit_args):
                    continue
                holder = ArgumentsHolder.from_explicit(explicit_args)
            else:
                try:
                    holder = self._create_argument_array(
                        name,
                        definition,
                        resolved_values,
                        candidate,
                        autowiring=autowiring,
                        fallback=len(candidates) == 1,
                        context=context,
                    )
                except DIBindUnsatisfiedDependencyError as error:
                    logger.debug("Ignoring factory method %s of component '%s': %s", candidate, name, error)
                    causes.append(error)
                    continue

            weight = holder.weight(candidate.parameter_types, lenient=lenient)
            incumbent = selection.executable
            # The same signature reached twice (e.g. an override) is not an ambiguity.
            record_tie = (
                not lenient
                and incumbent is not None
                and parameter_count == incumbent.parameter_count
                and not candidate.has_same_parameter_types(incumbent)
            )
            selection = selection.offer(candidate, holder, weight, record_tie=record_tie)

        if selection.executable is None or selection.holder is None:
            if causes:
                self._raise_last_cause(name, causes)
            msg = self._no_matching_factory_method_message(
                definition,
                factory_type,
                explicit_args=explicit_args,
                resolved_values=resolved_values,
                min_argument_count=min_argument_count,
                is_static=is_static,
            )
            raise DIBindNoMatchingExecutableError(
                msg,
                component_name=name,
                resource_description=definition.resource_description,
            )
        self._check_factory_method_returns(name, definition, factory_type, selection.executable)
        if selection.ambiguous:
            msg = (
                f"Ambiguous factory method matches found on class '{factory_type.__qualname__}' "
                "(hint: specify index/type/name arguments for simple parameters to avoid "
                "type ambiguities)"
            )
            raise DIBindAmbiguousExecutableError(
                msg,
                component_name=name,
                candidates=selection.tied,
                resource_description=definition.resource_description,
            )

        if explicit_args is None:
            self._store_plan(name, definition, selection.executable, selection.holder)
        arguments = tuple(selection.holder.arguments)
        instance = self._instantiate(name, definition, selection.executable, arguments, factory_instance)
        return instance, selection.executable

    def _factory_target(
        self,
        name: str,
        definition: ComponentDefinition,
        context: ResolutionContext,
    ) -> tuple[Any, type[Any], bool]:
        factory_component = definition.factory_component
        if factory_component is not None:
            if factory_component == name:
                msg = "factory component reference points back to the same component definition"
                raise DIBindConfigurationError(msg, component_name=name)
            factory_instance = self._definition_store.get_component(factory_component, context=context)
            return factory_instance, type(factory_instance), False

        if definition.component_type is None:
            msg = "component definition declares neither a component class nor a factory component reference"
            raise DIBindConfigurationError(msg, component_name=name)
        return None, definition.component_type, True

    def _factory_method_candidates(
        self,
        name: str,
        definition: ComponentDefinition,
        factory_type: type[Any],
    ) -> list[ExecutableDescriptor]:
        if definition.factory_method is None:
            msg = "component definition declares no factory method"
            raise DIBindConfigurationError(msg, component_name=name)
        try:
            return self._executable_registry.factory_methods_of(
                factory_type,
                definition.factory_method,
                include_non_public=definition.non_public_access_allowed,
            )
        except DIBindConfigurationError as error:
            msg = (
                f"Resolution of factory method '{definition.factory_method}' on class "
                f"'{factory_type.__qualname__}' failed"
            )
            raise DIBindConfigurationError(f"{msg}: {error}", component_name=name) from error

    def _check_factory_method_returns(
        self,
        name: str,
        definition: ComponentDefinition,
        factory_type: type[Any],
        executable: ExecutableDescriptor,
    ) -> None:
        if executable.returns_nothing:
            msg = (
                f"Invalid factory method '{definition.factory_method}' on class "
                f"'{factory_type.__qualname__}': needs to have a non-None return type"
            )
            raise DIBindConfigurationError(msg, component_name=name)

    def _no_matching_factory_method_message(
        self,
        definition: ComponentDefinition,
        factory_type: type[Any],
        *,
        explicit_args: Sequence[Any] | None,
        resolved_values: ConstructorArguments | None,
        min_argument_count: int,
        is_static: bool,
    ) -> str:
        argument_types: list[str] = []
        if explicit_args is not None:
            argument_types = [type(argument).__name__ for argument in explicit_args]
        elif resolved_values is not None:
            argument_types = [
                _declared_type_name(argument) for argument in resolved_values.all_values()
            ]
        factory_component = (
            f"factory component '{definition.factory_component}'; "
            if definition.factory_component is not None
            else ""
        )
        arguments_hint = "and arguments " if min_argument_count > 0 else ""
        static_hint = "static" if is_static else "non-static"
        return (
            f"No matching factory method found on class '{factory_type.__qualname__}': "
            f"{factory_component}factory method "
            f"'{definition.factory_method}({', '.join(argument_types)})'. "
            f"Check that a method with the specified name {arguments_hint}exists "
            f"and that it is {static_hint}."
        )

    # endregion Factory methods

    # region Argument binding
    def _resolve_declared_arguments(
        self,
        name: str,
        definition: ComponentDefinition,
        resolved_values: ConstructorArguments,
        context: ResolutionContext,
    ) -> int:
        declared = definition.constructor_arguments
        min_argument_count = declared.argument_count

        for index, argument in declared.indexed.items():
            min_argument_count = max(min_argument_count, index + 1)
            resolved_values.put_indexed(
                index,
                self._resolve_declared_argument(name, definition, argument, context),
            )
        for argument in declared.generic:
            resolved_values.put_generic(
                self._resolve_declared_argument(name, definition, argument, context),
            )
        return min_argument_count

    def _resolve_declared_argument(
        self,
        name: str,
        definition: ComponentDefinition,
        argument: ArgumentValue,
        context: ResolutionContext,
    ) -> ArgumentValue:
        if argument.converted:
            return argument
        resolved_value = self._value_resolver.resolve_value(
            argument.value,
            component_name=name,
            definition=definition,
            context=context,
        )
        return argument.resolved(resolved_value)

    def _create_argument_array(
        self,
        name: str,
        definition: ComponentDefinition,
        resolved_values: ConstructorArguments | None,
        executable: ExecutableDescriptor,
        *,
        autowiring: bool,
        fallback: bool,
        context: ResolutionContext,
    ) -> ArgumentsHolder:
        parameter_names = self._parameter_names(executable)
        parameter_count = executable.parameter_count
        holder = ArgumentsHolder(parameter_count)
        used_values: set[ArgumentValue] = set()
        autowired_names: list[str] = []

        for index, parameter_type in enumerate(executable.parameter_types):
            parameter_name = parameter_names[index] if parameter_names is not None else ""
            injection_point = InjectionPoint(executable=executable, index=index)
            argument: ArgumentValue | None = None
            if resolved_values is not None:
                argument = resolved_values.argument_value(
                    index,
                    parameter_type,
                    parameter_name,
                    used_values,
                )
                if argument is None and (
                    not autowiring or parameter_count == resolved_values.argument_count
                ):
                    argument = resolved_values.generic_argument_value(None, None, used_values)

            if argument is not None:
                used_values.add(argument)
                original_value = argument.value
                if argument.converted:
                    converted_value = argument.converted_value
                    holder.prepared_arguments[index] = ConvertedArgument(converted_value)
                else:
                    converted_value = self._convert(
                        name,
                        definition,
                        original_value,
                        injection_point,
                    )
                    if argument.source is not None:
                        holder.resolve_necessary = True
                        holder.prepared_arguments[index] = DeclaredArgument(argument.source.value)
                holder.arguments[index] = converted_value
                holder.raw_arguments[index] = original_value
                continue

            if not autowiring:
                msg = (
                    "Ambiguous argument values for parameter of type "
                    f"'{annotation_name(parameter_type)}' - did you specify the correct "
                    "component references as arguments?"
                )
                raise DIBindUnsatisfiedDependencyError(
                    msg,
                    component_name=name,
                    injection_point=injection_point,
                    resource_description=definition.resource_description,
                )
            try:
                autowired_value = self._resolve_autowired_argument(
                    name,
                    injection_point,
                    autowired_names,
                    fallback=fallback,
                    context=context,
                )
            except DIBindNoUniqueDependencyError:
                raise
            except (DIBindNoSuchDependencyError, DIBindCreationError) as error:
                raise DIBindUnsatisfiedDependencyError(
                    str(error),
                    component_name=name,
                    injection_point=injection_point,
                    resource_description=definition.resource_description,
                ) from error
            holder.raw_arguments[index] = autowired_value
            holder.arguments[index] = autowired_value
            holder.prepared_arguments[index] = AutowiredArgument()
            holder.resolve_necessary = True

        via = "constructor" if executable.kind is ExecutableKind.CONSTRUCTOR else "factory method"
        for autowired_name in autowired_names:
            logger.debug(
                "Autowiring by type from component name '%s' via %s to component named '%s'",
                name,
                via,
                autowired_name,
            )
        return holder

    def _parameter_names(self, executable: ExecutableDescriptor) -> Sequence[str] | None:
        declared_names = executable.declared_parameter_names
        if declared_names is not None:
            if len(declared_names) != executable.parameter_count:
                msg = (
                    f"{executable.describe()} declares parameter names {list(declared_names)} "
                    "not corresponding to actual number of parameters "
                    f"({executable.parameter_count})"
                )
                raise DIBindConfigurationError(msg)
            return declared_names
        return self._parameter_name_discoverer.parameter_names(executable)

    def _resolve_autowired_argument(
        self,
        name: str,
        injection_point: InjectionPoint,
        autowired_names: list[str] | None,
        *,
        fallback: bool,
        context: ResolutionContext,
    ) -> Any:
        parameter_type = strip_annotated(injection_point.annotation)
        if is_runtime_class(parameter_type) and issubclass(parameter_type, InjectionPoint):
            current = context.current_injection_point
            if current is None:
                msg = f"No current injection point available for {injection_point.describe()}"
                raise DIBindInjectionPointUnavailableError(msg)
            return current

        try:
            with context.injection_point(injection_point):
                return self._dependency_locator.resolve_dependency(
                    injection_point,
                    requesting_name=name,
                    autowired_names=autowired_names,
                    context=context,
                )
        except DIBindNoUniqueDependencyError:
            raise
        except DIBindNoSuchDependencyError:
            if fallback:
                empty_container = _empty_container_for(injection_point.annotation)
                if empty_container is not None:
                    return empty_container
            raise

    def _convert(
        self,
        name: str,
        definition: ComponentDefinition,
        value: Any,
        injection_point: InjectionPoint,
    ) -> Any:
        try:
            return self._type_converter.convert(value, injection_point.annotation, injection_point)
        except DIBindTypeMismatchError as error:
            msg = (
                f"Could not convert argument value of type '{type(value).__qualname__}' to "
                f"required type '{annotation_name(injection_point.annotation)}': {error}"
            )
            raise DIBindUnsatisfiedDependencyError(
                msg,
                component_name=name,
                injection_point=injection_point,
                resource_description=definition.resource_description,
            ) from error

    # endregion Argument binding

    # region Plan cache
    def _cached_arguments(
        self,
        name: str,
        definition: ComponentDefinition,
        context: ResolutionContext,
    ) -> tuple[ExecutableDescriptor, tuple[Any, ...]] | None:
        plan = definition.cached_plan()
        if plan is None:
            return None
        if isinstance(plan, ResolvedPlan):
            return plan.executable, plan.arguments
        return plan.executable, self._resolve_prepared_arguments(name, definition, plan, context)

    def _resolve_prepared_arguments(
        self,
        name: str,
        definition: ComponentDefinition,
        plan: PreparedPlan,
        context: ResolutionContext,
    ) -> tuple[Any, ...]:
        resolved_arguments: list[Any] = []
        for index, prepared in enumerate(plan.template):
            injection_point = InjectionPoint(executable=plan.executable, index=index)
            if isinstance(prepared, AutowiredArgument):
                try:
                    value = self._resolve_autowired_argument(
                        name,
                        injection_point,
                        None,
                        fallback=True,
                        context=context,
                    )
                except DIBindNoUniqueDependencyError:
                    raise
                except DIBindNoSuchDependencyError as error:
                    raise DIBindUnsatisfiedDependencyError(
                        str(error),
                        component_name=name,
                        injection_point=injection_point,
                        resource_description=definition.resource_description,
                    ) from error
                # Lookup results are passed as returned, like on first creation.
                resolved_arguments.append(value)
                continue
            if isinstance(prepared, DeclaredArgument):
                value = self._value_resolver.resolve_value(
                    prepared.value,
                    component_name=name,
                    definition=definition,
                    context=context,
                )
            else:
                value = prepared.value
            resolved_arguments.append(self._convert(name, definition, value, injection_point))
        return tuple(resolved_arguments)

    def _store_plan(
        self,
        name: str,
        definition: ComponentDefinition,
        executable: ExecutableDescriptor,
        holder: ArgumentsHolder,
    ) -> None:
        plan = holder.to_plan(executable)
        definition.store_plan(plan)
        logger.debug(
            "Cached %s plan for component '%s' using %s",
            "prepared" if isinstance(plan, PreparedPlan) else "resolved",
            name,
            executable,
        )

    # endregion Plan cache

    def _instantiate(
        self,
        name: str,
        definition: ComponentDefinition,
        executable: ExecutableDescriptor,
        arguments: Sequence[Any],
        factory_instance: Any = None,
    ) -> Any:
        try:
            return self._instantiation_strategy.instantiate(executable, arguments, factory_instance)
        except Exception as error:
            via = "constructor" if executable.kind is ExecutableKind.CONSTRUCTOR else "factory method"
            msg = f"Instantiation via {via} {executable.describe()} failed: {error}"
            raise DIBindInstantiationError(
                msg,
                component_name=name,
                resource_description=definition.resource_description,
            ) from error

    def _raise_last_cause(self, name: str, causes: list[DIBindUnsatisfiedDependencyError]) -> None:
        last_cause = causes.pop()
        for suppressed in causes:
            logger.debug("Suppressed binding failure for component '%s': %s", name, suppressed)
        raise last_cause


def sort_executables(executables: Sequence[ExecutableDescriptor]) -> list[ExecutableDescriptor]:
    """Order candidates public first, then by descending parameter count.

    The sort is stable, so declaration order breaks the remaining ties.

    Args:
        executables: Candidate executables.

    """
    return sorted(executables, key=lambda executable: (not executable.is_public, -executable.parameter_count))


def _empty_container_for(annotation: Any) -> Any | None:
    annotation = strip_annotated(annotation)
    members = union_members(annotation)
    if members is not None:
        for member in members:
            empty_container = _empty_container_for(member)
            if empty_container is not None:
                return empty_container
        return None
    origin = get_origin(annotation) or annotation
    try:
        factory = _EMPTY_CONTAINER_FACTORIES.get(origin)
    except TypeError:
        return None
    return factory() if factory is not None else None


def _declared_type_name(argument: ArgumentValue) -> str:
    if argument.type is not None:
        return argument.type if isinstance(argument.type, str) else annotation_name(argument.type)
    if argument.value is None:
        return "None"
    return type(argument.value).__name__
