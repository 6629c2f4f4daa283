from __future__ import annotations

import collections.abc
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar, get_args, get_origin, overload

from dibind._internal.arguments import ConstructorArguments
from dibind._internal.converter import PydanticTypeConverter
from dibind._internal.definitions import ComponentDefinition
from dibind._internal.executables import ExecutableRegistry
from dibind._internal.injection_point import InjectionPoint, ResolutionContext
from dibind._internal.markers import Expression, Reference, qualifier_of, strip_annotated
from dibind._internal.policies import AutowireMode, Lifetime
from dibind._internal.protocols import (
    InstantiationStrategy,
    ParameterNameDiscoverer,
    TypeConverter,
)
from dibind._internal.resolver import ConstructorResolver
from dibind._internal.type_checks import (
    is_assignable_class,
    is_runtime_class,
    runtime_class_of,
)
from dibind.exceptions import (
    DIBindComponentNotRegisteredError,
    DIBindConfigurationError,
    DIBindNoSuchDependencyError,
    DIBindNoUniqueDependencyError,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS: dict[Any, Callable[[list[Any]], Any]] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}
_MAPPING_ORIGINS: dict[Any, Callable[[dict[str, Any]], Any]] = {
    dict: dict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}
_UNRESOLVED = object()


class ComponentFactory:
    """Hold component definitions and create components on demand.

    The factory is the definition store, dependency locator and value resolver
    used by ``ConstructorResolver``. Components are registered under a name
    and created the first time they are requested; singletons are cached,
    transient components are created on every request.

    Examples:
        .. code-block:: python

            factory = ComponentFactory()
            factory.add_component(Engine)
            factory.add_component(Widget, args=[Reference("engine"), 4])

            widget = factory.get(Widget)

    """

    def __init__(
        self,
        *,
        default_lifetime: Lifetime = Lifetime.SINGLETON,
        default_autowire_mode: AutowireMode = AutowireMode.CONSTRUCTOR,
        lenient_constructor_resolution: bool = True,
        non_public_access_allowed: bool = True,
        executable_registry: ExecutableRegistry | None = None,
        type_converter: TypeConverter | None = None,
        parameter_name_discoverer: ParameterNameDiscoverer | None = None,
        instantiation_strategy: InstantiationStrategy | None = None,
    ) -> None:
        """Initialize an empty factory and its resolution engine.

        Args:
            default_lifetime: Lifetime used by registrations that omit ``lifetime``.
            default_autowire_mode: Autowire mode used by registrations that omit it.
            lenient_constructor_resolution: Default leniency of new definitions.
            non_public_access_allowed: Default visibility policy of new definitions.
            executable_registry: Source of constructor and factory-method descriptors.
                Share one registry to declare signatures explicitly.
            type_converter: Converter for declared argument values.
            parameter_name_discoverer: Source of parameter names.
            instantiation_strategy: Strategy that invokes the selected executable.

        """
        self._default_lifetime = default_lifetime
        self._default_autowire_mode = default_autowire_mode
        self._lenient_constructor_resolution = lenient_constructor_resolution
        self._non_public_access_allowed = non_public_access_allowed
        self.executable_registry = executable_registry or ExecutableRegistry()

        self._definitions: dict[str, ComponentDefinition] = {}
        self._singletons: dict[str, Any] = {}
        self._singleton_creation_lock = threading.RLock()
        self._registration_lock = threading.RLock()

        self.resolver = ConstructorResolver(
            definition_store=self,
            value_resolver=self,
            dependency_locator=self,
            executable_registry=self.executable_registry,
            type_converter=type_converter or PydanticTypeConverter(),
            parameter_name_discoverer=parameter_name_discoverer,
            instantiation_strategy=instantiation_strategy,
        )

    # region Registration Methods
    def register(self, definition: ComponentDefinition) -> ComponentDefinition:
        """Register ``definition`` under its name.

        Re-registering a name replaces the previous definition, drops its cached
        singleton and clears the cached resolution plan.

        Args:
            definition: Definition to register.

        """
        definition.clear_plan()
        with self._registration_lock:
            replaced = self._definitions.get(definition.name)
            self._definitions[definition.name] = definition
            self._singletons.pop(definition.name, None)
        if replaced is not None:
            logger.debug("Replaced definition of component '%s'", definition.name)
        return definition

    def add_component(
        self,
        component_type: type[Any],
        *,
        name: str | None = None,
        args: Sequence[Any] = (),
        named_args: Mapping[str, Any] | None = None,
        lifetime: Lifetime | None = None,
        autowire_mode: AutowireMode | None = None,
        lenient_constructor_resolution: bool | None = None,
        primary: bool = False,
    ) -> ComponentDefinition:
        """Register a class created through its best matching constructor.

        Args:
            component_type: Class to construct.
            name: Component name. Defaults to the class name with a lowercase first letter.
            args: Declared values for the leading parameters, by index.
            named_args: Declared values matched to parameters by name.
            lifetime: Lifetime of the component.
            autowire_mode: Whether unbound parameters are looked up by type.
            lenient_constructor_resolution: Rank candidates leniently.
            primary: Prefer this component when several match a lookup by type.

        Examples:
            .. code-block:: python

                factory.add_component(Widget, args=[Reference("engine")], named_args={"size": "4"})

        """
        if not is_runtime_class(component_type):
            msg = f"add_component() expects a class, got {component_type!r}"
            raise DIBindConfigurationError(msg)
        definition = ComponentDefinition(
            name=name or default_component_name(component_type),
            component_type=component_type,
            constructor_arguments=self._declared_arguments(args, named_args),
            **self._definition_options(
                lifetime=lifetime,
                autowire_mode=autowire_mode,
                lenient_constructor_resolution=lenient_constructor_resolution,
                primary=primary,
            ),
        )
        return self.register(definition)

    def add_factory_method(
        self,
        name: str,
        factory_method: str,
        *,
        factory_class: type[Any] | None = None,
        factory_component: str | None = None,
        args: Sequence[Any] = (),
        named_args: Mapping[str, Any] | None = None,
        lifetime: Lifetime | None = None,
        autowire_mode: AutowireMode | None = None,
        lenient_constructor_resolution: bool | None = None,
        primary: bool = False,
    ) -> ComponentDefinition:
        """Register a component produced by a factory method.

        Pass ``factory_class`` for a static or class method, or
        ``factory_component`` for an instance method of another component.

        Args:
            name: Component name.
            factory_method: Name of the factory method.
            factory_class: Class declaring a static factory method.
            factory_component: Name of the component whose method builds this one.
            args: Declared values for the leading parameters, by index.
            named_args: Declared values matched to parameters by name.
            lifetime: Lifetime of the component.
            autowire_mode: Whether unbound parameters are looked up by type.
            lenient_constructor_resolution: Rank candidates leniently.
            primary: Prefer this component when several match a lookup by type.

        """
        if (factory_class is None) == (factory_component is None):
            msg = "add_factory_method() requires exactly one of 'factory_class' or 'factory_component'"
            raise DIBindConfigurationError(msg, component_name=name)
        definition = ComponentDefinition(
            name=name,
            component_type=factory_class,
            factory_component=factory_component,
            factory_method=factory_method,
            constructor_arguments=self._declared_arguments(args, named_args),
            **self._definition_options(
                lifetime=lifetime,
                autowire_mode=autowire_mode,
                lenient_constructor_resolution=lenient_constructor_resolution,
                primary=primary,
            ),
        )
        return self.register(definition)

    def add_instance(
        self,
        instance: Any,
        *,
        name: str | None = None,
        primary: bool = False,
    ) -> ComponentDefinition:
        """Register a pre-built instance as a singleton component.

        Args:
            instance: Instance returned for the name and matched by its class.
            name: Component name. Defaults to the class name with a lowercase first letter.
            primary: Prefer this component when several match a lookup by type.

        """
        component_name = name or default_component_name(type(instance))
        definition = ComponentDefinition(
            name=component_name,
            component_type=type(instance),
            lifetime=Lifetime.SINGLETON,
            primary=primary,
        )
        with self._registration_lock:
            self.register(definition)
            self._singletons[component_name] = instance
        return definition

    def _definition_options(
        self,
        *,
        lifetime: Lifetime | None,
        autowire_mode: AutowireMode | None,
        lenient_constructor_resolution: bool | None,
        primary: bool,
    ) -> dict[str, Any]:
        return {
            "lifetime": lifetime or self._default_lifetime,
            "autowire_mode": autowire_mode or self._default_autowire_mode,
            "lenient_constructor_resolution": (
                self._lenient_constructor_resolution
                if lenient_constructor_resolution is None
                else lenient_constructor_resolution
            ),
            "non_public_access_allowed": self._non_public_access_allowed,
            "primary": primary,
        }

    def _declared_arguments(
        self,
        args: Sequence[Any],
        named_args: Mapping[str, Any] | None,
    ) -> ConstructorArguments:
        arguments = ConstructorArguments()
        for index, value in enumerate(args):
            arguments.add_indexed(index, value)
        for parameter_name, value in (named_args or {}).items():
            arguments.add_generic(value, name=parameter_name)
        return arguments

    # endregion Registration Methods

    # region Resolution Methods
    @overload
    def get(self, key: type[T], *explicit_args: Any) -> T: ...

    @overload
    def get(self, key: str, *explicit_args: Any) -> Any: ...

    def get(self, key: Any, *explicit_args: Any) -> Any:
        """Return the component registered under a name, or the unique one of a type.

        Explicit arguments select a constructor or factory method with exactly
        that many parameters and always create a new instance, which is not
        cached even for singletons.

        Args:
            key: Component name or type.
            *explicit_args: Arguments passed to the executable without conversion.

        Raises:
            DIBindComponentNotRegisteredError: If no component has the name.
            DIBindNoSuchDependencyError: If no component matches the type.
            DIBindNoUniqueDependencyError: If several components match the type.

        """
        name = key if isinstance(key, str) else self._unique_name_for_type(key)
        context = ResolutionContext()
        if explicit_args:
            return self._create(name, self.get_definition(name), explicit_args, context)
        return self.get_component(name, context=context)

    def contains(self, name: str) -> bool:
        with self._registration_lock:
            return name in self._definitions

    def component_names(self) -> list[str]:
        with self._registration_lock:
            return list(self._definitions)

    def get_definition(self, name: str) -> ComponentDefinition:
        """Return the definition registered under ``name``.

        Args:
            name: Component name.

        """
        with self._registration_lock:
            definition = self._definitions.get(name)
        if definition is None:
            raise DIBindComponentNotRegisteredError(name)
        return definition

    def component_type(self, name: str) -> type[Any] | None:
        """Return the class of the component registered under ``name`` without creating it.

        Singletons that already exist report their actual class. Factory-method
        components report their factory method's return annotation when it is a
        class, otherwise ``None``.

        Args:
            name: Component name.

        """
        with self._registration_lock:
            definition = self._definitions.get(name)
            singleton = self._singletons.get(name, _UNRESOLVED)
        if singleton is not _UNRESOLVED:
            return type(singleton)
        if definition is None:
            return None
        if not definition.uses_factory_method:
            return definition.component_type

        factory_method = definition.factory_method_to_introspect
        if factory_method is None:
            try:
                factory_method = self.resolver.resolve_factory_method(definition)
            except DIBindConfigurationError as error:
                logger.debug("Cannot predict type of component '%s': %s", name, error)
                return None
        if factory_method is None:
            return None
        return runtime_class_of(factory_method.return_type)

    def get_component(self, name: str, *, context: ResolutionContext) -> Any:
        """Return the component registered under ``name``, creating it if needed.

        Args:
            name: Component name.
            context: Resolution context of the current request.

        """
        definition = self.get_definition(name)
        if definition.lifetime is not Lifetime.SINGLETON:
            return self._create(name, definition, None, context)

        with self._registration_lock:
            instance = self._singletons.get(name, _UNRESOLVED)
        if instance is not _UNRESOLVED:
            return instance

        # Shared by every singleton; a cycle across threads raises instead of blocking.
        with context.creating(name), self._singleton_creation_lock:
            with self._registration_lock:
                instance = self._singletons.get(name, _UNRESOLVED)
            if instance is not _UNRESOLVED:
                return instance
            instance = self._instantiate(name, definition, None, context)
            with self._registration_lock:
                if self._definitions.get(name) is definition:
                    self._singletons[name] = instance
        return instance

    def _create(
        self,
        name: str,
        definition: ComponentDefinition,
        explicit_args: Sequence[Any] | None,
        context: ResolutionContext,
    ) -> Any:
        with context.creating(name):
            return self._instantiate(name, definition, explicit_args, context)

    def _instantiate(
        self,
        name: str,
        definition: ComponentDefinition,
        explicit_args: Sequence[Any] | None,
        context: ResolutionContext,
    ) -> Any:
        logger.debug("Creating instance of %s", definition.describe())
        if definition.uses_factory_method:
            instance, _ = self.resolver.instantiate_using_factory_method(
                name,
                definition,
                explicit_args,
                context=context,
            )
        else:
            instance, _ = self.resolver.autowire_constructor(
                name,
                definition,
                None,
                explicit_args,
                context=context,
            )
        return instance

    # endregion Resolution Methods

    # region Lookup by type
    def resolve_dependency(
        self,
        injection_point: InjectionPoint,
        *,
        requesting_name: str,
        autowired_names: list[str] | None,
        context: ResolutionContext,
    ) -> Any:
        """Return the value for ``injection_point`` looked up by its annotation.

        ``Annotated[T, Qualifier("name")]`` selects a component by name.
        Collection annotations collect every matching component. Otherwise
        exactly one component must match, after preferring a primary component
        and then the component named like the parameter.

        Args:
            injection_point: Parameter being resolved.
            requesting_name: Component being created; never returned for its own parameters.
            autowired_names: Receives the names of the components used, when given.
            context: Resolution context of the current request.

        """
        annotation = injection_point.annotation
        qualifier = qualifier_of(annotation)
        target = strip_annotated(annotation)
        if qualifier is not None:
            if qualifier.name == requesting_name or not self.contains(qualifier.name):
                raise DIBindNoSuchDependencyError(target, f"no component named '{qualifier.name}'")
            component_type = self.component_type(qualifier.name)
            if component_type is not None and not is_assignable_class(target, component_type):
                msg = f"component '{qualifier.name}' is of type '{component_type.__qualname__}'"
                raise DIBindNoSuchDependencyError(target, msg)
            return self._use(qualifier.name, autowired_names, context)

        if target is Any or target is object:
            raise DIBindNoSuchDependencyError(target, "lookup by type requires a concrete annotation")

        collected = self._resolve_collection(target, requesting_name, autowired_names, context)
        if collected is not _UNRESOLVED:
            return collected

        names = self._matching_names(target, exclude=requesting_name)
        if not names:
            raise DIBindNoSuchDependencyError(target)
        if len(names) > 1:
            names = self._determine_candidate(target, names, injection_point.name)
        return self._use(names[0], autowired_names, context)

    def _resolve_collection(
        self,
        target: Any,
        requesting_name: str,
        autowired_names: list[str] | None,
        context: ResolutionContext,
    ) -> Any:
        origin = get_origin(target)
        type_args = get_args(target)
        if origin in _MAPPING_ORIGINS and len(type_args) == 2 and type_args[0] is str:
            names = self._matching_names(type_args[1], exclude=requesting_name)
            if not names:
                raise DIBindNoSuchDependencyError(target)
            build_mapping = _MAPPING_ORIGINS[origin]
            return build_mapping({name: self._use(name, autowired_names, context) for name in names})
        if origin in _SEQUENCE_ORIGINS and type_args:
            if origin is tuple and not (len(type_args) == 2 and type_args[1] is Ellipsis):
                return _UNRESOLVED
            names = self._matching_names(type_args[0], exclude=requesting_name)
            if not names:
                raise DIBindNoSuchDependencyError(target)
            build_sequence = _SEQUENCE_ORIGINS[origin]
            return build_sequence([self._use(name, autowired_names, context) for name in names])
        return _UNRESOLVED

    def _matching_names(self, target: Any, *, exclude: str) -> list[str]:
        with self._registration_lock:
            names = list(self._definitions)
        matching: list[str] = []
        for name in names:
            if name == exclude:
                continue
            component_type = self.component_type(name)
            if component_type is not None and is_assignable_class(target, component_type):
                matching.append(name)
        return matching

    def _determine_candidate(self, target: Any, names: list[str], parameter_name: str) -> list[str]:
        primary_names = [name for name in names if self.get_definition(name).primary]
        if len(primary_names) > 1:
            raise DIBindNoUniqueDependencyError(target, primary_names)
        if primary_names:
            return primary_names
        if parameter_name in names:
            return [parameter_name]
        raise DIBindNoUniqueDependencyError(target, names)

    def _use(self, name: str, autowired_names: list[str] | None, context: ResolutionContext) -> Any:
        value = self.get_component(name, context=context)
        if autowired_names is not None:
            autowired_names.append(name)
        return value

    def _unique_name_for_type(self, component_type: Any) -> str:
        names = self._matching_names(component_type, exclude="")
        if not names:
            raise DIBindNoSuchDependencyError(component_type)
        if len(names) > 1:
            primary_names = [name for name in names if self.get_definition(name).primary]
            if len(primary_names) != 1:
                raise DIBindNoUniqueDependencyError(component_type, primary_names or names)
            return primary_names[0]
        return names[0]

    # endregion Lookup by type

    # region Value resolution
    def resolve_value(
        self,
        value: Any,
        *,
        component_name: str,
        definition: ComponentDefinition,
        context: ResolutionContext,
    ) -> Any:
        """Resolve references and expressions inside a declared value.

        ``Reference`` values become the referenced component, ``Expression``
        values are evaluated with this factory, and lists, tuples, sets and
        dictionaries are resolved element by element. Other values are
        returned unchanged.

        Args:
            value: Declared value.
            component_name: Name of the component whose argument is resolved.
            definition: Definition of that component.
            context: Resolution context of the current request.

        """
        if isinstance(value, Reference):
            return self.get_component(value.name, context=context)
        if isinstance(value, Expression):
            return value.evaluate(self)
        resolve = self._element_resolver(component_name, definition, context)
        if isinstance(value, dict):
            return {resolve(key): resolve(item) for key, item in value.items()}
        if isinstance(value, list):
            return [resolve(item) for item in value]
        if type(value) is tuple:
            return tuple(resolve(item) for item in value)
        if isinstance(value, (set, frozenset)):
            return type(value)(resolve(item) for item in value)
        return value

    def _element_resolver(
        self,
        component_name: str,
        definition: ComponentDefinition,
        context: ResolutionContext,
    ) -> Callable[[Any], Any]:
        def resolve(item: Any) -> Any:
            return self.resolve_value(
                item,
                component_name=component_name,
                definition=definition,
                context=context,
            )

        return resolve

    # endregion Value resolution


def default_component_name(component_type: type[Any]) -> str:
    """Return the class name with its first letter lowercased.

    Args:
        component_type: Component class.

    """
    class_name = component_type.__name__
    return class_name[:1].lower() + class_name[1:]
