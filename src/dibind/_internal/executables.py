from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from inspect import Parameter
from typing import Any, TypeVar, get_type_hints, overload

from typing_extensions import get_overloads

from dibind._internal.type_checks import annotation_name, is_runtime_class
from dibind.exceptions import DIBindConfigurationError

F = TypeVar("F", bound=Callable[..., Any])

CONSTRUCTOR_MARKER = "__dibind_constructor__"
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_SKIPPED_PARAMETER_KINDS = {Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD}
_NONE_TYPE = type(None)


class ExecutableKind(Enum):
    """Distinguish constructors from factory methods."""

    CONSTRUCTOR = "constructor"
    FACTORY_METHOD = "factory method"


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one bindable parameter of an executable.

    An empty ``name`` means the parameter name is not known.
    """

    name: str
    annotation: Any = Any
    keyword_only: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ExecutableDescriptor:
    """Describe a constructor or factory method that can produce a component.

    Descriptors are produced once per type by ``ExecutableRegistry`` (either
    from explicit registrations or from signature introspection) and carry
    everything the resolution engine needs: parameter annotations and names,
    static/instance mode, visibility and the callable used for invocation.
    """

    declaring_type: type[Any]
    """The class that declares the constructor or factory method."""
    name: str
    """``__init__`` for primary constructors, otherwise the attribute name."""
    kind: ExecutableKind
    parameters: tuple[ParameterDescriptor, ...] = ()
    declared_parameter_names: tuple[str, ...] | None = None
    """Names declared explicitly next to the executable, checked against the parameter count."""
    is_static: bool = True
    """False only for factory methods invoked on a factory component instance."""
    is_public: bool = True
    return_type: Any = Any
    """Return annotation of factory methods; ``None`` marks a method that returns nothing."""
    invoker: Callable[..., Any] = field(compare=False, repr=False)
    """Callable invoked with the bound arguments (and the factory instance for instance methods)."""

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return tuple(parameter.annotation for parameter in self.parameters)

    @property
    def parameter_names(self) -> tuple[str, ...] | None:
        """Discovered parameter names, or ``None`` when any name is unknown."""
        names = tuple(parameter.name for parameter in self.parameters)
        if any(not name for name in names):
            return None
        return names

    @property
    def returns_nothing(self) -> bool:
        return self.return_type is None or self.return_type is _NONE_TYPE

    def has_same_parameter_types(self, other: ExecutableDescriptor) -> bool:
        """Check whether both executables declare identical parameter annotations.

        Args:
            other: Executable to compare against.

        """
        return self.parameter_types == other.parameter_types

    def split_arguments(self, arguments: Sequence[Any]) -> tuple[list[Any], dict[str, Any]]:
        """Split a bound argument list into positional and keyword-only arguments.

        Args:
            arguments: One value per parameter, in declaration order.

        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter, value in zip(self.parameters, arguments, strict=True):
            if parameter.keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return args, kwargs

    def describe(self) -> str:
        parameters = ", ".join(annotation_name(annotation) for annotation in self.parameter_types)
        owner = self.declaring_type.__qualname__
        if self.kind is ExecutableKind.CONSTRUCTOR and self.name == "__init__":
            return f"{owner}({parameters})"
        return f"{owner}.{self.name}({parameters})"

    def __str__(self) -> str:
        return self.describe()


@overload
def constructor(func: F) -> F: ...


@overload
def constructor(
    *,
    parameter_names: Sequence[str] | None = None,
) -> Callable[[F], F]: ...


def constructor(
    func: F | None = None,
    *,
    parameter_names: Sequence[str] | None = None,
) -> F | Callable[[F], F]:
    """Mark a class-level callable as an alternate constructor of its class.

    Apply it underneath ``@classmethod`` or ``@staticmethod``. Marked callables
    become constructor candidates next to ``__init__`` (and its overloads).
    ``parameter_names`` declares parameter names explicitly; they are matched
    against named declared arguments.

    Examples:
        .. code-block:: python

            class Widget:
                def __init__(self, engine: Engine, size: int) -> None: ...

                @classmethod
                @constructor
                def small(cls, engine: Engine) -> Widget:
                    return cls(engine, 1)

    """

    def decorator(func: F) -> F:
        names = tuple(parameter_names) if parameter_names is not None else ()
        setattr(func, CONSTRUCTOR_MARKER, names or True)
        return func

    if func is not None:
        return decorator(func)
    return decorator


def is_public_name(name: str) -> bool:
    """Return true unless ``name`` is a single-underscore private name.

    Args:
        name: Attribute name of the executable.

    """
    return not name.startswith("_") or (name.startswith("__") and name.endswith("__"))


class ExecutableIntrospector:
    """Build executable descriptors from Python signatures and type hints."""

    def constructors(self, cls: type[Any]) -> list[ExecutableDescriptor]:
        """Describe every constructor of ``cls``.

        ``__init__`` overloads each become one candidate. Without overloads the
        class signature itself is used. Alternate constructors marked with
        ``@constructor`` are appended in declaration order.

        Args:
            cls: Class whose constructors are described.

        """
        if not is_runtime_class(cls):
            msg = f"Cannot enumerate constructors of non-class {cls!r}"
            raise DIBindConfigurationError(msg)

        descriptors: list[ExecutableDescriptor] = []
        init = getattr(cls, "__init__", None)
        init_overloads = get_overloads(init) if inspect.isfunction(init) else []
        for variant in init_overloads:
            descriptors.append(
                self._describe(
                    owner=cls,
                    name="__init__",
                    kind=ExecutableKind.CONSTRUCTOR,
                    function=variant,
                    skip_first_parameter=True,
                    invoker=cls,
                    is_static=True,
                ),
            )
        if not init_overloads:
            descriptors.append(self._describe_class_signature(cls))

        for attribute_name, attribute in vars(cls).items():
            function = getattr(attribute, "__func__", attribute)
            marker = getattr(function, CONSTRUCTOR_MARKER, None)
            if marker is None or not callable(function):
                continue
            declared_names = marker if isinstance(marker, tuple) else None
            variants = get_overloads(function) or [function]
            for variant in variants:
                descriptors.append(
                    self._describe(
                        owner=cls,
                        name=attribute_name,
                        kind=ExecutableKind.CONSTRUCTOR,
                        function=getattr(variant, "__func__", variant),
                        skip_first_parameter=isinstance(attribute, classmethod),
                        invoker=getattr(cls, attribute_name),
                        is_static=True,
                        declared_parameter_names=declared_names,
                    ),
                )
        return descriptors

    def factory_methods(self, factory_type: type[Any], name: str) -> list[ExecutableDescriptor]:
        """Describe every variant of the factory method ``name`` on ``factory_type``.

        Args:
            factory_type: Class declaring the factory method.
            name: Factory method name.

        """
        attribute = inspect.getattr_static(factory_type, name, None)
        if attribute is None:
            return []
        is_static = isinstance(attribute, (staticmethod, classmethod))
        function = attribute.__func__ if is_static else attribute
        if not inspect.isfunction(function):
            return []

        invoker: Callable[..., Any] = getattr(factory_type, name) if is_static else function
        variants = get_overloads(function) or [function]
        return [
            self._describe(
                owner=factory_type,
                name=name,
                kind=ExecutableKind.FACTORY_METHOD,
                function=getattr(variant, "__func__", variant),
                skip_first_parameter=not isinstance(attribute, staticmethod),
                invoker=invoker,
                is_static=is_static,
            )
            for variant in variants
        ]

    def _describe_class_signature(self, cls: type[Any]) -> ExecutableDescriptor:
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as error:
            msg = f"Resolution of declared constructors on class '{cls.__qualname__}' failed: {error}"
            raise DIBindConfigurationError(msg) from error

        hints: dict[str, Any] = {}
        for member_name in ("__new__", "__init__"):
            member = getattr(cls, member_name, None)
            if inspect.isfunction(member) or inspect.ismethod(member):
                hints.update(self._type_hints(member, owner=cls))
        return ExecutableDescriptor(
            declaring_type=cls,
            name="__init__",
            kind=ExecutableKind.CONSTRUCTOR,
            parameters=self._parameters(signature.parameters.values(), hints),
            invoker=cls,
        )

    def _describe(
        self,
        *,
        owner: type[Any],
        name: str,
        kind: ExecutableKind,
        function: Callable[..., Any],
        skip_first_parameter: bool,
        invoker: Callable[..., Any],
        is_static: bool,
        declared_parameter_names: tuple[str, ...] | None = None,
    ) -> ExecutableDescriptor:
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError) as error:
            msg = f"Resolution of '{name}' on class '{owner.__qualname__}' failed: {error}"
            raise DIBindConfigurationError(msg) from error

        parameters = list(signature.parameters.values())
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            parameters = parameters[1:]
        hints = self._type_hints(function, owner=owner)
        return ExecutableDescriptor(
            declaring_type=owner,
            name=name,
            kind=kind,
            parameters=self._parameters(parameters, hints),
            declared_parameter_names=declared_parameter_names,
            is_static=is_static,
            is_public=is_public_name(name),
            return_type=self._return_type(signature, hints),
            invoker=invoker,
        )

    def _parameters(
        self,
        parameters: Any,
        hints: dict[str, Any],
    ) -> tuple[ParameterDescriptor, ...]:
        described: list[ParameterDescriptor] = []
        for parameter in parameters:
            if parameter.kind in _SKIPPED_PARAMETER_KINDS:
                continue
            annotation = hints.get(parameter.name, parameter.annotation)
            if annotation is Parameter.empty or isinstance(annotation, str):
                annotation = Any
            described.append(
                ParameterDescriptor(
                    name=parameter.name,
                    annotation=annotation,
                    keyword_only=parameter.kind is Parameter.KEYWORD_ONLY,
                ),
            )
        return tuple(described)

    def _return_type(self, signature: inspect.Signature, hints: dict[str, Any]) -> Any:
        if "return" in hints:
            return hints["return"]
        if signature.return_annotation is inspect.Signature.empty:
            return Any
        return signature.return_annotation

    def _type_hints(self, function: Callable[..., Any], *, owner: type[Any]) -> dict[str, Any]:
        try:
            return get_type_hints(function, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            function_name = getattr(function, "__qualname__", repr(function))
            msg = (
                f"Unable to resolve type annotations of '{function_name}' declared on "
                f"'{owner.__qualname__}': {error}"
            )
            raise DIBindConfigurationError(msg) from error


class ExecutableRegistry:
    """Hold the executable descriptors available for each class.

    Explicit registrations take precedence over introspection for the class
    (or factory method name) they describe. Introspected descriptors are
    computed once and reused, so repeated enumeration is a dictionary lookup.
    """

    def __init__(self, introspector: ExecutableIntrospector | None = None) -> None:
        self._introspector = introspector or ExecutableIntrospector()
        self._registered_constructors: dict[type[Any], list[ExecutableDescriptor]] = {}
        self._registered_factory_methods: dict[tuple[type[Any], str], list[ExecutableDescriptor]] = {}
        self._introspected_constructors: dict[type[Any], tuple[ExecutableDescriptor, ...]] = {}
        self._introspected_factory_methods: dict[
            tuple[type[Any], str],
            tuple[ExecutableDescriptor, ...],
        ] = {}
        self._lock = threading.Lock()

    def register_constructor(
        self,
        cls: type[Any],
        parameter_types: Sequence[Any] = (),
        *,
        parameter_names: Sequence[str] | None = None,
        public: bool = True,
        invoker: Callable[..., Any] | None = None,
    ) -> ExecutableDescriptor:
        """Declare one constructor signature of ``cls``.

        The constructor is invoked as ``invoker(*arguments)``, which defaults to
        the class itself, so a flexible ``__init__`` can expose several
        signatures.

        Args:
            cls: Class the constructor builds.
            parameter_types: Parameter annotations in positional order.
            parameter_names: Optional parameter names, one per parameter type.
            public: Whether the constructor counts as public for visibility checks.
            invoker: Callable invoked with the bound arguments.

        """
        descriptor = ExecutableDescriptor(
            declaring_type=cls,
            name="__init__",
            kind=ExecutableKind.CONSTRUCTOR,
            parameters=self._parameters(parameter_types, parameter_names),
            declared_parameter_names=tuple(parameter_names) if parameter_names else None,
            is_public=public,
            invoker=invoker or cls,
        )
        with self._lock:
            self._registered_constructors.setdefault(cls, []).append(descriptor)
        return descriptor

    def register_factory_method(
        self,
        factory_type: type[Any],
        name: str,
        parameter_types: Sequence[Any] = (),
        *,
        return_type: Any = Any,
        static: bool = True,
        parameter_names: Sequence[str] | None = None,
        public: bool | None = None,
        invoker: Callable[..., Any] | None = None,
    ) -> ExecutableDescriptor:
        """Declare one factory method signature on ``factory_type``.

        Static factory methods are invoked as ``invoker(*arguments)``; instance
        factory methods as ``invoker(factory_instance, *arguments)``. The
        invoker defaults to the attribute ``name`` of ``factory_type``.

        Args:
            factory_type: Class declaring the factory method.
            name: Factory method name.
            parameter_types: Parameter annotations in positional order.
            return_type: Return annotation; ``None`` marks a method returning nothing.
            static: Whether the method is called without a factory instance.
            parameter_names: Optional parameter names, one per parameter type.
            public: Visibility override; derived from ``name`` when omitted.
            invoker: Callable invoked with the bound arguments.

        """
        if invoker is None:
            invoker = getattr(factory_type, name)
        descriptor = ExecutableDescriptor(
            declaring_type=factory_type,
            name=name,
            kind=ExecutableKind.FACTORY_METHOD,
            parameters=self._parameters(parameter_types, parameter_names),
            declared_parameter_names=tuple(parameter_names) if parameter_names else None,
            is_static=static,
            is_public=is_public_name(name) if public is None else public,
            return_type=return_type,
            invoker=invoker,
        )
        with self._lock:
            self._registered_factory_methods.setdefault((factory_type, name), []).append(descriptor)
        return descriptor

    def constructors_of(
        self,
        cls: type[Any],
        *,
        include_non_public: bool = True,
    ) -> list[ExecutableDescriptor]:
        """Return the constructor candidates of ``cls``.

        Args:
            cls: Class whose constructors are requested.
            include_non_public: Keep constructors with private names.

        """
        with self._lock:
            registered = self._registered_constructors.get(cls)
            descriptors = tuple(registered) if registered else self._introspected_constructors.get(cls)
        if descriptors is None:
            descriptors = tuple(self._introspector.constructors(cls))
            with self._lock:
                descriptors = self._introspected_constructors.setdefault(cls, descriptors)
        return [d for d in descriptors if include_non_public or d.is_public]

    def factory_methods_of(
        self,
        factory_type: type[Any],
        name: str,
        *,
        include_non_public: bool = True,
    ) -> list[ExecutableDescriptor]:
        """Return the factory method candidates named ``name`` on ``factory_type``.

        Args:
            factory_type: Class declaring the factory method.
            name: Factory method name.
            include_non_public: Keep methods with private names.

        """
        key = (factory_type, name)
        with self._lock:
            registered = self._registered_factory_methods.get(key)
            descriptors = tuple(registered) if registered else self._introspected_factory_methods.get(key)
        if descriptors is None:
            descriptors = tuple(self._introspector.factory_methods(factory_type, name))
            with self._lock:
                descriptors = self._introspected_factory_methods.setdefault(key, descriptors)
        return [d for d in descriptors if include_non_public or d.is_public]

    def _parameters(
        self,
        parameter_types: Sequence[Any],
        parameter_names: Sequence[str] | None,
    ) -> tuple[ParameterDescriptor, ...]:
        if parameter_names is not None and len(parameter_names) != len(parameter_types):
            msg = (
                f"Declared {len(parameter_names)} parameter names for "
                f"{len(parameter_types)} parameter types"
            )
            raise DIBindConfigurationError(msg)
        names = list(parameter_names) if parameter_names is not None else [""] * len(parameter_types)
        return tuple(
            ParameterDescriptor(name=name, annotation=annotation)
            for name, annotation in zip(names, parameter_types, strict=True)
        )
