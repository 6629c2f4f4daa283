from dibind._internal.arguments import ArgumentValue, ConstructorArguments
from dibind._internal.definitions import ComponentDefinition
from dibind._internal.executables import (
    ExecutableDescriptor,
    ExecutableKind,
    ExecutableRegistry,
    ParameterDescriptor,
    constructor,
)
from dibind._internal.factory import ComponentFactory
from dibind._internal.injection_point import InjectionPoint, ResolutionContext
from dibind._internal.markers import Expression, Qualifier, Reference
from dibind._internal.policies import AutowireMode, Lifetime
from dibind._internal.resolver import ConstructorResolver
from dibind.exceptions import (
    DIBindAmbiguousExecutableError,
    DIBindCircularDependencyError,
    DIBindComponentNotRegisteredError,
    DIBindConfigurationError,
    DIBindCreationError,
    DIBindError,
    DIBindInjectionPointUnavailableError,
    DIBindInstantiationError,
    DIBindNoMatchingExecutableError,
    DIBindNoSuchDependencyError,
    DIBindNoUniqueDependencyError,
    DIBindTypeMismatchError,
    DIBindUnsatisfiedDependencyError,
)

__all__ = [
    "ArgumentValue",
    "AutowireMode",
    "ComponentDefinition",
    "ComponentFactory",
    "ConstructorArguments",
    "ConstructorResolver",
    "DIBindAmbiguousExecutableError",
    "DIBindCircularDependencyError",
    "DIBindComponentNotRegisteredError",
    "DIBindConfigurationError",
    "DIBindCreationError",
    "DIBindError",
    "DIBindInjectionPointUnavailableError",
    "DIBindInstantiationError",
    "DIBindNoMatchingExecutableError",
    "DIBindNoSuchDependencyError",
    "DIBindNoUniqueDependencyError",
    "DIBindTypeMismatchError",
    "DIBindUnsatisfiedDependencyError",
    "ExecutableDescriptor",
    "ExecutableKind",
    "ExecutableRegistry",
    "Expression",
    "InjectionPoint",
    "Lifetime",
    "ParameterDescriptor",
    "Qualifier",
    "Reference",
    "ResolutionContext",
    "constructor",
]
