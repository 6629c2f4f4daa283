from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from dibind._internal.arguments import ConstructorArguments
from dibind._internal.executables import ExecutableDescriptor, ExecutableKind
from dibind._internal.plan import CachedPlan
from dibind._internal.policies import AutowireMode, Lifetime
from dibind.exceptions import DIBindConfigurationError


@dataclass(kw_only=True, eq=False)
class ComponentDefinition:
    """Describe how one named component is created.

    A definition names either a class to construct (``component_type``) or a
    factory method: static when only ``component_type`` and
    ``factory_method`` are set, on another component instance when
    ``factory_component`` is set as well.

    The resolution engine stores its outcome on the definition as a
    ``CachedPlan``. The plan is read and written under a lock owned by the
    definition, and replacing the plan is a single assignment, so concurrent
    creations observe either no plan or a complete one.
    """

    name: str
    component_type: type[Any] | None = None
    """Class to construct, or the class declaring a static factory method."""
    factory_component: str | None = None
    """Name of the component whose instance method builds this component."""
    factory_method: str | None = None
    constructor_arguments: ConstructorArguments = field(default_factory=ConstructorArguments)
    autowire_mode: AutowireMode = AutowireMode.CONSTRUCTOR
    lifetime: Lifetime = Lifetime.SINGLETON
    lenient_constructor_resolution: bool = True
    """Rank candidates by type-difference weight instead of strict assignability."""
    non_public_access_allowed: bool = True
    """Consider constructors and factory methods with private names."""
    primary: bool = False
    """Win lookup by type when several components match."""
    resource_description: str | None = None
    is_factory_method_unique: bool = False
    """Skip enumeration and use ``factory_method_to_introspect`` directly."""

    factory_method_to_introspect: ExecutableDescriptor | None = field(default=None, init=False)
    _plan: CachedPlan | None = field(default=None, init=False, repr=False)
    _plan_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Component definitions require a non-empty name"
            raise DIBindConfigurationError(msg)
        if self.factory_component is not None and self.factory_method is None:
            msg = "A factory component requires a factory method name"
            raise DIBindConfigurationError(msg, component_name=self.name)

    @property
    def uses_factory_method(self) -> bool:
        return self.factory_method is not None

    def has_constructor_arguments(self) -> bool:
        return not self.constructor_arguments.is_empty()

    def is_factory_method(self, executable: ExecutableDescriptor) -> bool:
        """Check whether ``executable`` is this definition's factory method.

        Args:
            executable: Candidate executable.

        """
        return executable.name == self.factory_method

    def cached_plan(self) -> CachedPlan | None:
        with self._plan_lock:
            return self._plan

    def store_plan(self, plan: CachedPlan) -> None:
        """Replace the cached resolution plan.

        Factory-method plans also record the method as
        ``factory_method_to_introspect``.

        Args:
            plan: Plan produced by a successful resolution without explicit arguments.

        """
        with self._plan_lock:
            self._plan = plan
            if plan.executable.kind is ExecutableKind.FACTORY_METHOD:
                self.factory_method_to_introspect = plan.executable

    def record_factory_method(self, executable: ExecutableDescriptor | None) -> None:
        """Record the factory method predicted for this definition.

        Args:
            executable: Unique factory method, or ``None`` when overloads differ.

        """
        with self._plan_lock:
            self.factory_method_to_introspect = executable

    def clear_plan(self) -> None:
        with self._plan_lock:
            self._plan = None
            self.factory_method_to_introspect = None

    def describe(self) -> str:
        if self.factory_method is None:
            target = self.component_type.__qualname__ if self.component_type else "<no class>"
            return f"component '{self.name}' of type {target}"
        owner = self.factory_component or (
            self.component_type.__qualname__ if self.component_type else "<no class>"
        )
        return f"component '{self.name}' via factory method {owner}.{self.factory_method}"
