from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from dibind._internal.executables import ExecutableDescriptor, ExecutableKind, ParameterDescriptor
from dibind.exceptions import DIBindCircularDependencyError


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """Identify the parameter of an executable that a value is resolved for.

    Components may declare a parameter annotated ``InjectionPoint`` to receive
    the injection point that triggered their creation.
    """

    executable: ExecutableDescriptor
    index: int

    @property
    def parameter(self) -> ParameterDescriptor:
        return self.executable.parameters[self.index]

    @property
    def annotation(self) -> Any:
        return self.parameter.annotation

    @property
    def name(self) -> str:
        return self.parameter.name

    def describe(self) -> str:
        kind = "constructor" if self.executable.kind is ExecutableKind.CONSTRUCTOR else "factory method"
        label = f"parameter {self.index}"
        if self.name:
            label = f"{label} ('{self.name}')"
        return f"{label} of {kind} {self.executable.describe()}"


class ResolutionContext:
    """Per-request state threaded through nested component creation.

    Holds the injection point currently being resolved and the stack of
    component names in creation. One context is created for each top-level
    request and passed down explicitly; it is not shared between threads.
    """

    def __init__(self) -> None:
        self._current_injection_point: InjectionPoint | None = None
        self._creation_stack: list[str] = []

    @property
    def current_injection_point(self) -> InjectionPoint | None:
        return self._current_injection_point

    @property
    def creation_stack(self) -> tuple[str, ...]:
        return tuple(self._creation_stack)

    @contextmanager
    def injection_point(self, injection_point: InjectionPoint | None) -> Generator[None, None, None]:
        """Set the current injection point and restore the previous one on exit.

        Args:
            injection_point: Injection point being resolved, or ``None`` to clear it.

        """
        previous = self._current_injection_point
        self._current_injection_point = injection_point
        try:
            yield
        finally:
            self._current_injection_point = previous

    @contextmanager
    def creating(self, name: str) -> Generator[None, None, None]:
        """Mark ``name`` as in creation for the duration of the block.

        Args:
            name: Component name being created.

        """
        if name in self._creation_stack:
            raise DIBindCircularDependencyError(name, [*self._creation_stack, name])
        self._creation_stack.append(name)
        try:
            yield
        finally:
            self._creation_stack.pop()
