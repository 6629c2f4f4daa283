from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from dibind._internal.executables import ExecutableDescriptor


class SignatureParameterNameDiscoverer:
    """Discover parameter names from the descriptor's recorded signature."""

    def parameter_names(self, executable: ExecutableDescriptor) -> Sequence[str] | None:
        return executable.parameter_names


class SimpleInstantiationStrategy:
    """Invoke executables directly through their recorded invoker."""

    def instantiate(
        self,
        executable: ExecutableDescriptor,
        arguments: Sequence[Any],
        factory_instance: Any = None,
    ) -> Any:
        args, kwargs = executable.split_arguments(arguments)
        if executable.is_static:
            return executable.invoker(*args, **kwargs)
        return executable.invoker(factory_instance, *args, **kwargs)
