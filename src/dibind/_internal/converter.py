from __future__ import annotations

import dataclasses
import threading
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, PydanticUserError, TypeAdapter, ValidationError
from typing_extensions import is_typeddict

from dibind._internal.markers import strip_annotated
from dibind._internal.type_checks import is_assignable_value, is_runtime_class
from dibind.exceptions import DIBindTypeMismatchError

if TYPE_CHECKING:
    from dibind._internal.injection_point import InjectionPoint

_ADAPTER_CONFIG = ConfigDict(arbitrary_types_allowed=True)


class PydanticTypeConverter:
    """Convert declared argument values with ``pydantic.TypeAdapter`` in lax mode.

    Values that are already instances of a runtime class are returned
    unchanged. ``typing.Any`` and ``object`` accept every value. Adapters are
    built once per annotation.
    """

    def __init__(self) -> None:
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self._lock = threading.Lock()

    def convert(
        self,
        value: Any,
        target_type: Any,
        injection_point: InjectionPoint | None = None,
    ) -> Any:
        """Convert ``value`` to ``target_type`` if necessary.

        Args:
            value: Value to convert.
            target_type: Parameter annotation to convert to.
            injection_point: Parameter the value is converted for, if any.

        """
        annotation = strip_annotated(target_type)
        if annotation is Any or annotation is object:
            return value
        if is_runtime_class(annotation) and is_assignable_value(annotation, value):
            return value
        try:
            adapter = self._adapter(target_type)
        except PydanticUserError as error:
            raise DIBindTypeMismatchError(value, target_type, str(error)) from error
        try:
            return adapter.validate_python(value)
        except ValidationError as error:
            reason = str(error)
            if injection_point is not None:
                reason = f"{reason} (for {injection_point.describe()})"
            raise DIBindTypeMismatchError(value, target_type, reason) from error

    def _adapter(self, target_type: Any) -> TypeAdapter[Any]:
        try:
            with self._lock:
                adapter = self._adapters.get(target_type)
        except TypeError:
            return self._build_adapter(target_type)
        if adapter is None:
            adapter = self._build_adapter(target_type)
            with self._lock:
                self._adapters[target_type] = adapter
        return adapter

    def _build_adapter(self, target_type: Any) -> TypeAdapter[Any]:
        annotation = strip_annotated(target_type)
        if _has_own_config(annotation):
            return TypeAdapter(target_type)
        return TypeAdapter(target_type, config=_ADAPTER_CONFIG)


def _has_own_config(annotation: Any) -> bool:
    if not is_runtime_class(annotation):
        return False
    return (
        issubclass(annotation, BaseModel)
        or dataclasses.is_dataclass(annotation)
        or is_typeddict(annotation)
    )
