from __future__ import annotations

import inspect
import types
from typing import Any, Literal, TypeGuard, Union, get_args, get_origin

from dibind._internal.markers import strip_annotated

_NONE_TYPE = type(None)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def union_members(annotation: Any) -> tuple[Any, ...] | None:
    """Return the members of a ``Union``/``X | Y`` annotation, or ``None``.

    Args:
        annotation: Annotation value to inspect.

    """
    annotation = strip_annotated(annotation)
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return get_args(annotation)
    return None


def runtime_class_of(annotation: Any) -> type[Any] | None:
    """Map an annotation to the runtime class used for isinstance checks.

    ``list[int]`` maps to ``list``, ``None`` maps to ``NoneType`` and
    annotations without a runtime class (``Any``, type variables, unions)
    map to ``None``.

    Args:
        annotation: Annotation value to inspect.

    """
    annotation = strip_annotated(annotation)
    if annotation is None:
        return _NONE_TYPE
    if is_runtime_class(annotation):
        return annotation
    origin = get_origin(annotation)
    if is_runtime_class(origin):
        return origin
    return None


def is_abstract_class(cls: type[Any]) -> bool:
    """Return true for ABCs with abstract members and for ``Protocol`` classes.

    Args:
        cls: Class to inspect.

    """
    return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))


def is_assignable_value(annotation: Any, value: Any) -> bool:
    """Check whether ``value`` may be passed where ``annotation`` is declared.

    Annotations that carry no runtime class accept any value, and
    non-runtime-checkable protocols accept any value as well.

    Args:
        annotation: Declared parameter annotation.
        value: Candidate argument value.

    """
    annotation = strip_annotated(annotation)
    if annotation is Any or annotation is object:
        return True
    members = union_members(annotation)
    if members is not None:
        return any(is_assignable_value(member, value) for member in members)
    if get_origin(annotation) is Literal:
        return value in get_args(annotation)
    cls = runtime_class_of(annotation)
    if cls is None:
        return True
    if value is None:
        return cls is _NONE_TYPE
    try:
        return isinstance(value, cls)
    except TypeError:
        return True


def is_assignable_class(annotation: Any, cls: type[Any]) -> bool:
    """Check whether instances of ``cls`` may be passed where ``annotation`` is declared.

    Args:
        annotation: Declared parameter or lookup annotation.
        cls: Candidate component class.

    """
    annotation = strip_annotated(annotation)
    if annotation is Any or annotation is object:
        return True
    members = union_members(annotation)
    if members is not None:
        return any(is_assignable_class(member, cls) for member in members)
    target = runtime_class_of(annotation)
    if target is None or not is_runtime_class(cls):
        return False
    try:
        return issubclass(cls, target)
    except TypeError:
        return False


def annotation_name(annotation: Any) -> str:
    """Return a short human readable name for an annotation.

    Args:
        annotation: Annotation value to describe.

    """
    annotation = strip_annotated(annotation)
    if annotation is None or annotation is _NONE_TYPE:
        return "None"
    if is_runtime_class(annotation):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


__all__ = [
    "annotation_name",
    "is_abstract_class",
    "is_assignable_class",
    "is_assignable_value",
    "is_runtime_class",
    "runtime_class_of",
    "union_members",
]
