"""Cached outcome of a successful constructor or factory-method resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from dibind._internal.executables import ExecutableDescriptor


@dataclass(frozen=True, slots=True)
class ConvertedArgument:
    """A value that was already converted and can be passed again as-is."""

    value: Any


@dataclass(frozen=True, slots=True)
class DeclaredArgument:
    """A declared value that must go through the value resolver again."""

    value: Any


@dataclass(frozen=True, slots=True)
class AutowiredArgument:
    """A parameter that must be looked up by type again."""


PreparedArgument: TypeAlias = ConvertedArgument | DeclaredArgument | AutowiredArgument


@dataclass(frozen=True, slots=True)
class ResolvedPlan:
    """An executable together with arguments that are safe to reuse verbatim."""

    executable: ExecutableDescriptor
    arguments: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class PreparedPlan:
    """An executable together with a per-argument template to re-resolve on each creation."""

    executable: ExecutableDescriptor
    template: tuple[PreparedArgument, ...]


CachedPlan: TypeAlias = ResolvedPlan | PreparedPlan
