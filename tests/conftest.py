"""Shared pytest fixtures for dibind tests."""

import pytest

from dibind import ComponentFactory, ExecutableRegistry, Lifetime


@pytest.fixture()
def factory() -> ComponentFactory:
    """Default factory: singletons, lenient resolution, constructor autowiring."""
    return ComponentFactory()


@pytest.fixture()
def transient_factory() -> ComponentFactory:
    """Factory whose registrations default to a transient lifetime."""
    return ComponentFactory(default_lifetime=Lifetime.TRANSIENT)


@pytest.fixture()
def strict_factory() -> ComponentFactory:
    """Factory whose definitions rank candidates by strict assignability."""
    return ComponentFactory(lenient_constructor_resolution=False)


@pytest.fixture()
def registry() -> ExecutableRegistry:
    """Executable registry backed by signature introspection."""
    return ExecutableRegistry()
