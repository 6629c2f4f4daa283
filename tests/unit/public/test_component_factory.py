from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

import pytest

from dibind import (
    ComponentDefinition,
    ComponentFactory,
    DIBindCircularDependencyError,
    DIBindComponentNotRegisteredError,
    DIBindConfigurationError,
    DIBindNoSuchDependencyError,
    DIBindNoUniqueDependencyError,
    DIBindUnsatisfiedDependencyError,
    Expression,
    Lifetime,
    Qualifier,
    Reference,
)


class Database:
    def __init__(self, url: str) -> None:
        self.url = url


class Repository:
    def __init__(self, database: Database) -> None:
        self.database = database


class ReplicaReporter:
    def __init__(self, db: Annotated[Database, Qualifier("replica")]) -> None:
        self.db = db


class Plugin:
    pass


class AuditPlugin(Plugin):
    pass


class MetricsPlugin(Plugin):
    pass


class PluginHost:
    def __init__(self, plugins: Sequence[Plugin], registry: dict[str, Plugin]) -> None:
        self.plugins = plugins
        self.registry = registry


class Chicken:
    def __init__(self, egg: Egg) -> None:
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken) -> None:
        self.chicken = chicken


class Settings:
    def __init__(self, options: dict[str, object], hosts: list[str]) -> None:
        self.options = options
        self.hosts = hosts


class SelfAware:
    def __init__(self, other: SelfAware) -> None:
        self.other = other


def test_get_by_name_and_by_type_return_same_singleton(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"])

    assert factory.get("database") is factory.get(Database)
    assert factory.get(Database).url == "sqlite://"


def test_transient_components_are_created_on_every_request(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"], lifetime=Lifetime.TRANSIENT)

    assert factory.get(Database) is not factory.get(Database)


def test_default_lifetime_applies_to_new_registrations(transient_factory: ComponentFactory) -> None:
    definition = transient_factory.add_component(Database, args=["sqlite://"])

    assert definition.lifetime is Lifetime.TRANSIENT


def test_explicit_arguments_create_uncached_instances_of_singletons(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"])
    singleton = factory.get(Database)

    other = factory.get(Database, "postgres://")

    assert other is not singleton
    assert other.url == "postgres://"
    assert factory.get(Database) is singleton


def test_unknown_names_are_reported(factory: ComponentFactory) -> None:
    with pytest.raises(DIBindComponentNotRegisteredError, match="No component named 'missing'"):
        factory.get("missing")


def test_unknown_types_are_reported(factory: ComponentFactory) -> None:
    with pytest.raises(DIBindNoSuchDependencyError, match="No qualifying component of type 'Database'"):
        factory.get(Database)


def test_instances_are_registered_as_singletons(factory: ComponentFactory) -> None:
    database = Database("memory://")

    definition = factory.add_instance(database)
    factory.add_component(Repository)

    assert definition.name == "database"
    assert factory.get(Repository).database is database


def test_primary_component_wins_lookup_by_type(factory: ComponentFactory) -> None:
    factory.add_component(Database, name="main", args=["main://"], primary=True)
    factory.add_component(Database, name="replica", args=["replica://"])
    factory.add_component(Repository)

    assert factory.get(Repository).database.url == "main://"
    assert factory.get(Database) is factory.get("main")


def test_two_primary_components_are_ambiguous(factory: ComponentFactory) -> None:
    factory.add_component(Database, name="main", args=["main://"], primary=True)
    factory.add_component(Database, name="other", args=["other://"], primary=True)
    factory.add_component(Repository)

    with pytest.raises(DIBindNoUniqueDependencyError) as exc_info:
        factory.get(Repository)

    assert exc_info.value.candidate_names == ("main", "other")


def test_parameter_name_selects_among_several_matches(factory: ComponentFactory) -> None:
    factory.add_component(Database, name="database", args=["named://"])
    factory.add_component(Database, name="replica", args=["replica://"])
    factory.add_component(Repository)

    assert factory.get(Repository).database.url == "named://"


def test_qualifier_selects_component_by_name(factory: ComponentFactory) -> None:
    factory.add_component(Database, name="main", args=["main://"])
    factory.add_component(Database, name="replica", args=["replica://"])
    factory.add_component(ReplicaReporter)

    assert factory.get(ReplicaReporter).db.url == "replica://"


def test_qualifier_naming_missing_component_is_unsatisfied(factory: ComponentFactory) -> None:
    factory.add_component(Database, name="main", args=["main://"])
    factory.add_component(ReplicaReporter)

    with pytest.raises(DIBindUnsatisfiedDependencyError, match="no component named 'replica'"):
        factory.get(ReplicaReporter)


def test_collections_gather_every_matching_component(factory: ComponentFactory) -> None:
    factory.add_component(AuditPlugin)
    factory.add_component(MetricsPlugin)
    factory.add_component(PluginHost)

    host = factory.get(PluginHost)

    assert [type(plugin) for plugin in host.plugins] == [AuditPlugin, MetricsPlugin]
    assert set(host.registry) == {"auditPlugin", "metricsPlugin"}


def test_component_is_never_injected_into_itself(factory: ComponentFactory) -> None:
    factory.add_component(SelfAware)

    with pytest.raises(DIBindUnsatisfiedDependencyError, match="No qualifying component of type 'SelfAware'"):
        factory.get(SelfAware)


def test_circular_dependencies_are_detected(factory: ComponentFactory) -> None:
    factory.add_component(Chicken)
    factory.add_component(Egg)

    with pytest.raises(DIBindUnsatisfiedDependencyError) as exc_info:
        factory.get(Chicken)

    causes = []
    error: BaseException | None = exc_info.value
    while error is not None:
        causes.append(error)
        error = error.__cause__
    circular = [cause for cause in causes if isinstance(cause, DIBindCircularDependencyError)]
    assert circular
    assert circular[0].chain == ("chicken", "egg", "chicken")


def test_declared_containers_are_resolved_element_wise(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"])
    factory.add_component(
        Settings,
        args=[
            {"db": Reference("database"), "retries": Expression(lambda _: 3)},
            ["a", Expression(lambda f: f.get(Database).url)],
        ],
    )

    settings = factory.get(Settings)

    assert settings.options == {"db": factory.get(Database), "retries": 3}
    assert settings.hosts == ["a", "sqlite://"]


def test_expressions_receive_the_factory(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=[Expression(lambda f: f"components:{len(f.component_names())}")])

    assert factory.get(Database).url == "components:1"


def test_component_type_predicts_without_creating(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"])

    assert factory.component_type("database") is Database
    assert factory.component_type("missing") is None
    assert not factory._singletons


def test_contains_and_component_names(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["sqlite://"])
    factory.add_component(Repository, name="repo")

    assert factory.contains("repo")
    assert not factory.contains("missing")
    assert factory.component_names() == ["database", "repo"]


def test_replacing_definition_drops_singleton(factory: ComponentFactory) -> None:
    factory.add_component(Database, args=["first://"])
    first = factory.get(Database)

    factory.add_component(Database, args=["second://"])

    assert factory.get(Database) is not first
    assert factory.get(Database).url == "second://"


def test_add_component_requires_a_class(factory: ComponentFactory) -> None:
    with pytest.raises(DIBindConfigurationError, match="expects a class"):
        factory.add_component("database")  # type: ignore[arg-type]


def test_add_factory_method_requires_one_factory_source(factory: ComponentFactory) -> None:
    with pytest.raises(DIBindConfigurationError, match="exactly one of"):
        factory.add_factory_method("client", "build")


def test_definition_names_are_required() -> None:
    with pytest.raises(DIBindConfigurationError, match="non-empty name"):
        ComponentDefinition(name="")


def test_factory_component_requires_method_name() -> None:
    with pytest.raises(DIBindConfigurationError, match="requires a factory method name"):
        ComponentDefinition(name="client", factory_component="builder")
