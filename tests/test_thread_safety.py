"""Tests for thread safety of ComponentFactory and the resolution cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from dibind import (
    ComponentFactory,
    DIBindCircularDependencyError,
    DIBindUnsatisfiedDependencyError,
    ExecutableRegistry,
    Lifetime,
)
from dibind._internal.plan import PreparedPlan


class ServiceA:
    pass


class ServiceB:
    def __init__(self, a: ServiceA) -> None:
        self.a = a


class Configured:
    def __init__(self, a: ServiceA, retries: int) -> None:
        self.a = a
        self.retries = retries


class SlowInit:
    instance_count = 0
    count_lock = threading.Lock()

    def __init__(self) -> None:
        time.sleep(0.01)
        with SlowInit.count_lock:
            SlowInit.instance_count += 1


class CycA:
    def __init__(self, b: "CycB") -> None:
        self.b = b


class CycB:
    def __init__(self, a: CycA) -> None:
        self.a = a


class SlowLookupFactory(ComponentFactory):
    def resolve_dependency(self, *args: Any, **kwargs: Any) -> Any:
        time.sleep(0.05)
        return super().resolve_dependency(*args, **kwargs)


class CountingRegistry(ExecutableRegistry):
    def __init__(self) -> None:
        super().__init__()
        self.lookups = 0
        self._lookups_lock = threading.Lock()

    def constructors_of(self, cls: type[Any], *, include_non_public: bool = True) -> list[Any]:
        with self._lookups_lock:
            self.lookups += 1
        return super().constructors_of(cls, include_non_public=include_non_public)


class TestConcurrentResolution:
    def test_concurrent_singleton_resolution_same_instance(self, factory: ComponentFactory) -> None:
        """Concurrent singleton resolution returns the same instance."""
        SlowInit.instance_count = 0
        factory.add_component(SlowInit)
        results: list[SlowInit] = []
        errors: list[Exception] = []

        def resolve_service() -> None:
            try:
                results.append(factory.get(SlowInit))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_service) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
        assert all(r is results[0] for r in results)
        assert SlowInit.instance_count == 1

    def test_concurrent_transient_resolution_different_instances(
        self,
        transient_factory: ComponentFactory,
    ) -> None:
        """Concurrent transient resolution creates different instances."""
        transient_factory.add_component(ServiceA)
        transient_factory.add_component(ServiceB)
        results: list[ServiceB] = []
        errors: list[Exception] = []

        def resolve_service() -> None:
            try:
                results.append(transient_factory.get(ServiceB))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve_service) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len({id(r) for r in results}) == 10
        assert len({id(r.a) for r in results}) == 10

    def test_cycle_requested_from_two_threads_raises_instead_of_hanging(self) -> None:
        """A singleton cycle entered from both ends at once reports the cycle."""
        factory = SlowLookupFactory()
        factory.add_component(CycA)
        factory.add_component(CycB)
        barrier = threading.Barrier(2)
        outcomes: list[BaseException] = []

        def resolve(name: str) -> None:
            barrier.wait()
            try:
                factory.get(name)
            except DIBindUnsatisfiedDependencyError as e:
                outcomes.append(e)

        threads = [threading.Thread(target=resolve, args=(name,), daemon=True) for name in ("cycA", "cycB")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert not any(t.is_alive() for t in threads)
        assert len(outcomes) == 2
        for outcome in outcomes:
            causes = []
            error: BaseException | None = outcome
            while error is not None:
                causes.append(error)
                error = error.__cause__
            assert any(isinstance(cause, DIBindCircularDependencyError) for cause in causes)


class TestConcurrentPlanCaching:
    def test_every_thread_sees_a_complete_plan(self) -> None:
        """Concurrent first creations agree on the cached executable."""
        factory = ComponentFactory(default_lifetime=Lifetime.TRANSIENT)
        factory.add_component(ServiceA)
        definition = factory.add_component(Configured, named_args={"retries": "3"})
        barrier = threading.Barrier(16)

        def create() -> Any:
            barrier.wait()
            _, executable = factory.resolver.autowire_constructor("configured", definition)
            plan = definition.cached_plan()
            assert plan is not None
            assert len(plan.template) == executable.parameter_count  # type: ignore[union-attr]
            return executable

        with ThreadPoolExecutor(max_workers=16) as executor:
            futures = [executor.submit(create) for _ in range(16)]
            executables = [f.result() for f in as_completed(futures)]

        plan = definition.cached_plan()
        assert isinstance(plan, PreparedPlan)
        assert all(executable == plan.executable for executable in executables)

    def test_cached_plan_stops_enumeration_under_load(self) -> None:
        """Once a plan is cached no thread enumerates constructors again."""
        registry = CountingRegistry()
        factory = ComponentFactory(default_lifetime=Lifetime.TRANSIENT, executable_registry=registry)
        factory.add_component(ServiceA)
        factory.add_component(ServiceB)
        factory.get(ServiceB)
        lookups_after_warmup = registry.lookups

        with ThreadPoolExecutor(max_workers=20) as executor:
            futures = [executor.submit(factory.get, ServiceB) for _ in range(100)]
            for f in as_completed(futures):
                f.result()

        assert registry.lookups == lookups_after_warmup


class TestConcurrentRegistration:
    def test_concurrent_registration_and_resolution(self) -> None:
        """Concurrent registration and resolution do not deadlock."""
        factory = ComponentFactory()
        results: list[object] = []
        errors: list[Exception] = []

        def register_and_resolve(index: int) -> None:
            try:
                factory.add_component(ServiceA, name=f"service{index}")
                results.append(factory.get(f"service{index}"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=register_and_resolve, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
        assert len(factory.component_names()) == 10
