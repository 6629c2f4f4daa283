from __future__ import annotations

import pytest

from dibind import (
    ComponentFactory,
    DIBindCircularDependencyError,
    DIBindInjectionPointUnavailableError,
    ExecutableRegistry,
    InjectionPoint,
    Lifetime,
    ResolutionContext,
)


class Logger:
    def __init__(self, point: InjectionPoint) -> None:
        self.point = point


class OrderService:
    def __init__(self, logger: Logger) -> None:
        self.logger = logger


class BillingService:
    def __init__(self, audit_log: Logger) -> None:
        self.audit_log = audit_log


def _point(index: int = 0) -> InjectionPoint:
    (executable,) = ExecutableRegistry().constructors_of(OrderService)
    return InjectionPoint(executable=executable, index=index)


@pytest.fixture()
def logging_factory() -> ComponentFactory:
    factory = ComponentFactory()
    factory.add_component(Logger, lifetime=Lifetime.TRANSIENT)
    factory.add_component(OrderService)
    factory.add_component(BillingService)
    return factory


def test_component_receives_the_injection_point_that_requested_it(logging_factory: ComponentFactory) -> None:
    orders = logging_factory.get(OrderService)
    billing = logging_factory.get(BillingService)

    assert orders.logger.point.executable.declaring_type is OrderService
    assert orders.logger.point.name == "logger"
    assert billing.audit_log.point.executable.declaring_type is BillingService
    assert billing.audit_log.point.name == "audit_log"


def test_injection_point_is_resolved_again_from_cached_plan(logging_factory: ComponentFactory) -> None:
    logging_factory.get(OrderService)

    billing = logging_factory.get(BillingService)

    assert billing.audit_log.point.name == "audit_log"


def test_requesting_injection_point_outside_lookup_fails(logging_factory: ComponentFactory) -> None:
    with pytest.raises(DIBindInjectionPointUnavailableError, match="No current injection point"):
        logging_factory.get(Logger)


def test_context_restores_previous_injection_point() -> None:
    context = ResolutionContext()
    outer, inner = _point(), _point()

    with context.injection_point(outer):
        with context.injection_point(inner):
            assert context.current_injection_point is inner
        assert context.current_injection_point is outer

    assert context.current_injection_point is None


def test_context_restores_injection_point_after_failure() -> None:
    context = ResolutionContext()

    with pytest.raises(RuntimeError), context.injection_point(_point()):
        msg = "lookup failed"
        raise RuntimeError(msg)

    assert context.current_injection_point is None


def test_engine_restores_injection_point_after_lookup(logging_factory: ComponentFactory) -> None:
    context = ResolutionContext()
    definition = logging_factory.get_definition("orderService")

    logging_factory.resolver.autowire_constructor("orderService", definition, context=context)

    assert context.current_injection_point is None
    assert context.creation_stack == ()


def test_creation_stack_detects_cycles() -> None:
    context = ResolutionContext()

    with context.creating("a"), context.creating("b"):
        assert context.creation_stack == ("a", "b")
        with pytest.raises(DIBindCircularDependencyError) as exc_info, context.creating("a"):
            pass

    assert exc_info.value.chain == ("a", "b", "a")
    assert context.creation_stack == ()


def test_injection_point_describes_its_parameter() -> None:
    point = _point()

    assert point.describe() == "parameter 0 ('logger') of constructor OrderService(Logger)"
    assert point.annotation is Logger
