from collections.abc import Callable
from typing import Annotated, Any, NamedTuple, get_args, get_origin

_ANNOTATED_MARKER_MIN_ARGS = 2


class Qualifier(NamedTuple):
    """Select one component by name when several match a parameter type.

    Attach ``Qualifier`` metadata to ``typing.Annotated`` on a constructor or
    factory-method parameter.

    Examples:
        .. code-block:: python

            from typing import Annotated


            class Reporter:
                def __init__(self, db: Annotated[Database, Qualifier("replica")]) -> None:
                    self.db = db

    """

    name: str


class Reference(NamedTuple):
    """Declared argument value that points at another component by name.

    References are resolved every time a declared argument table is built, so
    transient components receive fresh instances.
    """

    name: str


class Expression(NamedTuple):
    """Declared argument value computed on each resolution.

    The callable receives the owning ``ComponentFactory`` and its result is
    converted to the parameter type like any other declared value.
    """

    function: Callable[[Any], Any]

    def evaluate(self, factory: Any) -> Any:
        return self.function(factory)


def strip_annotated(annotation: Any) -> Any:
    """Return ``T`` for ``Annotated[T, ...]`` and the annotation itself otherwise.

    Args:
        annotation: Annotation value to normalize.

    """
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def qualifier_of(annotation: Any) -> Qualifier | None:
    """Return the ``Qualifier`` attached to an ``Annotated`` annotation, if any.

    Args:
        annotation: Annotation value to inspect.

    """
    if get_origin(annotation) is not Annotated:
        return None
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None  # pragma: no cover - Annotated requires at least 2 args
    for metadata in annotation_args[1:]:
        if isinstance(metadata, Qualifier):
            return metadata
    return None
