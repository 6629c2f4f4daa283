from enum import Enum


class AutowireMode(str, Enum):
    """Policy for satisfying constructor parameters without declared values."""

    NO = "no"
    """Only declared argument values are bound; missing values reject the candidate."""

    CONSTRUCTOR = "constructor"
    """Missing values are looked up by parameter type."""


class Lifetime(str, Enum):
    """Defines how often a component definition is instantiated."""

    SINGLETON = "singleton"
    """A single instance is created and shared for the lifetime of the factory."""

    TRANSIENT = "transient"
    """A new instance is created every time the component is requested."""
