"""Declarative requirement values: requirements, bundles and overrides.

All values here are immutable and declared once per process.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from featuregate.exceptions import FeatureDeclarationError
from featuregate.features.catalog import (
    EdgeFeatures,
    EdgePropertyFeatures,
    FeatureSet,
    GraphFeatures,
    VertexFeatures,
    VertexPropertyFeatures,
)

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class FeatureRequirement:
    """A test needs ``feature`` of ``feature_class`` to be ``supported``.

    Equal triples collapse into one requirement when collected into a set.
    """

    feature_class: type[FeatureSet]
    feature: str
    supported: bool = True

    @property
    def key(self) -> tuple[type[FeatureSet], str]:
        """The ``(feature_class, feature)`` pair, used to find overrides."""
        return (self.feature_class, self.feature)

    def __str__(self) -> str:
        return f"{self.feature_class.__name__}.{self.feature}={self.supported}"


@dataclass(frozen=True)
class FeatureRequirementSet:
    """A named bundle of requirements, expanded on demand.

    Example:
        >>> str(SIMPLE.features_required()[0])
        'EdgeFeatures.AddEdges=True'
    """

    name: str
    factory: Callable[[], Iterable[FeatureRequirement]] = field(compare=False, repr=False)

    def features_required(self) -> tuple[FeatureRequirement, ...]:
        return tuple(self.factory())


@dataclass(frozen=True)
class FeatureOverride:
    """Forces the value a backend reports for one capability.

    Attached to a backend class with :func:`feature_override`. The override
    wins over whatever the live graph says about the same pair.
    """

    feature_class: type[FeatureSet]
    feature: str
    supported: bool
    reason: str = ""

    @property
    def key(self) -> tuple[type[FeatureSet], str]:
        return (self.feature_class, self.feature)


OVERRIDES_ATTR = "__feature_overrides__"


def feature_override(
    feature_class: type[FeatureSet],
    feature: str,
    supported: bool,
    *,
    reason: str = "",
) -> Callable[[T], T]:
    """Class decorator declaring a :class:`FeatureOverride` on a graph backend.

    Decorators stack; the topmost declaration for a pair takes precedence.

    Raises:
        FeatureDeclarationError: If ``feature`` is not a declared capability
            name of ``feature_class``.

    Example:
        >>> @feature_override(VertexFeatures, "MetaProperties", False, reason="not wired up")
        ... class MyGraph(NetworkXGraph):
        ...     pass
    """
    if not feature_class.has_feature(feature):
        raise FeatureDeclarationError(feature_class, feature)
    override = FeatureOverride(feature_class, feature, supported, reason)

    def decorator(cls: T) -> T:
        own = cls.__dict__.get(OVERRIDES_ATTR, ())
        setattr(cls, OVERRIDES_ATTR, (override, *own))
        return cls

    return decorator


def overrides_for(graph_type: type) -> tuple[FeatureOverride, ...]:
    """All overrides declared on ``graph_type`` and its bases, subclass first."""
    collected: list[FeatureOverride] = []
    for klass in graph_type.__mro__:
        collected.extend(klass.__dict__.get(OVERRIDES_ATTR, ()))
    return tuple(collected)


def override_map(graph: Any) -> dict[tuple[type[FeatureSet], str], FeatureOverride]:
    """Overrides for a live graph keyed by ``(feature_class, feature)``.

    The first override found for a pair wins.
    """
    mapping: dict[tuple[type[FeatureSet], str], FeatureOverride] = {}
    for override in overrides_for(type(graph)):
        mapping.setdefault(override.key, override)
    return mapping


# =============================================================================
# Bundled requirement sets
# =============================================================================


def _simple() -> list[FeatureRequirement]:
    return [
        FeatureRequirement(EdgeFeatures, EdgeFeatures.FEATURE_ADD_EDGES),
        FeatureRequirement(EdgeFeatures, EdgeFeatures.FEATURE_ADD_PROPERTY),
        FeatureRequirement(EdgePropertyFeatures, EdgePropertyFeatures.FEATURE_STRING_VALUES),
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_VERTICES),
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_PROPERTY),
        FeatureRequirement(VertexPropertyFeatures, VertexPropertyFeatures.FEATURE_STRING_VALUES),
    ]


def _vertices_only() -> list[FeatureRequirement]:
    return [
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_VERTICES),
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_PROPERTY),
        FeatureRequirement(VertexPropertyFeatures, VertexPropertyFeatures.FEATURE_STRING_VALUES),
    ]


def _transactional() -> list[FeatureRequirement]:
    return [FeatureRequirement(GraphFeatures, GraphFeatures.FEATURE_TRANSACTIONS)]


SIMPLE = FeatureRequirementSet("SIMPLE", _simple)
VERTICES_ONLY = FeatureRequirementSet("VERTICES_ONLY", _vertices_only)
TRANSACTIONAL = FeatureRequirementSet("TRANSACTIONAL", _transactional)

REQUIREMENT_SETS: dict[str, FeatureRequirementSet] = {
    s.name: s for s in (SIMPLE, VERTICES_ONLY, TRANSACTIONAL)
}


def requirement_set_named(name: str) -> FeatureRequirementSet:
    try:
        return REQUIREMENT_SETS[name]
    except KeyError:
        known = ", ".join(sorted(REQUIREMENT_SETS))
        raise KeyError(f"Unknown requirement set '{name}'. Known sets: {known}") from None
