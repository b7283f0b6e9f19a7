"""Named sample datasets that can be loaded into a graph before a test.

Every element in a fixture carries a unique ``name`` property, which is what
the lookup helpers in :mod:`featuregate.lookup` rely on.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib.resources import files
from typing import Any

from featuregate.exceptions import FixtureNotFoundError
from featuregate.features.catalog import (
    EdgeFeatures,
    EdgePropertyFeatures,
    VertexFeatures,
    VertexPropertyFeatures,
)
from featuregate.features.requirements import FeatureRequirement


@dataclass(frozen=True)
class FixtureSpec:
    """A named dataset plus the capabilities a graph needs to hold it.

    Attributes:
        name: Registry name (e.g. "grateful-dead")
        resource: JSON file under ``featuregate/data``
        requirements: Requirements that must hold for the data to load
    """

    name: str
    resource: str
    requirements: tuple[FeatureRequirement, ...] = ()

    def features_required(self) -> tuple[FeatureRequirement, ...]:
        return self.requirements


@dataclass(frozen=True)
class FixtureData:
    """Parsed contents of a fixture."""

    vertices: list[dict[str, Any]] = field(default_factory=list)
    edges: list[dict[str, Any]] = field(default_factory=list)


def _element_requirements(
    edge_value_feature: str,
    *vertex_value_features: str,
) -> tuple[FeatureRequirement, ...]:
    requirements = [
        FeatureRequirement(EdgeFeatures, EdgeFeatures.FEATURE_ADD_EDGES),
        FeatureRequirement(EdgeFeatures, EdgeFeatures.FEATURE_ADD_PROPERTY),
        FeatureRequirement(EdgePropertyFeatures, edge_value_feature),
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_VERTICES),
        FeatureRequirement(VertexFeatures, VertexFeatures.FEATURE_ADD_PROPERTY),
    ]
    requirements.extend(FeatureRequirement(VertexPropertyFeatures, f) for f in vertex_value_features)
    return tuple(requirements)


CLASSIC = FixtureSpec(
    "classic",
    "classic.json",
    _element_requirements(
        EdgePropertyFeatures.FEATURE_FLOAT_VALUES,
        VertexPropertyFeatures.FEATURE_STRING_VALUES,
        VertexPropertyFeatures.FEATURE_INTEGER_VALUES,
    ),
)

MODERN = FixtureSpec(
    "modern",
    "modern.json",
    _element_requirements(
        EdgePropertyFeatures.FEATURE_DOUBLE_VALUES,
        VertexPropertyFeatures.FEATURE_STRING_VALUES,
        VertexPropertyFeatures.FEATURE_INTEGER_VALUES,
    ),
)

GRATEFUL = FixtureSpec(
    "grateful-dead",
    "grateful-dead.json",
    _element_requirements(
        EdgePropertyFeatures.FEATURE_INTEGER_VALUES,
        VertexPropertyFeatures.FEATURE_STRING_VALUES,
        VertexPropertyFeatures.FEATURE_INTEGER_VALUES,
    ),
)

FIXTURES: dict[str, FixtureSpec] = {f.name: f for f in (CLASSIC, MODERN, GRATEFUL)}


def fixture_for(name: str | FixtureSpec) -> FixtureSpec:
    """Resolve a fixture by registry name. Specs pass through unchanged."""
    if isinstance(name, FixtureSpec):
        return name
    try:
        return FIXTURES[name]
    except KeyError:
        raise FixtureNotFoundError(name, sorted(FIXTURES)) from None


def read_fixture(spec: FixtureSpec) -> FixtureData:
    """Load and parse the packaged JSON for ``spec``."""
    resource = files("featuregate").joinpath("data").joinpath(spec.resource)
    data = json.loads(resource.read_text(encoding="utf-8"))
    return FixtureData(vertices=data.get("vertices", []), edges=data.get("edges", []))
