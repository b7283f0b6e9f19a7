"""Capability classes and the declarative requirement model."""

from featuregate.features.catalog import (
    FEATURE_CLASSES,
    DataTypeFeatures,
    EdgeFeatures,
    EdgePropertyFeatures,
    ElementFeatures,
    Features,
    FeatureSet,
    GraphFeatures,
    PropertyFeatures,
    VariableFeatures,
    VertexFeatures,
    VertexPropertyFeatures,
    canonical_feature,
    feature_class_named,
    method_name,
)
from featuregate.features.requirements import (
    REQUIREMENT_SETS,
    SIMPLE,
    TRANSACTIONAL,
    VERTICES_ONLY,
    FeatureOverride,
    FeatureRequirement,
    FeatureRequirementSet,
    feature_override,
    override_map,
    overrides_for,
    requirement_set_named,
)

__all__ = [
    "FEATURE_CLASSES",
    "DataTypeFeatures",
    "EdgeFeatures",
    "EdgePropertyFeatures",
    "ElementFeatures",
    "Features",
    "FeatureSet",
    "GraphFeatures",
    "PropertyFeatures",
    "VariableFeatures",
    "VertexFeatures",
    "VertexPropertyFeatures",
    "canonical_feature",
    "feature_class_named",
    "method_name",
    "REQUIREMENT_SETS",
    "SIMPLE",
    "TRANSACTIONAL",
    "VERTICES_ONLY",
    "FeatureOverride",
    "FeatureRequirement",
    "FeatureRequirementSet",
    "feature_override",
    "override_map",
    "overrides_for",
    "requirement_set_named",
]
