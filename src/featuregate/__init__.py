"""featuregate - feature-gated test lifecycle for pluggable graph backends."""

from featuregate.backends import NetworkXGraph
from featuregate.declarations import (
    TestDeclaration,
    TestIdentity,
    declaration_for,
    load_graph_with,
    requires,
    requires_set,
)
from featuregate.exceptions import (
    ElementNotFoundError,
    FeatureDeclarationError,
    FeatureNotSupported,
    FixtureNotFoundError,
    ProviderNotConfiguredError,
    ProvisioningError,
    TeardownError,
    UnsupportedOperationError,
)
from featuregate.features import (
    SIMPLE,
    TRANSACTIONAL,
    VERTICES_ONLY,
    EdgeFeatures,
    EdgePropertyFeatures,
    FeatureOverride,
    FeatureRequirement,
    FeatureRequirementSet,
    Features,
    GraphFeatures,
    VariableFeatures,
    VertexFeatures,
    VertexPropertyFeatures,
    feature_override,
)
from featuregate.fixtures import CLASSIC, GRATEFUL, MODERN, FixtureSpec
from featuregate.lifecycle import FeatureGatedLifecycle, LifecycleState, TestContext
from featuregate.lookup import edge_for, edge_id, vertex_for, vertex_id
from featuregate.provider import GraphManager, GraphProvider, NetworkXGraphProvider
from featuregate.resolver import Resolution, RequirementOutcome
from featuregate.strategy import GraphStrategy, ReadOnlyStrategy, SequenceStrategy
from featuregate.transactions import try_commit, try_rollback

__all__ = [
    # Lifecycle
    "FeatureGatedLifecycle",
    "LifecycleState",
    "TestContext",
    "TestDeclaration",
    "TestIdentity",
    "declaration_for",
    "requires",
    "requires_set",
    "load_graph_with",
    # Requirement model
    "FeatureRequirement",
    "FeatureRequirementSet",
    "FeatureOverride",
    "feature_override",
    "SIMPLE",
    "VERTICES_ONLY",
    "TRANSACTIONAL",
    "Resolution",
    "RequirementOutcome",
    # Capability classes
    "Features",
    "GraphFeatures",
    "VariableFeatures",
    "VertexFeatures",
    "VertexPropertyFeatures",
    "EdgeFeatures",
    "EdgePropertyFeatures",
    # Fixtures
    "FixtureSpec",
    "CLASSIC",
    "MODERN",
    "GRATEFUL",
    # Providers & backends
    "GraphProvider",
    "GraphManager",
    "NetworkXGraphProvider",
    "NetworkXGraph",
    "GraphStrategy",
    "ReadOnlyStrategy",
    "SequenceStrategy",
    # Helpers
    "try_commit",
    "try_rollback",
    "vertex_for",
    "vertex_id",
    "edge_for",
    "edge_id",
    # Errors
    "FeatureDeclarationError",
    "FeatureNotSupported",
    "ProvisioningError",
    "TeardownError",
    "ElementNotFoundError",
    "UnsupportedOperationError",
    "FixtureNotFoundError",
    "ProviderNotConfiguredError",
]
