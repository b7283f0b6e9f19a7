"""pytest integration: markers, fixtures and the before/after hooks.

Registered through the ``pytest11`` entry point, so installing featuregate
is enough. A test asks for the ``graph`` fixture and declares what it needs:

    @pytest.mark.feature_requirement(VertexFeatures, "AddVertices")
    @pytest.mark.load_graph_with("grateful-dead")
    def test_garcia(graph):
        assert vertex_id(graph, "Garcia") is not None

Override ``graph_strategy`` in a conftest to run tests under a strategy,
or ``graph_provider`` to plug in a different backend.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from featuregate.config import load_config
from featuregate.declarations import TestDeclaration, TestIdentity, declaration_for
from featuregate.exceptions import FeatureNotSupported
from featuregate.features.requirements import FeatureRequirement, requirement_set_named
from featuregate.fixtures import fixture_for
from featuregate.lifecycle import FeatureGatedLifecycle, TestContext
from featuregate.provider import GraphManager, GraphProvider, load_provider

MARKERS = (
    "feature_requirement(feature_class, feature, supported=True): skip unless the graph matches the capability",
    "feature_requirement_set(requirement_set): skip unless the graph meets every requirement in the bundle",
    "load_graph_with(fixture): load a named dataset into the graph before the test",
)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("featuregate")
    group.addoption(
        "--featuregate-provider",
        default=None,
        help="Graph provider as 'module:attribute' (overrides [tool.featuregate] provider)",
    )


def pytest_configure(config: pytest.Config) -> None:
    for marker in MARKERS:
        config.addinivalue_line("markers", marker)


def declaration_from_item(item: pytest.Item) -> TestDeclaration:
    """Build a test's declaration from its markers and decorator attachments."""
    func = getattr(item, "function", None)
    declaration = declaration_for(func, item.name) if func is not None else TestDeclaration(name=item.name)

    requirements = []
    for mark in item.iter_markers("feature_requirement"):
        requirements.append(FeatureRequirement(*mark.args, **mark.kwargs))

    requirement_sets = []
    for mark in item.iter_markers("feature_requirement_set"):
        for value in mark.args:
            requirement_sets.append(requirement_set_named(value) if isinstance(value, str) else value)

    fixture = None
    fixture_mark = item.get_closest_marker("load_graph_with")
    if fixture_mark is not None:
        fixture = fixture_for(fixture_mark.args[0])

    return declaration.merged(
        TestDeclaration(
            name=item.name,
            requirements=tuple(requirements),
            requirement_sets=tuple(requirement_sets),
            fixture=fixture,
        )
    )


@pytest.fixture(scope="session")
def graph_provider(pytestconfig: pytest.Config) -> Iterator[GraphProvider]:
    """The provider for this session, installed in :class:`GraphManager`.

    Chosen in order: ``--featuregate-provider``, a ``[tool.featuregate]``
    section, a provider already installed with
    :meth:`GraphManager.set_provider` (for example from a conftest
    ``pytest_configure``), then the default NetworkX provider.
    """
    target = pytestconfig.getoption("featuregate_provider")
    config = load_config(pytestconfig.rootpath)
    installed = GraphManager.installed()
    if target:
        provider = load_provider(target)
    elif config.source is None and installed is not None:
        provider = installed
    else:
        provider = config.build_provider()
    previous = GraphManager.set_provider(provider)
    yield provider
    GraphManager.set_provider(previous)


@pytest.fixture(scope="session")
def featuregate_lifecycle(graph_provider: GraphProvider, pytestconfig: pytest.Config) -> FeatureGatedLifecycle:
    config = load_config(pytestconfig.rootpath)
    return FeatureGatedLifecycle(
        graph_provider,
        revalidate_fixture_features=config.revalidate_fixture_features,
    )


@pytest.fixture
def graph_strategy() -> Any:
    """Strategy the test graph is opened with. None by default."""
    return None


@pytest.fixture
def gremlin_context(
    request: pytest.FixtureRequest,
    featuregate_lifecycle: FeatureGatedLifecycle,
    graph_strategy: Any,
) -> Iterator[TestContext]:
    """A READY :class:`TestContext`; torn down after the test whatever its outcome."""
    identity = TestIdentity(
        request.node.name,
        request.cls.__name__ if request.cls is not None else None,
    )
    declaration = declaration_from_item(request.node)
    try:
        context = featuregate_lifecycle.before_test(identity, declaration, graph_strategy)
    except FeatureNotSupported as e:
        pytest.skip(e.reason)
    yield context
    featuregate_lifecycle.after_test(context)


@pytest.fixture
def graph(gremlin_context: TestContext) -> Any:
    """The opened graph for this test."""
    return gremlin_context.graph
