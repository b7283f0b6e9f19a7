"""Tests for the pytest plugin: markers, the graph fixture and provider selection."""

import pytest

from featuregate import GraphFeatures, VertexFeatures, edge_id, load_graph_with, requires, vertex_id
from featuregate.features import EdgeFeatures
from featuregate.pytest_plugin import declaration_from_item

# ---------------------------------------------------------------------------
# In-suite usage: this file's own tests run through the plugin
# ---------------------------------------------------------------------------


@pytest.mark.load_graph_with("grateful-dead")
def test_graph_fixture_with_marker(graph):
    assert vertex_id(graph, "Garcia") == 5


@load_graph_with("classic")
def test_graph_fixture_with_decorator(graph):
    assert edge_id(graph, "marko", "created", "lop") == 9


@pytest.mark.feature_requirement(VertexFeatures, "MetaProperties", supported=False)
def test_expecting_missing_capability_runs(graph):
    assert not graph.features().vertex().supports_meta_properties()


def test_graph_is_fresh_per_test(graph):
    assert list(graph.vertices()) == []
    graph.add_vertex(name="leftover")


def test_graph_is_fresh_per_test_again(graph):
    assert list(graph.vertices()) == []


class TestContextFixture:
    def test_identity_includes_class(self, gremlin_context):
        assert str(gremlin_context.identity) == "TestContextFixture.test_identity_includes_class"

    @pytest.mark.parametrize("n", [1, 2])
    def test_parametrized_names(self, gremlin_context, n):
        assert gremlin_context.declaration.name == f"test_parametrized_names[{n}]"


# ---------------------------------------------------------------------------
# Isolated runs via pytester
# ---------------------------------------------------------------------------

OUTCOMES_MODULE = """
import pytest
from featuregate import GraphFeatures, VertexFeatures, requires, vertex_id


@pytest.mark.feature_requirement(VertexFeatures, "MetaProperties")
def test_needs_meta(graph):
    pass


@pytest.mark.load_graph_with("grateful-dead")
def test_garcia(graph):
    assert vertex_id(graph, "Garcia") == 5


@pytest.mark.feature_requirement(VertexFeatures, "Teleport")
def test_broken_declaration(graph):
    pass


@requires(GraphFeatures, "Transactions")
def test_needs_tx(graph):
    pass
"""


TX_MODULE = """
from featuregate import GraphFeatures, requires


@requires(GraphFeatures, "Transactions")
def test_tx(graph):
    pass
"""

TX_PROVIDER_MODULE = """
from featuregate import NetworkXGraphProvider

provider = NetworkXGraphProvider(transactions=True)
"""

INSTALLING_CONFTEST = """
from featuregate import GraphManager, NetworkXGraphProvider

_previous = []


def pytest_configure(config):
    _previous.append(GraphManager.set_provider(NetworkXGraphProvider(transactions=True)))


def pytest_unconfigure(config):
    GraphManager.set_provider(_previous.pop())
"""


class TestOutcomes:
    def test_pass_skip_error(self, pytester):
        pytester.makepyfile(test_outcomes=OUTCOMES_MODULE)
        result = pytester.runpytest("--strict-markers", "-rs")
        result.assert_outcomes(passed=1, skipped=2, errors=1)
        result.stdout.fnmatch_lines(["*VertexFeatures.MetaProperties expected supported=True*"])

    def test_declaration_error_message(self, pytester):
        pytester.makepyfile(test_outcomes=OUTCOMES_MODULE)
        result = pytester.runpytest("-k", "broken")
        result.stdout.fnmatch_lines(["*[[]supports_teleport[]] is not a valid feature on VertexFeatures*"])

    def test_requirement_set_marker(self, pytester):
        pytester.makepyfile(
            """
            import pytest

            @pytest.mark.feature_requirement_set("TRANSACTIONAL")
            def test_tx(graph):
                pass

            @pytest.mark.feature_requirement_set("SIMPLE")
            def test_simple(graph):
                pass
            """
        )
        result = pytester.runpytest()
        result.assert_outcomes(passed=1, skipped=1)

    def test_failing_body_still_tears_down(self, pytester):
        pytester.makepyfile(
            """
            import pytest

            opened = []

            def test_fails(graph):
                opened.append(graph)
                assert False

            def test_was_closed():
                assert opened[0].closed
            """
        )
        result = pytester.runpytest()
        result.assert_outcomes(passed=1, failed=1)


class TestProviderSelection:
    def test_command_line_provider(self, pytester):
        pytester.makepyfile(tx_provider_cli=TX_PROVIDER_MODULE)
        pytester.makepyfile(test_tx=TX_MODULE)
        result = pytester.runpytest("--featuregate-provider=tx_provider_cli:provider")
        result.assert_outcomes(passed=1)

    def test_pyproject_provider_settings(self, pytester):
        pytester.makepyprojecttoml(
            """
            [tool.pytest.ini_options]

            [tool.featuregate]
            transactions = true
            """
        )
        pytester.makepyfile(test_tx=TX_MODULE)
        result = pytester.runpytest()
        result.assert_outcomes(passed=1)

    def test_provider_installed_before_session(self, pytester):
        """A provider set on GraphManager from conftest is used when nothing else names one."""
        pytester.makeconftest(INSTALLING_CONFTEST)
        pytester.makepyfile(test_tx=TX_MODULE)
        result = pytester.runpytest()
        result.assert_outcomes(passed=1)

    def test_pyproject_section_wins_over_installed_provider(self, pytester):
        pytester.makepyprojecttoml(
            """
            [tool.pytest.ini_options]

            [tool.featuregate]
            transactions = false
            """
        )
        pytester.makeconftest(INSTALLING_CONFTEST)
        pytester.makepyfile(test_tx=TX_MODULE)
        result = pytester.runpytest()
        result.assert_outcomes(skipped=1)

    def test_strategy_fixture_override(self, pytester):
        pytester.makeconftest(
            """
            import pytest
            from featuregate import ReadOnlyStrategy

            @pytest.fixture
            def graph_strategy():
                return ReadOnlyStrategy()
            """
        )
        pytester.makepyfile(
            """
            import pytest
            from featuregate import UnsupportedOperationError, vertex_id

            @pytest.mark.load_graph_with("classic")
            def test_read_only(graph):
                assert vertex_id(graph, "marko") == 1
                with pytest.raises(UnsupportedOperationError):
                    graph.add_vertex()
            """
        )
        result = pytester.runpytest()
        result.assert_outcomes(passed=1)


class TestDeclarationFromItem:
    def test_markers_and_decorators_merge(self, pytester):
        pytester.makepyfile(
            """
            import pytest
            from featuregate import GraphFeatures, requires

            @pytest.mark.feature_requirement(GraphFeatures, "Computer", supported=False)
            @pytest.mark.load_graph_with("modern")
            @requires(GraphFeatures, "Persistence", False)
            def test_declared():
                pass
            """
        )
        items, _ = pytester.inline_genitems()
        declaration = declaration_from_item(items[0])
        assert declaration.name == "test_declared"
        assert len(declaration.requirements) == 2
        assert declaration.fixture.name == "modern"

    def test_class_marker_applies_to_methods(self, pytester):
        pytester.makepyfile(
            """
            import pytest
            from featuregate import EdgeFeatures

            @pytest.mark.feature_requirement(EdgeFeatures, "AddEdges")
            class TestEdges:
                def test_one(self):
                    pass
            """
        )
        items, _ = pytester.inline_genitems()
        (requirement,) = declaration_from_item(items[0]).requirements
        assert requirement.feature_class is EdgeFeatures
        assert requirement.feature == "AddEdges"


@requires(GraphFeatures, "Transactions")
def test_skipped_in_suite_without_transactions(graph):
    pytest.fail("default provider has no transactions")


@pytest.mark.feature_requirement(EdgeFeatures, "CustomIds")
def test_skipped_by_marker(graph):
    pytest.fail("networkx graphs do not support custom ids")
