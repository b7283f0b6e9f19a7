"""
Parametrized tests using the resolution decision matrix.

Test Strategy:
- Default: pairwise scenarios through both the resolver and the lifecycle
- CI: every valid scenario with `pytest -m full_matrix`
"""

import pytest

from featuregate import FeatureGatedLifecycle, FeatureNotSupported, LifecycleState, TestIdentity
from featuregate.features import override_map
from featuregate.resolver import collect_requirements, resolve_requirements

from tests.doubles import RecordingProvider

from .builders import declaration_for_scenario, graph_type_for, requirement_for
from .matrix import (
    Duplication,
    Expected,
    Override,
    Scenario,
    Source,
    all_scenarios,
    pairwise_scenarios,
    scenarios_for,
)


# =============================================================================
# Test helpers
# =============================================================================


def resolve_scenario(scenario: Scenario) -> bool:
    """Resolve the scenario's declaration against its graph; True if the test would run."""
    declaration = declaration_for_scenario(scenario)
    graph = graph_type_for(scenario)()
    requirements = collect_requirements(declaration)
    assert requirements.count(requirement_for(scenario)) == 1, f"Duplicate requirement: {scenario}"
    resolution = resolve_requirements(requirements, graph.features(), override_map(graph))
    return resolution.passed


def run_scenario(scenario: Scenario) -> None:
    """Drive the full lifecycle and check the verdict and teardown."""
    provider = RecordingProvider(graph_type=graph_type_for(scenario))
    lifecycle = FeatureGatedLifecycle(provider)
    identity = TestIdentity(str(scenario))

    if scenario.should_run:
        context = lifecycle.before_test(identity, declaration_for_scenario(scenario))
        assert context.state == LifecycleState.READY
        if scenario.source == Source.FIXTURE:
            assert "load" in provider.calls
        lifecycle.after_test(context)
    else:
        with pytest.raises(FeatureNotSupported):
            lifecycle.before_test(identity, declaration_for_scenario(scenario))
        assert "load" not in provider.calls

    assert provider.calls.count("clear") == 1, f"Teardown count wrong: {scenario}"


_pairwise = list(pairwise_scenarios())


# =============================================================================
# Matrix sanity tests
# =============================================================================


class TestMatrixSanity:
    """Tests that the matrix itself is well-formed."""

    def test_has_valid_scenarios(self):
        assert len(list(all_scenarios())) > 0

    def test_pairwise_is_smaller_than_full(self):
        assert len(_pairwise) < len(list(all_scenarios()))

    def test_all_scenarios_are_valid(self):
        for scenario in all_scenarios():
            assert scenario.is_valid(), f"Invalid scenario generated: {scenario}"

    def test_fixture_scenarios_expect_support(self):
        for scenario in scenarios_for(source=Source.FIXTURE):
            assert scenario.expected == Expected.SUPPORTED

    def test_direct_scenarios_not_duplicated(self):
        for scenario in scenarios_for(source=Source.DIRECT):
            assert scenario.duplication == Duplication.ONCE

    def test_scenario_string_is_unique(self):
        strings = [str(s) for s in all_scenarios()]
        assert len(strings) == len(set(strings))

    def test_both_verdicts_present(self):
        verdicts = {s.should_run for s in all_scenarios()}
        assert verdicts == {True, False}


# =============================================================================
# Pairwise tests (default)
# =============================================================================


class TestPairwiseResolution:
    @pytest.mark.parametrize("scenario", _pairwise, ids=str)
    def test_resolver_verdict(self, scenario: Scenario):
        assert resolve_scenario(scenario) == scenario.should_run

    @pytest.mark.parametrize("scenario", _pairwise, ids=str)
    def test_lifecycle_verdict(self, scenario: Scenario):
        run_scenario(scenario)


# =============================================================================
# Full matrix tests (CI only)
# =============================================================================


@pytest.mark.full_matrix
class TestFullMatrix:
    """
    Every valid scenario.

    Run with: pytest -m full_matrix
    """

    @pytest.mark.parametrize("scenario", list(all_scenarios()), ids=str)
    def test_resolver_verdict(self, scenario: Scenario):
        assert resolve_scenario(scenario) == scenario.should_run

    @pytest.mark.parametrize("scenario", list(all_scenarios()), ids=str)
    def test_lifecycle_verdict(self, scenario: Scenario):
        run_scenario(scenario)


# =============================================================================
# Focused checks
# =============================================================================


class TestOverridePrecedence:
    @pytest.mark.parametrize("scenario", list(scenarios_for(override=Override.FORCED_OFF)), ids=str)
    def test_forced_off_ignores_live_report(self, scenario: Scenario):
        """Whatever the instance says, a FORCED_OFF override decides."""
        assert resolve_scenario(scenario) == (scenario.expected == Expected.UNSUPPORTED)

    @pytest.mark.parametrize("scenario", list(scenarios_for(override=Override.FORCED_ON)), ids=str)
    def test_forced_on_ignores_live_report(self, scenario: Scenario):
        assert resolve_scenario(scenario) == (scenario.expected == Expected.SUPPORTED)
