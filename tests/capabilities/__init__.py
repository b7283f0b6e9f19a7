"""Decision matrix for systematic testing of requirement resolution."""

from .builders import declaration_for_scenario, graph_type_for
from .matrix import (
    Duplication,
    Expected,
    Live,
    Override,
    Scenario,
    Source,
    all_scenarios,
    scenarios_for,
)

__all__ = [
    "Duplication",
    "Expected",
    "Live",
    "Override",
    "Scenario",
    "Source",
    "all_scenarios",
    "scenarios_for",
    "declaration_for_scenario",
    "graph_type_for",
]
