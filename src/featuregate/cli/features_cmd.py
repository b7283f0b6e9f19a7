"""Feature CLI commands: features, check, fixtures."""

from __future__ import annotations

import importlib
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any

import typer

from featuregate.cli._format import format_bool, format_outcome, print_json, print_lines, print_table
from featuregate.config import load_config
from featuregate.declarations import TestIdentity, declaration_for
from featuregate.exceptions import FeatureDeclarationError, ProviderNotConfiguredError
from featuregate.features.requirements import override_map
from featuregate.fixtures import FIXTURES
from featuregate.provider import GraphProvider, load_provider
from featuregate.resolver import collect_requirements, resolve_requirements, validate_requirements

ProviderOption = Annotated[
    str | None,
    typer.Option("--provider", help="Graph provider as 'module:attribute' (default: [tool.featuregate])"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]
OutputOption = Annotated[str | None, typer.Option("--output", help="Write JSON to file")]


def _resolve_provider(target: str | None) -> GraphProvider:
    try:
        if target:
            return load_provider(target)
        return load_config().build_provider()
    except ProviderNotConfiguredError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


@contextmanager
def _scratch_graph(provider: GraphProvider, name: str) -> Iterator[Any]:
    """Open a throwaway graph and always clear it afterwards."""
    configuration = provider.standard_graph_configuration(TestIdentity(name, "featuregate-cli"))
    provider.clear_configuration(configuration)
    graph = provider.open_test_graph(configuration)
    try:
        yield graph
    finally:
        provider.clear(graph, configuration)


def _import_test(target: str) -> Any:
    """Import a test function from 'module:function' path."""
    if ":" not in target:
        print(f"Error: '{target}' must use 'module:function' format")
        raise typer.Exit(1)
    module_name, attr_name = target.rsplit(":", 1)

    try:
        if "." not in sys.path:
            sys.path.insert(0, ".")
        module = importlib.import_module(module_name)
    except ImportError as e:
        print(f"Error: Could not import module '{module_name}': {e}")
        raise typer.Exit(1) from e

    func = getattr(module, attr_name, None)
    if func is None or not callable(func):
        print(f"Error: Module '{module_name}' has no callable '{attr_name}'")
        raise typer.Exit(1)
    return func


def register_commands(app: typer.Typer) -> None:
    """Register `features`, `check` and `fixtures` as top-level commands on the app."""

    @app.command("features")
    def features_cmd(
        provider: ProviderOption = None,
        as_json: JsonOption = False,
        output: OutputOption = None,
    ):
        """Show every capability a provider's graphs report, with overrides applied."""
        graph_provider = _resolve_provider(provider)
        with _scratch_graph(graph_provider, "features") as graph:
            overrides = override_map(graph)
            records = []
            for feature_class, feature, live in graph_provider.features(graph).describe():
                override = overrides.get((feature_class, feature))
                records.append(
                    {
                        "feature_class": feature_class.__name__,
                        "feature": feature,
                        "live": live,
                        "override": override.supported if override else None,
                        "resolved": override.supported if override else live,
                    }
                )

        if as_json:
            print_json("features", {"graph": type(graph).__name__, "features": records}, output)
            return

        headers = ["Class", "Feature", "Live", "Override", "Resolved"]
        rows = [
            [
                r["feature_class"],
                r["feature"],
                format_bool(r["live"]),
                format_bool(r["override"]),
                format_bool(r["resolved"]),
            ]
            for r in records
        ]
        print(f"\n  Features of {type(graph).__name__} ({len(records)}):\n")
        print_lines(print_table(headers, rows))

    @app.command("check")
    def check_cmd(
        target: Annotated[str, typer.Argument(help="Test function as 'module:function'")],
        provider: ProviderOption = None,
        as_json: JsonOption = False,
        output: OutputOption = None,
    ):
        """Resolve one test's declared requirements against a provider.

        Exits 0 if the test would run, 1 if it would be skipped, 2 if its
        declaration is invalid.
        """
        func = _import_test(target)
        declaration = declaration_for(func)
        requirements = collect_requirements(declaration)
        try:
            validate_requirements(requirements)
        except FeatureDeclarationError as e:
            print(f"Error: {e}")
            raise typer.Exit(2) from e

        graph_provider = _resolve_provider(provider)
        with _scratch_graph(graph_provider, "check") as graph:
            resolution = resolve_requirements(requirements, graph_provider.features(graph), override_map(graph))

        if as_json:
            data = {
                "test": declaration.to_dict(),
                "runnable": resolution.passed,
                "outcomes": [
                    {
                        "requirement": str(o.requirement),
                        "actual": o.actual,
                        "source": o.source,
                        "passed": o.passed,
                    }
                    for o in resolution.outcomes
                ],
            }
            print_json("check", data, output)
        else:
            headers = ["Requirement", "Actual", "Source", "Outcome"]
            rows = [
                [str(o.requirement), format_bool(o.actual), o.source, format_outcome(o.passed)]
                for o in resolution.outcomes
            ]
            verdict = "would run" if resolution.passed else "would be SKIPPED"
            print(f"\n  {declaration.name} {verdict} ({len(resolution.outcomes)} requirements)\n")
            print_lines(print_table(headers, rows))

        if not resolution.passed:
            raise typer.Exit(1)

    @app.command("fixtures")
    def fixtures_cmd(
        as_json: JsonOption = False,
        output: OutputOption = None,
    ):
        """List the built-in fixtures and what they require."""
        if as_json:
            data = {
                name: {
                    "resource": spec.resource,
                    "requirements": [str(r) for r in spec.features_required()],
                }
                for name, spec in FIXTURES.items()
            }
            print_json("fixtures", data, output)
            return

        headers = ["Name", "Resource", "Requirements"]
        rows = [
            [name, spec.resource, ", ".join(str(r) for r in spec.features_required())]
            for name, spec in sorted(FIXTURES.items())
        ]
        print(f"\n  Fixtures ({len(FIXTURES)}):\n")
        print_lines(print_table(headers, rows))
