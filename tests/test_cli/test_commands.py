"""Tests for CLI features, check and fixtures commands."""

from __future__ import annotations

import json

import pytest

typer = pytest.importorskip("typer")

from typer.testing import CliRunner  # noqa: E402

from featuregate import GraphFeatures, VertexFeatures, load_graph_with, requires  # noqa: E402
from featuregate.cli import create_app  # noqa: E402

# ---------------------------------------------------------------------------
# Declared test functions at module scope for the CLI to import
# ---------------------------------------------------------------------------


@load_graph_with("grateful-dead")
def loads_grateful_dead():
    pass


@requires(GraphFeatures, "Transactions")
def needs_transactions():
    pass


@requires(VertexFeatures, "Teleport")
def broken_declaration():
    pass


def undeclared():
    pass


not_callable = 42

runner_cli = CliRunner()


def _target(name: str) -> str:
    return f"{__name__}:{name}"


def _invoke(*args: str):
    return runner_cli.invoke(create_app(), list(args))


# ---------------------------------------------------------------------------
# features
# ---------------------------------------------------------------------------


class TestFeaturesCommand:
    def test_table(self):
        result = _invoke("features")
        assert result.exit_code == 0, result.output
        assert "Features of NetworkXGraph" in result.output
        assert "MetaProperties" in result.output

    def test_json(self):
        result = _invoke("features", "--json")
        assert result.exit_code == 0, result.output
        envelope = json.loads(result.output)
        assert envelope["command"] == "features"
        records = {(r["feature_class"], r["feature"]): r for r in envelope["data"]["features"]}
        meta = records[("VertexFeatures", "MetaProperties")]
        assert meta["live"] is False
        assert meta["override"] is None
        assert meta["resolved"] is False

    def test_output_file(self, tmp_path):
        target = tmp_path / "features.json"
        result = _invoke("features", "--json", "--output", str(target))
        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text())["command"] == "features"

    def test_bad_provider(self):
        result = _invoke("features", "--provider", "featuregate.provider:nope")
        assert result.exit_code == 1
        assert "has no attribute 'nope'" in result.output


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_runnable(self):
        result = _invoke("check", _target("loads_grateful_dead"))
        assert result.exit_code == 0, result.output
        assert "would run" in result.output

    def test_skipped(self):
        result = _invoke("check", _target("needs_transactions"))
        assert result.exit_code == 1
        assert "would be SKIPPED" in result.output
        assert "GraphFeatures.Transactions=True" in result.output

    def test_declaration_error(self):
        result = _invoke("check", _target("broken_declaration"))
        assert result.exit_code == 2
        assert "supports_teleport" in result.output

    def test_undeclared_runs(self):
        result = _invoke("check", _target("undeclared"))
        assert result.exit_code == 0, result.output

    def test_json(self):
        result = _invoke("check", _target("needs_transactions"), "--json")
        assert result.exit_code == 1
        envelope = json.loads(result.output)
        assert envelope["command"] == "check"
        data = envelope["data"]
        assert data["runnable"] is False
        assert data["test"]["name"] == "needs_transactions"
        assert data["outcomes"] == [
            {
                "requirement": "GraphFeatures.Transactions=True",
                "actual": False,
                "source": "instance",
                "passed": False,
            }
        ]

    def test_missing_colon(self):
        result = _invoke("check", "no_colon_here")
        assert result.exit_code == 1
        assert "module:function" in result.output

    def test_missing_module(self):
        result = _invoke("check", "no_such_module_xyz:fn")
        assert result.exit_code == 1
        assert "Could not import" in result.output

    def test_not_callable(self):
        result = _invoke("check", _target("not_callable"))
        assert result.exit_code == 1
        assert "no callable 'not_callable'" in result.output


# ---------------------------------------------------------------------------
# fixtures
# ---------------------------------------------------------------------------


class TestFixturesCommand:
    def test_table(self):
        result = _invoke("fixtures")
        assert result.exit_code == 0, result.output
        assert "Fixtures (3)" in result.output
        assert "grateful-dead.json" in result.output

    def test_json(self):
        result = _invoke("fixtures", "--json")
        envelope = json.loads(result.output)
        assert set(envelope["data"]) == {"classic", "modern", "grateful-dead"}
        assert "EdgePropertyFeatures.FloatValues=True" in envelope["data"]["classic"]["requirements"]


def test_no_args_shows_help():
    result = _invoke()
    assert "features" in result.output
    assert "check" in result.output
