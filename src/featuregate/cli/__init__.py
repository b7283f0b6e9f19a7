"""featuregate CLI: inspect provider capabilities and test declarations.

Entry point for the `featuregate` command. Requires ``pip install featuregate[cli]``.

Commands:
    features    Capability table of the provider's graphs (live, override, resolved)
    check       Would a given test run or be skipped against the provider?
    fixtures    Built-in fixtures and their requirements
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install featuregate[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all commands."""
    _require_typer()

    import typer

    from featuregate.cli.features_cmd import register_commands

    app = typer.Typer(
        name="featuregate",
        help="Feature-gated graph test harness CLI.",
        no_args_is_help=True,
    )
    register_commands(app)

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
