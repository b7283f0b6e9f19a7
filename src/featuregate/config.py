"""Project-level configuration from pyproject.toml.

Reads the [tool.featuregate] section:

    [tool.featuregate]
    provider = "my_backend.testing:provider"   # module:attribute
    data_dir = ".featuregate"                   # default provider only
    transactions = false                        # default provider only
    revalidate_fixture_features = false
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from featuregate.provider import GraphProvider, NetworkXGraphProvider, load_provider


@dataclass(frozen=True)
class FeaturegateConfig:
    """Configuration from [tool.featuregate] in pyproject.toml.

    ``source`` is the pyproject.toml the section was read from, or None when
    no section was found and every field is a default.
    """

    provider: str | None = None
    data_dir: str | None = None
    transactions: bool = False
    revalidate_fixture_features: bool = False
    source: Path | None = None

    def build_provider(self) -> GraphProvider:
        """The configured provider, or a NetworkXGraphProvider when none is named."""
        if self.provider:
            return load_provider(self.provider)
        return NetworkXGraphProvider(self.data_dir, transactions=self.transactions)


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> FeaturegateConfig:
    """Load [tool.featuregate] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.featuregate] section.
    """
    path = find_pyproject(start)
    if path is None:
        return FeaturegateConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("featuregate", {})
    if not section:
        return FeaturegateConfig()

    data_dir = section.get("data_dir")
    if data_dir is not None and not Path(data_dir).is_absolute():
        data_dir = str(path.parent / data_dir)

    return FeaturegateConfig(
        provider=section.get("provider"),
        data_dir=data_dir,
        transactions=bool(section.get("transactions", False)),
        revalidate_fixture_features=bool(section.get("revalidate_fixture_features", False)),
        source=path,
    )
