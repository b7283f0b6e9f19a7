"""Tests for [tool.featuregate] configuration."""

import pytest

from featuregate import NetworkXGraphProvider, ProviderNotConfiguredError
from featuregate.config import FeaturegateConfig, find_pyproject, load_config


class TestFindPyproject:
    def test_exists(self, tmp_path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        assert find_pyproject(tmp_path) == pyproject

    def test_walks_up(self, tmp_path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        child = tmp_path / "tests" / "unit"
        child.mkdir(parents=True)
        assert find_pyproject(child) == pyproject


class TestLoadConfig:
    def test_no_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'test'\n")
        assert load_config(tmp_path) == FeaturegateConfig()
        assert load_config(tmp_path).source is None

    def test_full_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            "[tool.featuregate]\n"
            'provider = "my_backend.testing:provider"\n'
            'data_dir = ".graphs"\n'
            "transactions = true\n"
            "revalidate_fixture_features = true\n"
        )
        config = load_config(tmp_path)
        assert config.provider == "my_backend.testing:provider"
        assert config.data_dir == str(tmp_path / ".graphs")
        assert config.transactions is True
        assert config.revalidate_fixture_features is True
        assert config.source == (tmp_path / "pyproject.toml").resolve()

    def test_absolute_data_dir_kept(self, tmp_path):
        target = tmp_path / "abs"
        (tmp_path / "pyproject.toml").write_text(f'[tool.featuregate]\ndata_dir = "{target.as_posix()}"\n')
        assert load_config(tmp_path).data_dir == target.as_posix()


class TestBuildProvider:
    def test_default_is_networkx(self):
        provider = FeaturegateConfig().build_provider()
        assert isinstance(provider, NetworkXGraphProvider)
        assert provider.base_dir is None

    def test_default_uses_data_dir_and_transactions(self, tmp_path):
        provider = FeaturegateConfig(data_dir=str(tmp_path), transactions=True).build_provider()
        assert provider.base_dir == tmp_path
        assert provider.transactions is True

    def test_named_provider(self):
        provider = FeaturegateConfig(provider="featuregate.provider:NetworkXGraphProvider").build_provider()
        assert isinstance(provider, NetworkXGraphProvider)

    def test_bad_provider(self):
        with pytest.raises(ProviderNotConfiguredError):
            FeaturegateConfig(provider="featuregate.provider:missing").build_provider()
