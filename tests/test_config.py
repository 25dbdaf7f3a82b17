"""Tests for configuration loading and merging."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from lau.config.loader import (
    get_package_corpus_path,
    load_config,
    load_yaml_config,
    resolve_corpus_root,
    save_config,
)
from lau.config.schema import DEFAULT_CONFIG, LauConfig


class TestLauConfig:
    """Tests for LauConfig dataclass."""

    def test_default_config_values(self) -> None:
        """Test that DEFAULT_CONFIG has expected values."""
        assert DEFAULT_CONFIG.on_conflict == "overwrite"
        assert DEFAULT_CONFIG.parallel == 1
        assert DEFAULT_CONFIG.corpus_root is None

    def test_merge_prefers_other_values(self) -> None:
        """Test that merge prefers values from 'other' when set."""
        base = LauConfig(on_conflict="overwrite", parallel=1)
        override = LauConfig(on_conflict="skip", parallel=4)
        merged = base.merge(override)

        assert merged.on_conflict == "skip"
        assert merged.parallel == 4

    def test_merge_preserves_base_when_other_is_none(self) -> None:
        """Test that merge preserves base values when other is None."""
        base = LauConfig(corpus_root="/corpus", provider="claude")
        merged = base.merge(LauConfig(provider="cursor"))

        assert merged.corpus_root == "/corpus"
        assert merged.provider == "cursor"

    def test_from_dict_ignores_unknown_and_invalid(self) -> None:
        """Test unknown keys and invalid values are dropped."""
        config = LauConfig.from_dict(
            {"on_conflict": "merge", "parallel": "lots", "colour": "blue"}
        )
        assert config.on_conflict is None
        assert config.parallel is None

    def test_from_dict_normalizes(self) -> None:
        """Test provider is lowercased and parallel clamped."""
        config = LauConfig.from_dict({"provider": "Claude", "parallel": 0})
        assert config.provider == "claude"
        assert config.parallel == 1

    def test_to_dict_excludes_none(self) -> None:
        """Test to_dict only includes set values."""
        assert LauConfig(on_conflict="abort").to_dict() == {"on_conflict": "abort"}


class TestLoader:
    """Tests for YAML loading and layering."""

    def test_load_yaml_missing(self, tmp_path: Path) -> None:
        """Test a missing file loads as None."""
        assert load_yaml_config(tmp_path / "config.yaml") is None

    def test_load_yaml_invalid(self, tmp_path: Path) -> None:
        """Test malformed or non-mapping YAML loads as None."""
        path = tmp_path / "config.yaml"
        path.write_text("key: [unclosed\n")
        assert load_yaml_config(path) is None
        path.write_text("- a\n- b\n")
        assert load_yaml_config(path) is None

    def test_save_and_reload(self, tmp_path: Path) -> None:
        """Test save_config writes YAML that loads back."""
        path = tmp_path / "nested" / "config.yaml"
        save_config(LauConfig(provider="cursor", parallel=2), path)

        data = yaml.safe_load(path.read_text())
        assert data == {"provider": "cursor", "parallel": 2}

    def test_local_overrides_home(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test precedence: defaults < home < local < environment."""
        monkeypatch.delenv("LAU_CORPUS_ROOT", raising=False)
        monkeypatch.delenv("LAU_ON_CONFLICT", raising=False)
        home = tmp_path / "home.yaml"
        local = tmp_path / "local.yaml"
        home.write_text("on_conflict: skip\nprovider: claude\n")
        local.write_text("on_conflict: abort\n")

        with (
            patch("lau.config.loader.get_home_config_path", return_value=home),
            patch("lau.config.loader.get_local_config_path", return_value=local),
        ):
            config = load_config()
            assert config.on_conflict == "abort"
            assert config.provider == "claude"
            assert config.parallel == 1

            monkeypatch.setenv("LAU_ON_CONFLICT", "overwrite")
            monkeypatch.setenv("LAU_CORPUS_ROOT", "/srv/corpus")
            config = load_config()
            assert config.on_conflict == "overwrite"
            assert config.corpus_root == "/srv/corpus"


class TestResolveCorpusRoot:
    """Tests for corpus root resolution."""

    def test_override_wins(self, tmp_path: Path) -> None:
        """Test --corpus beats configuration."""
        config = LauConfig(corpus_root="/configured")
        assert resolve_corpus_root(config, tmp_path) == tmp_path

    def test_configured_root(self) -> None:
        """Test corpus_root from config is used."""
        config = LauConfig(corpus_root="/configured")
        assert resolve_corpus_root(config) == Path("/configured")

    def test_local_then_global_then_package(self, tmp_path: Path) -> None:
        """Test filesystem fallbacks in order."""
        local = tmp_path / "local"
        global_ = tmp_path / "global"

        with (
            patch("lau.config.loader.get_local_corpus_path", return_value=local),
            patch("lau.config.loader.get_global_corpus_path", return_value=global_),
        ):
            assert resolve_corpus_root(LauConfig()) == get_package_corpus_path()
            global_.mkdir()
            assert resolve_corpus_root(LauConfig()) == global_
            local.mkdir()
            assert resolve_corpus_root(LauConfig()) == local
