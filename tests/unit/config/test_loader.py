"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from attune.config.loader import (
    current_environment,
    find_config_dir,
    load_config,
    merge_layers,
    read_toml,
)


class TestMergeLayers:
    """Tests for merge_layers function."""

    def test_merge_flat_dicts(self) -> None:
        """Flat dictionaries are merged correctly."""
        result = merge_layers({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_merge_nested_dicts(self) -> None:
        """Nested dictionaries are merged recursively."""
        base = {"reconciler": {"gap_analysis": {"timeout_seconds": 8.0, "max_retries": 1}}}
        override = {"reconciler": {"gap_analysis": {"timeout_seconds": 2.0}}}

        result = merge_layers(base, override)

        assert result == {
            "reconciler": {"gap_analysis": {"timeout_seconds": 2.0, "max_retries": 1}}
        }

    def test_override_replaces_non_dict(self) -> None:
        """Non-dict values in override replace base values."""
        assert merge_layers({"a": {"x": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_later_layers_win(self) -> None:
        result = merge_layers(
            {"storage": {"backend": "inmemory", "key_prefix": "attune"}},
            {"storage": {"backend": "redis"}},
            {"storage": {"key_prefix": "attune-test"}},
        )
        assert result == {"storage": {"backend": "redis", "key_prefix": "attune-test"}}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": 1}
        merge_layers(base, {"b": 2})
        assert base == {"a": 1}


class TestReadToml:
    """Tests for read_toml function."""

    def test_load_valid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "test.toml"
        toml_file.write_text('[storage]\nbackend = "redis"\n')

        assert read_toml(toml_file) == {"storage": {"backend": "redis"}}

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml_raises(self, tmp_path: Path) -> None:
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("invalid = [unclosed")

        with pytest.raises(tomllib.TOMLDecodeError):
            read_toml(invalid_file)


class TestCurrentEnvironment:
    """Tests for current_environment function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATTUNE_ENV", "production")
        assert current_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ATTUNE_ENV", raising=False)
        assert current_environment() == "development"

    def test_normalizes_case_and_blank(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATTUNE_ENV", " Test ")
        assert current_environment() == "test"

        monkeypatch.setenv("ATTUNE_ENV", "")
        assert current_environment() == "development"


class TestFindConfigDir:
    """Tests for find_config_dir function."""

    def test_uses_env_var_when_set(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_dir = tmp_path / "custom_config"
        config_dir.mkdir()
        monkeypatch.setenv("ATTUNE_CONFIG_DIR", str(config_dir))

        assert find_config_dir() == config_dir

    def test_raises_for_missing_env_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ATTUNE_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            find_config_dir()

    def test_finds_nearest_config_with_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ATTUNE_CONFIG_DIR", raising=False)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "default.toml").write_text("")
        nested = tmp_path / "services" / "api"
        nested.mkdir(parents=True)
        (nested / "config").mkdir()

        assert find_config_dir(nested) == (tmp_path / "config").resolve()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_merges_environment_config(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment config overrides default config."""
        mock_toml_files(
            {
                "default.toml": "app_name = 'attune'\ndebug = false",
                "staging.toml": "debug = true",
            }
        )
        monkeypatch.setenv("ATTUNE_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ATTUNE_ENV", "staging")

        assert load_config() == {"app_name": "attune", "debug": True}

    def test_missing_environment_file_ignored(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "debug = false"})
        monkeypatch.setenv("ATTUNE_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ATTUNE_ENV", "nonexistent")

        assert load_config() == {"debug": False}

    def test_missing_default_raises(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ATTUNE_CONFIG_DIR", str(test_config_dir))

        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()
