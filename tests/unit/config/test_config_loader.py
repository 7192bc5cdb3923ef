"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from tracelink.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_flat_dicts(self) -> None:
        assert deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_merge_nested_dicts(self) -> None:
        base = {"workload": {"max_latency_ms": 400, "failure_rate": 0.2}, "debug": False}
        override = {"workload": {"max_latency_ms": 500}}

        assert deep_merge(base, override) == {
            "workload": {"max_latency_ms": 500, "failure_rate": 0.2},
            "debug": False,
        }

    def test_override_replaces_non_dict(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        base = {"a": 1}
        deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestTomlParsing:
    """Tests for reading the TOML files themselves."""

    def test_reads_nested_tables(self, test_config_dir: Path) -> None:
        (test_config_dir / "default.toml").write_text('[section]\nkey = "value"\nnumber = 42')

        assert load_config(test_config_dir, "none") == {"section": {"key": "value", "number": 42}}

    def test_invalid_toml_raises(self, test_config_dir: Path) -> None:
        (test_config_dir / "default.toml").write_text("invalid = [")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(test_config_dir, "none")

    def test_explicit_profile_beats_environment(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (test_config_dir / "simple.toml").write_text("debug = true\n")
        monkeypatch.setenv("TRACELINK_ENV", "development")

        assert load_config(test_config_dir, "simple") == {"debug": True}


class TestConfigDirAndEnvironment:
    """Tests for config directory and profile lookup."""

    def test_config_dir_from_env(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TRACELINK_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_missing_config_dir_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TRACELINK_CONFIG_DIR", str(tmp_path / "missing"))
        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_default_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TRACELINK_ENV", raising=False)
        assert get_environment() == "development"

    def test_environment_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRACELINK_ENV", "simple")
        assert get_environment() == "simple"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_profile_overrides_default(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files(
            {
                "default.toml": "[workload]\nmax_latency_ms = 400\nfailure_rate = 0.2\n",
                "simple.toml": "[workload]\nmax_latency_ms = 500\n",
            }
        )
        monkeypatch.setenv("TRACELINK_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("TRACELINK_ENV", "simple")

        assert load_config() == {"workload": {"max_latency_ms": 500, "failure_rate": 0.2}}

    def test_missing_profile_file_is_ignored(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "debug = true\n"})
        monkeypatch.setenv("TRACELINK_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("TRACELINK_ENV", "production")

        assert load_config() == {"debug": True}

    def test_empty_config_dir(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TRACELINK_CONFIG_DIR", str(test_config_dir))
        assert load_config() == {}
