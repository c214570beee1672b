"""Tests for tagger.settings: profile precedence and report configuration."""

from pathlib import Path

import typer
import pytest
import tomlkit

import tagger.settings as settings_module
from tagger.settings import _list_profiles, get_settings, split_repo


def _write_config(tmp_path: Path, config: dict) -> Path:
    config_path = tmp_path / "config.toml"
    config_path.write_text(tomlkit.dumps(config))
    return config_path


@pytest.fixture(autouse=True)
def reset_lru_cache(monkeypatch: pytest.MonkeyPatch):
    """Clear the lru_cache and TAGGER_ env vars before each test."""
    for var in ("TAGGER_DEFAULT_TRACKER", "TAGGER_GITHUB_TOKEN", "TAGGER_GITHUB_REPO"):
        monkeypatch.delenv(var, raising=False)
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


class TestListProfiles:
    def test_returns_section_keys(self) -> None:
        config = {
            "default_tracker": "home",
            "home": {"github_repo": "nuget/home"},
            "eng": {"github_repo": "nuget/client.engineering"},
        }
        assert _list_profiles(config) == ["home", "eng"]

    def test_skips_scalar_keys(self) -> None:
        config = {"default_tracker": "home", "home": {"github_repo": "nuget/home"}}
        assert _list_profiles(config) == ["home"]

    def test_empty_config(self) -> None:
        assert _list_profiles({}) == []


class TestGetSettings:
    def _two_profiles(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = _write_config(
            tmp_path,
            {
                "default_tracker": "eng",
                "home": {"github_repo": "nuget/home"},
                "eng": {"github_repo": "nuget/client.engineering"},
            },
        )
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

    def test_tracker_arg_takes_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._two_profiles(tmp_path, monkeypatch)
        monkeypatch.setenv("TAGGER_DEFAULT_TRACKER", "eng")
        assert get_settings(tracker="home").github_repo == "nuget/home"

    def test_env_var_takes_precedence_over_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._two_profiles(tmp_path, monkeypatch)
        monkeypatch.setenv("TAGGER_DEFAULT_TRACKER", "home")
        assert get_settings().github_repo == "nuget/home"

    def test_toml_default_tracker_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._two_profiles(tmp_path, monkeypatch)
        assert get_settings().github_repo == "nuget/client.engineering"

    def test_first_profile_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = _write_config(tmp_path, {"home": {"github_repo": "nuget/home"}})
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)
        assert get_settings().github_repo == "nuget/home"

    def test_missing_profile_exits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._two_profiles(tmp_path, monkeypatch)
        with pytest.raises(typer.Exit):
            get_settings(tracker="nonexistent")

    def test_env_overrides_profile_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._two_profiles(tmp_path, monkeypatch)
        monkeypatch.setenv("TAGGER_GITHUB_REPO", "someone/else")
        assert get_settings(tracker="home").github_repo == "someone/else"

    def test_no_config_file_returns_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings_module, "CONFIG_PATH", tmp_path / "nonexistent.toml")
        monkeypatch.setenv("TAGGER_GITHUB_TOKEN", "ghp_env")
        s = get_settings()
        assert s.github_token is not None
        assert s.github_token.get_secret_value() == "ghp_env"
        assert s.github_auth == "token"
        assert s.snapshot_label == "priority:1"
        assert s.internal_aliases == []

    def test_report_configuration_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_path = _write_config(
            tmp_path,
            {
                "home": {
                    "github_repo": "nuget/home",
                    "internal_aliases": ["alice", "bob"],
                    "ignore_label_ids": [2671458320],
                    "type_label_ids": [180116450],
                    "area_categories": [{"name": "Restore", "label_ids": [345983287, 1950335805]}],
                },
            },
        )
        monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)

        s = get_settings()
        assert s.internal_aliases == ["alice", "bob"]
        assert s.ignore_label_ids == [2671458320]
        assert s.type_label_ids == [180116450]
        assert s.area_categories[0].name == "Restore"
        assert s.area_categories[0].label_ids == [345983287, 1950335805]


class TestSplitRepo:
    def test_valid(self) -> None:
        assert split_repo("nuget/home") == ("nuget", "home")

    @pytest.mark.parametrize("value", ["nuget", "nuget/", "/home", "a/b/c"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="owner/repo"):
            split_repo(value)
