"""Settings resolution with profile precedence and report configuration."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "tagger" / "config.toml"


class LabelCategory(BaseModel):
    """A row of the area-owner report: a display name and the label ids it covers."""

    name: str
    label_ids: list[int]


class TaggerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TAGGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tracker: str | None = None  # profile name

    # GitHub
    github_token: SecretStr | None = None
    github_auth: str = "token"  # "token" | "gh-cli"
    github_repo: str | None = None  # "owner/repo" used when --repo is omitted

    # Scoring
    internal_aliases: list[str] = []

    # Area-owner report
    ignore_label_ids: list[int] = []
    type_label_ids: list[int] = []
    area_categories: list[LabelCategory] = []

    # Priority snapshot
    snapshot_label: str = "priority:1"
    snapshot_repos: list[str] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Profile values arrive as init kwargs; the environment wins over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/tagger/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    with CONFIG_PATH.open() as fh:
        return tomlkit.load(fh)


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(tracker: str | None = None) -> TaggerSettings:
    """Resolve the active profile and return a fully populated TaggerSettings.

    Precedence (highest to lowest):
    1. tracker argument (--tracker CLI flag)
    2. TAGGER_DEFAULT_TRACKER env var
    3. default_tracker key in ~/.config/tagger/config.toml
    4. First profile defined in ~/.config/tagger/config.toml
    """
    toml_config = _load_toml()

    active = (
        tracker
        or os.environ.get("TAGGER_DEFAULT_TRACKER")
        or toml_config.get("default_tracker")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = toml_config[active].unwrap()
        else:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    return TaggerSettings(**profile_defaults)


def split_repo(full_name: str) -> tuple[str, str]:
    """Split "owner/repo" into its parts."""
    owner, sep, repo = full_name.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Expected owner/repo, got '{full_name}'")
    return owner, repo
