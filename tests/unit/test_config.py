"""Tests for dansbag_cli.config module.

Tests the configuration system including:
- Loading config from .dansbag/config.yaml or an explicit file
- Setting precedence (CLI > env > config file > default)
- Validation of section shapes
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING
from unittest import mock

import pytest

from dansbag_cli.config import (
    DepositorRoles,
    OtherIdPrefix,
    ValidatorSettings,
    get_config_path,
    get_setting,
    load_config,
    load_settings,
)
from dansbag_cli.errors import InvalidConfigError

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def clean_env() -> Iterator[None]:
    """Hide DANSBAG_* variables of the surrounding shell."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("DANSBAG_")}
    with mock.patch.dict(os.environ, env, clear=True):
        yield


class TestLoadConfig:
    """Tests for load_config function."""

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing config file yields an empty dict."""
        assert load_config(tmp_path / "config.yaml") == {}

    @pytest.mark.unit
    def test_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("\n")

        assert load_config(config_file) == {}

    @pytest.mark.unit
    def test_reads_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dataverse:\n  base_url: https://dv.example.org\n")

        assert load_config(config_file) == {"dataverse": {"base_url": "https://dv.example.org"}}

    @pytest.mark.unit
    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(InvalidConfigError):
            load_config(config_file)

    @pytest.mark.unit
    def test_default_path(self, tmp_path: Path) -> None:
        assert get_config_path(tmp_path) == tmp_path / ".dansbag" / "config.yaml"


class TestGetSetting:
    """Tests for setting precedence."""

    @pytest.mark.unit
    def test_cli_wins(self) -> None:
        with mock.patch.dict(os.environ, {"DANSBAG_API_KEY": "from-env"}):
            assert get_setting("api_key", "from-cli", {"api_key": "from-file"}) == "from-cli"

    @pytest.mark.unit
    def test_env_beats_file(self) -> None:
        with mock.patch.dict(os.environ, {"DANSBAG_API_KEY": "from-env"}):
            assert get_setting("api_key", None, {"api_key": "from-file"}) == "from-env"

    @pytest.mark.unit
    def test_file_beats_default(self) -> None:
        assert get_setting("api_key", None, {"api_key": "from-file"}, "default") == "from-file"

    @pytest.mark.unit
    def test_default(self) -> None:
        assert get_setting("api_key", None, {}, "default") == "default"


class TestValidatorSettings:
    """Tests for building settings from config mappings."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        settings = ValidatorSettings.from_dict({})

        assert settings.schema_locations == {}
        assert settings.catalog.base_url is None
        assert settings.catalog.collection_alias == "root"
        assert settings.catalog.timeout == 30.0
        assert settings.depositor_roles == DepositorRoles()
        assert settings.other_id_prefixes == ()

    @pytest.mark.unit
    def test_full_config(self) -> None:
        settings = ValidatorSettings.from_dict(
            {
                "schemas": {"dataset.xml": "ddm.xsd", "files.xml": "files.xsd"},
                "dataverse": {
                    "base_url": "https://dv.example.org",
                    "api_key": "secret",
                    "collection_alias": "dans",
                    "timeout": 5,
                },
                "depositor_roles": {"collection": ["datasetcreator", "curator"], "dataset": "contributor"},
                "other_id_prefixes": [{"account": "user001", "prefix": "u1:"}],
            }
        )

        assert settings.schema_locations == {"dataset.xml": "ddm.xsd", "files.xml": "files.xsd"}
        assert settings.catalog.base_url == "https://dv.example.org"
        assert settings.catalog.api_key == "secret"
        assert settings.catalog.collection_alias == "dans"
        assert settings.catalog.timeout == 5.0
        assert settings.depositor_roles.collection == frozenset({"datasetcreator", "curator"})
        assert settings.depositor_roles.dataset == frozenset({"contributor"})
        assert settings.other_id_prefixes == (OtherIdPrefix("user001", "u1:"),)

    @pytest.mark.unit
    def test_cli_overrides(self) -> None:
        settings = ValidatorSettings.from_dict(
            {"dataverse": {"base_url": "https://file.example.org"}},
            dataverse_url="https://cli.example.org",
            api_key="cli-key",
        )

        assert settings.catalog.base_url == "https://cli.example.org"
        assert settings.catalog.api_key == "cli-key"

    @pytest.mark.unit
    def test_env_overrides(self) -> None:
        env = {
            "DANSBAG_DATAVERSE_URL": "https://env.example.org",
            "DANSBAG_TIMEOUT": "7.5",
            "DANSBAG_COLLECTION_ALIAS": "env-alias",
        }
        with mock.patch.dict(os.environ, env):
            settings = ValidatorSettings.from_dict({"dataverse": {"base_url": "https://file.example.org"}})

        assert settings.catalog.base_url == "https://env.example.org"
        assert settings.catalog.timeout == 7.5
        assert settings.catalog.collection_alias == "env-alias"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "config",
        [
            {"schemas": ["dataset.xml"]},
            {"dataverse": "https://dv.example.org"},
            {"dataverse": {"timeout": "soon"}},
            {"depositor_roles": {"collection": [1, 2]}},
            {"other_id_prefixes": {"account": "user001"}},
            {"other_id_prefixes": [{"account": "user001"}]},
        ],
    )
    def test_invalid_shapes(self, config: dict[str, object]) -> None:
        with pytest.raises(InvalidConfigError):
            ValidatorSettings.from_dict(config)


class TestLoadSettings:
    @pytest.mark.unit
    def test_explicit_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("schemas:\n  dataset.xml: ddm.xsd\n")

        assert load_settings(config_file).schema_locations == {"dataset.xml": "ddm.xsd"}

    @pytest.mark.unit
    def test_default_location_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_dir = tmp_path / ".dansbag"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("dataverse:\n  collection_alias: dans\n")
        monkeypatch.chdir(tmp_path)

        assert load_settings().catalog.collection_alias == "dans"
