"""Configuration for dansbag.

Settings come from a YAML file (default `.dansbag/config.yaml` in the
working directory, or `--config`). Scalar settings resolve with the
following precedence (highest to lowest):
1. CLI argument
2. Environment variable (DANSBAG_<KEY>)
3. Config file
4. Built-in default

Example config.yaml:

    schemas:
      dataset.xml: https://schemas.dans.knaw.nl/md/ddm/v2/ddm.xsd
      files.xml: https://schemas.dans.knaw.nl/bag/metadata/files/files.xsd
    dataverse:
      base_url: https://dataverse.example.org
      api_key: changeme
      collection_alias: root
    depositor_roles:
      collection: [datasetcreator]
      dataset: [dataseteditor]
    other_id_prefixes:
      - account: user001
        prefix: "u1:"

Usage:
    from dansbag_cli.config import load_config, load_settings

    settings = load_settings(Path("config.yaml"), dataverse_url=cli_url)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dansbag_cli.errors import InvalidConfigError

CONFIG_DIR = ".dansbag"
CONFIG_FILENAME = "config.yaml"

DEFAULT_COLLECTION_ALIAS = "root"
DEFAULT_TIMEOUT = 30.0


def get_config_path(base_dir: Path) -> Path:
    """Default config file location below a directory."""
    return base_dir / CONFIG_DIR / CONFIG_FILENAME


def load_config(config_file: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Returns:
        Config dictionary. Returns empty dict if file doesn't exist or is empty.
    """
    if not config_file.exists():
        return {}

    content = config_file.read_text()
    if not content.strip():
        return {}

    data = yaml.safe_load(content)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigError(str(config_file), "top level must be a mapping")
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name (e.g. DANSBAG_API_KEY)."""
    return f"DANSBAG_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    section: Mapping[str, Any] | None = None,
    default: Any | None = None,
) -> Any | None:
    """Resolve a scalar setting: CLI > DANSBAG_<KEY> > config section > default."""
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    if section is not None and section.get(key) is not None:
        return section[key]

    return default


@dataclass(frozen=True)
class OtherIdPrefix:
    """Prefix an account's organizational identifiers carry in the catalog."""

    account: str
    prefix: str


@dataclass(frozen=True)
class DepositorRoles:
    """Role aliases that allow an account to deposit.

    Attributes:
        collection: Accepted aliases on the target collection.
        dataset: Accepted aliases on an existing dataset (new versions).
    """

    collection: frozenset[str] = frozenset({"datasetcreator"})
    dataset: frozenset[str] = frozenset({"dataseteditor"})


@dataclass(frozen=True)
class CatalogSettings:
    """Connection settings for the Dataverse catalog."""

    base_url: str | None = None
    api_key: str | None = None
    collection_alias: str = DEFAULT_COLLECTION_ALIAS
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class ValidatorSettings:
    """Everything the rule catalog and its collaborators are built from."""

    schema_locations: dict[str, str] = field(default_factory=dict)
    catalog: CatalogSettings = field(default_factory=CatalogSettings)
    depositor_roles: DepositorRoles = field(default_factory=DepositorRoles)
    other_id_prefixes: tuple[OtherIdPrefix, ...] = ()

    @classmethod
    def from_dict(
        cls,
        config: Mapping[str, Any],
        *,
        dataverse_url: str | None = None,
        api_key: str | None = None,
    ) -> ValidatorSettings:
        """Build settings from a config mapping plus CLI overrides.

        Raises:
            InvalidConfigError: If a section has the wrong shape.
        """
        schemas = _section(config, "schemas")
        dataverse = _section(config, "dataverse")
        roles = _section(config, "depositor_roles")

        timeout_value = get_setting("timeout", section=dataverse, default=DEFAULT_TIMEOUT)
        try:
            timeout = float(timeout_value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidConfigError("dataverse.timeout", f"not a number: {timeout_value!r}") from None

        catalog = CatalogSettings(
            base_url=get_setting("dataverse_url", dataverse_url, {"dataverse_url": dataverse.get("base_url")}),
            api_key=get_setting("api_key", api_key, dataverse),
            collection_alias=get_setting(
                "collection_alias", section=dataverse, default=DEFAULT_COLLECTION_ALIAS
            ),
            timeout=timeout,
        )

        default_roles = DepositorRoles()
        depositor_roles = DepositorRoles(
            collection=_aliases(roles, "collection", default_roles.collection),
            dataset=_aliases(roles, "dataset", default_roles.dataset),
        )

        return cls(
            schema_locations={str(k): str(v) for k, v in schemas.items()},
            catalog=catalog,
            depositor_roles=depositor_roles,
            other_id_prefixes=_prefixes(config.get("other_id_prefixes") or []),
        )


def load_settings(
    config_file: Path | None = None,
    *,
    dataverse_url: str | None = None,
    api_key: str | None = None,
) -> ValidatorSettings:
    """Load settings from a config file (or the default location)."""
    path = config_file if config_file is not None else get_config_path(Path.cwd())
    return ValidatorSettings.from_dict(
        load_config(path), dataverse_url=dataverse_url, api_key=api_key
    )


def _section(config: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = config.get(key) or {}
    if not isinstance(value, Mapping):
        raise InvalidConfigError(key, "expected a mapping")
    return value


def _aliases(section: Mapping[str, Any], key: str, default: frozenset[str]) -> frozenset[str]:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return frozenset(value)
    raise InvalidConfigError(f"depositor_roles.{key}", "expected a role alias or a list of them")


def _prefixes(entries: Any) -> tuple[OtherIdPrefix, ...]:
    if not isinstance(entries, list):
        raise InvalidConfigError("other_id_prefixes", "expected a list")
    prefixes = []
    for entry in entries:
        if not isinstance(entry, Mapping) or "account" not in entry or "prefix" not in entry:
            raise InvalidConfigError("other_id_prefixes", f"entry needs account and prefix: {entry!r}")
        prefixes.append(OtherIdPrefix(account=str(entry["account"]), prefix=str(entry["prefix"])))
    return tuple(prefixes)
