"""Validate command logic: open a package, run the rule catalog, build the verdict.

This module contains the logic; the CLI command is
a thin wrapper around validate_bag().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dansbag_cli.bag import open_bag
from dansbag_cli.catalog import make_catalog_client
from dansbag_cli.catalog.protocol import CatalogClient
from dansbag_cli.config import ValidatorSettings
from dansbag_cli.profile import build_rule_catalog
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.documents import SchemaCache
from dansbag_cli.validation.rules import RuleCatalog
from dansbag_cli.validation.runner import run
from dansbag_cli.validation.verdict import (
    ComplianceVerdict,
    PackageType,
    ValidationLevel,
    build_verdict,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BagValidator:
    """Process-wide collaborators, built once and shared by all runs.

    Attributes:
        level: Validation level the rule catalog was built for.
        rules: The rule catalog.
        catalog_client: Catalog client, or None for stand-alone validation.
    """

    level: ValidationLevel
    rules: RuleCatalog
    catalog_client: CatalogClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ValidatorSettings,
        level: ValidationLevel,
        *,
        schemas: SchemaCache | None = None,
        catalog_client: CatalogClient | None = None,
    ) -> BagValidator:
        """Load schemas, build the rule catalog and (if needed) the catalog client.

        Raises:
            ConfigurationError: On missing schemas, bad rules or missing catalog settings.
        """
        schemas = schemas or SchemaCache(settings.schema_locations, timeout=settings.catalog.timeout)
        if level is ValidationLevel.WITH_DATA_STATION_CONTEXT and catalog_client is None:
            catalog_client = make_catalog_client(settings.catalog)
        rules = build_rule_catalog(level, schemas, settings)
        logger.debug("Built rule catalog for %s: %s", level.value, ", ".join(rules.ids))
        return cls(level=level, rules=rules, catalog_client=catalog_client)

    def validate(
        self,
        location: Path,
        *,
        package_type: PackageType = PackageType.DEPOSIT,
        bag_location: str | None = None,
    ) -> ComplianceVerdict:
        """Validate one package (directory or zip).

        Args:
            location: Bag directory or zip file on disk.
            package_type: Reported information package type.
            bag_location: Location echoed in the verdict (defaults to `location`).

        Returns:
            The compliance verdict.

        Raises:
            PackageError: If the package cannot be found or extracted.
            ValidationAbortedError: If a rule hit a fatal condition.
        """
        with open_bag(location) as bag_dir:
            ctx = ValidationContext(bag_dir, catalog=self.catalog_client)
            report = run(self.rules, ctx)
            report.raise_for_fatal()
            verdict = build_verdict(
                report,
                name=bag_dir.name,
                bag_location=bag_location if bag_location is not None else str(location),
                package_type=package_type,
                level=self.level,
            )
        logger.debug(
            "%s: compliant=%s, violated rules=%s",
            location,
            verdict.is_compliant,
            verdict.violated_rules,
        )
        return verdict


def validate_bag(
    location: Path,
    settings: ValidatorSettings,
    *,
    level: ValidationLevel = ValidationLevel.STAND_ALONE,
    package_type: PackageType = PackageType.DEPOSIT,
) -> ComplianceVerdict:
    """One-shot validation: build collaborators and validate a single package."""
    return BagValidator.from_settings(settings, level).validate(location, package_type=package_type)
