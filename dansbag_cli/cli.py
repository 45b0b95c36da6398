"""dansbag CLI - Command-line interface for DANS bag compliance validation.

The CLI is a thin wrapper around the Python API (see check.py).
All business logic lives in the library; the CLI handles user interaction.

Exit codes:
    0: Bag is compliant
    1: Bag is not compliant
    2: The request could not be completed (bag not found, bad configuration,
       validation aborted)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from dansbag_cli.check import BagValidator
from dansbag_cli.config import load_settings
from dansbag_cli.errors import DansBagError, ValidationAbortedError
from dansbag_cli.json_output import ErrorDetail, error_envelope, success_envelope
from dansbag_cli.output import detail, error, info, success
from dansbag_cli.validation.results import Status
from dansbag_cli.validation.verdict import ComplianceVerdict, PackageType, ValidationLevel

EXIT_NOT_COMPLIANT = 1
EXIT_REQUEST_FAULT = 2

_VIOLATION_BULLET = "  - "


def should_output_json(ctx: click.Context, json_flag: bool = False) -> bool:
    """Determine if JSON output should be used.

    Global --format=json takes precedence, but the per-command --json flag
    also works.
    """
    obj = ctx.find_root().obj or {}
    global_format = obj.get("format", "text")
    return global_format == "json" or json_flag


def output_json_envelope(envelope: Any) -> None:
    click.echo(envelope.to_json())


@click.group()
@click.version_option(package_name="dansbag-cli")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.pass_context
def cli(ctx: click.Context, output_format: str) -> None:
    """dansbag - Validate bags against the DANS BagIt profile."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


def _print_verdict(verdict: ComplianceVerdict, *, verbose: bool) -> None:
    header, *lines = verdict.to_text().split("\n")
    info(header)
    for line in lines:
        if line.startswith(_VIOLATION_BULLET):
            error(line)
        else:
            detail(line)

    if verbose and verdict.report is not None:
        for entry in verdict.report.entries:
            if entry.outcome.status is Status.SKIPPED:
                detail(f"[{entry.rule_id}] skipped (depends on {entry.outcome.skipped_by})")

    if verdict.is_compliant:
        success("Bag is compliant")
    else:
        count = len(verdict.violated_rules)
        error(f"Bag is not compliant: {count} rule{'s' if count != 1 else ''} violated")


def _report_fault(use_json: bool, err: DansBagError) -> None:
    if use_json:
        data = None
        if isinstance(err, ValidationAbortedError):
            data = {"report": err.report.to_dict()}
        output_json_envelope(error_envelope("validate", [ErrorDetail.from_error(err)], data=data))
    else:
        error(f"{err.message} ({err.code})")


@cli.command()
@click.argument("location", type=click.Path(path_type=Path))
@click.option(
    "--level",
    type=click.Choice([level.value for level in ValidationLevel]),
    default=ValidationLevel.STAND_ALONE.value,
    show_default=True,
    help="Validate the bag alone or against the data station's catalog.",
)
@click.option(
    "--package-type",
    type=click.Choice([kind.value for kind in PackageType]),
    default=PackageType.DEPOSIT.value,
    show_default=True,
    help="Information package type reported in the verdict.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: .dansbag/config.yaml).",
)
@click.option("--dataverse-url", default=None, help="Dataverse base URL (env: DANSBAG_DATAVERSE_URL).")
@click.option("--api-key", default=None, help="Dataverse API key (env: DANSBAG_API_KEY).")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Show skipped rules and debug logging")
@click.pass_context
def validate(
    ctx: click.Context,
    location: Path,
    level: str,
    package_type: str,
    config_file: Path | None,
    dataverse_url: str | None,
    api_key: str | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Validate a bag against the DANS BagIt profile.

    LOCATION is a bag directory or a zip file containing one.
    """
    use_json = should_output_json(ctx, json_output)
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        settings = load_settings(config_file, dataverse_url=dataverse_url, api_key=api_key)
        validator = BagValidator.from_settings(settings, ValidationLevel(level))
        verdict = validator.validate(location, package_type=PackageType(package_type))
    except DansBagError as err:
        _report_fault(use_json, err)
        raise SystemExit(EXIT_REQUEST_FAULT) from err

    if use_json:
        output_json_envelope(success_envelope("validate", verdict.to_dict()))
    else:
        _print_verdict(verdict, verbose=verbose)

    if not verdict.is_compliant:
        raise SystemExit(EXIT_NOT_COMPLIANT)


@cli.command()
@click.option(
    "--level",
    type=click.Choice([level.value for level in ValidationLevel]),
    default=ValidationLevel.STAND_ALONE.value,
    show_default=True,
)
@click.option("--config", "config_file", type=click.Path(path_type=Path, dir_okay=False), default=None)
@click.option("--json", "json_output", is_flag=True, help="Output rules as JSON")
@click.pass_context
def rules(ctx: click.Context, level: str, config_file: Path | None, json_output: bool) -> None:
    """List the rules checked at a validation level, in execution order."""
    from dansbag_cli.profile import build_rule_catalog
    from dansbag_cli.validation.documents import SchemaCache

    use_json = should_output_json(ctx, json_output)
    try:
        settings = load_settings(config_file)
        schemas = SchemaCache(settings.schema_locations, timeout=settings.catalog.timeout)
        catalog = build_rule_catalog(ValidationLevel(level), schemas, settings)
    except DansBagError as err:
        if use_json:
            output_json_envelope(error_envelope("rules", [ErrorDetail.from_error(err)]))
        else:
            error(f"{err.message} ({err.code})")
        raise SystemExit(EXIT_REQUEST_FAULT) from err

    listing = [
        {
            "rule": rule.id,
            "depends_on": sorted(rule.depends_on),
            "description": rule.description,
        }
        for rule in catalog
    ]
    if use_json:
        output_json_envelope(success_envelope("rules", {"level": level, "rules": listing}))
        return
    for item in listing:
        deps = f" (after {', '.join(item['depends_on'])})" if item["depends_on"] else ""
        info(f"{item['rule']}: {item['description']}{deps}")
