"""Rule engine: executes a rule catalog against one bag."""

from __future__ import annotations

import logging

from dansbag_cli.errors import FatalValidationError
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import ReportEntry, RuleOutcome, Status, ValidationReport
from dansbag_cli.validation.rules import RuleCatalog

logger = logging.getLogger(__name__)


def run(catalog: RuleCatalog, ctx: ValidationContext) -> ValidationReport:
    """Run every rule of the catalog in dependency order.

    A rule whose dependency did not succeed is SKIPPED without calling its
    validator. A FatalValidationError from a validator is recorded as FATAL
    and no further validators are called; the rules that did not get to run
    are recorded as SKIPPED by the fatal rule.

    Args:
        catalog: The rules to evaluate.
        ctx: Context of this run (not shared with other runs).

    Returns:
        ValidationReport with exactly one entry per rule, in execution order.
    """
    outcomes: dict[str, RuleOutcome] = {}
    entries: list[ReportEntry] = []
    aborted_by: str | None = None

    for rule in catalog:
        if aborted_by is not None:
            outcome = RuleOutcome.skipped(aborted_by)
        else:
            unmet = next(
                (
                    dep
                    for dep in catalog.dependencies_in_order(rule)
                    if outcomes[dep].status is not Status.SUCCESS
                ),
                None,
            )
            if unmet is not None:
                logger.debug("Skipping rule %s: dependency %s not met", rule.id, unmet)
                outcome = RuleOutcome.skipped(unmet)
            else:
                logger.debug("Evaluating rule %s", rule.id)
                try:
                    outcome = rule.evaluate(ctx)
                except FatalValidationError as err:
                    logger.error("Rule %s aborted validation: %s", rule.id, err.message)
                    outcome = RuleOutcome.fatal(err.message)
                    aborted_by = rule.id

        outcomes[rule.id] = outcome
        entries.append(ReportEntry(rule.id, outcome))

    return ValidationReport(entries=entries)
