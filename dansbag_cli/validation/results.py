"""Validation result data structures.

RuleOutcome is the single tagged result every rule produces. The
ValidationReport keeps them in execution order and derives the verdict.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dansbag_cli.errors import ValidationAbortedError


class Status(Enum):
    """Outcome status of a single rule.

    SUCCESS: The rule's check passed.
    VIOLATION: The package fails the rule (recoverable, reported).
    SKIPPED: A declared dependency did not succeed; the rule was not evaluated.
    FATAL: The rule could not be evaluated at all; the run was aborted.
    """

    SUCCESS = "success"
    VIOLATION = "violation"
    SKIPPED = "skipped"
    FATAL = "fatal"


@dataclass(frozen=True)
class RuleOutcome:
    """Result of evaluating one rule.

    Attributes:
        status: Which variant holds.
        messages: Violation messages in order (VIOLATION only).
        skipped_by: Id of the dependency that was not met (SKIPPED only).
        diagnostic: Why the run was aborted (FATAL only).
    """

    status: Status
    messages: tuple[str, ...] = ()
    skipped_by: str | None = None
    diagnostic: str | None = None

    @classmethod
    def success(cls) -> RuleOutcome:
        return cls(Status.SUCCESS)

    @classmethod
    def violation(cls, messages: Iterable[str]) -> RuleOutcome:
        msgs = tuple(messages)
        if not msgs:
            raise ValueError("A violation needs at least one message")
        return cls(Status.VIOLATION, messages=msgs)

    @classmethod
    def from_messages(cls, messages: Iterable[str]) -> RuleOutcome:
        """SUCCESS when there are no messages, VIOLATION otherwise."""
        msgs = tuple(messages)
        return cls.violation(msgs) if msgs else cls.success()

    @classmethod
    def skipped(cls, rule_id: str) -> RuleOutcome:
        return cls(Status.SKIPPED, skipped_by=rule_id)

    @classmethod
    def fatal(cls, diagnostic: str) -> RuleOutcome:
        return cls(Status.FATAL, diagnostic=diagnostic)

    @property
    def passed(self) -> bool:
        return self.status is Status.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d: dict[str, Any] = {"status": self.status.value}
        if self.messages:
            d["messages"] = list(self.messages)
        if self.skipped_by is not None:
            d["skipped_by"] = self.skipped_by
        if self.diagnostic is not None:
            d["diagnostic"] = self.diagnostic
        return d


@dataclass(frozen=True)
class ReportEntry:
    """One (rule id, outcome) pair of a report."""

    rule_id: str
    outcome: RuleOutcome

    def to_dict(self) -> dict[str, Any]:
        return {"rule": self.rule_id, **self.outcome.to_dict()}


@dataclass
class ValidationReport:
    """Ordered outcomes of one validation run.

    Attributes:
        entries: One entry per registered rule, in execution order.
    """

    entries: list[ReportEntry] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        """True if no rule produced a VIOLATION or FATAL outcome."""
        return not any(
            e.outcome.status in (Status.VIOLATION, Status.FATAL) for e in self.entries
        )

    @property
    def violations(self) -> list[ReportEntry]:
        """Entries whose rule was violated."""
        return [e for e in self.entries if e.outcome.status is Status.VIOLATION]

    @property
    def skipped(self) -> list[ReportEntry]:
        return [e for e in self.entries if e.outcome.status is Status.SKIPPED]

    @property
    def fatal(self) -> ReportEntry | None:
        """The entry that aborted the run, if any."""
        for entry in self.entries:
            if entry.outcome.status is Status.FATAL:
                return entry
        return None

    @property
    def violated_rules(self) -> list[str]:
        return [e.rule_id for e in self.violations]

    def outcome_of(self, rule_id: str) -> RuleOutcome:
        """Return the outcome recorded for a rule.

        Raises:
            KeyError: If the rule is not part of this report.
        """
        for entry in self.entries:
            if entry.rule_id == rule_id:
                return entry.outcome
        raise KeyError(rule_id)

    def raise_for_fatal(self) -> None:
        """Raise ValidationAbortedError if the run was aborted."""
        entry = self.fatal
        if entry is not None:
            raise ValidationAbortedError(entry.rule_id, entry.outcome.diagnostic or "", self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for --json output."""
        return {
            "is_compliant": self.is_compliant,
            "violation_count": len(self.violations),
            "skipped_count": len(self.skipped),
            "results": [e.to_dict() for e in self.entries],
        }
