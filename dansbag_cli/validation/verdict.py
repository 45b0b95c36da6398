"""Report builder: turns a ValidationReport into the verdict callers consume."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dansbag_cli.constants import PROFILE_VERSION
from dansbag_cli.validation.results import ValidationReport


class ValidationLevel(Enum):
    """How much context the validation may use.

    STAND_ALONE: Only the bag itself.
    WITH_DATA_STATION_CONTEXT: The bag plus the data station's catalog.
    """

    STAND_ALONE = "STAND-ALONE"
    WITH_DATA_STATION_CONTEXT = "WITH-DATA-STATION-CONTEXT"


class PackageType(Enum):
    """Kind of information package being validated."""

    DEPOSIT = "DEPOSIT"
    MIGRATION = "MIGRATION"


@dataclass(frozen=True)
class RuleViolation:
    """One violation message of one rule."""

    rule: str
    violation: str

    def to_dict(self) -> dict[str, str]:
        return {"rule": self.rule, "violation": self.violation}


@dataclass
class ComplianceVerdict:
    """Compliance verdict for one package.

    Attributes:
        bag_location: Location the caller gave, or None for uploaded zips.
        name: Name of the bag directory.
        profile_version: Version of the profile the rules implement.
        information_package_type: DEPOSIT or MIGRATION.
        level: Validation level used.
        is_compliant: True if no rule was violated.
        rule_violations: One entry per violation message, in rule order.
        report: The full report the verdict was built from.
    """

    bag_location: str | None
    name: str
    information_package_type: PackageType
    level: ValidationLevel
    is_compliant: bool
    rule_violations: list[RuleViolation] = field(default_factory=list)
    profile_version: str = PROFILE_VERSION
    report: ValidationReport | None = field(default=None, repr=False, compare=False)

    @property
    def violated_rules(self) -> list[str]:
        """Distinct violated rule ids, in rule order."""
        return list(dict.fromkeys(v.rule for v in self.rule_violations))

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "bag_location": self.bag_location,
            "name": self.name,
            "profile_version": self.profile_version,
            "information_package_type": self.information_package_type.value,
            "level": self.level.value,
            "is_compliant": self.is_compliant,
            "rule_violations": [v.to_dict() for v in self.rule_violations],
        }

    def to_text(self) -> str:
        """Plain-text rendering, one field per line."""
        lines = [
            f"Bag location: {self.bag_location or ''}",
            f"Name: {self.name}",
            f"Profile version: {self.profile_version}",
            f"Information package type: {self.information_package_type.value}",
            f"Level: {self.level.value}",
            f"Is compliant: {str(self.is_compliant).lower()}",
            "Rule violations:",
        ]
        lines.extend(f"  - [{v.rule}] {v.violation}" for v in self.rule_violations)
        return "\n".join(lines)


def build_verdict(
    report: ValidationReport,
    *,
    name: str,
    bag_location: str | None = None,
    package_type: PackageType = PackageType.DEPOSIT,
    level: ValidationLevel = ValidationLevel.STAND_ALONE,
) -> ComplianceVerdict:
    """Build the verdict for a completed (non-aborted) report."""
    violations = [
        RuleViolation(rule=entry.rule_id, violation=message)
        for entry in report.violations
        for message in entry.outcome.messages
    ]
    return ComplianceVerdict(
        bag_location=bag_location,
        name=name,
        information_package_type=package_type,
        level=level,
        is_compliant=report.is_compliant,
        rule_violations=violations,
        report=report,
    )
