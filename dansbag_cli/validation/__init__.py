"""Rule engine for DANS bag validation.

This module provides the public API of the engine:
- Rule / RuleCatalog: Numbered checks and their dependency graph
- run(): Evaluate a catalog against one bag
- RuleOutcome / ValidationReport: Tagged per-rule results and their aggregate
- ValidationContext: Per-run view of the bag, its documents and the catalog
- build_verdict(): Turn a report into the compliance verdict

The DANS rule catalog itself is assembled in dansbag_cli.profile.
"""

from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.documents import DocumentCache, ParsedDocument, SchemaCache
from dansbag_cli.validation.results import (
    ReportEntry,
    RuleOutcome,
    Status,
    ValidationReport,
)
from dansbag_cli.validation.rules import Rule, RuleCatalog
from dansbag_cli.validation.runner import run
from dansbag_cli.validation.verdict import (
    ComplianceVerdict,
    PackageType,
    RuleViolation,
    ValidationLevel,
    build_verdict,
)

__all__ = [
    "ComplianceVerdict",
    "DocumentCache",
    "PackageType",
    "ParsedDocument",
    "ReportEntry",
    "Rule",
    "RuleCatalog",
    "RuleOutcome",
    "RuleViolation",
    "SchemaCache",
    "Status",
    "ValidationContext",
    "ValidationLevel",
    "ValidationReport",
    "build_verdict",
    "run",
]
