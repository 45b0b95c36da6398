"""dansbag - Validate bags against the DANS BagIt profile."""

from dansbag_cli.check import BagValidator, validate_bag
from dansbag_cli.cli import cli
from dansbag_cli.validation import ComplianceVerdict, PackageType, ValidationLevel, ValidationReport

__all__ = [
    "BagValidator",
    "ComplianceVerdict",
    "PackageType",
    "ValidationLevel",
    "ValidationReport",
    "cli",
    "validate_bag",
]
