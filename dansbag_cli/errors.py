"""Structured error codes for dansbag.

All errors follow the format DBAG-{category}{number}:
- DBAG-CFG*: Configuration errors (rule catalog, schemas, config file)
- DBAG-FTL*: Fatal validation errors (abort the whole run)
- DBAG-PKG*: Package errors (bag cannot be located or opened)

Rule violations are never raised; they are data in the ValidationReport.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dansbag_cli.validation.results import ValidationReport


class DansBagError(Exception):
    """Base class for all dansbag errors.

    All errors have:
    - code: Structured error code (e.g., DBAG-CFG001)
    - message: Human-readable error message
    """

    code: str = "DBAG-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a dansbag error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
        }


# Configuration Errors (DBAG-CFG*)
class ConfigurationError(DansBagError):
    """Base class for programmer/configuration errors detected at startup."""

    code = "DBAG-CFG000"


class DuplicateRuleError(ConfigurationError):
    """Raised when two rules in a catalog share an id.

    Error code: DBAG-CFG001
    """

    code = "DBAG-CFG001"

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is registered more than once", rule_id=rule_id)


class UnknownDependencyError(ConfigurationError):
    """Raised when a rule depends on an id that is not in the catalog.

    Error code: DBAG-CFG002
    """

    code = "DBAG-CFG002"

    def __init__(self, rule_id: str, dependency: str) -> None:
        super().__init__(
            f"Rule '{rule_id}' depends on unknown rule '{dependency}'",
            rule_id=rule_id,
            dependency=dependency,
        )


class RuleCycleError(ConfigurationError):
    """Raised when rule dependencies form a cycle.

    Error code: DBAG-CFG003
    """

    code = "DBAG-CFG003"

    def __init__(self, rule_ids: list[str]) -> None:
        super().__init__(
            f"Rule dependencies form a cycle between: {', '.join(rule_ids)}",
            rule_ids=rule_ids,
        )


class SchemaLoadError(ConfigurationError):
    """Raised when an XML schema cannot be loaded or compiled.

    Error code: DBAG-CFG004
    """

    code = "DBAG-CFG004"

    def __init__(self, schema_key: str, location: str, reason: str) -> None:
        super().__init__(
            f"Cannot load schema '{schema_key}' from {location}: {reason}",
            schema_key=schema_key,
            location=location,
        )


class UnknownSchemaError(ConfigurationError):
    """Raised when a validator asks for a schema key that was never registered.

    Error code: DBAG-CFG005
    """

    code = "DBAG-CFG005"

    def __init__(self, schema_key: str) -> None:
        super().__init__(f"No schema registered for '{schema_key}'", schema_key=schema_key)


class InvalidConfigError(ConfigurationError):
    """Raised when the configuration file has an unexpected shape.

    Error code: DBAG-CFG006
    """

    code = "DBAG-CFG006"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Invalid configuration for '{key}': {reason}", key=key)


# Fatal Validation Errors (DBAG-FTL*)
class FatalValidationError(DansBagError):
    """Base class for conditions that abort a validation run.

    Raised by validators; the rule engine records them as FATAL outcomes.
    """

    code = "DBAG-FTL000"


class DocumentParseError(FatalValidationError):
    """Raised when a rule needs a parsed document that is not well-formed.

    Error code: DBAG-FTL001

    The message is the formatted parse diagnostic, so callers see the same
    text the conformance rule reports as a violation.
    """

    code = "DBAG-FTL001"

    def __init__(self, path: str, diagnostic: str) -> None:
        super().__init__(diagnostic, path=path)


class CatalogUnavailableError(FatalValidationError):
    """Raised when the external catalog cannot be reached or answers with an error.

    Error code: DBAG-FTL002
    """

    code = "DBAG-FTL002"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Catalog request '{operation}' failed: {reason}",
            operation=operation,
        )


class BagInfoReadError(FatalValidationError):
    """Raised when bag-info.txt exists but cannot be read or decoded as UTF-8.

    Error code: DBAG-FTL004
    """

    code = "DBAG-FTL004"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path} could not be read: {reason}", path=path)


class ValidationAbortedError(FatalValidationError):
    """Raised at the boundary when a run ended with a FATAL outcome.

    Error code: DBAG-FTL003

    Carries the partial report so callers can still show what was evaluated.
    """

    code = "DBAG-FTL003"

    def __init__(self, rule_id: str, diagnostic: str, report: ValidationReport) -> None:
        super().__init__(
            f"Validation aborted by rule {rule_id}: {diagnostic}",
            rule_id=rule_id,
        )
        self.report = report


# Package Errors (DBAG-PKG*)
class PackageError(DansBagError):
    """Base class for errors locating or opening a package."""

    code = "DBAG-PKG000"


class BagNotFoundError(PackageError):
    """Raised when the bag location does not exist or cannot be read.

    Error code: DBAG-PKG001
    """

    code = "DBAG-PKG001"

    def __init__(self, location: str) -> None:
        super().__init__(
            f"Bag on path '{location}' could not be found or read", location=location
        )


class BagExtractionError(PackageError):
    """Raised when a zipped package does not contain a bag directory.

    Error code: DBAG-PKG002
    """

    code = "DBAG-PKG002"

    def __init__(self, reason: str, **context: Any) -> None:
        super().__init__(reason, **context)
