"""Unit tests for dansbag error classes.

Tests cover:
- Base DansBagError behavior
- Error codes format (DBAG-{category}{number})
- Error to_dict serialization
- Category hierarchy (configuration, fatal, package)
"""

from __future__ import annotations

import re

import pytest

from dansbag_cli.errors import (
    BagExtractionError,
    BagNotFoundError,
    CatalogUnavailableError,
    ConfigurationError,
    DansBagError,
    DocumentParseError,
    DuplicateRuleError,
    FatalValidationError,
    InvalidConfigError,
    PackageError,
    RuleCycleError,
    SchemaLoadError,
    UnknownDependencyError,
    UnknownSchemaError,
    ValidationAbortedError,
)
from dansbag_cli.validation.results import ValidationReport


class TestDansBagError:
    """Tests for base DansBagError class."""

    @pytest.mark.unit
    def test_error_has_code_and_message(self) -> None:
        error = DansBagError("Test error message")

        assert error.code == "DBAG-000"
        assert error.message == "Test error message"

    @pytest.mark.unit
    def test_error_str_includes_code(self) -> None:
        error = DansBagError("Test message")

        assert str(error) == "[DBAG-000] Test message"

    @pytest.mark.unit
    def test_error_to_dict(self) -> None:
        error = DansBagError("Test message", extra=42)
        data = error.to_dict()

        assert data == {"code": "DBAG-000", "message": "Test message", "context": {"extra": "42"}}

    @pytest.mark.unit
    def test_context_is_exposed_as_attributes(self) -> None:
        error = DansBagError("Test message", path="metadata/dataset.xml")

        assert error.path == "metadata/dataset.xml"  # type: ignore[attr-defined]

    @pytest.mark.unit
    def test_reserved_context_keys_do_not_override(self) -> None:
        error = DansBagError("Real message", code="fake")

        assert error.message == "Real message"
        assert error.code == "DBAG-000"


class TestErrorCodes:
    """Every concrete error carries a unique code of the documented shape."""

    ERRORS = [
        DuplicateRuleError("1.1.1"),
        UnknownDependencyError("1.1.2", "9.9"),
        RuleCycleError(["1.1", "1.2"]),
        SchemaLoadError("files.xml", "/nowhere/files.xsd", "not found"),
        UnknownSchemaError("files.xml"),
        InvalidConfigError("schemas", "expected a mapping"),
        DocumentParseError("metadata/dataset.xml", "dataset.xml - line: 1; column: 2 msg: x."),
        CatalogUnavailableError("search_by_identifier", "timeout"),
        ValidationAbortedError("3.1.7", "boom", ValidationReport()),
        BagNotFoundError("/tmp/missing"),
        BagExtractionError("Extracted zip does not contain a directory"),
    ]

    @pytest.mark.unit
    @pytest.mark.parametrize("error", ERRORS, ids=lambda e: type(e).__name__)
    def test_code_format(self, error: DansBagError) -> None:
        assert re.fullmatch(r"DBAG-(CFG|FTL|PKG)\d{3}", error.code)

    @pytest.mark.unit
    def test_codes_are_unique(self) -> None:
        codes = [e.code for e in self.ERRORS]
        assert len(codes) == len(set(codes))


class TestHierarchy:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error_type",
        [DuplicateRuleError, UnknownDependencyError, RuleCycleError, SchemaLoadError, UnknownSchemaError, InvalidConfigError],
    )
    def test_configuration_errors(self, error_type: type) -> None:
        assert issubclass(error_type, ConfigurationError)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error_type", [DocumentParseError, CatalogUnavailableError, ValidationAbortedError]
    )
    def test_fatal_errors(self, error_type: type) -> None:
        assert issubclass(error_type, FatalValidationError)
        assert not issubclass(error_type, ConfigurationError)

    @pytest.mark.unit
    @pytest.mark.parametrize("error_type", [BagNotFoundError, BagExtractionError])
    def test_package_errors(self, error_type: type) -> None:
        assert issubclass(error_type, PackageError)


class TestMessages:
    @pytest.mark.unit
    def test_document_parse_error_message_is_the_diagnostic(self) -> None:
        diagnostic = "dataset.xml - line: 3; column: 7 msg: broken."
        error = DocumentParseError("metadata/dataset.xml", diagnostic)

        assert error.message == diagnostic
        assert error.path == "metadata/dataset.xml"  # type: ignore[attr-defined]

    @pytest.mark.unit
    def test_bag_not_found_message(self) -> None:
        error = BagNotFoundError("/tmp/missing")

        assert error.message == "Bag on path '/tmp/missing' could not be found or read"

    @pytest.mark.unit
    def test_validation_aborted_keeps_report(self) -> None:
        report = ValidationReport()
        error = ValidationAbortedError("3.1.7", "boom", report)

        assert error.report is report
        assert error.rule_id == "3.1.7"  # type: ignore[attr-defined]
        assert "3.1.7" in error.message
        assert "boom" in error.message

    @pytest.mark.unit
    def test_rule_cycle_lists_rules(self) -> None:
        error = RuleCycleError(["1.1", "1.2"])

        assert "1.1, 1.2" in error.message
