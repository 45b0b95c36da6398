"""XML well-formedness and schema conformance.

This is the one rule family that treats a parse failure as an ordinary
violation: the parse diagnostic becomes the rule's message. Rules that need
the parsed tree depend on the conformance rule of their document.
"""

from __future__ import annotations

import logging

from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.documents import SchemaCache, format_xml_error
from dansbag_cli.validation.results import RuleOutcome
from dansbag_cli.validators.base import Validator

logger = logging.getLogger(__name__)


class ConformsToSchema(Validator):
    """A bag document must be well-formed and valid against its schema.

    Args:
        relative_path: Document path relative to the bag root.
        schema_key: Key of the compiled schema in the SchemaCache.
        schemas: Process-wide schema cache.
    """

    def __init__(self, relative_path: str, schema_key: str, schemas: SchemaCache) -> None:
        self.relative_path = relative_path
        self.schema_key = schema_key
        self._schemas = schemas

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        document = ctx.documents.get(self.relative_path)
        if document.diagnostic is not None:
            return self._violation(document.diagnostic.format())

        schema = self._schemas.get(self.schema_key)
        tree = document.require_tree()
        if schema.validate(tree):
            return self._success()

        filename = self.relative_path.rsplit("/", 1)[-1]
        errors = sorted(schema.error_log, key=lambda e: (e.line, e.column))
        logger.debug("%s has %d schema errors", self.relative_path, len(errors))
        if not errors:
            return self._violation(f"{filename} is not valid against schema {self.schema_key}")
        return self._collect(format_xml_error(filename, e.line, e.column, e.message) for e in errors)


def conforms_to_schema(relative_path: str, schema_key: str, schemas: SchemaCache) -> ConformsToSchema:
    """Build the conformance validator for one document."""
    return ConformsToSchema(relative_path, schema_key, schemas)
