"""The DANS bag rule catalog.

Rule numbers follow the DANS BagIt profile. Rules that read a parsed XML
document depend on that document's conformance rule, so a malformed
document is reported once, as a violation of its conformance rule, and the
rules that need its content are skipped.

    1.1.1   Payload files are listed in a manifest
    1.1.2   Manifest checksums match the payload
    1.2.1   bagit.txt exists
    1.2.2   bag-info.txt exists
    2.2(a)  metadata/dataset.xml exists
    2.2(b)  metadata/files.xml exists
    3.1.1   dataset.xml conforms to its schema
    3.1.7   dataset.xml points, boxes and polygons are valid
    3.2.1   files.xml conforms to its schema
    3.2.2   files.xml filepaths refer to payload files
    3.2.3   files.xml describes every payload file
    4.x     Identity reconciliation (data station context only)
"""

from __future__ import annotations

from dansbag_cli.config import ValidatorSettings
from dansbag_cli.constants import BAG_INFO_TXT, BAGIT_TXT, DATASET_XML, FILES_XML
from dansbag_cli.validation.documents import SchemaCache
from dansbag_cli.validation.rules import Rule, RuleCatalog
from dansbag_cli.validation.verdict import ValidationLevel
from dansbag_cli.validators import (
    IdentityCheck,
    IdentityReconciler,
    conforms_to_schema,
    file_exists,
    files_xml_describes_payload,
    files_xml_paths_exist,
    manifest_checksums_match,
    manifests_cover_payload,
    points_have_at_least_two_values,
    validate_polygon,
)
from dansbag_cli.validators.identity import (
    COLLECTION_ROLE,
    DATASET_ROLE,
    NO_DATASET_VERSION,
    NO_MATCHING_DATASET,
    OTHER_ID_MISMATCH,
    TOKEN_NOT_LINKED,
)
from dansbag_cli.validators.polygons import PolygonValidator

DATASET_SCHEMA_KEY = "dataset.xml"
FILES_SCHEMA_KEY = "files.xml"

_IDENTITY_DESCRIPTIONS: dict[str, str] = {
    COLLECTION_ROLE: "Depositor has an accepted role on the target collection",
    DATASET_ROLE: "Depositor has an accepted role on the dataset",
    NO_DATASET_VERSION: "Is-Version-Of refers to an existing dataset version",
    NO_MATCHING_DATASET: "Organizational identifier matches exactly one dataset",
    TOKEN_NOT_LINKED: "SWORD token is linked to a dataset",
    OTHER_ID_MISMATCH: "Organizational identifier matches the dataset's other identifier",
}


def stand_alone_rules(
    schemas: SchemaCache,
    polygon_validator: PolygonValidator = validate_polygon,
) -> list[Rule]:
    """Rules that only look at the bag itself."""
    return [
        Rule("1.1.1", manifests_cover_payload(), description="Payload files are listed in a manifest"),
        Rule(
            "1.1.2",
            manifest_checksums_match(),
            frozenset({"1.1.1"}),
            "Manifest checksums match the payload",
        ),
        Rule("1.2.1", file_exists(BAGIT_TXT), description="bagit.txt exists"),
        Rule("1.2.2", file_exists(BAG_INFO_TXT), description="bag-info.txt exists"),
        Rule("2.2(a)", file_exists(DATASET_XML), description="metadata/dataset.xml exists"),
        Rule("2.2(b)", file_exists(FILES_XML), description="metadata/files.xml exists"),
        Rule(
            "3.1.1",
            conforms_to_schema(DATASET_XML, DATASET_SCHEMA_KEY, schemas),
            frozenset({"2.2(a)"}),
            "dataset.xml conforms to its schema",
        ),
        Rule(
            "3.1.7",
            points_have_at_least_two_values(DATASET_XML, polygon_validator),
            frozenset({"3.1.1"}),
            "Points, bounding boxes and polygons in dataset.xml are valid",
        ),
        Rule(
            "3.2.1",
            conforms_to_schema(FILES_XML, FILES_SCHEMA_KEY, schemas),
            frozenset({"2.2(b)"}),
            "files.xml conforms to its schema",
        ),
        Rule(
            "3.2.2",
            files_xml_paths_exist(),
            frozenset({"1.1.1", "3.2.1"}),
            "files.xml filepaths refer to payload files",
        ),
        Rule(
            "3.2.3",
            files_xml_describes_payload(),
            frozenset({"1.1.1", "3.2.1"}),
            "files.xml describes every payload file",
        ),
    ]


def identity_rules(reconciler: IdentityReconciler) -> list[Rule]:
    """Rules that cross-check the bag with the data station's catalog."""
    return [
        Rule(code, IdentityCheck(code, reconciler), description=description)
        for code, description in _IDENTITY_DESCRIPTIONS.items()
    ]


def build_rule_catalog(
    level: ValidationLevel,
    schemas: SchemaCache,
    settings: ValidatorSettings | None = None,
    *,
    polygon_validator: PolygonValidator = validate_polygon,
) -> RuleCatalog:
    """Assemble the rule catalog for a validation level.

    Build it once at startup and reuse it for every run.

    Raises:
        UnknownSchemaError: If a document schema was not loaded.
        ConfigurationError: If the rules do not form a valid catalog.
    """
    settings = settings or ValidatorSettings()
    for key in (DATASET_SCHEMA_KEY, FILES_SCHEMA_KEY):
        schemas.get(key)
    rules = stand_alone_rules(schemas, polygon_validator)
    if level is ValidationLevel.WITH_DATA_STATION_CONTEXT:
        reconciler = IdentityReconciler(
            other_id_prefixes=settings.other_id_prefixes,
            depositor_roles=settings.depositor_roles,
            collection_alias=settings.catalog.collection_alias,
        )
        rules.extend(identity_rules(reconciler))
    return RuleCatalog(rules)
