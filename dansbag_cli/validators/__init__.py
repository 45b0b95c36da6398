"""Validator families used by the rule catalog.

- Structure: FileExists, FilesXmlPathsExist, FilesXmlDescribesPayload
- Manifests: ManifestsCoverPayload, ManifestChecksumsMatch
- XML: ConformsToSchema
- Geospatial: PointsHaveAtLeastTwoValues (polygons via validate_polygon)
- Identity: IdentityReconciler, IdentityCheck, OrganizationalIdentifierConsistent
"""

from dansbag_cli.validators.base import Validator
from dansbag_cli.validators.geo import PointsHaveAtLeastTwoValues, points_have_at_least_two_values
from dansbag_cli.validators.identity import (
    IdentityCheck,
    IdentityReconciler,
    OrganizationalIdentifierConsistent,
    organizational_identifier_consistent,
)
from dansbag_cli.validators.manifest import (
    ManifestChecksumsMatch,
    ManifestsCoverPayload,
    manifest_checksums_match,
    manifests_cover_payload,
)
from dansbag_cli.validators.polygons import validate_polygon
from dansbag_cli.validators.structure import (
    FileExists,
    FilesXmlDescribesPayload,
    FilesXmlPathsExist,
    file_exists,
    files_xml_describes_payload,
    files_xml_paths_exist,
)
from dansbag_cli.validators.xml_schema import ConformsToSchema, conforms_to_schema

__all__ = [
    "ConformsToSchema",
    "FileExists",
    "FilesXmlDescribesPayload",
    "FilesXmlPathsExist",
    "IdentityCheck",
    "IdentityReconciler",
    "ManifestChecksumsMatch",
    "ManifestsCoverPayload",
    "OrganizationalIdentifierConsistent",
    "PointsHaveAtLeastTwoValues",
    "Validator",
    "conforms_to_schema",
    "file_exists",
    "files_xml_describes_payload",
    "files_xml_paths_exist",
    "manifest_checksums_match",
    "manifests_cover_payload",
    "organizational_identifier_consistent",
    "points_have_at_least_two_values",
    "validate_polygon",
]
