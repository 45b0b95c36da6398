"""Shared constants for dansbag.

Paths, XML namespaces and coordinate bounds used across validators.
"""

from __future__ import annotations

# Version of the DANS BagIt profile the rule catalog implements
PROFILE_VERSION: str = "1.0.0"

# Bag layout
PAYLOAD_DIR: str = "data"
BAGIT_TXT: str = "bagit.txt"
BAG_INFO_TXT: str = "bag-info.txt"
MANIFEST_PREFIX: str = "manifest-"
DATASET_XML: str = "metadata/dataset.xml"
FILES_XML: str = "metadata/files.xml"

# bag-info.txt elements read for identity reconciliation
BAG_INFO_ORGANIZATIONAL_IDENTIFIER: str = "Has-Organizational-Identifier"
BAG_INFO_IS_VERSION_OF: str = "Is-Version-Of"
BAG_INFO_USER_ACCOUNT: str = "Data-Station-User-Account"

# XML namespaces
GML_NS: str = "http://www.opengis.net/gml"
DDM_NS: str = "http://schemas.dans.knaw.nl/dataset/ddm-v2/"
FILES_NS: str = "http://easy.dans.knaw.nl/schemas/bag/metadata/files/"

NAMESPACES: dict[str, str] = {
    "gml": GML_NS,
    "ddm": DDM_NS,
    "files": FILES_NS,
}

# RD New (Amersfoort, EPSG:28992) valid extent, inclusive
RD_MIN_X: float = -7000.0
RD_MAX_X: float = 300000.0
RD_MIN_Y: float = 289000.0
RD_MAX_Y: float = 629000.0

# srsName spellings that denote RD
RD_SRS_NAMES: frozenset[str] = frozenset(
    {
        "urn:ogc:def:crs:EPSG::28992",
        "http://www.opengis.net/def/crs/EPSG/0/28992",
        "EPSG:28992",
    }
)

# Checksum algorithms accepted in manifest-<alg>.txt
MANIFEST_ALGORITHMS: frozenset[str] = frozenset({"md5", "sha1", "sha256", "sha512"})

# Read buffer for checksum computation
CHECKSUM_CHUNK_SIZE: int = 1024 * 1024
