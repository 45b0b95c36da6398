"""Geospatial checks on the GML embedded in dataset.xml.

Covers gml:Point positions, gml:Envelope corners (including the RD bounds
check) and gml:Polygon rings through a pluggable PolygonValidator. Messages
from all elements accumulate in document order into one outcome.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from lxml import etree

from dansbag_cli.constants import (
    DATASET_XML,
    NAMESPACES,
    RD_MAX_X,
    RD_MAX_Y,
    RD_MIN_X,
    RD_MIN_Y,
    RD_SRS_NAMES,
)
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import RuleOutcome
from dansbag_cli.validators.base import Validator
from dansbag_cli.validators.polygons import PolygonValidator, validate_polygon

# Union keeps the matches in document order
_GEOMETRY_XPATH = "//gml:Point/gml:pos | //gml:Envelope | //gml:Polygon"
_CORNER_XPATH = "gml:lowerCorner | gml:upperCorner"


@dataclass(frozen=True)
class Coordinate:
    """A position in a projected coordinate system."""

    x: float
    y: float


@dataclass(frozen=True)
class Envelope:
    """A bounding box as given by gml:Envelope."""

    lower: Coordinate | None
    upper: Coordinate | None
    srs_name: str | None = None

    @property
    def is_rd(self) -> bool:
        """True when the envelope is (or defaults to) RD."""
        return self.srs_name is None or self.srs_name in RD_SRS_NAMES


def is_within_rd_bounds(coordinate: Coordinate) -> bool:
    """True if the coordinate lies inside the RD extent (bounds inclusive)."""
    return RD_MIN_X <= coordinate.x <= RD_MAX_X and RD_MIN_Y <= coordinate.y <= RD_MAX_Y


def _to_number(token: str) -> float:
    # float() accepts digit separators, coordinates must not
    if "_" in token:
        raise ValueError(token)
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(token)
    return value


def parse_coordinate(label: str, raw: str) -> tuple[Coordinate | None, str | None]:
    """Parse 'x y [...]' text into a Coordinate.

    Returns:
        (coordinate, None) on success, (None, message) when the text has
        fewer than two values or a value is not numeric. Values beyond the
        second are ignored.
    """
    tokens = raw.split()
    if len(tokens) < 2:
        return None, f"{label} has less than two coordinates: {raw}"
    try:
        values = [_to_number(t) for t in tokens]
    except ValueError:
        return None, f"{label} has non numeric coordinates: {raw}"
    return Coordinate(values[0], values[1]), None


def _text(element: etree._Element) -> str:
    return (element.text or "").strip()


def envelope_messages(element: etree._Element) -> list[str]:
    """Corner problems of one gml:Envelope, in the order the corners appear.

    Each corner is parsed once. Corners of an RD envelope must lie inside
    the RD bounds; a malformed corner does not stop the other from being
    checked.
    """
    corners = []
    for corner in element.xpath(_CORNER_XPATH, namespaces=NAMESPACES):
        name = etree.QName(corner).localname
        raw = _text(corner)
        coordinate, problem = parse_coordinate(name, raw)
        corners.append((name, raw, coordinate, problem))

    parsed = {name: coordinate for name, _, coordinate, _ in corners}
    envelope = Envelope(parsed.get("lowerCorner"), parsed.get("upperCorner"), element.get("srsName"))

    messages: list[str] = []
    for name, raw, coordinate, problem in corners:
        if problem is not None:
            messages.append(problem)
        elif coordinate is not None and envelope.is_rd and not is_within_rd_bounds(coordinate):
            messages.append(f"{name} is outside RD bounds: {raw}")
    return messages


def geometry_messages(root: etree._Element, polygon_validator: PolygonValidator) -> list[str]:
    """All point, corner and polygon problems of a document, in document order."""
    messages: list[str] = []
    for element in root.xpath(_GEOMETRY_XPATH, namespaces=NAMESPACES):
        name = etree.QName(element).localname
        if name == "Polygon":
            messages.extend(polygon_validator(element))
        elif name == "Envelope":
            messages.extend(envelope_messages(element))
        else:
            _, problem = parse_coordinate(name, _text(element))
            if problem is not None:
                messages.append(problem)
    return messages


class PointsHaveAtLeastTwoValues(Validator):
    """Points, envelope corners and polygons in dataset.xml must be well formed.

    The document must be parseable: a parse failure raises
    DocumentParseError, which aborts the run. Register this validator with a
    dependency on the document's conformance rule.
    """

    def __init__(
        self,
        relative_path: str = DATASET_XML,
        polygon_validator: PolygonValidator = validate_polygon,
    ) -> None:
        self.relative_path = relative_path
        self.polygon_validator = polygon_validator

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        root = ctx.documents.tree(self.relative_path).getroot()
        return self._collect(geometry_messages(root, self.polygon_validator))


def points_have_at_least_two_values(
    relative_path: str = DATASET_XML, polygon_validator: PolygonValidator = validate_polygon
) -> PointsHaveAtLeastTwoValues:
    """Build the geometry validator for a document and polygon validator."""
    return PointsHaveAtLeastTwoValues(relative_path, polygon_validator)
