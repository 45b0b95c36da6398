"""Polygon geometry checks for GML metadata.

The geospatial validator only relies on the PolygonValidator contract: a
callable taking a gml:Polygon element and returning problem messages (an
empty list means the polygon is valid). validate_polygon is the default
implementation; it checks ring structure, not self-intersection.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from lxml import etree

from dansbag_cli.constants import NAMESPACES

PolygonValidator = Callable[[etree._Element], list[str]]

MIN_RING_POSITIONS = 4


def _ring_text(ring: etree._Element) -> str:
    pos_list = ring.find("gml:posList", NAMESPACES)
    if pos_list is not None:
        return (pos_list.text or "").strip()
    return " ".join((p.text or "").strip() for p in ring.iterfind("gml:pos", NAMESPACES))


def _srs_dimension(ring: etree._Element) -> int:
    for element in (ring.find("gml:posList", NAMESPACES), ring, *ring.iterancestors()):
        if element is not None and element.get("srsDimension"):
            try:
                return int(element.get("srsDimension"))
            except ValueError:
                return 2
    return 2


def validate_polygon(polygon: etree._Element) -> list[str]:
    """Check every LinearRing of a polygon.

    A ring needs a multiple of srsDimension numeric values, at least four
    positions, and must end where it starts.
    """
    messages: list[str] = []
    for ring in polygon.iterfind(".//gml:LinearRing", NAMESPACES):
        raw = _ring_text(ring)
        try:
            values = [float(token) for token in raw.split()]
            if not all(math.isfinite(v) for v in values):
                raise ValueError(raw)
        except ValueError:
            messages.append(f"posList has non numeric coordinates: {raw}")
            continue

        dimension = _srs_dimension(ring)
        if len(values) % dimension:
            messages.append(f"posList has an incomplete position (srsDimension {dimension}): {raw}")
            continue

        positions = [tuple(values[i : i + dimension]) for i in range(0, len(values), dimension)]
        if len(positions) < MIN_RING_POSITIONS:
            messages.append(f"LinearRing has less than {MIN_RING_POSITIONS} positions: {raw}")
        elif positions[0] != positions[-1]:
            messages.append(f"LinearRing is not closed: {raw}")
    return messages
