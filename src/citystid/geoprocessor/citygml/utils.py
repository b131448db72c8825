"""
CityGML Utilities
=================

Geometry and tag helpers shared by the building scanner:

- posList parsing into :class:`Point` sequences
- fan triangulation
- ring-to-spatial-ID mapping
- tag classification for the scan state machine
"""

import math
from enum import Enum
from typing import Callable, List, Set, Tuple

from lxml import etree

from ...errors import FormatError
from ...spatial_id import CellId, triangle_cells
from .constants import (
    BOUNDARY_GEOMETRY_LOCAL_NAME,
    BUILDING_LOCAL_NAME,
    BUILDING_NS_FRAGMENT,
    EXTENSION_NS_FRAGMENT,
    GML_NS_PREFIX,
)
from .models import Point


Triangle = Tuple[Point, Point, Point]
CoverFunction = Callable[[int, Point, Point, Point], Set[CellId]]


# =============================================================================
# Geometry Utilities
# =============================================================================

def parse_points(pos_list_text: str) -> List[Point]:
    """
    Parse a GML posList string into 3D points.

    Tokens are consumed three at a time in document order and mapped to
    latitude, longitude and altitude. The ring is not checked for closure.

    Args:
        pos_list_text: Whitespace-separated coordinate string.

    Returns:
        List of points, possibly empty.

    Raises:
        FormatError: If a token is not a finite float or the count is not a
            multiple of 3.
    """
    tokens = pos_list_text.split()
    try:
        coords = [float(token) for token in tokens]
    except ValueError as exc:
        raise FormatError(f"Non-numeric token in posList: {exc}") from exc
    if len(coords) % 3 != 0:
        raise FormatError(f"posList token count is not a multiple of 3: {len(coords)}")
    for index, value in enumerate(coords):
        if not math.isfinite(value):
            raise FormatError(f"Non-finite coordinate in posList at token {index}: {tokens[index]}")
    return [
        Point(latitude=coords[i], longitude=coords[i + 1], altitude=coords[i + 2])
        for i in range(0, len(coords), 3)
    ]


def triangulate_polygon(points: List[Point]) -> List[Triangle]:
    """
    Triangulate a polygon ring using fan triangulation around its first point.

    Exact for convex rings; concave or self-intersecting rings yield an
    approximate tiling.
    """
    if len(points) < 3:
        return []
    a = points[0]
    return [(a, points[i], points[i + 1]) for i in range(1, len(points) - 1)]


def cells_for_ring(zoom: int, points: List[Point],
                   cover: CoverFunction = triangle_cells) -> Set[CellId]:
    """
    Map a boundary ring to the set of spatial IDs its surface occupies.

    Args:
        zoom: Spatial ID zoom level.
        points: Ring vertices; fewer than three contribute nothing.
        cover: Per-triangle covering function.

    Returns:
        Union of the cells covered by each fan triangle.
    """
    cells: Set[CellId] = set()
    for a, b, c in triangulate_polygon(points):
        cells |= cover(zoom, a, b, c)
    return cells


# =============================================================================
# Tag Classification
# =============================================================================

class TagKind(Enum):
    """What a start tag means to the building scanner."""
    BUILDING = "building"
    EXTENSION_ATTRIBUTE = "extension_attribute"
    BOUNDARY_GEOMETRY = "boundary_geometry"
    OTHER = "other"


def split_tag(tag: str) -> Tuple[str, str]:
    """Split a Clark-notation tag ``{ns}local`` into ``(ns, local)``."""
    qname = etree.QName(tag)
    return qname.namespace or "", qname.localname


def classify_tag(tag: str) -> TagKind:
    """Classify a Clark-notation tag for the scan state machine."""
    namespace, local = split_tag(tag)
    if BUILDING_NS_FRAGMENT in namespace and local == BUILDING_LOCAL_NAME:
        return TagKind.BUILDING
    if EXTENSION_NS_FRAGMENT in namespace:
        return TagKind.EXTENSION_ATTRIBUTE
    if namespace.startswith(GML_NS_PREFIX) and local == BOUNDARY_GEOMETRY_LOCAL_NAME:
        return TagKind.BOUNDARY_GEOMETRY
    return TagKind.OTHER
