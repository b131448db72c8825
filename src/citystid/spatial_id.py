"""
Spatial ID Cells
================

Cell identifiers of the 4D spatial-ID scheme and the function that maps a 3D
triangle onto the cells it occupies.

A cell at zoom ``z`` is addressed by ``(f, x, y)``:

- ``x``, ``y``: web-mercator tile indices, as in XYZ map tiles.
- ``f``: vertical index; the range ``[0, 2**25)`` metres is split into
  ``2**z`` layers, negative indices lie below zero altitude.

An optional temporal pair ``(i, t)`` (interval seconds, interval index) can be
attached. The canonical string form is ``z/f/x/y`` or ``z/f/x/y_i/t``.

Coverage is computed in continuous index space: the triangle's vertices are
projected to fractional ``(x, y, f)`` and every candidate unit cube in the
triangle's bounding range is tested with a separating-axis triangle/box test.
"""

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Set

import numpy as np
import pyproj


VERTICAL_EXTENT = 2 ** 25
"""Height in metres covered by the f axis at zoom 0."""

MAX_MERCATOR_LATITUDE = 85.0511287798066
_MERCATOR_HALF_EXTENT = math.pi * 6378137.0


@dataclass(frozen=True)
class CellId:
    """One spatial-ID cell.

    Attributes:
        z: Zoom level.
        f: Vertical index.
        x: Tile column.
        y: Tile row (grows southward).
        i: Optional temporal interval in seconds.
        t: Optional temporal index.
    """
    z: int
    f: int
    x: int
    y: int
    i: Optional[int] = None
    t: Optional[int] = None

    def __post_init__(self):
        if self.z < 0:
            raise ValueError(f"zoom must be non-negative, got {self.z}")
        n = 2 ** self.z
        if not 0 <= self.x < n or not 0 <= self.y < n:
            raise ValueError(f"x/y out of range for zoom {self.z}: {self.x}, {self.y}")
        if not -n <= self.f < n:
            raise ValueError(f"f out of range for zoom {self.z}: {self.f}")
        if (self.i is None) != (self.t is None):
            raise ValueError("temporal interval and index must be given together")

    def __str__(self) -> str:
        spatial = f"{self.z}/{self.f}/{self.x}/{self.y}"
        if self.i is None:
            return spatial
        return f"{spatial}_{self.i}/{self.t}"

    @classmethod
    def parse(cls, text: str) -> "CellId":
        """Inverse of ``str(cell)``. Raises ValueError on malformed input."""
        spatial, _, temporal = text.strip().partition("_")
        parts = spatial.split("/")
        if len(parts) != 4:
            raise ValueError(f"Malformed spatial ID: {text!r}")
        z, f, x, y = (int(p) for p in parts)
        if not temporal:
            return cls(z, f, x, y)
        t_parts = temporal.split("/")
        if len(t_parts) != 2:
            raise ValueError(f"Malformed temporal part of spatial ID: {text!r}")
        return cls(z, f, x, y, int(t_parts[0]), int(t_parts[1]))


@lru_cache(maxsize=1)
def _mercator_transformer() -> pyproj.Transformer:
    return pyproj.Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def index_coords(zoom: int, latitude: float, longitude: float, altitude: float) -> np.ndarray:
    """
    Project a geographic point into fractional cell-index space at ``zoom``.

    Returns:
        Array ``[x, y, f]`` where the integer parts are the cell indices.
    """
    lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, latitude))
    mx, my = _mercator_transformer().transform(longitude, lat)
    n = 2 ** zoom
    x = (mx + _MERCATOR_HALF_EXTENT) / (2 * _MERCATOR_HALF_EXTENT) * n
    y = (_MERCATOR_HALF_EXTENT - my) / (2 * _MERCATOR_HALF_EXTENT) * n
    f = altitude * n / VERTICAL_EXTENT
    return np.array([x, y, f], dtype=np.float64)


# =============================================================================
# Triangle / Cell Intersection
# =============================================================================

_BOX_AXES = np.eye(3)
_UNIT_HALFSIZE = np.full(3, 0.5)


def triangle_aabb_intersection(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray,
                               box_center: np.ndarray, box_halfsize: np.ndarray) -> bool:
    """
    Check if triangle intersects axis-aligned bounding box (AABB).

    Separating Axis Theorem over the 13 candidate axes of Akenine-Möller's
    test: the three box normals, the triangle normal, and the nine cross
    products of triangle edges with box normals. Touching counts as
    intersecting.
    """
    verts = np.stack([v0, v1, v2]) - box_center
    edges = np.stack([verts[1] - verts[0], verts[2] - verts[1], verts[0] - verts[2]])

    axes = [_BOX_AXES[0], _BOX_AXES[1], _BOX_AXES[2], np.cross(edges[0], edges[1])]
    for edge in edges:
        for box_axis in _BOX_AXES:
            axes.append(np.cross(edge, box_axis))

    for axis in axes:
        projected = verts @ axis
        radius = float(np.abs(axis) @ box_halfsize)
        if projected.min() > radius or projected.max() < -radius:
            return False
    return True


def _cell_range(lo: float, hi: float) -> range:
    # A face lying exactly on an upper boundary belongs to the cell above.
    start = int(math.floor(lo))
    stop = max(start, int(math.ceil(hi)) - 1)
    return range(start, stop + 1)


def triangle_cells(zoom: int, a, b, c) -> Set[CellId]:
    """
    Return every cell at ``zoom`` that the triangle ``(a, b, c)`` occupies.

    Vertices are objects with ``latitude``, ``longitude`` and ``altitude``.
    The triangle is treated as planar in index space, which holds closely at
    building scale.
    """
    verts = np.stack([
        index_coords(zoom, p.latitude, p.longitude, p.altitude) for p in (a, b, c)
    ])
    lo = verts.min(axis=0)
    hi = verts.max(axis=0)
    n = 2 ** zoom

    xs = [x for x in _cell_range(lo[0], hi[0]) if 0 <= x < n]
    ys = [y for y in _cell_range(lo[1], hi[1]) if 0 <= y < n]
    fs = list(_cell_range(lo[2], hi[2]))

    cells = set()
    for x in xs:
        for y in ys:
            for f in fs:
                center = np.array([x + 0.5, y + 0.5, f + 0.5])
                if triangle_aabb_intersection(verts[0], verts[1], verts[2], center, _UNIT_HALFSIZE):
                    cells.add(CellId(z=zoom, f=f, x=x, y=y))
    return cells
