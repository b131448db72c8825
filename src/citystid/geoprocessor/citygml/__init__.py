"""
citystid CityGML Subpackage
===========================

Streaming extraction of a single building from Japanese PLATEAU CityGML data:

- parsers: the building scan state machine and source discovery
- codespace: code-list (``gml:Dictionary``) resolution for ``uro:*`` attributes
- utils: posList parsing, fan triangulation, ring-to-spatial-ID mapping
- models: :class:`Point` and :class:`BuildingRecord`

Usage::

    from citystid.geoprocessor.citygml import BuildingScanner

    record = BuildingScanner("udx/bldg/54393087_bldg_6697_op.gml").scan()
    print(record.building_id, len(record.cell_ids))
"""

from .parsers import (
    BuildingScanner,
    ScanState,
    find_first_document,
    scan_first_building,
)
from .codespace import CodeSpaceResolver, resolve_code_space
from .models import BuildingRecord, Point
from .utils import (
    TagKind,
    cells_for_ring,
    classify_tag,
    parse_points,
    triangulate_polygon,
)
from .constants import DEFAULT_ZOOM

__all__ = [
    "BuildingScanner",
    "ScanState",
    "find_first_document",
    "scan_first_building",
    "CodeSpaceResolver",
    "resolve_code_space",
    "BuildingRecord",
    "Point",
    "TagKind",
    "cells_for_ring",
    "classify_tag",
    "parse_points",
    "triangulate_polygon",
    "DEFAULT_ZOOM",
]
