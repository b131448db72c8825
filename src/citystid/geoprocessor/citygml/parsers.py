"""
CityGML Parsers
===============

Streaming scanner for PLATEAU building documents.

:class:`BuildingScanner` walks a CityGML file with ``lxml.etree.iterparse``
and never builds the full tree. It enters the first ``bldg:Building`` and
collects:

- the building's ``gml:id``
- spatial IDs for every ``gml:posList`` ring inside the building
- ``uro:*`` extension attribute values, with coded values replaced by their
  code-list descriptions

The scan stops as soon as that building closes.

Scan states
-----------
``IDLE`` -> ``IN_BUILDING`` on the first building start tag.
``IN_BUILDING`` <-> ``IN_EXTENSION_ATTRIBUTE`` while ``uro:*`` elements are open.
``IN_BUILDING`` -> ``DONE`` on the building end tag.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from lxml import etree

from ...errors import IoError, ParseError
from ...spatial_id import triangle_cells
from ...utils.logging import get_logger
from .codespace import CodeMap, CodeSpaceResolver
from .constants import CODE_SPACE_ATTRIBUTE, DEFAULT_ZOOM, GML_NS_PREFIX, IDENTITY_LOCAL_NAME
from .models import BuildingRecord
from .utils import CoverFunction, TagKind, cells_for_ring, classify_tag, parse_points, split_tag

_logger = get_logger(__name__)

RecordSink = Callable[[BuildingRecord], None]


class ScanState(Enum):
    IDLE = "idle"
    IN_BUILDING = "in_building"
    IN_EXTENSION_ATTRIBUTE = "in_extension_attribute"
    DONE = "done"


# =============================================================================
# Source Discovery
# =============================================================================

def find_first_document(directory: Union[str, os.PathLike], extension: str = ".gml") -> Path:
    """
    Return the first file in ``directory`` with the given extension.

    Files are taken in name order so repeated runs pick the same document.

    Raises:
        IoError: If the directory cannot be listed or holds no matching file.
    """
    directory = Path(directory)
    try:
        candidates = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == extension.lower()
        )
    except OSError as exc:
        raise IoError(f"Cannot list {directory}: {exc}") from exc
    if not candidates:
        raise IoError(f"No {extension} files found in {directory}")
    return candidates[0]


# =============================================================================
# Building Scanner
# =============================================================================

class BuildingScanner:
    """
    Extracts the first building of a CityGML document.

    Args:
        source_path: CityGML document to scan.
        zoom: Spatial ID zoom level for boundary rings.
        resolver: Code-list resolver; defaults to one rooted at the source
            document's directory.
        cover: Per-triangle covering function.
        cache_code_spaces: Passed to the default resolver.

    Example::

        scanner = BuildingScanner("udx/bldg/54393087_bldg_6697_op.gml")
        record = scanner.scan()
    """

    def __init__(self,
                 source_path: Union[str, os.PathLike],
                 zoom: int = DEFAULT_ZOOM,
                 resolver: Optional[CodeSpaceResolver] = None,
                 cover: CoverFunction = triangle_cells,
                 cache_code_spaces: bool = True):
        self.source_path = Path(source_path)
        self.zoom = zoom
        self.resolver = resolver or CodeSpaceResolver(self.source_path.parent, cache=cache_code_spaces)
        self.cover = cover
        self.state = ScanState.IDLE
        self.record: Optional[BuildingRecord] = None
        self._code_maps: List[Optional[CodeMap]] = []
        self._ring_count = 0

    def _reset(self) -> None:
        self.state = ScanState.IDLE
        self.record = None
        self._code_maps = []
        self._ring_count = 0

    def scan(self, sink: Optional[RecordSink] = None) -> Optional[BuildingRecord]:
        """
        Stream the document and return the first building's record.

        ``sink`` receives the finished record exactly once. It is not called
        when the document holds no building or when any error occurs.

        Returns:
            The record, or None if the document contains no building.

        Raises:
            IoError: Source or code-list document unreadable.
            ParseError: Malformed markup.
            FormatError: posList text that is not a list of float triples.
        """
        self._reset()
        _logger.info("Scanning %s", self.source_path)
        try:
            with open(self.source_path, "rb") as source:
                for event, elem in etree.iterparse(source, events=("start", "end")):
                    if event == "start":
                        self._on_start(elem)
                    else:
                        self._on_end(elem)
                    if self.state is ScanState.DONE:
                        break
        except OSError as exc:
            raise IoError(f"Cannot read {self.source_path}: {exc}") from exc
        except etree.XMLSyntaxError as exc:
            raise ParseError(f"Malformed CityGML in {self.source_path}: {exc}") from exc

        if self.state is not ScanState.DONE:
            _logger.info("No building found in %s", self.source_path)
            return None

        record = self.record
        _logger.info(
            "Building %s: %d rings, %d spatial IDs, %d attributes",
            record.building_id or "<no id>", self._ring_count,
            record.cell_count, len(record.attributes),
        )
        if sink is not None:
            sink(record)
        return record

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    def _on_start(self, elem) -> None:
        kind = classify_tag(elem.tag)

        if self.state is ScanState.IDLE:
            if kind is TagKind.BUILDING:
                self.record = BuildingRecord(building_id=self._identity(elem))
                self.state = ScanState.IN_BUILDING
                _logger.debug("Entered building %s", self.record.building_id)
            return

        if kind is TagKind.EXTENSION_ATTRIBUTE:
            code_space = elem.get(CODE_SPACE_ATTRIBUTE)
            code_map = self.resolver.resolve(code_space) if code_space else None
            self._code_maps.append(code_map)
            self.state = ScanState.IN_EXTENSION_ATTRIBUTE

    def _on_end(self, elem) -> None:
        if self.state is ScanState.IDLE:
            elem.clear(keep_tail=True)
            return

        kind = classify_tag(elem.tag)

        if kind is TagKind.EXTENSION_ATTRIBUTE and self._code_maps:
            code_map = self._code_maps.pop()
            text = (elem.text or "").strip()
            if text:
                value = code_map.get(text, text) if code_map is not None else text
                self.record.set_attribute(self._prefixed_name(elem), value)
            if not self._code_maps:
                self.state = ScanState.IN_BUILDING
        elif kind is TagKind.BOUNDARY_GEOMETRY and self.state is ScanState.IN_BUILDING:
            points = parse_points(elem.text or "")
            self.record.add_cells(cells_for_ring(self.zoom, points, self.cover))
            self._ring_count += 1
        elif kind is TagKind.BUILDING:
            self.state = ScanState.DONE

        elem.clear(keep_tail=True)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _identity(elem) -> str:
        for key, value in elem.attrib.items():
            namespace, local = split_tag(key)
            if local == IDENTITY_LOCAL_NAME and namespace.startswith(GML_NS_PREFIX):
                return value
        return ""

    @staticmethod
    def _prefixed_name(elem) -> str:
        local = etree.QName(elem).localname
        return f"{elem.prefix}:{local}" if elem.prefix else local


def scan_first_building(source_path: Union[str, os.PathLike],
                        zoom: int = DEFAULT_ZOOM,
                        sink: Optional[RecordSink] = None,
                        cache_code_spaces: bool = True) -> Optional[BuildingRecord]:
    """Convenience wrapper: scan ``source_path`` and return its first building."""
    scanner = BuildingScanner(source_path, zoom=zoom, cache_code_spaces=cache_code_spaces)
    return scanner.scan(sink=sink)
