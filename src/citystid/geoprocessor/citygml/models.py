"""
CityGML Data Models
===================

Dataclasses for what the building scanner produces: the points parsed from
``gml:posList`` text and the per-building record that ends up in the ledger.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Set

from ...spatial_id import CellId


@dataclass(frozen=True)
class Point:
    """
    A 3D coordinate taken verbatim from a PLATEAU posList triple.

    PLATEAU (EPSG:6697) writes coordinates as latitude, longitude, height;
    no reordering or unit conversion is applied.
    """
    latitude: float
    longitude: float
    altitude: float


@dataclass
class BuildingRecord:
    """
    Everything extracted from one ``bldg:Building`` scope.

    Attributes:
        building_id: Value of the building's ``gml:id`` (empty if absent).
        cell_ids: Union of the spatial IDs covered by every boundary ring.
        attributes: Extension attribute values keyed by prefixed tag name,
            e.g. ``uro:buildingStructureType``. Coded values are replaced by
            their code-list description when one was resolved.
    """
    building_id: str = ""
    cell_ids: Set[CellId] = field(default_factory=set)
    attributes: Dict[str, str] = field(default_factory=dict)

    def add_cells(self, cells: Iterable[CellId]) -> None:
        self.cell_ids.update(cells)

    def set_attribute(self, tag: str, value: str) -> None:
        self.attributes[tag] = value

    def to_ledger_entry(self) -> dict:
        """Return the JSON-ready form stored in the ledger."""
        return {
            "id": self.building_id,
            "stid_set": sorted(str(cell) for cell in self.cell_ids),
            "attributes": dict(self.attributes),
        }

    @property
    def cell_count(self) -> int:
        """Number of distinct spatial IDs collected."""
        return len(self.cell_ids)
