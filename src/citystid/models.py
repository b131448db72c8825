"""Run configuration for citystid."""
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .geoprocessor.citygml.constants import DEFAULT_ZOOM


DEFAULT_DATA_DIR = Path("CityData") / "10201_maebashi-shi_city_2023_citygml_2_op" / "udx" / "bldg"
DEFAULT_LEDGER_PATH = Path("building_info.json")


@dataclass
class ScanConfig:
    """Where to find the source document, where to write, and at which zoom.

    Attributes:
        data_dir: Directory searched for the first source document.
        extension: File extension of source documents.
        ledger_path: JSON ledger the building record is appended to.
        zoom: Spatial ID zoom level used for cell covering.
        cache_code_spaces: Parse each code-list document at most once per run.
    """
    data_dir: Union[str, Path] = DEFAULT_DATA_DIR
    extension: str = ".gml"
    ledger_path: Union[str, Path] = DEFAULT_LEDGER_PATH
    zoom: int = DEFAULT_ZOOM
    cache_code_spaces: bool = True

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.ledger_path = Path(self.ledger_path)
        if not self.extension.startswith("."):
            self.extension = "." + self.extension
        if self.zoom < 0:
            raise ValueError(f"zoom must be non-negative, got {self.zoom}")
