__author__ = """citystid contributors"""
__version__ = "0.1.0"

from .errors import CityStidError, FormatError, IoError, ParseError
from .models import ScanConfig
from .spatial_id import CellId, triangle_cells
from .ledger import BuildingLedger, load_ledger
from .geoprocessor.citygml import BuildingRecord, BuildingScanner, Point
