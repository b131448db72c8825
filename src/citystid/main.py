"""
Command-line entry point.

Finds the first CityGML document in the data directory, extracts its first
building, appends the record to the ledger and prints it.

Usage:
    python -m citystid
    python -m citystid --data-dir CityData/.../udx/bldg --ledger out.json --zoom 20
"""
import argparse
import json
import sys
from typing import List, Optional

from .errors import CityStidError
from .geoprocessor.citygml.parsers import BuildingScanner, find_first_document
from .geoprocessor.citygml.models import BuildingRecord
from .ledger import BuildingLedger
from .models import ScanConfig
from .utils.logging import get_logger

_logger = get_logger(__name__)


def first_building_info(config: Optional[ScanConfig] = None) -> Optional[BuildingRecord]:
    """
    Run one extraction: discover, scan, and append to the ledger.

    Returns:
        The building record, or None if the document holds no building (in
        which case the ledger is left untouched).
    """
    config = config or ScanConfig()
    source = find_first_document(config.data_dir, config.extension)
    ledger = BuildingLedger(config.ledger_path)
    scanner = BuildingScanner(source, zoom=config.zoom, cache_code_spaces=config.cache_code_spaces)
    return scanner.scan(sink=ledger.append)


def _parse_args(argv: Optional[List[str]]) -> ScanConfig:
    defaults = ScanConfig()
    parser = argparse.ArgumentParser(
        prog="citystid",
        description="Extract the first PLATEAU building as spatial IDs into a JSON ledger.",
    )
    parser.add_argument("--data-dir", default=str(defaults.data_dir),
                        help="Directory holding the CityGML building documents")
    parser.add_argument("--ledger", default=str(defaults.ledger_path),
                        help="JSON ledger to append to")
    parser.add_argument("--zoom", type=int, default=defaults.zoom,
                        help="Spatial ID zoom level")
    args = parser.parse_args(argv)
    return ScanConfig(data_dir=args.data_dir, ledger_path=args.ledger, zoom=args.zoom)


def main(argv: Optional[List[str]] = None) -> int:
    config = _parse_args(argv)
    try:
        record = first_building_info(config)
    except CityStidError as exc:
        _logger.error("%s", exc)
        return 1

    if record is None:
        print("No building found.")
    else:
        print(json.dumps(record.to_ledger_entry(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
