"""
Building Ledger
===============

JSON ledger of processed buildings::

    {"0": {"id": "bldg_...", "stid_set": ["18/0/232837/103186", ...],
           "attributes": {"uro:buildingStructureType": "木造・土蔵造"}}}

Keys are a zero-based counter owned by one :class:`BuildingLedger` instance,
i.e. by one run. A new run starts again at ``"0"`` and overwrites that entry;
other entries already in the file are preserved.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Set, Union

from .errors import IoError, ParseError
from .geoprocessor.citygml.models import BuildingRecord
from .spatial_id import CellId
from .utils.logging import get_logger

_logger = get_logger(__name__)


def load_ledger(path: Union[str, os.PathLike]) -> Dict[str, dict]:
    """
    Read a ledger file.

    A missing file or one holding only whitespace is an empty ledger.

    Raises:
        IoError: If the file exists but cannot be read.
        ParseError: If the content is not UTF-8 encoded JSON object text.
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise IoError(f"Cannot read ledger {path}: {exc}") from exc

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"Ledger {path} is not valid UTF-8: {exc}") from exc
    if not content.strip():
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Ledger {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(f"Ledger {path} must hold a JSON object, found {type(data).__name__}")
    return data


def entry_cell_ids(entry: dict) -> Set[CellId]:
    """Decode the ``stid_set`` of a ledger entry back into cell identifiers."""
    return {CellId.parse(text) for text in entry.get("stid_set", [])}


def _write_atomic(path: Path, data: dict) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class BuildingLedger:
    """
    Appends building records to a JSON ledger file.

    Each :meth:`append` reads the whole file, sets one key, and rewrites the
    file through a temporary file and ``os.replace`` so a crash mid-write
    leaves the previous ledger intact. There is no locking; a ledger must
    have a single writer.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)
        self.count = 0

    def append(self, record: BuildingRecord) -> str:
        """
        Store ``record`` under the next key of this run.

        Returns:
            The key the record was stored under.

        Raises:
            IoError: If the ledger cannot be read or written.
            ParseError: If the existing ledger is not a JSON object.
        """
        existing = load_ledger(self.path)
        key = str(self.count)
        if key in existing:
            _logger.warning("Overwriting ledger entry %s in %s", key, self.path)
        existing[key] = record.to_ledger_entry()

        try:
            _write_atomic(self.path, existing)
        except OSError as exc:
            raise IoError(f"Cannot write ledger {self.path}: {exc}") from exc

        self.count += 1
        _logger.info("Wrote building %s to %s under key %s",
                     record.building_id or "<no id>", self.path, key)
        return key
