"""Tests for citystid.ledger - JSON ledger persistence."""
import json

import pytest

from citystid.errors import IoError, ParseError
from citystid.geoprocessor.citygml.models import BuildingRecord
from citystid.ledger import BuildingLedger, entry_cell_ids, load_ledger
from citystid.spatial_id import CellId


@pytest.fixture
def record():
    return BuildingRecord(
        building_id="bldg_001",
        cell_ids={CellId(18, 0, 232332, 102591), CellId(18, 0, 232333, 102591), CellId(18, 1, 232332, 102591)},
        attributes={"uro:buildingStructureType": "木造・土蔵造"},
    )


@pytest.fixture
def other_record():
    return BuildingRecord(building_id="bldg_002", cell_ids={CellId(18, 0, 1, 1)})


def _read(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class TestLoadLedger:
    def test_absent_file_is_empty(self, tmp_path):
        assert load_ledger(tmp_path / "ledger.json") == {}

    def test_blank_file_is_empty(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("  \n\t", encoding="utf-8")
        assert load_ledger(path) == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseError):
            load_ledger(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ParseError):
            load_ledger(path)

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_bytes(b'{"0": "\xff\xfe"}')
        with pytest.raises(ParseError):
            load_ledger(path)

    def test_unreadable_path(self, tmp_path):
        # A directory where the ledger file should be
        with pytest.raises(IoError):
            load_ledger(tmp_path)


class TestBuildingLedger:
    def test_append_to_absent_file(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        key = BuildingLedger(path).append(record)
        assert key == "0"
        assert _read(path) == {"0": record.to_ledger_entry()}

    def test_entry_shape(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        BuildingLedger(path).append(record)
        entry = _read(path)["0"]
        assert set(entry) == {"id", "stid_set", "attributes"}
        assert entry["id"] == "bldg_001"
        assert entry["attributes"] == {"uro:buildingStructureType": "木造・土蔵造"}

    def test_same_run_uses_next_key(self, tmp_path, record, other_record):
        path = tmp_path / "building_info.json"
        ledger = BuildingLedger(path)
        ledger.append(record)
        assert ledger.append(other_record) == "1"
        assert set(_read(path)) == {"0", "1"}

    def test_new_run_overwrites_key_zero(self, tmp_path, record, other_record):
        # Current behaviour: the counter restarts at 0 for every run
        path = tmp_path / "building_info.json"
        BuildingLedger(path).append(record)
        BuildingLedger(path).append(other_record)
        data = _read(path)
        assert list(data) == ["0"]
        assert data["0"]["id"] == "bldg_002"

    def test_preserves_other_entries(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        path.write_text(json.dumps({"5": {"id": "old", "stid_set": [], "attributes": {}}}), encoding="utf-8")
        BuildingLedger(path).append(record)
        assert set(_read(path)) == {"0", "5"}
        assert _read(path)["5"]["id"] == "old"

    def test_blank_existing_file(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        path.write_text("\n", encoding="utf-8")
        BuildingLedger(path).append(record)
        assert list(_read(path)) == ["0"]

    def test_invalid_existing_file_left_untouched(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        path.write_text("garbage", encoding="utf-8")
        ledger = BuildingLedger(path)
        with pytest.raises(ParseError):
            ledger.append(record)
        assert path.read_text(encoding="utf-8") == "garbage"
        assert ledger.count == 0

    def test_non_utf8_existing_file_left_untouched(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(ParseError):
            BuildingLedger(path).append(record)
        assert path.read_bytes() == b"\xff\xfe"

    def test_no_temporary_files_left(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        BuildingLedger(path).append(record)
        assert [p.name for p in tmp_path.iterdir()] == ["building_info.json"]

    def test_missing_parent_directory(self, tmp_path, record):
        with pytest.raises(IoError):
            BuildingLedger(tmp_path / "missing" / "ledger.json").append(record)

    def test_cell_ids_round_trip(self, tmp_path, record):
        path = tmp_path / "building_info.json"
        BuildingLedger(path).append(record)
        assert entry_cell_ids(load_ledger(path)["0"]) == record.cell_ids
