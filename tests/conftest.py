import pytest
import os
import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

NS_DECL = (
    'xmlns:core="http://www.opengis.net/citygml/2.0" '
    'xmlns:bldg="http://www.opengis.net/citygml/building/2.0" '
    'xmlns:gml="http://www.opengis.net/gml" '
    'xmlns:uro="https://www.geospatial.jp/iur/uro/3.1"'
)

# Planar quadrilateral near Maebashi, not closed (4 distinct points)
QUAD_POS_LIST = (
    "36.3900 139.0600 100.0 "
    "36.3900 139.0601 100.0 "
    "36.3901 139.0601 100.0 "
    "36.3901 139.0600 100.0"
)

CODE_LIST_XML = """<?xml version="1.0" encoding="UTF-8"?>
<gml:Dictionary xmlns:gml="http://www.opengis.net/gml" gml:id="Building_buildingStructureType">
  <gml:name>Building_buildingStructureType</gml:name>
  <gml:dictionaryEntry>
    <gml:Definition gml:id="id1">
      <gml:description>Wooden</gml:description>
      <gml:name>1030</gml:name>
    </gml:Definition>
  </gml:dictionaryEntry>
  <gml:dictionaryEntry>
    <gml:Definition gml:id="id2">
      <gml:description>Steel</gml:description>
      <gml:name>1040</gml:name>
    </gml:Definition>
  </gml:dictionaryEntry>
</gml:Dictionary>
"""


def make_citygml(buildings: str) -> str:
    """Wrap building members in a minimal PLATEAU CityModel."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<core:CityModel {NS_DECL}>
  <gml:boundedBy>
    <gml:Envelope srsName="http://www.opengis.net/def/crs/EPSG/0/6697">
      <gml:lowerCorner>36.38 139.05 0</gml:lowerCorner>
      <gml:upperCorner>36.40 139.07 50</gml:upperCorner>
    </gml:Envelope>
  </gml:boundedBy>
{buildings}
</core:CityModel>
"""


def make_building(gml_id: str = "bldg_001", pos_list: str = QUAD_POS_LIST,
                  code: str = "1030",
                  code_space: str = "../../codelists/Building_buildingStructureType.xml") -> str:
    id_attr = f' gml:id="{gml_id}"' if gml_id else ""
    cs_attr = f' codeSpace="{code_space}"' if code_space else ""
    return f"""  <core:cityObjectMember>
    <bldg:Building{id_attr}>
      <bldg:measuredHeight uom="m">6.5</bldg:measuredHeight>
      <bldg:lod1Solid>
        <gml:Solid>
          <gml:exterior>
            <gml:CompositeSurface>
              <gml:surfaceMember>
                <gml:Polygon>
                  <gml:exterior>
                    <gml:LinearRing>
                      <gml:posList>{pos_list}</gml:posList>
                    </gml:LinearRing>
                  </gml:exterior>
                </gml:Polygon>
              </gml:surfaceMember>
            </gml:CompositeSurface>
          </gml:exterior>
        </gml:Solid>
      </bldg:lod1Solid>
      <uro:buildingDetailAttribute>
        <uro:BuildingDetailAttribute>
          <uro:buildingStructureType{cs_attr}>{code}</uro:buildingStructureType>
        </uro:BuildingDetailAttribute>
      </uro:buildingDetailAttribute>
    </bldg:Building>
  </core:cityObjectMember>"""


@pytest.fixture
def plateau_dir(tmp_path):
    """PLATEAU-like layout: udx/bldg/*.gml plus codelists/ two levels up."""
    bldg_dir = tmp_path / "udx" / "bldg"
    bldg_dir.mkdir(parents=True)
    codelists = tmp_path / "codelists"
    codelists.mkdir()
    (codelists / "Building_buildingStructureType.xml").write_text(CODE_LIST_XML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_gml(plateau_dir):
    """Document with two buildings; only the first should ever be read."""
    path = plateau_dir / "udx" / "bldg" / "53394611_bldg_6697_op.gml"
    path.write_text(
        make_citygml(make_building() + "\n" + make_building(gml_id="bldg_002", code="1040")),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def code_list_path(plateau_dir):
    return plateau_dir / "codelists" / "Building_buildingStructureType.xml"
