"""
CityGML Constants
=================

Namespace fragments, tag names and defaults shared by the scanner, the code-list
resolver and the cell mapper.
"""

# =============================================================================
# Spatial ID Resolution
# =============================================================================

DEFAULT_ZOOM = 18
"""Zoom level at which building boundaries are mapped to spatial IDs."""


# =============================================================================
# Tag Classification
# =============================================================================
# Namespace URIs differ between CityGML and PLATEAU versions, so elements are
# matched on a stable fragment of the URI plus the local name.

BUILDING_NS_FRAGMENT = "citygml/building"
BUILDING_LOCAL_NAME = "Building"

EXTENSION_NS_FRAGMENT = "/iur/uro"

GML_NS_PREFIX = "http://www.opengis.net/gml"
BOUNDARY_GEOMETRY_LOCAL_NAME = "posList"
IDENTITY_LOCAL_NAME = "id"

CODE_SPACE_ATTRIBUTE = "codeSpace"


# =============================================================================
# Code-list Documents
# =============================================================================

CODE_LIST_NAME = "name"
CODE_LIST_DESCRIPTION = "description"
CODE_LIST_DEFINITION = "Definition"
