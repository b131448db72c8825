"""
Code-list Resolution
====================

PLATEAU stores coded attribute values (``uro:buildingStructureType`` = ``610``)
and points at a ``gml:Dictionary`` document through the element's
``codeSpace`` attribute. Each ``gml:Definition`` in that document pairs a
``gml:name`` (the code) with a ``gml:description``.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Union

from lxml import etree

from ...errors import IoError, ParseError
from ...utils.logging import get_logger
from .constants import CODE_LIST_DEFINITION, CODE_LIST_DESCRIPTION, CODE_LIST_NAME

_logger = get_logger(__name__)

CodeMap = Dict[str, str]


def resolve_code_space(path: Union[str, os.PathLike]) -> CodeMap:
    """
    Parse a code-list document into a code -> description mapping.

    Elements are matched on local name only, so any namespace prefix works.
    A definition missing its name or its description is skipped.

    Raises:
        IoError: If the document cannot be opened.
        ParseError: If the document is not well-formed XML.
    """
    code_map: CodeMap = {}
    pending_name = ""
    pending_desc = ""

    try:
        with open(path, "rb") as source:
            for event, elem in etree.iterparse(source, events=("start", "end")):
                local = etree.QName(elem).localname
                if event == "start":
                    if local == CODE_LIST_DEFINITION:
                        # Also reset on open: the dictionary's own gml:name and
                        # gml:description must not pair into an entry.
                        pending_name = ""
                        pending_desc = ""
                    continue

                if local == CODE_LIST_NAME:
                    pending_name = (elem.text or "").strip()
                elif local == CODE_LIST_DESCRIPTION:
                    pending_desc = (elem.text or "").strip()
                elif local == CODE_LIST_DEFINITION:
                    if pending_name and pending_desc:
                        code_map[pending_name] = pending_desc
                    pending_name = ""
                    pending_desc = ""
                    elem.clear()
    except OSError as exc:
        raise IoError(f"Cannot read code list {path}: {exc}") from exc
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"Malformed code list {path}: {exc}") from exc

    _logger.debug("Resolved %d codes from %s", len(code_map), path)
    return code_map


class CodeSpaceResolver:
    """
    Resolves ``codeSpace`` references relative to a source document.

    With ``cache=True`` each canonical code-list path is parsed at most once
    for the lifetime of the resolver. Code-list documents do not change during
    a run, so the cached and uncached results are identical.
    """

    def __init__(self, base_dir: Union[str, os.PathLike], cache: bool = True):
        self.base_dir = Path(base_dir)
        self.cache = cache
        self._maps: Dict[Path, CodeMap] = {}

    def canonical_path(self, code_space: str) -> Path:
        """Resolve a ``codeSpace`` value against the base directory.

        Raises:
            IoError: If the referenced document does not exist.
        """
        try:
            return (self.base_dir / code_space).resolve(strict=True)
        except OSError as exc:
            raise IoError(f"Code list not found: {code_space} (relative to {self.base_dir})") from exc

    def resolve(self, code_space: str) -> CodeMap:
        path = self.canonical_path(code_space)
        if not self.cache:
            return resolve_code_space(path)
        cached: Optional[CodeMap] = self._maps.get(path)
        if cached is None:
            cached = resolve_code_space(path)
            self._maps[path] = cached
        return cached
