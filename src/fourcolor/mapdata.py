"""Map declarations: regions with their outlines and the adjacency list."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from fourcolor.shape import FcShape

logger = logging.getLogger(__name__)

# Array declarations as written by the map generators, e.g. "var COUNTRIES = [...];"
JS_REGION_ARRAY = re.compile(r"var\s+(?:US_STATES|COUNTRIES|REGIONS)\s*=\s*\[(.*?)\];", re.DOTALL)
JS_ADJACENCY_ARRAY = re.compile(r"var\s+(?:US_ADJACENCY|ADJACENCY)\s*=\s*\[(.*?)\];", re.DOTALL)
# Single quoted string literal with backslash escapes
_JS_STRING = r"'((?:[^'\\]|\\.)*)'"
JS_REGION_ENTRY = re.compile(
    r"\{\s*id\s*:\s*" + _JS_STRING + r"\s*,\s*name\s*:\s*" + _JS_STRING + r"\s*,\s*path\s*:\s*" + _JS_STRING + r"\s*\}"
)
JS_ADJACENCY_PAIR = re.compile(r"\[\s*" + _JS_STRING + r"\s*,\s*" + _JS_STRING + r"\s*\]")
JS_HTML_SUFFIXES = (".html", ".htm", ".js")


###############################################################################
# MapRegion
###############################################################################
@dataclass(frozen=True)
class MapRegion:
    """One colorable region of a map.

    Attributes:
        id: short identifier, e.g. an ISO code
        name: display name
        path: outline as path description (see FcPathParser)
    """

    id: str
    name: str
    path: str

    @classmethod
    def from_dict(cls, data: dict) -> MapRegion:
        """Create a MapRegion from a dictionary with keys id, name (optional) and path."""
        return cls(id=str(data["id"]), name=str(data.get("name", data["id"])), path=str(data.get("path", "")))

    def to_dict(self) -> dict:
        """Convert the MapRegion to a dictionary."""
        return {"id": self.id, "name": self.name, "path": self.path}


###############################################################################
# MapDeclaration
###############################################################################
@dataclass
class MapDeclaration:
    """
    Regions of a map plus the list of adjacent region pairs.

    Adjacency pairs refer to region ids. On construction duplicate pairs
    (in either order) are removed and pairs naming unknown regions are dropped
    with a warning.
    """

    regions: List[MapRegion]
    adjacency: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self):
        self._index: Dict[str, int] = {}
        for idx, region in enumerate(self.regions):
            if region.id in self._index:
                raise ValueError(f"Duplicate region id '{region.id}'")
            self._index[region.id] = idx
        self._shapes: Dict[int, FcShape] = {}
        self.adjacency = self._normalize_adjacency(self.adjacency)

    def _normalize_adjacency(self, pairs: Sequence[Sequence[str]]) -> List[Tuple[str, str]]:
        seen = set()
        result: List[Tuple[str, str]] = []
        for pair in pairs:
            id_a, id_b = str(pair[0]), str(pair[1])
            key = "-".join(sorted((id_a, id_b)))
            if key in seen:
                continue
            seen.add(key)
            if id_a not in self._index or id_b not in self._index:
                logger.warning("Dropping adjacency %s-%s: unknown region", id_a, id_b)
                continue
            result.append((id_a, id_b))
        return result

    def index_of(self, region_id: str) -> int:
        """Position of the region with _region_id_ (raises KeyError if unknown)."""
        return self._index[region_id]

    def adjacency_indices(self) -> List[Tuple[int, int]]:
        """Adjacency pairs as region indices, in declaration order."""
        return [(self._index[id_a], self._index[id_b]) for id_a, id_b in self.adjacency]

    def shape(self, index: int) -> FcShape:
        """Parsed outline of the region at _index_ (parsed once)."""
        if index not in self._shapes:
            shape = FcShape.from_path_string(self.regions[index].path)
            if shape.is_empty:
                logger.warning("Region '%s' has an empty outline", self.regions[index].id)
            self._shapes[index] = shape
        return self._shapes[index]

    @classmethod
    def from_dict(cls, data: dict) -> MapDeclaration:
        """Create a MapDeclaration from {"regions": [...], "adjacency": [[id, id], ...]}."""
        regions = [MapRegion.from_dict(item) for item in data.get("regions", [])]
        adjacency = [(pair[0], pair[1]) for pair in data.get("adjacency", [])]
        return cls(regions, adjacency)

    @classmethod
    def from_js(cls, text: str) -> MapDeclaration:
        """
        Create a MapDeclaration from JavaScript (or an HTML page embedding it).

        Reads the region array ``var COUNTRIES = [{id:'..',name:'..',path:'..'}, ...];``
        (also ``US_STATES`` or ``REGIONS``) and the adjacency array
        ``var ADJACENCY = [['A','B'], ...];`` (also ``US_ADJACENCY``).
        A missing adjacency array yields a declaration without pairs.

        Raises:
            ValueError: If _text_ contains no region array
        """
        regions = region_entries_from_js(text)
        if regions is None:
            raise ValueError("No region array 'var COUNTRIES = [...];' found")
        adjacency: List[Tuple[str, str]] = []
        match = JS_ADJACENCY_ARRAY.search(text)
        if match:
            adjacency = [(_js_unescape(a), _js_unescape(b)) for a, b in JS_ADJACENCY_PAIR.findall(match.group(1))]
        else:
            logger.warning("No adjacency array found")
        return cls(regions, adjacency)

    def to_dict(self) -> dict:
        """Convert the MapDeclaration to a dictionary."""
        return {
            "regions": [region.to_dict() for region in self.regions],
            "adjacency": [list(pair) for pair in self.adjacency],
        }


def _js_unescape(literal: str) -> str:
    return re.sub(r"\\(.)", r"\1", literal)


def region_entries_from_js(text: str) -> Optional[List[MapRegion]]:
    """Regions of the first region array in _text_, None if there is none."""
    match = JS_REGION_ARRAY.search(text)
    if not match:
        return None
    return [
        MapRegion(_js_unescape(id_), _js_unescape(name), _js_unescape(path))
        for id_, name, path in JS_REGION_ENTRY.findall(match.group(1))
    ]


def load_map(filename: Union[str, Path]) -> MapDeclaration:
    """Read a map declaration from a JSON file or from an HTML/JavaScript source."""
    with open(filename, "r", encoding="utf-8") as file:
        if str(filename).lower().endswith(JS_HTML_SUFFIXES):
            declaration = MapDeclaration.from_js(file.read())
        else:
            declaration = MapDeclaration.from_dict(json.load(file))
    logger.info(
        "Loaded %d regions and %d adjacency pairs from %s",
        len(declaration.regions),
        len(declaration.adjacency),
        filename,
    )
    return declaration
