"""Coloring conflicts between adjacent regions and their markers."""

from __future__ import annotations

import gzip
import io
from typing import List, Optional, Sequence, Tuple

import svgwrite
import svgwrite.container
from svgwrite.extensions import Inkscape

from fourcolor.cache import MidpointCache
from fourcolor.common import MARKER_HALF_SIZE, Point
from fourcolor.geom import FcBox
from fourcolor.shape import FcShape

# Palette of the four colors plus fill and stroke of uncolored regions
COLORS: Tuple[str, ...] = ("#ef4444", "#60a5fa", "#fbbf24", "#34d399")
REGION_DEFAULT = "#f1f5f9"
REGION_STROKE = "#64748b"
MARKER_STROKE = "#dc2626"

Segment = Tuple[Point, Point]


###############################################################################
# Functions
###############################################################################


def find_conflict_edges(
    adjacency: Sequence[Tuple[int, int]], region_colors: Sequence[Optional[int]]
) -> List[Tuple[int, int]]:
    """
    Adjacent pairs whose regions are both colored with the same color.

    Args:
        adjacency: pairs of region indices
        region_colors: color index per region, None for uncolored regions

    Returns:
        List[Tuple[int, int]]: conflicting pairs in adjacency order
    """
    conflicts = []
    for idx_a, idx_b in adjacency:
        color_a = region_colors[idx_a]
        color_b = region_colors[idx_b]
        if color_a is not None and color_b is not None and color_a == color_b:
            conflicts.append((idx_a, idx_b))
    return conflicts


def is_solved(adjacency: Sequence[Tuple[int, int]], region_colors: Sequence[Optional[int]]) -> bool:
    """True if every region is colored and no adjacent regions share a color."""
    if any(color is None for color in region_colors):
        return False
    return not find_conflict_edges(adjacency, region_colors)


def marker_segments(center: Point, half_size: float = MARKER_HALF_SIZE) -> Tuple[Segment, Segment]:
    """The two crossed segments of an X marker centered at _center_."""
    x, y = center
    return (
        ((x - half_size, y - half_size), (x + half_size, y + half_size)),
        ((x + half_size, y - half_size), (x - half_size, y + half_size)),
    )


def conflict_markers(
    cache: MidpointCache,
    adjacency: Sequence[Tuple[int, int]],
    region_colors: Sequence[Optional[int]],
    half_size: float = MARKER_HALF_SIZE,
) -> List[Tuple[Segment, Segment]]:
    """Marker segments for all current conflicts, positioned via _cache_."""
    return [
        marker_segments(cache.get(idx_a, idx_b), half_size)
        for idx_a, idx_b in find_conflict_edges(adjacency, region_colors)
    ]


def shape_path_string(shape: FcShape) -> str:
    """Path description of the sampled rings of _shape_ (straight segments only)."""
    commands = []
    for ring in shape.rings:
        commands.append(f"M{ring[0, 0]:g},{ring[0, 1]:g}")
        commands.extend(f"L{x:g},{y:g}" for x, y in ring[1:])
        if len(ring) > 2 and ring[0, 0] == ring[-1, 0] and ring[0, 1] == ring[-1, 1]:
            commands.append("Z")
    return " ".join(commands)


###############################################################################
# FcPreviewPage
###############################################################################
class FcPreviewPage:
    """SVG page showing regions and conflict markers in the shapes' own coordinates.

    Contains groups/layers:
        - regions  -- one path per region
        - markers  -- X markers at border midpoints
        - debug    -- hidden, e.g. all border midpoints of a table
    """

    def __init__(self, view_box: FcBox, margin: float = MARKER_HALF_SIZE):
        """
        Initialize the page.

        Args:
            view_box (FcBox): area to show
            margin (float): extra space around _view_box_
        """
        width = view_box.width + 2 * margin
        height = view_box.height + 2 * margin
        self.drawing = svgwrite.Drawing(
            size=(f"{width:g}", f"{height:g}"),
            viewBox=f"{view_box.xmin - margin:g} {view_box.ymin - margin:g} {width:g} {height:g}",
            profile="full",
        )
        self._inkscape = Inkscape(self.drawing)
        self.region_layer: svgwrite.container.Group = self._inkscape.layer(label="regions", locked=False)
        self.marker_layer: svgwrite.container.Group = self._inkscape.layer(label="markers", locked=False)
        self.debug_layer: svgwrite.container.Group = self._inkscape.layer(label="debug", locked=False, display="none")
        self.drawing.add(self.region_layer)
        self.drawing.add(self.marker_layer)
        self.drawing.add(self.debug_layer)

    def add_region(self, shape: FcShape, color: Optional[int] = None, stroke_width: float = 0.5):
        """Add the outline of a region, filled with palette color _color_ if given."""
        fill = COLORS[color % len(COLORS)] if color is not None else REGION_DEFAULT
        self.region_layer.add(
            self.drawing.path(
                d=shape_path_string(shape),
                fill=fill,
                stroke=REGION_STROKE,
                stroke_width=stroke_width,
                fill_rule="evenodd",
            )
        )

    def add_marker(self, center: Point, half_size: float = MARKER_HALF_SIZE, add_to_debug_layer: bool = False):
        """Add an X marker centered at _center_."""
        layer = self.debug_layer if add_to_debug_layer else self.marker_layer
        for start, end in marker_segments(center, half_size):
            layer.add(
                self.drawing.line(
                    start=start,
                    end=end,
                    stroke=MARKER_STROKE,
                    stroke_width=half_size / 5,
                    stroke_linecap="round",
                )
            )

    def tostring(self, pretty: bool = False, indent: int = 2) -> str:
        """Serialized SVG document."""
        svg_buffer = io.StringIO()
        self.drawing.write(svg_buffer, pretty=pretty, indent=indent)
        return svg_buffer.getvalue()

    def save_as(self, filename: str, pretty: bool = False, indent: int = 2, compressed: bool = False):
        """Save as SVG file

        Args:
            filename (str): path and filename
            pretty (bool, optional): True for easy readable output. Defaults to False.
            indent (int, optional): Indention if pretty is enabled. Defaults to 2 spaces.
            compressed (bool, optional): Save as compressed svgz-file. Defaults to False.
        """
        output_data = self.tostring(pretty, indent).encode("utf-8")
        if compressed:
            output_data = gzip.compress(output_data)
        with open(filename, "wb") as svg_file:
            svg_file.write(output_data)


def build_preview(
    shapes: Sequence[FcShape],
    cache: MidpointCache,
    adjacency: Sequence[Tuple[int, int]],
    region_colors: Optional[Sequence[Optional[int]]] = None,
) -> FcPreviewPage:
    """
    Preview page of a map with conflict markers.

    Without _region_colors_ all regions stay uncolored and every adjacency
    midpoint is drawn on the (visible) marker layer, which is the way to
    inspect a precomputed table. With _region_colors_ only conflicts get
    markers and all other midpoints go to the hidden debug layer.
    """
    view_box = FcBox(0.0, 0.0, 0.0, 0.0)
    non_empty = [shape for shape in shapes if not shape.is_empty]
    if non_empty:
        view_box = non_empty[0].bounding_box()
        for shape in non_empty[1:]:
            view_box = view_box.union(shape.bounding_box())

    page = FcPreviewPage(view_box)
    colors = region_colors if region_colors is not None else [None] * len(shapes)
    for shape, color in zip(shapes, colors):
        if not shape.is_empty:
            page.add_region(shape, color)

    conflicts = set(find_conflict_edges(adjacency, colors)) if region_colors is not None else set(adjacency)
    for idx_a, idx_b in adjacency:
        page.add_marker(cache.get(idx_a, idx_b), add_to_debug_layer=(idx_a, idx_b) not in conflicts)
    return page
