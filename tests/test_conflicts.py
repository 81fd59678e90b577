"""Test module for fourcolor.conflicts

The tests are run using pytest.
"""

import gzip

from fourcolor.cache import MidpointCache
from fourcolor.conflicts import (
    COLORS,
    FcPreviewPage,
    build_preview,
    conflict_markers,
    find_conflict_edges,
    is_solved,
    marker_segments,
    shape_path_string,
)
from fourcolor.geom import FcBox
from fourcolor.shape import FcShape

ADJACENCY = [(0, 1), (1, 2), (0, 2)]


class TestConflicts:
    """Test detection of coloring conflicts."""

    def test_find_conflict_edges(self):
        """Test that only pairs with equal colors conflict."""
        assert find_conflict_edges(ADJACENCY, [0, 0, 1]) == [(0, 1)]
        assert find_conflict_edges(ADJACENCY, [2, 2, 2]) == ADJACENCY
        assert find_conflict_edges(ADJACENCY, [0, 1, 2]) == []

    def test_uncolored_regions_never_conflict(self):
        """Test that None colors are ignored."""
        assert find_conflict_edges(ADJACENCY, [None, None, 1]) == []

    def test_is_solved(self):
        """Test that all regions must be colored without conflicts."""
        assert is_solved(ADJACENCY, [0, 1, 2])
        assert not is_solved(ADJACENCY, [0, 1, None])
        assert not is_solved(ADJACENCY, [0, 1, 1])


class TestMarkers:
    """Test marker geometry."""

    def test_marker_segments(self):
        """Test the two crossed segments around the center."""
        first, second = marker_segments((50.0, 20.0))

        assert first == ((36.0, 6.0), (64.0, 34.0))
        assert second == ((64.0, 6.0), (36.0, 34.0))

    def test_conflict_markers_use_cache(self):
        """Test that markers are centered at cached midpoints."""
        calls = []

        def estimate(idx_a, idx_b):
            calls.append((idx_a, idx_b))
            return (10.0 * idx_a, 10.0 * idx_b)

        cache = MidpointCache(estimate, seed={"1-2": (5.0, 5.0)})

        markers = conflict_markers(cache, ADJACENCY, [0, 1, 1], half_size=1.0)

        assert markers == [(((4.0, 4.0), (6.0, 6.0)), ((6.0, 4.0), (4.0, 6.0)))]
        assert calls == []

    def test_markers_follow_recoloring(self):
        """Test that markers appear and disappear with conflicts."""
        cache = MidpointCache(lambda idx_a, idx_b: (float(idx_a), float(idx_b)))

        assert len(conflict_markers(cache, ADJACENCY, [0, 0, 0])) == 3
        assert conflict_markers(cache, ADJACENCY, [0, 1, 2]) == []
        assert len(cache) == 3


class TestPreview:
    """Test the SVG preview."""

    def test_shape_path_string(self):
        """Test conversion of rings back to a path description."""
        shape = FcShape.from_path_string("M0,0 L1.5,0 L1.5,1 Z M5,5 L6,6")

        assert shape_path_string(shape) == "M0,0 L1.5,0 L1.5,1 L0,0 Z M5,5 L6,6"

    def test_page_layers(self):
        """Test that the page holds one path per region and two lines per marker."""
        page = FcPreviewPage(FcBox(0.0, 0.0, 200.0, 100.0))
        page.add_region(FcShape.from_path_string("M0,0 L100,0 L100,100 L0,100 Z"), color=1)
        page.add_marker((100.0, 50.0))

        svg = page.tostring()

        assert svg.count("<path") == 1
        assert svg.count("<line") == 2
        assert COLORS[1] in svg
        assert 'inkscape:label="markers"' in svg
        assert 'viewBox="-14 -14 228 128"' in svg

    def test_build_preview(self):
        """Test a preview with one conflict and one valid border."""
        shapes = [
            FcShape.from_path_string("M0,0 L100,0 L100,100 L0,100 Z"),
            FcShape.from_path_string("M100,0 L200,0 L200,100 L100,100 Z"),
            FcShape.from_path_string("M200,0 L300,0 L300,100 L200,100 Z"),
        ]
        cache = MidpointCache(lambda idx_a, idx_b: (100.0 * idx_b, 50.0))

        page = build_preview(shapes, cache, [(0, 1), (1, 2)], region_colors=[0, 0, 1])

        assert len(page.marker_layer.elements) == 2
        assert len(page.debug_layer.elements) == 2
        assert len(page.region_layer.elements) == 3

    def test_build_preview_without_colors(self):
        """Test that without colors every midpoint is marked visibly."""
        shapes = [FcShape.from_path_string("M0,0 L1,0 L1,1 Z"), FcShape()]
        cache = MidpointCache(lambda idx_a, idx_b: (0.5, 0.5))

        page = build_preview(shapes, cache, [(0, 1)])

        assert len(page.region_layer.elements) == 1
        assert len(page.marker_layer.elements) == 2
        assert len(page.debug_layer.elements) == 0

    def test_save_as_compressed(self, tmp_path):
        """Test writing a compressed preview."""
        page = FcPreviewPage(FcBox(0.0, 0.0, 10.0, 10.0))
        page.add_marker((5.0, 5.0), half_size=2.0)
        filename = tmp_path / "preview.svgz"

        page.save_as(str(filename), compressed=True)

        assert b"<line" in gzip.decompress(filename.read_bytes())
