"""Live geometry queries over rendered outlines using shapely."""

from __future__ import annotations

import bisect
from typing import List, Sequence, Union

import numpy as np
import shapely.geometry
from numpy.typing import NDArray

from fourcolor.common import Point
from fourcolor.geom import FcBox
from fourcolor.shape import FcShape


###############################################################################
# RenderedShape
###############################################################################
class RenderedShape:
    """
    Length and point queries answered by the rendered geometry itself.

    Each ring becomes a shapely LineString (single point rings become
    zero length pieces), their lengths accumulate in drawing order like
    the subpaths of one rendered path element. Queries go through
    LineString.length and LineString.interpolate instead of the segment
    tables of ArcLengthSampler, so results may differ from it in the last
    bits.
    """

    def __init__(self, shape: FcShape):
        """
        Initialize from a shape.

        Args:
            shape (FcShape): outline to render, may be empty
        """
        self._shape = shape
        self._pieces: List[Union[shapely.geometry.LineString, shapely.geometry.Point]] = []
        self._offsets: List[float] = []

        offset = 0.0
        for ring in shape.rings:
            if len(ring) >= 2:
                piece = shapely.geometry.LineString(ring.tolist())
            else:
                piece = shapely.geometry.Point(ring[0].tolist())
            self._pieces.append(piece)
            self._offsets.append(offset)
            offset += piece.length
        self._total_length = offset

    @property
    def shape(self) -> FcShape:
        """The rendered shape."""
        return self._shape

    @property
    def total_length(self) -> float:
        """Length of the rendered outline."""
        return self._total_length

    def bounding_box(self) -> FcBox:
        """Bounding box of the rendered outline."""
        if not self._pieces:
            return FcBox(0.0, 0.0, 0.0, 0.0)
        xmin, ymin, xmax, ymax = shapely.geometry.GeometryCollection(self._pieces).bounds
        return FcBox(xmin, ymin, xmax, ymax)

    def point_at_length(self, target_length: float) -> Point:
        """
        Point located _target_length_ units along the rendered outline.

        Lengths are clamped to [0, total_length].

        Raises:
            ValueError: If the shape has no points
        """
        if not self._pieces:
            raise ValueError("Cannot sample a point on a shape without points")

        length = min(max(float(target_length), 0.0), self._total_length)
        # Last piece starting at or before the target length
        idx = bisect.bisect_right(self._offsets, length) - 1
        piece = self._pieces[idx]
        if isinstance(piece, shapely.geometry.Point):
            return (float(piece.x), float(piece.y))
        point = piece.interpolate(length - self._offsets[idx])
        return (float(point.x), float(point.y))

    def points_at_lengths(self, target_lengths: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """Point at length for each entry of _target_lengths_, as (n, 2) array."""
        return np.array([self.point_at_length(length) for length in target_lengths], dtype=np.float64).reshape(-1, 2)

    def uniform_samples(self, num_samples: int) -> NDArray[np.float64]:
        """_num_samples_ + 1 evenly spaced points along the outline, both ends included."""
        targets = self._total_length * np.arange(num_samples + 1, dtype=np.float64) / num_samples
        return self.points_at_lengths(targets)
