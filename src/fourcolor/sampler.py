"""Arc-length parameterization of multi-ring shapes."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from fourcolor.common import Point
from fourcolor.geom import FcBox
from fourcolor.shape import FcShape


###############################################################################
# ArcLengthSampler
###############################################################################
class ArcLengthSampler:
    """
    Maps length values along the outline of a shape back to 2D points.

    All segments of all rings are walked in drawing order as one polyline
    whose length accumulates across rings. Rings are not closed implicitly;
    only explicit points count. Gaps between rings (the jump from the end of
    one ring to the start of the next) have no length.

    Segment tables are computed once on construction.
    """

    def __init__(self, shape: FcShape):
        """
        Initialize the sampler for the given _shape_.

        Args:
            shape (FcShape): the shape to sample, may be empty
        """
        self._shape = shape

        starts = []
        deltas = []
        for ring in shape.rings:
            if len(ring) < 2:
                continue
            starts.append(ring[:-1])
            deltas.append(ring[1:] - ring[:-1])

        if starts:
            self._starts: NDArray[np.float64] = np.vstack(starts)
            self._deltas: NDArray[np.float64] = np.vstack(deltas)
        else:
            self._starts = np.empty((0, 2), dtype=np.float64)
            self._deltas = np.empty((0, 2), dtype=np.float64)

        dx = self._deltas[:, 0]
        dy = self._deltas[:, 1]
        self._lengths: NDArray[np.float64] = np.sqrt(dx * dx + dy * dy)
        # Sequential accumulation, identical to summing segment by segment
        self._cum_end: NDArray[np.float64] = np.add.accumulate(self._lengths)
        self._cum_start: NDArray[np.float64] = np.concatenate(([0.0], self._cum_end[:-1]))
        self._total_length: float = float(self._cum_end[-1]) if self._cum_end.size else 0.0

        if shape.is_empty:
            self._last_point = None
        else:
            last = shape.rings[-1][-1]
            self._last_point = (float(last[0]), float(last[1]))

    @classmethod
    def from_path_string(cls, path_string: str) -> ArcLengthSampler:
        """Parse _path_string_ and create a sampler for the resulting shape."""
        return cls(FcShape.from_path_string(path_string))

    @property
    def shape(self) -> FcShape:
        """The sampled shape."""
        return self._shape

    @property
    def total_length(self) -> float:
        """Sum of the Euclidean lengths of all ring segments."""
        return self._total_length

    def bounding_box(self) -> FcBox:
        """Bounding box of the sampled shape."""
        return self._shape.bounding_box()

    def _check_not_empty(self) -> None:
        if self._last_point is None:
            raise ValueError("Cannot sample a point on a shape without points")

    @property
    def last_point(self) -> Point:
        """Last point of the last ring, the result for lengths beyond the total length."""
        self._check_not_empty()
        return self._last_point

    def point_at_length(self, target_length: float) -> Point:
        """
        Point located _target_length_ units along the outline.

        Within the first segment whose accumulated end length reaches
        _target_length_ the point is interpolated linearly (zero length
        segments yield their start point). Lengths beyond the total length
        yield the last point of the last ring.

        Args:
            target_length (float): length along the outline, starting at 0

        Returns:
            Point: the interpolated point

        Raises:
            ValueError: If the shape has no points
        """
        self._check_not_empty()

        idx = int(np.searchsorted(self._cum_end, target_length, side="left"))
        if idx >= self._cum_end.size:
            return self._last_point

        seg_len = self._lengths[idx]
        t = (target_length - self._cum_start[idx]) / seg_len if seg_len > 0 else 0.0
        start = self._starts[idx]
        delta = self._deltas[idx]
        return (float(start[0] + t * delta[0]), float(start[1] + t * delta[1]))

    def points_at_lengths(self, target_lengths: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """
        Vectorized point_at_length().

        Args:
            target_lengths: 1D sequence of lengths

        Returns:
            NDArray[np.float64]: (n, 2) array, row i equals point_at_length(target_lengths[i])

        Raises:
            ValueError: If the shape has no points
        """
        self._check_not_empty()

        targets = np.asarray(target_lengths, dtype=np.float64)
        result = np.empty((targets.size, 2), dtype=np.float64)

        idx = np.searchsorted(self._cum_end, targets, side="left")
        inside = idx < self._cum_end.size
        result[~inside] = self._last_point

        seg_idx = idx[inside]
        seg_len = self._lengths[seg_idx]
        t = np.zeros(seg_idx.size, dtype=np.float64)
        np.divide(targets[inside] - self._cum_start[seg_idx], seg_len, out=t, where=seg_len > 0)
        result[inside] = self._starts[seg_idx] + t[:, np.newaxis] * self._deltas[seg_idx]
        return result

    def uniform_samples(self, num_samples: int) -> NDArray[np.float64]:
        """
        _num_samples_ + 1 points at lengths total * i / num_samples for i in 0..num_samples.

        Args:
            num_samples (int): number of sampling intervals

        Returns:
            NDArray[np.float64]: (num_samples + 1, 2) array
        """
        targets = self._total_length * np.arange(num_samples + 1, dtype=np.float64) / num_samples
        return self.points_at_lengths(targets)


###############################################################################
# Functions
###############################################################################


def total_length(shape: FcShape) -> float:
    """Sum of the Euclidean segment lengths of all rings of _shape_ (0 for an empty shape)."""
    return ArcLengthSampler(shape).total_length


def point_at_length(shape: FcShape, total_len: float, target_len: float) -> Point:
    """
    Point located _target_len_ units along the outline of _shape_.

    Args:
        shape (FcShape): the shape, must contain at least one point
        total_len (float): total length of _shape_ as returned by total_length()
        target_len (float): length along the outline

    Returns:
        Point: the interpolated point, or the last point of the last ring if
            _target_len_ exceeds _total_len_

    Raises:
        ValueError: If the shape has no points
    """
    sampler = ArcLengthSampler(shape)
    if target_len > total_len:
        return sampler.last_point
    return sampler.point_at_length(target_len)
