"""Estimation of a representative point on the shared border of two shapes.

Two interchangeable strategies implement the same contract, "a point plausibly
on the shared border between two adjacent shapes":

- ContiguousRunEstimator: dense sampling, keeps the nearest match per sample
  and returns the middle of the longest contiguous run of matches. Preferred
  for precomputed (offline) tables.
- CentroidEstimator: sparse sampling against live geometry, averages all
  close sample pairs and corrects the average back onto the border when the
  matches are spread out. Meant for ad hoc runtime queries.

Both fall back to the midpoint of the two bounding box centers when the
shapes do not come closer than the match threshold anywhere.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from fourcolor.common import (
    LIVE_CENTROID_SPREAD,
    LIVE_MATCH_THRESHOLD,
    LIVE_SAMPLES,
    OFFLINE_MATCH_THRESHOLD,
    OFFLINE_RUN_GAP,
    OFFLINE_SAMPLES,
    Point,
)
from fourcolor.geom import FcBox, GeomMath
from fourcolor.rendered import RenderedShape
from fourcolor.sampler import ArcLengthSampler
from fourcolor.shape import FcShape

logger = logging.getLogger(__name__)


###############################################################################
# Interfaces
###############################################################################


@runtime_checkable
class LengthQueryable(Protocol):
    """Outline that can be sampled by length (ArcLengthSampler, RenderedShape)."""

    @property
    def total_length(self) -> float:
        """Length of the outline."""

    def point_at_length(self, target_length: float) -> Point:
        """Point located _target_length_ units along the outline."""

    def points_at_lengths(self, target_lengths: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """Point at length for each entry of _target_lengths_, as (n, 2) array."""

    def uniform_samples(self, num_samples: int) -> NDArray[np.float64]:
        """_num_samples_ + 1 evenly spaced points along the outline."""

    def bounding_box(self) -> FcBox:
        """Bounding box of the outline."""


ShapeLike = Union[FcShape, LengthQueryable]


class BorderMidpointEstimator(Protocol):
    """Common signature of all border midpoint strategies."""

    def estimate(self, shape_a: ShapeLike, shape_b: ShapeLike) -> Point:
        """Point plausibly on the shared border of _shape_a_ and _shape_b_."""


###############################################################################
# EstimatorSettings
###############################################################################


@dataclass(frozen=True)
class EstimatorSettings:
    """Tuning values of the border estimators.

    All distances are in units of the shapes' coordinate system; the defaults
    are tuned for SVG viewBox coordinates of a map some hundred units wide.

    Attributes:
        samples: Number of sampling intervals per shape (samples + 1 points).
        match_threshold: Two samples closer than this belong to the shared border.
        run_gap: Consecutive border candidates closer than this form one run
            (ContiguousRunEstimator only).
        centroid_spread: If no shared point lies within this distance of the
            centroid, the closest shared point is returned instead
            (CentroidEstimator only).
    """

    samples: int = OFFLINE_SAMPLES
    match_threshold: float = OFFLINE_MATCH_THRESHOLD
    run_gap: float = OFFLINE_RUN_GAP
    centroid_spread: float = LIVE_CENTROID_SPREAD

    def __post_init__(self):
        if self.samples < 1:
            raise ValueError(f"Number of samples must be positive, got {self.samples}")
        if self.match_threshold <= 0:
            raise ValueError(f"Match threshold must be positive, got {self.match_threshold}")
        if self.run_gap <= 0:
            raise ValueError(f"Run gap must be positive, got {self.run_gap}")
        if self.centroid_spread < 0:
            raise ValueError(f"Centroid spread must not be negative, got {self.centroid_spread}")

    @classmethod
    def offline(cls) -> EstimatorSettings:
        """Dense settings for precomputation."""
        return cls(samples=OFFLINE_SAMPLES, match_threshold=OFFLINE_MATCH_THRESHOLD, run_gap=OFFLINE_RUN_GAP)

    @classmethod
    def live(cls) -> EstimatorSettings:
        """Sparse settings for runtime queries."""
        return cls(samples=LIVE_SAMPLES, match_threshold=LIVE_MATCH_THRESHOLD, centroid_spread=LIVE_CENTROID_SPREAD)


###############################################################################
# Helpers
###############################################################################


def bounding_box_fallback(outline_a: LengthQueryable, outline_b: LengthQueryable) -> Point:
    """Midpoint of the bounding box centers of both outlines."""
    box_a = outline_a.bounding_box()
    box_b = outline_b.bounding_box()
    # Fixed summation order: (xa + wa/2 + xb + wb/2) / 2
    return (
        (box_a.xmin + box_a.width / 2 + box_b.xmin + box_b.width / 2) / 2,
        (box_a.ymin + box_a.height / 2 + box_b.ymin + box_b.height / 2) / 2,
    )


def longest_contiguous_run(points: Sequence[Sequence[float]], max_gap: float) -> Tuple[int, int]:
    """
    Find the longest run of consecutive points each closer than _max_gap_ to its predecessor.

    Ties are won by the run starting first.

    Args:
        points: at least one 2D point, in sampling order
        max_gap (float): maximum distance (exclusive) between neighbors of a run

    Returns:
        Tuple[int, int]: (start index, length) of the run

    Raises:
        ValueError: If no points are given
    """
    if len(points) == 0:
        raise ValueError("Cannot find a run in an empty point sequence")

    max_gap_sq = max_gap * max_gap
    best_start, best_len = 0, 1
    cur_start, cur_len = 0, 1
    for i in range(1, len(points)):
        if GeomMath.squared_distance(points[i], points[i - 1]) < max_gap_sq:
            cur_len += 1
        else:
            cur_start, cur_len = i, 1
        if cur_len > best_len:
            best_start, best_len = cur_start, cur_len
    return best_start, best_len


def _pairwise_squared_distances(samples_a: NDArray[np.float64], samples_b: NDArray[np.float64]) -> NDArray[np.float64]:
    """Matrix of squared distances, row i for samples_a[i], column j for samples_b[j]."""
    dx = samples_a[:, np.newaxis, 0] - samples_b[np.newaxis, :, 0]
    dy = samples_a[:, np.newaxis, 1] - samples_b[np.newaxis, :, 1]
    return dx * dx + dy * dy


###############################################################################
# ContiguousRunEstimator
###############################################################################


class ContiguousRunEstimator:
    """Border midpoint from the longest contiguous run of matched samples.

    For each of the samples + 1 evenly spaced points of shape A the nearest of
    the samples + 1 points of shape B is searched (linear scan, first minimum
    wins). Pairs closer than the match threshold yield a candidate at their
    midpoint. Candidates are kept in sampling order; the longest run of
    neighbors closer than run_gap traces one continuous border segment and
    sparse near misses elsewhere on the perimeter are discarded. The result is
    the candidate in the middle of that run, so it is always an actually
    sampled border point.
    """

    def __init__(self, settings: Optional[EstimatorSettings] = None):
        self.settings = settings or EstimatorSettings.offline()

    @staticmethod
    def _as_queryable(shape: ShapeLike) -> LengthQueryable:
        if isinstance(shape, FcShape):
            return ArcLengthSampler(shape)
        return shape

    def border_candidates(self, shape_a: ShapeLike, shape_b: ShapeLike) -> NDArray[np.float64]:
        """
        Candidate border points in sampling order of _shape_a_.

        Returns:
            NDArray[np.float64]: (n, 2) array, possibly empty

        Raises:
            ValueError: If one of the shapes has no points
        """
        outline_a = self._as_queryable(shape_a)
        outline_b = self._as_queryable(shape_b)
        samples_a = outline_a.uniform_samples(self.settings.samples)
        samples_b = outline_b.uniform_samples(self.settings.samples)

        dist_sq = _pairwise_squared_distances(samples_a, samples_b)
        nearest = np.argmin(dist_sq, axis=1)
        best = dist_sq[np.arange(len(samples_a)), nearest]

        threshold_sq = self.settings.match_threshold * self.settings.match_threshold
        matched = best < threshold_sq
        return (samples_a[matched] + samples_b[nearest[matched]]) / 2

    def estimate(self, shape_a: ShapeLike, shape_b: ShapeLike) -> Point:
        """
        Point on the shared border of _shape_a_ and _shape_b_.

        Args:
            shape_a: first shape (FcShape or sampled outline)
            shape_b: second shape (FcShape or sampled outline)

        Returns:
            Point: middle candidate of the longest run, or the bounding box
                fallback if no samples match

        Raises:
            ValueError: If one of the shapes has no points
        """
        outline_a = self._as_queryable(shape_a)
        outline_b = self._as_queryable(shape_b)
        candidates = self.border_candidates(outline_a, outline_b)

        if not len(candidates):
            logger.debug("No shared border within %g units, using bounding box fallback", self.settings.match_threshold)
            return bounding_box_fallback(outline_a, outline_b)

        start, length = longest_contiguous_run(candidates, self.settings.run_gap)
        mid = candidates[start + length // 2]
        return (float(mid[0]), float(mid[1]))


###############################################################################
# CentroidEstimator
###############################################################################


class CentroidEstimator:
    """Border midpoint from the centroid of all matched sample pairs.

    Every pair (i, j) of samples closer than the match threshold contributes
    its midpoint as a shared point. The centroid of the shared points is
    returned, unless no shared point lies within centroid_spread of it: then
    the shared points spread along a long or curved border and the centroid
    may float off the border, so the shared point closest to the centroid is
    returned instead.
    """

    def __init__(self, settings: Optional[EstimatorSettings] = None):
        self.settings = settings or EstimatorSettings.live()

    @staticmethod
    def _as_queryable(shape: ShapeLike) -> LengthQueryable:
        if isinstance(shape, FcShape):
            return RenderedShape(shape)
        return shape

    def shared_points(self, shape_a: ShapeLike, shape_b: ShapeLike) -> NDArray[np.float64]:
        """
        Midpoints of all close sample pairs, ordered by sample of A then sample of B.

        Raises:
            ValueError: If one of the shapes has no points
        """
        outline_a = self._as_queryable(shape_a)
        outline_b = self._as_queryable(shape_b)
        samples_a = outline_a.uniform_samples(self.settings.samples)
        samples_b = outline_b.uniform_samples(self.settings.samples)

        dist_sq = _pairwise_squared_distances(samples_a, samples_b)
        threshold_sq = self.settings.match_threshold * self.settings.match_threshold
        rows, cols = np.nonzero(dist_sq < threshold_sq)
        return (samples_a[rows] + samples_b[cols]) / 2

    def estimate(self, shape_a: ShapeLike, shape_b: ShapeLike) -> Point:
        """
        Point on the shared border of _shape_a_ and _shape_b_.

        Args:
            shape_a: first shape (FcShape or sampled outline)
            shape_b: second shape (FcShape or sampled outline)

        Returns:
            Point: centroid of the shared points, the shared point closest to
                it, or the bounding box fallback if no samples match

        Raises:
            ValueError: If one of the shapes has no points
        """
        outline_a = self._as_queryable(shape_a)
        outline_b = self._as_queryable(shape_b)
        shared = self.shared_points(outline_a, outline_b)

        if not len(shared):
            logger.debug("No shared border within %g units, using bounding box fallback", self.settings.match_threshold)
            return bounding_box_fallback(outline_a, outline_b)

        center = GeomMath.centroid(shared)
        dist_sq = [GeomMath.squared_distance(pt, center) for pt in shared]
        closest_idx = int(np.argmin(dist_sq))

        if math.sqrt(dist_sq[closest_idx]) > self.settings.centroid_spread:
            closest = shared[closest_idx]
            return (float(closest[0]), float(closest[1]))
        return center


###############################################################################
# Functions
###############################################################################


def estimate_border_midpoint(
    shape_a: ShapeLike, shape_b: ShapeLike, strategy: Optional[BorderMidpointEstimator] = None
) -> Point:
    """
    Estimate the border midpoint of two shapes.

    Args:
        shape_a: first shape
        shape_b: second shape
        strategy: estimator to use, defaults to ContiguousRunEstimator with offline settings

    Returns:
        Point: point plausibly on the shared border
    """
    if strategy is None:
        strategy = ContiguousRunEstimator()
    return strategy.estimate(shape_a, shape_b)
