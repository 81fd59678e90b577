"""Handling geometries"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from fourcolor.common import Point


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def squared_distance(point_a: Sequence[float], point_b: Sequence[float]) -> float:
        """Squared Euclidean distance of two 2D points."""
        dx = point_a[0] - point_b[0]
        dy = point_a[1] - point_b[1]
        return float(dx * dx + dy * dy)

    @staticmethod
    def centroid(points: Union[Sequence[Sequence[float]], NDArray[np.float64]]) -> Point:
        """
        Arithmetic mean of the given points (not the area centroid).

        Args:
            points: at least one 2D point

        Returns:
            Point: the mean point

        Raises:
            ValueError: If no points are given
        """
        if len(points) == 0:
            raise ValueError("Cannot compute the centroid of an empty point set")
        sum_x = 0.0
        sum_y = 0.0
        for pt in points:
            sum_x += pt[0]
            sum_y += pt[1]
        return (float(sum_x / len(points)), float(sum_y / len(points)))


###############################################################################
# FcBox
###############################################################################
@dataclass(frozen=True)
class FcBox:
    """
    Represents an axis aligned rectangular box.

    Attributes:
        xmin (float): The minimum x-coordinate.
        ymin (float): The minimum y-coordinate.
        xmax (float): The maximum x-coordinate.
        ymax (float): The maximum y-coordinate.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self):
        # Normalize coordinates to ensure xmin <= xmax and ymin <= ymax
        if self.xmin > self.xmax:
            xmin, xmax = self.xmax, self.xmin
            object.__setattr__(self, "xmin", xmin)
            object.__setattr__(self, "xmax", xmax)
        if self.ymin > self.ymax:
            ymin, ymax = self.ymax, self.ymin
            object.__setattr__(self, "ymin", ymin)
            object.__setattr__(self, "ymax", ymax)

    @classmethod
    def from_points(cls, points: NDArray[np.float64]) -> FcBox:
        """Tightest box around the given (n, 2) point array."""
        if not points.size:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(
            xmin=float(points[:, 0].min()),
            ymin=float(points[:, 1].min()),
            xmax=float(points[:, 0].max()),
            ymax=float(points[:, 1].max()),
        )

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """The extent of the box as Tuple (xmin, ymin, xmax, ymax)."""
        return self.xmin, self.ymin, self.xmax, self.ymax

    @property
    def width(self) -> float:
        """float: The width of the box (difference between xmax and xmin)."""
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        """float: The height of the box (difference between ymax and ymin)."""
        return self.ymax - self.ymin

    def union(self, other: FcBox) -> FcBox:
        """Smallest box containing this box and _other_."""
        return FcBox(
            xmin=min(self.xmin, other.xmin),
            ymin=min(self.ymin, other.ymin),
            xmax=max(self.xmax, other.xmax),
            ymax=max(self.ymax, other.ymax),
        )

    def __str__(self):
        """Returns a string representation of the FcBox instance."""
        return (
            f"FcBox(xmin={self.xmin}, ymin={self.ymin}, "
            f"xmax={self.xmax}, ymax={self.ymax}, "
            f"width={self.width}, height={self.height})"
        )

    def to_dict(self) -> dict:
        """Convert the FcBox instance to a dictionary."""
        return {
            "xmin": self.xmin,
            "ymin": self.ymin,
            "xmax": self.xmax,
            "ymax": self.ymax,
        }

    @classmethod
    def from_dict(cls, data: dict) -> FcBox:
        """Create an FcBox instance from a dictionary."""
        return cls(
            xmin=data.get("xmin", 0.0),
            ymin=data.get("ymin", 0.0),
            xmax=data.get("xmax", 0.0),
            ymax=data.get("ymax", 0.0),
        )
