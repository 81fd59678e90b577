"""Bezier curve handling utilities for path linearization."""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from fourcolor.common import BEZIER_STEPS, Point


class BezierCurve:
    """Class to handle cubic Bezier curve operations.

    Curves are evaluated with the closed form Bernstein polynomial at uniform
    parameter steps. The evaluation order of the terms is fixed so that equal
    input always yields bit-identical points.
    """

    @staticmethod
    def cubic_point(points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]], t: float) -> Point:
        """
        Evaluate a cubic Bezier curve at parameter _t_.

        B(t) = (1-t)^3*P0 + 3*(1-t)^2*t*P1 + 3*(1-t)*t^2*P2 + t^3*P3

        Args:
            points: Control points start, control1, control2, end
            t (float): Curve parameter in [0, 1]

        Returns:
            Point: the point on the curve
        """
        pt0, pt1, pt2, pt3 = points
        u = 1.0 - t
        x = u * u * u * pt0[0] + 3 * u * u * t * pt1[0] + 3 * u * t * t * pt2[0] + t * t * t * pt3[0]
        y = u * u * u * pt0[1] + 3 * u * u * t * pt1[1] + 3 * u * t * t * pt2[1] + t * t * t * pt3[1]
        return (float(x), float(y))

    @classmethod
    def polygonize_cubic_curve(
        cls,
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        steps: int = BEZIER_STEPS,
        skip_first: bool = True,
    ) -> List[Point]:
        """
        Polygonize a cubic Bezier curve into line segments.

        The parameter of the i-th sample is computed as i / steps (not by
        accumulating a step width) so that t = 1.0 hits the end point exactly.

        Args:
            points: Control points as Sequence[Tuple[float, float]] or NDArray[np.float64]
                    Must contain exactly 4 points: start, control1, control2, end
            steps: Number of segments to divide the curve into
            skip_first: If True, skip the start point (t=0) which is already part of the ring

        Returns:
            List[Point]: _steps_ points (or _steps_+1 if skip_first is False)

        Raises:
            ValueError: If not exactly four control points are given or steps is not positive
        """
        if len(points) != 4:
            raise ValueError(f"Cubic curve requires 4 control points, got {len(points)}")
        if steps < 1:
            raise ValueError(f"Number of steps must be positive, got {steps}")

        first = 1 if skip_first else 0
        return [cls.cubic_point(points, i / steps) for i in range(first, steps + 1)]
