"""Immutable multi-ring shapes"""

from __future__ import annotations

from functools import cached_property
from typing import Iterable, Iterator, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from fourcolor.common import BEZIER_STEPS, Ring
from fourcolor.geom import FcBox
from fourcolor.svgpath import FcPathParser


###############################################################################
# FcShape
###############################################################################
class FcShape:
    """
    A region outline made of one or more rings (islands, exclaves, ...).

    Shapes are constructed once from static geometry and never mutated: the
    ring arrays are stored as read-only copies.
    """

    def __init__(self, rings: Iterable[Union[Ring, Sequence[Tuple[float, float]]]] = ()):
        """
        Initialize the shape.

        Args:
            rings: (n, 2) arrays or sequences of (x, y) tuples, each with at least one point.
                Empty rings are dropped.
        """
        frozen = []
        for ring in rings:
            array = np.array(ring, dtype=np.float64).reshape(-1, 2)
            if not array.size:
                continue
            array.flags.writeable = False
            frozen.append(array)
        self._rings: Tuple[Ring, ...] = tuple(frozen)

    @classmethod
    def from_path_string(cls, path_string: str, bezier_steps: int = BEZIER_STEPS) -> FcShape:
        """Parse a path description (see FcPathParser) into a shape."""
        return cls(FcPathParser.parse(path_string, bezier_steps))

    @property
    def rings(self) -> Tuple[Ring, ...]:
        """Read-only rings of the shape."""
        return self._rings

    @property
    def num_points(self) -> int:
        """Total number of points over all rings."""
        return sum(len(ring) for ring in self._rings)

    @property
    def is_empty(self) -> bool:
        """True if the shape has no points at all."""
        return self.num_points == 0

    @cached_property
    def points(self) -> NDArray[np.float64]:
        """All points of all rings stacked into one (n, 2) array."""
        if not self._rings:
            return np.empty((0, 2), dtype=np.float64)
        stacked = np.vstack(self._rings)
        stacked.flags.writeable = False
        return stacked

    def bounding_box(self) -> FcBox:
        """Tightest box around all points. An empty shape yields a box of size 0 at the origin."""
        return FcBox.from_points(self.points)

    def __iter__(self) -> Iterator[Ring]:
        return iter(self._rings)

    def __len__(self) -> int:
        return len(self._rings)

    def __repr__(self) -> str:
        return f"FcShape(rings={len(self._rings)}, points={self.num_points})"
