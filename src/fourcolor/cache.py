"""Memoization of border midpoints per unordered pair of shapes."""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, ItemsView, Mapping, Optional

from fourcolor.common import TABLE_DECIMALS, Point

logger = logging.getLogger(__name__)


def round_half_up(value: float, decimals: int = TABLE_DECIMALS) -> float:
    """Round _value_ to _decimals_ places, halves towards positive infinity (like JavaScript Math.round)."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


###############################################################################
# MidpointCache
###############################################################################
class MidpointCache:
    """
    Mapping from an unordered pair of shape indices to their border midpoint.

    Border midpoints are geometric constants of static shape data, so entries
    are never invalidated or evicted: the estimator runs at most once per pair
    for the lifetime of the cache. The cache is owned by the caller (one per
    session or batch run) and may be seeded with a precomputed table.
    """

    def __init__(
        self,
        estimate: Callable[[int, int], Point],
        seed: Optional[Mapping[str, Point]] = None,
    ):
        """
        Initialize the cache.

        Args:
            estimate: called as estimate(low, high) with low < high on a cache
                miss, returns the border midpoint of the two shapes
            seed: precomputed entries keyed by pair_key()
        """
        self._estimate = estimate
        self._entries: Dict[str, Point] = {}
        if seed:
            for key, point in seed.items():
                self._entries[key] = (float(point[0]), float(point[1]))

    @staticmethod
    def pair_key(key_a: int, key_b: int) -> str:
        """Canonical key "<low>-<high>" of the unordered pair (numeric ordering)."""
        return f"{min(key_a, key_b)}-{max(key_a, key_b)}"

    def get(self, key_a: int, key_b: int) -> Point:
        """
        Border midpoint of the pair, computed on first request.

        Args:
            key_a (int): index of the first shape
            key_b (int): index of the second shape

        Returns:
            Point: the (cached) midpoint
        """
        key = self.pair_key(key_a, key_b)
        point = self._entries.get(key)
        if point is None:
            point = self._estimate(min(key_a, key_b), max(key_a, key_b))
            self._entries[key] = point
            logger.debug("Computed border midpoint %s: (%g, %g)", key, point[0], point[1])
        return point

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> ItemsView[str, Point]:
        """Cached (key, point) entries in insertion order."""
        return self._entries.items()

    def clear(self) -> None:
        """Drop all entries (full session reset only, midpoints stay valid across resets)."""
        self._entries.clear()

    def to_dict(self, decimals: int = TABLE_DECIMALS) -> Dict[str, Dict[str, float]]:
        """
        Serializable table {"i-j": {"x": X, "y": Y}} with coordinates rounded half up.

        Args:
            decimals (int): decimal places to keep

        Returns:
            Dict[str, Dict[str, float]]: the table in insertion order
        """
        return {
            key: {"x": round_half_up(point[0], decimals), "y": round_half_up(point[1], decimals)}
            for key, point in self._entries.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, float]], estimate: Callable[[int, int], Point]) -> MidpointCache:
        """Create a cache seeded from a table as written by to_dict()."""
        return cls(estimate, {key: (value["x"], value["y"]) for key, value in data.items()})
