"""Central module containing constants and type definitions for path geometry and border detection."""

from __future__ import annotations

from typing import Literal, Tuple

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################


FcPathCmds = Literal[  # Type-Definition for path commands understood by FcPathParser
    # MoveTo (2) - start a new ring and move the current point to (x,y)
    "M",
    # LineTo (2) - draw a straight line from the current point to (x,y)
    "L",
    # Cubic Bezier To (6) - draw a cubic Bezier curve with two control points and an endpoint (x,y)
    "C",
    # ClosePath (0) - close ring by returning to its start point
    "Z",
]

# 2D point (x, y) in the shared coordinate space of all shapes
Point = Tuple[float, float]

# One traced sub-path, array of shape (n, 2)
Ring = NDArray[np.float64]


###############################################################################
# Consts
###############################################################################

# Number of line segments a cubic Bezier curve is linearized into.
# Fixed (not adaptive) so that precomputed midpoint tables are reproducible.
BEZIER_STEPS: int = 10

# Contiguous-run strategy (offline precomputation over parsed path data)
OFFLINE_SAMPLES: int = 200
OFFLINE_MATCH_THRESHOLD: float = 5.0
OFFLINE_RUN_GAP: float = 40.0

# Centroid strategy (runtime queries against rendered geometry)
LIVE_SAMPLES: int = 60
LIVE_MATCH_THRESHOLD: float = 4.0
LIVE_CENTROID_SPREAD: float = 15.0

# Half-length of the two crossed segments of a conflict marker
MARKER_HALF_SIZE: float = 14.0

# Decimal places kept for coordinates of serialized midpoint tables
TABLE_DECIMALS: int = 1
