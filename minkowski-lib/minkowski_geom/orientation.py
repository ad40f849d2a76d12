"""
Loop orientation.

Two independent classifiers that agree on every simple polygon: one inspects the turn at an
extreme vertex, the other integrates trapezoids under the edges. Convention is the standard
mathematical one (y up): a positive cross product is a counterclockwise turn.
"""

import numpy as np

from minkowski_geom.vector import cross


def polygon_is_clockwise(loop: np.ndarray) -> bool:
    """
    Extreme-vertex method. The vertex with minimum y (tie: maximum x) is always convex, so the
    turn there gives the winding of the whole loop.
    Args:
        loop: closed polygon, shape (N, 2)

    Returns: True if clockwise, False if counterclockwise

    """
    n = len(loop)
    k = 0
    for i in range(1, n):
        x, y = loop[i]
        if y < loop[k][1] or (y == loop[k][1] and x > loop[k][0]):
            k = i
    incoming = loop[k] - loop[k - 1]
    outgoing = loop[(k + 1) % n] - loop[k]
    return not cross(incoming, outgoing) > 0


def polygon_is_clockwise_by_area(loop: np.ndarray) -> bool:
    """
    Signed-area method: sum of (x1 - x0) * (y1 + y0) over the edges, positive for clockwise.
    """
    x0 = loop[:, 0]
    y0 = loop[:, 1]
    x1 = np.roll(x0, -1)
    y1 = np.roll(y0, -1)
    return float(np.sum((x1 - x0) * (y1 + y0))) > 0


def signed_area(loop: np.ndarray) -> float:
    """
    Shoelace formula (positive = CCW)
    """
    x = loop[:, 0]
    y = loop[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def ensure_ccw(loop: np.ndarray) -> np.ndarray:
    """
    Returns the loop in counterclockwise order (reversed copy if it was clockwise)
    """
    if polygon_is_clockwise(loop):
        return loop[::-1].copy()
    return loop
