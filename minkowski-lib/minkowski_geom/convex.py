"""
Minkowski sum of two convex polygons by merging their edge sequences in angular order.

The merge never computes an angle: the cross product of the two current edge directions decides
which cursor moves, which keeps the walk exact for float input.
"""

import logging
from typing import List, Tuple

import numpy as np

from minkowski_geom.orientation import ensure_ccw
from minkowski_geom.vector import as_polygon, cross

log = logging.getLogger(__name__)


def rotate_to_lowest(polygon: np.ndarray) -> np.ndarray:
    """
    Rotates the vertex list so that the lowest vertex (minimum y, tie minimum x) comes first
    """
    k = 0
    for i in range(1, len(polygon)):
        x, y = polygon[i]
        if y < polygon[k][1] or (y == polygon[k][1] and x < polygon[k][0]):
            k = i
    return np.roll(polygon, -k, axis=0)


def _prepare(polygon, name: str) -> np.ndarray:
    v = rotate_to_lowest(ensure_ccw(as_polygon(polygon, name)))
    # two wrap vertices so that edge (i, i + 1) never needs a modulo during the merge
    return np.vstack([v, v[:2]])


def _merge(p: np.ndarray, q: np.ndarray) -> np.ndarray:
    pp = _prepare(p, 'P')
    qq = _prepare(q, 'Q')
    n = len(pp) - 2
    m = len(qq) - 2

    result = []
    i = j = 0
    while i < n or j < m:
        result.append(pp[i] + qq[j])
        c = cross(pp[i + 1] - pp[i], qq[j + 1] - qq[j])
        if c >= 0 and i < n:
            i += 1
        if c <= 0 and j < m:
            j += 1
    return np.array(result)


def convex_sum(p, q) -> np.ndarray:
    """
    Computes the Minkowski sum of two convex polygons
    Args:
        p: convex polygon, any winding, shape (n, 2)
        q: convex polygon, any winding, shape (m, 2)

    Returns: The sum as a counterclockwise convex polygon with at most n + m vertices, starting at
    the sum of both lowest vertices

    """
    result = _merge(p, q)
    log.debug('convex_sum: %d + %d vertices -> %d', len(p), len(q), len(result))
    return result


def merge_segments(p, q) -> List[Tuple[np.ndarray, np.ndarray]]:
    """
    Returns the directed boundary segments of the merge walk of p and q, closing segment included
    """
    v = _merge(p, q)
    return [(v[k], v[(k + 1) % len(v)]) for k in range(len(v))]
