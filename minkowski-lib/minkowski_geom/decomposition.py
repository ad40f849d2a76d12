"""
Convex decomposition of simple polygons.

The engine consumes decompositions through a small contract, ``Decomposition(is_simple, pieces)``.
``DecompositionService`` is the handle callers pass around: it binds its backend lazily on first
use and reports whether it is ready. The default backend triangulates by ear clipping and then
merges triangles across diagonals while the union stays convex (Hertel-Mehlhorn).
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np
import shapely.geometry as sh

from minkowski_geom.errors import DecompositionError
from minkowski_geom.orientation import ensure_ccw
from minkowski_geom.vector import as_polygon, cross

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Decomposition:
    """
    Result of a decomposition request
    Attributes:
        is_simple: whether the input polygon is simple
        pieces: convex CCW pieces, or the input polygon alone if it is not simple
    """
    is_simple: bool
    pieces: List[np.ndarray]


def is_simple(polygon: np.ndarray) -> bool:
    return sh.LinearRing(polygon).is_simple


def _in_triangle(p, a, b, c) -> bool:
    return cross(b - a, p - a) >= 0 and cross(c - b, p - b) >= 0 and cross(a - c, p - c) >= 0


def triangulate(polygon: np.ndarray) -> List[List[int]]:
    """
    Ear clipping
    Args:
        polygon: simple CCW polygon

    Returns: Triangles as CCW index triples into polygon

    """
    idx = list(range(len(polygon)))
    triangles = []
    while len(idx) > 3:
        for k in range(len(idx)):
            a, b, c = idx[k - 1], idx[k], idx[(k + 1) % len(idx)]
            turn = cross(polygon[b] - polygon[a], polygon[c] - polygon[b])
            if turn == 0:
                # collinear vertex, drop it without emitting a triangle
                del idx[k]
                break
            if turn < 0:
                continue
            if any(_in_triangle(polygon[p], polygon[a], polygon[b], polygon[c])
                   for p in idx if p not in (a, b, c)):
                continue
            triangles.append([a, b, c])
            del idx[k]
            break
        else:
            raise DecompositionError('<triangulate>: no ear found, polygon is not simple')
    if cross(polygon[idx[1]] - polygon[idx[0]], polygon[idx[2]] - polygon[idx[1]]) != 0:
        triangles.append(idx)
    return triangles


def _is_convex(polygon: np.ndarray) -> bool:
    n = len(polygon)
    return all(cross(polygon[k] - polygon[k - 1], polygon[(k + 1) % n] - polygon[k]) >= 0 for k in range(n))


def _try_merge(a: List[int], b: List[int], polygon: np.ndarray) -> Optional[List[int]]:
    for s in range(len(a)):
        u, v = a[s], a[(s + 1) % len(a)]
        for t in range(len(b)):
            if b[t] == v and b[(t + 1) % len(b)] == u:
                # a from v round to u, then b strictly between u and v
                a_rot = a[s + 1:] + a[:s + 1]
                b_rot = b[t + 1:] + b[:t + 1]
                merged = a_rot + b_rot[1:-1]
                if _is_convex(polygon[merged]):
                    return merged
                return None
    return None


def merge_convex(triangles: List[List[int]], polygon: np.ndarray) -> List[List[int]]:
    """
    Removes diagonals between pieces while the union of the two pieces stays convex
    """
    pieces = [list(t) for t in triangles]
    merged = True
    while merged:
        merged = False
        for x in range(len(pieces)):
            for y in range(x + 1, len(pieces)):
                union = _try_merge(pieces[x], pieces[y], polygon)
                if union is not None:
                    pieces[x] = union
                    del pieces[y]
                    merged = True
                    break
            if merged:
                break
    return pieces


def decompose(polygon) -> Decomposition:
    v = as_polygon(polygon)
    if not is_simple(v):
        return Decomposition(False, [v])
    v = ensure_ccw(v)
    pieces = [v[p] for p in merge_convex(triangulate(v), v)]
    return Decomposition(True, pieces)


class DecompositionService:
    """
    Explicit handle to a decomposition backend. Not ready until initialized; ``decompose``
    initializes on first use.
    """

    def __init__(self, backend: Optional[Callable[[np.ndarray], Decomposition]] = None):
        self._requested = backend
        self._backend = None

    @property
    def ready(self) -> bool:
        return self._backend is not None

    def initialize(self) -> 'DecompositionService':
        if not self.ready:
            self._backend = self._requested if self._requested is not None else decompose
            log.debug('decomposition backend ready: %s', getattr(self._backend, '__name__', self._backend))
        return self

    def decompose(self, polygon) -> Decomposition:
        """
        Splits a polygon into convex pieces
        Args:
            polygon: vertex sequence of shape (N, 2)

        Returns: The decomposition. ``pieces`` is ``[polygon]`` when the polygon is not simple.

        """
        self.initialize()
        result = self._backend(polygon)
        log.debug('decompose: simple=%s, %d pieces', result.is_simple, len(result.pieces))
        return result
