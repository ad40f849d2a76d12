"""
Minkowski difference of two decomposed polygons and its closest boundary point to the origin.

Every convex piece of the left polygon is summed with the reflection of every convex piece of the
right polygon. The pairwise sums overlap in general; the boundary of their union is recovered as
the set of piece boundary points that are not strictly inside any other piece. The candidate
nearest to the origin gives the separation (or, when the origin is inside, the penetration).
"""

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from minkowski_geom.convex import convex_sum
from minkowski_geom.decomposition import DecompositionService
from minkowski_geom.errors import DecompositionError, InvalidPolygon
from minkowski_geom.orientation import ensure_ccw
from minkowski_geom.vector import as_polygon, cross, dot, edges, magnitude, reflect

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DifferenceResult:
    """
    Attributes:
        pieces: pairwise convex sums, counterclockwise
        candidates: points on the boundary of the union of pieces
        closest: candidate of minimum magnitude
        overlapping: True if the origin is strictly inside the union, i.e. the shapes overlap
    """
    pieces: List[np.ndarray]
    candidates: List[np.ndarray] = field(repr=False)
    closest: np.ndarray
    overlapping: bool

    @property
    def distance(self) -> float:
        """
        Signed distance between the shapes: positive gap when separated, negative penetration
        depth when overlapping
        """
        d = magnitude(self.closest)
        return -d if self.overlapping else d

    @property
    def separation(self) -> Optional[float]:
        return None if self.overlapping else magnitude(self.closest)

    @property
    def penetration(self) -> float:
        return magnitude(self.closest) if self.overlapping else 0.0


def strictly_inside(p: np.ndarray, piece: np.ndarray) -> bool:
    """
    True if p is strictly left of every edge of the convex CCW piece
    """
    return all(cross(b - a, p - a) > 0 for a, b in edges(piece))


class _EdgePoint(NamedTuple):
    """
    The point base + (num / den) * direction on a piece edge, den > 0. Containment is tested on
    these terms, never on the rounded point.
    """
    base: np.ndarray
    direction: np.ndarray
    num: float
    den: float

    @property
    def point(self) -> np.ndarray:
        if self.num == 0:
            return self.base
        return self.base + (self.num / self.den) * self.direction

    def strictly_inside(self, piece: np.ndarray) -> bool:
        for a, b in edges(piece):
            f = b - a
            if cross(f, self.base - a) * self.den + self.num * cross(f, self.direction) <= 0:
                return False
        return True


def _vertex(a: np.ndarray) -> _EdgePoint:
    return _EdgePoint(a, np.zeros(2), 0.0, 1.0)


def _origin_projection(a: np.ndarray, b: np.ndarray) -> Optional[_EdgePoint]:
    e = b - a
    ee = dot(e, e)
    num = -dot(a, e)
    if 0 < num < ee:
        return _EdgePoint(a, e, num, ee)
    return None


def _segment_intersection(a0, a1, b0, b1) -> Optional[_EdgePoint]:
    u = a1 - a0
    v = b1 - b0
    denom = cross(u, v)
    if denom == 0:
        return None
    d = b0 - a0
    s = cross(d, v)
    t = cross(d, u)
    if denom < 0:
        denom, s, t = -denom, -s, -t
    if 0 < s < denom and 0 < t < denom:
        return _EdgePoint(a0, u, s, denom)
    return None


def _candidates(pieces: List[np.ndarray]) -> List[np.ndarray]:
    found = []
    seen = set()

    def consider(c: _EdgePoint, owners):
        p = c.point
        key = (float(p[0]), float(p[1]))
        if key in seen:
            return
        if any(c.strictly_inside(pieces[k]) for k in range(len(pieces)) if k not in owners):
            return
        seen.add(key)
        found.append(p)

    for k, piece in enumerate(pieces):
        for a, b in edges(piece):
            consider(_vertex(a), (k,))
            consider(_vertex(b), (k,))
            proj = _origin_projection(a, b)
            if proj is not None:
                consider(proj, (k,))

    for k in range(len(pieces)):
        for l in range(k + 1, len(pieces)):
            for a0, a1 in edges(pieces[k]):
                for b0, b1 in edges(pieces[l]):
                    x = _segment_intersection(a0, a1, b0, b1)
                    if x is not None:
                        consider(x, (k, l))
    return found


def _pieces(pieces: Sequence, name: str) -> List[np.ndarray]:
    if len(pieces) == 0:
        raise InvalidPolygon('<decomposed_difference>: {} has no pieces'.format(name))
    return [ensure_ccw(as_polygon(p, '{}[{}]'.format(name, k))) for k, p in enumerate(pieces)]


def decomposed_difference(left_pieces: Sequence, right_pieces: Sequence) -> DifferenceResult:
    """
    Computes the Minkowski difference of two shapes given as convex pieces
    Args:
        left_pieces: convex pieces of the left shape
        right_pieces: convex pieces of the right shape

    Returns: The pairwise sums, the union boundary candidates and the closest candidate to the
    origin

    """
    left = _pieces(left_pieces, 'left')
    right = [reflect(p) for p in _pieces(right_pieces, 'right')]
    pieces = [convex_sum(l, r) for l in left for r in right]

    candidates = _candidates(pieces)
    origin = np.zeros(2)
    overlapping = any(strictly_inside(origin, p) for p in pieces)
    # extreme vertices of the union are inside no piece, so candidates is never empty
    closest = min(candidates, key=magnitude)

    log.debug('decomposed_difference: %d pieces, %d candidates, overlapping=%s',
              len(pieces), len(candidates), overlapping)
    return DifferenceResult(pieces, candidates, closest, overlapping)


def polygon_difference(a, b, service: Optional[DecompositionService] = None) -> DifferenceResult:
    """
    Decomposes two simple polygons and computes their Minkowski difference
    Args:
        a: left polygon
        b: right polygon
        service: decomposition handle. Default = a fresh DecompositionService

    Returns: see decomposed_difference

    """
    service = service if service is not None else DecompositionService()
    left = service.decompose(a)
    right = service.decompose(b)
    if not (left.is_simple and right.is_simple):
        raise DecompositionError('<polygon_difference>: both polygons must be simple')
    return decomposed_difference(left.pieces, right.pieces)
