"""
Reduced convolution of two polygons and assembly of the convolution into closed loops.

The reduced convolution keeps, for every convex vertex of one polygon, the edges of the other
polygon whose direction lies between the vertex's incoming and outgoing edges. The resulting
segments trace the Minkowski sum boundary, including holes, but cross each other wherever the
sum is not convex. ``extract_loops`` splits them at those crossings and walks the arrangement to
recover closed loops; ``classify_loops`` tells solid loops (CCW) from holes (CW).
"""

import functools
import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from minkowski_geom.orientation import ensure_ccw, polygon_is_clockwise
from minkowski_geom.vector import as_polygon, cross

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vert:
    """
    Sum of one vertex from each polygon
    Attributes:
        i: index of the vertex of the first polygon
        j: index of the vertex of the second polygon
        z: coordinates of the sum
    """
    i: int
    j: int
    z: Tuple[float, float]


@dataclass(frozen=True)
class Conv:
    """
    An edge of one polygon translated by a vertex of the other
    Attributes:
        start: sum at the tail of the edge
        end: sum at the head of the edge
        delta: direction of the source edge
    """
    start: Vert
    end: Vert
    delta: Tuple[float, float]

    @property
    def segment(self) -> Tuple[np.ndarray, np.ndarray]:
        return np.array(self.start.z), np.array(self.end.z)


@dataclass(frozen=True, eq=False)
class Loop:
    """
    A closed loop of the Minkowski sum boundary
    Attributes:
        vertices: loop vertices, shape (N, 2)
        clockwise: winding of the loop
    """
    vertices: np.ndarray
    clockwise: bool

    @property
    def solid(self) -> bool:
        """
        Counterclockwise loops bound the solid region, clockwise loops bound holes
        """
        return not self.clockwise


def _pos_cross(a, b) -> bool:
    return a[0] * b[1] >= b[0] * a[1]


def _convolve(a: np.ndarray, b: np.ndarray, swap: bool) -> List[Conv]:
    na = len(a)
    nb = len(b)
    result = []
    for i in range(na):
        a0 = a[i]
        before = a0 - a[i - 1]
        after = a[(i + 1) % na] - a0
        if not _pos_cross(before, after):
            # reflex vertex
            continue
        for j0 in range(nb):
            j1 = (j0 + 1) % nb
            v = b[j1] - b[j0]
            if _pos_cross(before, v) and _pos_cross(v, after):
                z0 = a0 + b[j0]
                z1 = a0 + b[j1]
                if swap:
                    p, q = Vert(j0, i, (float(z0[0]), float(z0[1]))), Vert(j1, i, (float(z1[0]), float(z1[1])))
                else:
                    p, q = Vert(i, j0, (float(z0[0]), float(z0[1]))), Vert(i, j1, (float(z1[0]), float(z1[1])))
                result.append(Conv(p, q, (float(v[0]), float(v[1]))))
    return result


def reduced_convolution(a, b) -> List[Conv]:
    """
    Computes the reduced convolution of two polygons
    Args:
        a: first polygon, any winding, need not be convex
        b: second polygon, any winding, need not be convex

    Returns: The directed convolution segments. Vertex indices refer to the counterclockwise
    normalised inputs.

    """
    a = ensure_ccw(as_polygon(a, 'A'))
    b = ensure_ccw(as_polygon(b, 'B'))
    convs = _convolve(a, b, swap=False) + _convolve(b, a, swap=True)
    log.debug('reduced_convolution: %d x %d vertices -> %d segments', len(a), len(b), len(convs))
    return convs


def convolution_segments(a, b) -> List[Tuple[np.ndarray, np.ndarray]]:
    return [c.segment for c in reduced_convolution(a, b)]


# angular order matching atan2: lower half plane, positive x axis, upper half plane, negative x axis
def _region(v) -> int:
    x, y = v
    if y < 0:
        return 0
    if y == 0:
        return 1 if x >= 0 else 3
    return 2


def _compare_angles(u, v) -> int:
    ru = _region(u)
    rv = _region(v)
    if ru != rv:
        return -1 if ru < rv else 1
    lhs = u[1] * v[0]
    rhs = u[0] * v[1]
    return (lhs > rhs) - (lhs < rhs)


def _compare_nodes(m, n) -> int:
    # node: (pseudovertex key, angle, leaving, tip index)
    if m[0] != n[0]:
        return -1 if m[0] < n[0] else 1
    c = _compare_angles(m[1], n[1])
    if c:
        return c
    if m[2:] != n[2:]:
        return -1 if m[2:] < n[2:] else 1
    return 0


def _independent(e0: Conv, e1: Conv) -> bool:
    """
    False for segment pairs that share a sum vertex, or that are translates of edges of the same
    polygon by the same vertex of the other; simple inputs never cross there.
    """
    i00, j00 = e0.start.i, e0.start.j
    i01, j01 = e0.end.i, e0.end.j
    i10, j10 = e1.start.i, e1.start.j
    i11, j11 = e1.end.i, e1.end.j
    return not ((i00 == i10 and (j00 == j10 or (i00, i10) == (i01, i11)))
                or (i01, j01) == (i10, j10)
                or (j00 == j11 and (i00 == i11 or (j00, j10) == (j01, j11)))
                or (i01, j01) == (i11, j11))


def _intersections(convs: List[Conv], tips: list) -> list:
    inters = []
    for n0, e0 in enumerate(convs):
        v0 = e0.delta
        for n1 in range(n0 + 1, len(convs)):
            e1 = convs[n1]
            if not _independent(e0, e1):
                continue
            v1 = e1.delta
            denom = cross(v0, v1)
            if denom == 0:
                continue
            d = (e1.start.z[0] - e0.start.z[0], e1.start.z[1] - e0.start.z[1])
            t0 = cross(d, v1) / denom
            t1 = cross(d, v0) / denom
            if 0 <= t0 <= 1 and 0 <= t1 <= 1:
                w = (cross(e0.start.z, e0.end.z), cross(e1.start.z, e1.end.z))
                z = (cross((v0[0], v1[0]), w) / denom, cross((v0[1], v1[1]), w) / denom)
                inters.append((n0, t0, n0, n1, len(tips)))
                tips.append(z)
                inters.append((n1, t1, n0, n1, len(tips)))
                tips.append(z)
    inters.sort()
    return inters


def extract_loops(convs: List[Conv]) -> List[np.ndarray]:
    """
    Assembles convolution segments into closed loops
    Args:
        convs: segments as returned by reduced_convolution

    Returns: The loops, each an array of shape (N, 2). Segments that do not close a loop are
    dropped.

    """
    # tips[n] is the end point of sub-segment n; the first len(convs) are the segment ends
    tips = [c.end.z for c in convs]
    inters = _intersections(convs, tips)

    nodes = []
    k = 0
    for n0, e0 in enumerate(convs):
        x, y = e0.delta
        angle_out = (x, y)
        angle_in = (-x, -y)
        start = (0, e0.start.i, e0.start.j)
        while k < len(inters) and inters[k][0] == n0:
            _, _, m, n, n1 = inters[k]
            end = (1, m, n)
            nodes.append((start, angle_out, True, n1))
            nodes.append((end, angle_in, False, n1))
            start = end
            k += 1
        nodes.append((start, angle_out, True, n0))
        nodes.append(((0, e0.end.i, e0.end.j), angle_in, False, n0))
    nodes.sort(key=functools.cmp_to_key(_compare_nodes))

    # first node index of each pseudovertex group, to wrap around a vertex
    group_start = [0] * len(nodes)
    for k in range(1, len(nodes)):
        group_start[k] = group_start[k - 1] if nodes[k][0] == nodes[k - 1][0] else k

    def advance(k: int) -> int:
        if k == len(nodes) - 1 or nodes[k + 1][0] != nodes[k][0]:
            return group_start[k]
        return k + 1

    arriving = [None] * len(tips)
    for k, (_, _, leaving, n) in enumerate(nodes):
        if not leaving:
            arriving[n] = k

    loops = []
    seen = [False] * len(tips)
    for n0, k0 in enumerate(arriving):
        if seen[n0]:
            continue
        seen[n0] = True
        stack = [[n0, k0]]
        closed = False
        while stack:
            top = stack[-1]
            top[1] = advance(top[1])
            if top[1] == arriving[top[0]]:
                stack.pop()
                continue
            _, _, leaving, n2 = nodes[top[1]]
            if not leaving:
                continue
            stack.append([n2, arriving[n2]])
            if seen[n2]:
                closed = True
                break
            seen[n2] = True
        if closed:
            last = stack[-1][0]
            first = next(pos for pos, (n, _) in enumerate(stack) if n == last)
            if first < len(stack) - 1:
                loops.append(np.array([tips[n] for n, _ in stack[first:-1]]))

    log.debug('extract_loops: %d segments, %d crossings -> %d loops', len(convs), len(inters) // 2, len(loops))
    return loops


def classify_loops(loops: List[np.ndarray]) -> List[Loop]:
    return [Loop(np.asarray(v, dtype=np.float64), polygon_is_clockwise(np.asarray(v))) for v in loops]
