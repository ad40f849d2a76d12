from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Tuple, Union

import matplotlib.patches as mp
import matplotlib.pyplot as plt
import numpy as np
import shapely.affinity as af
import shapely.geometry as sh

from minkowski_geom.convex import convex_sum
from minkowski_geom.convolution import Loop, classify_loops, extract_loops, reduced_convolution
from minkowski_geom.difference import decomposed_difference
from minkowski_geom.orientation import ensure_ccw, polygon_is_clockwise
from minkowski_geom.vector import as_polygon, cross


class IColor(Enum):
    N = 0
    R = 1
    G = 2
    B = 3


_COLORS = {IColor.N: 'k', IColor.R: 'r', IColor.G: 'g', IColor.B: 'b'}


# ----------------------------
# Sum boundary variants
# ----------------------------
@dataclass(frozen=True, eq=False)
class ConvexBoundary:
    """
    Sum of two convex polygons: a single CCW convex polygon
    """
    polygon: np.ndarray
    kind: Literal['convex'] = 'convex'


@dataclass(frozen=True, eq=False)
class PieceBoundary:
    """
    Pairwise sums of convex pieces; the pieces may overlap
    """
    pieces: List[np.ndarray]
    kind: Literal['pieces'] = 'pieces'


@dataclass(frozen=True, eq=False)
class SegmentBoundary:
    """
    Unassembled directed segments of a reduced convolution
    """
    segments: List[Tuple[np.ndarray, np.ndarray]]
    kind: Literal['segments'] = 'segments'


@dataclass(frozen=True, eq=False)
class LoopBoundary:
    """
    Closed loops of a reduced convolution, each labelled solid (CCW) or hole (CW)
    """
    loops: List[Loop]
    kind: Literal['loops'] = 'loops'


SumBoundary = Union[ConvexBoundary, PieceBoundary, SegmentBoundary, LoopBoundary]


def is_convex(vertices: np.ndarray) -> bool:
    """
    True if every turn of the CCW-normalised loop is non-negative
    """
    v = ensure_ccw(vertices)
    n = len(v)
    return all(cross(v[k] - v[k - 1], v[(k + 1) % n] - v[k]) >= 0 for k in range(n))


def minkowski_sum(a, b) -> SumBoundary:
    """
    Computes the Minkowski sum of two polygons with the cheapest algorithm that applies
    Args:
        a: first polygon
        b: second polygon

    Returns: ConvexBoundary if both polygons are convex, LoopBoundary otherwise

    """
    a = as_polygon(a, 'a')
    b = as_polygon(b, 'b')
    if is_convex(a) and is_convex(b):
        return ConvexBoundary(convex_sum(a, b))
    return LoopBoundary(classify_loops(extract_loops(reduced_convolution(a, b))))


def convolution_boundary(a, b) -> SegmentBoundary:
    return SegmentBoundary([c.segment for c in reduced_convolution(a, b)])


def difference_boundary(left_pieces, right_pieces) -> PieceBoundary:
    return PieceBoundary(decomposed_difference(left_pieces, right_pieces).pieces)


class Polygon(object):
    """
    Class representing a polygon
    """
    _id = 0

    @classmethod
    def _get_id(cls):
        cls._id += 1
        return cls._id

    def __init__(self, vertices, color: IColor = IColor.N):
        """
        Initializes a polygon object
        Args:
            vertices: The vertices of the polygon, shape (N, 2), any winding
            color: The color of the polygon. Default = IColor.N
        """
        self._v = as_polygon(vertices)
        self.color = color
        self.id = self._get_id()

    @property
    def vertices(self) -> np.ndarray:
        """
        Returns the vertices of the polygon
        Returns: The vertices of the polygon as a numpy array, in the order given

        """
        return self._v

    @property
    def shape(self) -> sh.Polygon:
        """
        Returns the shapely polygon object of this polygon
        Returns: Shapely polygon

        """
        return sh.Polygon(self._v)

    @property
    def center(self) -> np.ndarray:
        return np.array(self.shape.centroid.coords[0])

    @property
    def is_simple(self) -> bool:
        return sh.LinearRing(self._v).is_simple

    @property
    def is_convex(self) -> bool:
        return is_convex(self._v)

    @property
    def is_clockwise(self) -> bool:
        return polygon_is_clockwise(self._v)

    def translate(self, t) -> 'Polygon':
        """
        Translates the polygon by the given translation vector
        Args:
            t: Translation vector of length 2

        Returns: Translated copy of this polygon

        """
        assert len(t) == 2, '<Polygon/translate>: translation must have two components'
        moved = af.translate(sh.LinearRing(self._v), t[0], t[1])
        return Polygon(np.array(moved.coords)[:-1], color=self.color)

    def distance(self, other: 'Polygon') -> float:
        """
        Computes the distance to another polygon object
        Args:
            other: The other polygon object

        Returns: The distance (>=0) between this and the other object

        """
        return self.shape.distance(other.shape)

    def minkowski_sum(self, other: 'Polygon', sub: bool = False) -> SumBoundary:
        """
        Minkowski sum with another polygon, or with its reflection if sub is set
        """
        o = -other._v if sub else other._v
        return minkowski_sum(self._v, o)

    def __add__(self, other):
        return self.minkowski_sum(other)

    def __sub__(self, other):
        return self.minkowski_sum(other, sub=True)

    def __neg__(self):
        return Polygon(-self._v, color=self.color)

    def __hash__(self):
        return self.id

    def __repr__(self):
        return f'Polygon(id={self.id}, n={len(self._v)})'

    def plot(self, ax=None, alpha=1.0, label: bool = True, color=None):
        """
        Plots the polygon
        Args:
            ax: The axis object to plot to (if provided)
            alpha: The alpha value of the polygon
            label: bool to indicate whether to plot label
            color: matplotlib color. Default = color of the polygon

        """
        if ax is None:
            ax = plt.gca()
        ax.add_patch(mp.Polygon(self._v, color=color or _COLORS[self.color], alpha=alpha))
        if label:
            c = self.center
            ax.text(c[0], c[1], s=str(self.id), c='white', bbox=dict(facecolor='white', alpha=0.5))


def plot_boundary(boundary: SumBoundary, ax=None, solid_color='tab:blue', hole_color='tab:red', alpha=0.4):
    """
    Plots any sum boundary variant
    Args:
        boundary: the boundary to draw
        ax: The axis object to plot to (if provided)
        solid_color: color of solid regions
        hole_color: color of holes and of clockwise loops

    Returns: The axis

    """
    if ax is None:
        ax = plt.gca()

    if isinstance(boundary, ConvexBoundary):
        ax.add_patch(mp.Polygon(boundary.polygon, color=solid_color, alpha=alpha))
    elif isinstance(boundary, PieceBoundary):
        for piece in boundary.pieces:
            ax.add_patch(mp.Polygon(piece, facecolor=solid_color, edgecolor='k', alpha=alpha))
    elif isinstance(boundary, SegmentBoundary):
        for start, end in boundary.segments:
            ax.annotate('', xy=end, xytext=start, arrowprops=dict(arrowstyle='->', color=solid_color))
    elif isinstance(boundary, LoopBoundary):
        for loop in boundary.loops:
            ax.add_patch(mp.Polygon(loop.vertices, fill=False, linewidth=2,
                                    edgecolor=solid_color if loop.solid else hole_color))
    else:
        raise TypeError('<plot_boundary>: unsupported boundary {}'.format(type(boundary)))
    ax.autoscale_view()
    return ax


# camelCase names of the geometry API
convexSum = convex_sum
polygonIsClockwise = polygon_is_clockwise
decomposedDifference = decomposed_difference
reducedConvolution = reduced_convolution


if __name__ == '__main__':
    p1 = Polygon(np.array([[0.5, 0.5], [-0.5, 0.5], [-0.5, -0.5]]))
    p2 = Polygon(np.array([[2, 1], [1, 1], [1, -1], [-1, -1], [-1, 1], [-2, 1], [-2, -2], [2, -2]]))

    s = p1 + p2
    for loop in s.loops:
        print('solid' if loop.solid else 'hole', loop.vertices.tolist())

    plot_boundary(s)
    plt.axis('equal')
    plt.show()
