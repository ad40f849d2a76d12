"""
Vector2 primitives.

Points and displacements share one representation: a float64 numpy array of shape (2,).
Polygons are float64 arrays of shape (N, 2), implicitly closed. All arithmetic is plain IEEE
double arithmetic; nothing here applies a tolerance.
"""

import numpy as np

from minkowski_geom.errors import InvalidPolygon


def point(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a + b


def sub(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a - b


def scale(s: float, v: np.ndarray) -> np.ndarray:
    return s * v


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def cross(a: np.ndarray, b: np.ndarray) -> float:
    """
    2D scalar cross product. Positive if b is counterclockwise from a.
    """
    return float(a[0] * b[1] - a[1] * b[0])


def magnitude(v: np.ndarray) -> float:
    return float(np.hypot(v[0], v[1]))


def as_polygon(vertices, name: str = 'polygon') -> np.ndarray:
    """
    Converts and validates a vertex sequence
    Args:
        vertices: array-like of shape (N, 2)
        name: name used in error messages

    Returns: A fresh float64 array of shape (N, 2)

    """
    try:
        v = np.array(vertices, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidPolygon('<as_polygon>: {} is not numeric: {}'.format(name, e)) from e
    if v.ndim != 2 or v.shape[1] != 2:
        raise InvalidPolygon('<as_polygon>: {} must have shape (N, 2), got {}'.format(name, v.shape))
    if len(v) < 3:
        raise InvalidPolygon('<as_polygon>: {} needs at least 3 vertices, got {}'.format(name, len(v)))
    if not np.all(np.isfinite(v)):
        raise InvalidPolygon('<as_polygon>: {} has non-finite coordinates'.format(name))
    return v


def reflect(polygon: np.ndarray) -> np.ndarray:
    """
    Point reflection through the origin. Keeps the winding of the input.
    """
    return -polygon


def edges(polygon: np.ndarray):
    """
    Yields (start, end) for every edge of the closed polygon, including the closing edge
    """
    n = len(polygon)
    for i in range(n):
        yield polygon[i], polygon[(i + 1) % n]
