class GeometryError(Exception):
    """
    Base class of all errors raised by the geometry engine
    """


class InvalidPolygon(GeometryError, ValueError):
    """
    Raised when a vertex sequence cannot be used as a polygon (too few vertices, wrong shape,
    non-finite coordinates)
    """


class InvalidMask(GeometryError, ValueError):
    """
    Raised when a pixel mask is empty or not two dimensional
    """


class DecompositionError(GeometryError):
    """
    Raised when a polygon cannot be split into convex pieces
    """
