import numpy as np
import pytest
import shapely.geometry as sh

from minkowski_geom.decomposition import DecompositionService
from minkowski_geom.difference import decomposed_difference, polygon_difference, strictly_inside
from minkowski_geom.errors import DecompositionError, InvalidPolygon
from minkowski_geom.orientation import polygon_is_clockwise
from minkowski_geom.vector import magnitude

SQUARE = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
TRIANGLE = np.array([[0, 0], [1, 0], [0, 1]], dtype=float)
L_SHAPE = np.array([[0, 0], [3, 0], [3, 1], [1, 1], [1, 3], [0, 3]], dtype=float)


def star_polygon(rng, n, scale=1.0):
    angles = (np.arange(n) + rng.uniform(0.1, 0.9, n)) * 2 * np.pi / n
    radii = rng.uniform(0.5, 2.0, n) * scale
    return np.stack([radii * np.cos(angles), radii * np.sin(angles)], axis=-1)


def test_shape_minus_itself_overlaps():
    result = decomposed_difference([SQUARE], [SQUARE])
    assert result.overlapping
    assert result.separation is None
    # A - A is the square [-1, 1]^2, its boundary is at distance 1 from the origin
    assert result.penetration == 1.0
    assert result.distance == -1.0
    assert any(strictly_inside(np.zeros(2), p) for p in result.pieces)


def test_separated_triangles_match_brute_force_gap():
    far = TRIANGLE + [5, 3]
    result = decomposed_difference([TRIANGLE], [far])
    assert not result.overlapping
    assert result.separation == pytest.approx(sh.Polygon(TRIANGLE).distance(sh.Polygon(far)), abs=1e-12)

    # dense sampling of both boundaries gives an upper bound close to the gap
    t = np.linspace(0, 1, 201)[:, None]
    def boundary(p):
        return np.vstack([a + t * (b - a) for a, b in zip(p, np.roll(p, -1, axis=0))])
    gaps = np.linalg.norm(boundary(TRIANGLE)[:, None, :] - boundary(far)[None, :, :], axis=-1)
    assert result.separation <= gaps.min() + 1e-12
    assert result.separation == pytest.approx(gaps.min(), abs=1e-2)


def test_closest_point_is_the_separating_vector():
    far = SQUARE + [3, 0]
    result = decomposed_difference([SQUARE], [far])
    # difference is [-4, -2] x [-1, 1]; the nearest point is the middle of its right edge
    assert np.array_equal(result.closest, [-2, 0])
    assert result.distance == 2.0


def test_touching_shapes_are_not_overlapping():
    result = decomposed_difference([SQUARE], [SQUARE + [1, 0]])
    assert not result.overlapping
    assert result.separation == 0.0


def test_pieces_are_pairwise_sums():
    left = [SQUARE, SQUARE + [1, 0]]
    right = [TRIANGLE, TRIANGLE + [0, 2], TRIANGLE + [4, 4]]
    result = decomposed_difference(left, right)
    assert len(result.pieces) == 6
    assert all(not polygon_is_clockwise(p) for p in result.pieces)


def test_candidates_lie_outside_other_pieces():
    # pieces [-4, -2]^2 and [-3.5, -1.5]^2
    result = decomposed_difference([SQUARE, SQUARE + [0.5, 0.5]], [SQUARE + [4, 4]])
    points = {tuple(c) for c in np.array(result.candidates).tolist()}
    assert (-2.0, -2.0) not in points
    assert (-2.0, -3.5) in points
    assert (-3.5, -2.0) in points
    for c in result.candidates:
        assert sum(strictly_inside(c, p) for p in result.pieces) == 0
    assert magnitude(result.closest) == min(magnitude(c) for c in result.candidates)


def test_clockwise_pieces_are_normalised():
    a = decomposed_difference([SQUARE[::-1]], [TRIANGLE[::-1] + [4, 0]])
    b = decomposed_difference([SQUARE], [TRIANGLE + [4, 0]])
    assert a.separation == b.separation


@pytest.mark.parametrize('offset, expected', [
    ((2, 2), 1.0),
    ((4, 0), 1.0),
    ((1.5, 1.5), 0.5),
])
def test_non_convex_separation(offset, expected):
    square = SQUARE + offset
    result = polygon_difference(L_SHAPE, square)
    assert not result.overlapping
    assert result.separation == pytest.approx(expected, abs=1e-12)
    assert result.separation == pytest.approx(sh.Polygon(L_SHAPE).distance(sh.Polygon(square)), abs=1e-12)


def test_non_convex_overlap():
    result = polygon_difference(L_SHAPE, SQUARE + [0.5, 0.5], DecompositionService())
    assert result.overlapping
    assert result.separation is None
    assert result.penetration > 0


def test_non_simple_input_is_rejected():
    bowtie = [[0, 0], [1, 1], [1, 0], [0, 1]]
    with pytest.raises(DecompositionError):
        polygon_difference(bowtie, SQUARE)


def test_empty_piece_list_is_rejected():
    with pytest.raises(InvalidPolygon):
        decomposed_difference([], [SQUARE])
    with pytest.raises(InvalidPolygon):
        decomposed_difference([SQUARE], [[(0, 0), (1, 1)]])


def test_projection_on_a_shared_sloped_edge_is_kept():
    a = [(-2, 0), (1, -4), (3, 3), (-1, 4), (-4, 4)]
    b = [(-8, -7), (-7, -7), (-6, -8), (-2, -4), (-3, -1)]
    result = polygon_difference(a, b)
    assert not result.overlapping
    assert result.separation == pytest.approx(1.4, abs=1e-12)
    assert result.separation == pytest.approx(sh.Polygon(a).distance(sh.Polygon(b)), abs=1e-12)


def test_split_pieces_keep_the_penetration():
    # the square cut along its diagonal; the pieces of the difference share sloped edges
    halves = [SQUARE[[0, 1, 2]], SQUARE[[0, 2, 3]]]
    whole = decomposed_difference([SQUARE], [SQUARE])
    split = decomposed_difference(halves, [SQUARE])
    assert split.overlapping
    assert split.penetration == whole.penetration == 1.0


def test_random_integer_polygons_match_shapely_gap():
    rng = np.random.default_rng(17)
    checked = 0
    while checked < 100:
        a = np.round(star_polygon(rng, int(rng.integers(4, 8)), 4.0))
        b = np.round(star_polygon(rng, int(rng.integers(4, 8)), 4.0)) + rng.integers(-10, 11, size=2)
        if len(np.unique(a, axis=0)) < len(a) or len(np.unique(b, axis=0)) < len(b):
            continue
        if not (sh.Polygon(a).is_valid and sh.Polygon(b).is_valid):
            continue
        if not (sh.LinearRing(a).is_simple and sh.LinearRing(b).is_simple):
            continue
        gap = sh.Polygon(a).distance(sh.Polygon(b))
        if gap == 0:
            continue
        result = polygon_difference(a, b)
        assert not result.overlapping
        assert result.separation == pytest.approx(gap, abs=1e-9), (a.tolist(), b.tolist())
        checked += 1


def test_results_compare_by_identity():
    first = decomposed_difference([SQUARE], [TRIANGLE])
    assert first == first
    assert first != decomposed_difference([SQUARE], [TRIANGLE])
