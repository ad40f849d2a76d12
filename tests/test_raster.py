import numpy as np
import pytest

from minkowski_geom.config import EngineConfig
from minkowski_geom.errors import InvalidMask
from minkowski_geom.raster import mask_from_rgba, mask_to_rgba, raster_difference, raster_sum


def brute_force(left, right, sign):
    hl, wl = left.shape
    hr, wr = right.shape
    out = np.zeros((hl + hr - 1, wl + wr - 1), dtype=bool)
    origin = (0, 0) if sign > 0 else (hr - 1, wr - 1)
    for p in np.argwhere(left):
        for q in np.argwhere(right):
            r, c = p + sign * q
            out[r + origin[0], c + origin[1]] = True
    return out


@pytest.fixture
def masks():
    rng = np.random.default_rng(5)
    return rng.random((7, 9)) < 0.3, rng.random((4, 5)) < 0.4


def test_sum_matches_brute_force(masks):
    left, right = masks
    result = raster_sum(left, right)
    assert result.origin == (0, 0)
    assert result.mask.shape == (10, 13)
    assert np.array_equal(result.mask, brute_force(left, right, +1))


def test_difference_matches_brute_force(masks):
    left, right = masks
    result = raster_difference(left, right)
    assert result.origin == (3, 4)
    assert (result.height, result.width) == (10, 13)
    assert np.array_equal(result.mask, brute_force(left, right, -1))


def test_origin_pixel_marks_overlap():
    left = np.zeros((5, 5), dtype=bool)
    left[1:3, 1:3] = True
    right = np.zeros((5, 5), dtype=bool)
    right[2:4, 2:4] = True
    result = raster_difference(left, right)
    assert result.mask[result.origin]

    apart = np.zeros((5, 5), dtype=bool)
    apart[4, 4] = True
    result = raster_difference(left, apart)
    assert not result.mask[result.origin]


def test_single_pixels():
    one = np.ones((1, 1))
    assert raster_sum(one, one).mask.tolist() == [[True]]
    assert raster_difference(one, one).origin == (0, 0)


def test_rgba_conversion():
    mask = np.array([[True, False, True], [False, True, False]])
    rgba = mask_to_rgba(mask)
    assert rgba.shape == (2, 3, 4)
    assert rgba.dtype == np.uint8
    assert np.array_equal(mask_from_rgba(rgba.tobytes(), 3, 2), mask)
    assert np.array_equal(mask_from_rgba(rgba, 3, 2), mask)


def test_rgba_size_mismatch():
    with pytest.raises(InvalidMask):
        mask_from_rgba(bytes(12), 2, 2)


@pytest.mark.parametrize('mask', [np.ones(4), np.ones((0, 3)), np.ones((2, 2, 2))])
def test_rejects_invalid_masks(mask):
    with pytest.raises(InvalidMask):
        raster_sum(mask, np.ones((2, 2)))
    with pytest.raises(InvalidMask):
        raster_difference(np.ones((2, 2)), mask)


def test_configured_threshold_counts_overlapping_pairs():
    block = np.ones((2, 2))
    # corners of the sum are reached by one pixel pair, edges by two, the centre by four
    assert raster_sum(block, block).mask.all()
    two = raster_sum(block, block, config=EngineConfig(raster_threshold=1.5)).mask
    assert two.tolist() == [[False, True, False], [True, True, True], [False, True, False]]
    four = raster_difference(block, block, config=EngineConfig(raster_threshold=3.5))
    assert four.mask.sum() == 1 and four.mask[four.origin]
    # an explicit threshold wins over the configuration
    assert raster_sum(block, block, threshold=0.5, config=EngineConfig(raster_threshold=3.5)).mask.all()


def test_results_compare_by_identity():
    one = np.ones((1, 1))
    result = raster_sum(one, one)
    assert result == result
    assert result != raster_sum(one, one)
