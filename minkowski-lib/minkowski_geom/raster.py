"""
Minkowski sum and difference of freeform shapes given as binary pixel masks.

A mask sum is the support of the convolution of the two masks; the difference is the support of
their correlation. Both are evaluated with FFTs in torch on zero-padded buffers so that nothing
wraps around, then thresholded back to a binary mask.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import torch

from minkowski_geom.config import DEFAULT_CONFIG, EngineConfig
from minkowski_geom.errors import InvalidMask

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RasterResult:
    """
    Attributes:
        mask: boolean array of shape (hl + hr - 1, wl + wr - 1)
        origin: (row, col) of the pixel that corresponds to a zero offset
    """
    mask: np.ndarray
    origin: Tuple[int, int]

    @property
    def width(self) -> int:
        return self.mask.shape[1]

    @property
    def height(self) -> int:
        return self.mask.shape[0]


def _check(mask, name: str) -> np.ndarray:
    m = np.asarray(mask)
    if m.ndim != 2:
        raise InvalidMask('<raster>: {} must be two dimensional, got shape {}'.format(name, m.shape))
    if m.size == 0:
        raise InvalidMask('<raster>: {} is empty'.format(name))
    return m != 0


def mask_from_rgba(data, width: int, height: int) -> np.ndarray:
    """
    Reads a mask from RGBA pixel data: a pixel is set if its alpha is non-zero
    Args:
        data: bytes or uint8 array of length width * height * 4, row major
        width: image width
        height: image height

    Returns: Boolean mask of shape (height, width)

    """
    buf = np.frombuffer(bytes(data), dtype=np.uint8) if isinstance(data, (bytes, bytearray)) \
        else np.asarray(data, dtype=np.uint8).ravel()
    if buf.size != width * height * 4:
        raise InvalidMask('<mask_from_rgba>: expected {} bytes, got {}'.format(width * height * 4, buf.size))
    return buf.reshape(height, width, 4)[:, :, 3] != 0


def mask_to_rgba(mask) -> np.ndarray:
    """
    Black pixels, opaque where the mask is set. Shape (h, w, 4), uint8.
    """
    m = _check(mask, 'mask')
    out = np.zeros(m.shape + (4,), dtype=np.uint8)
    out[:, :, 3] = np.where(m, 255, 0)
    return out


def _fft_convolve(left: np.ndarray, right: np.ndarray, threshold: float) -> np.ndarray:
    shape = (left.shape[0] + right.shape[0] - 1, left.shape[1] + right.shape[1] - 1)
    a = torch.from_numpy(left.astype(np.float64))
    b = torch.from_numpy(right.astype(np.float64))
    spectrum = torch.fft.rfft2(a, s=shape) * torch.fft.rfft2(b, s=shape)
    conv = torch.fft.irfft2(spectrum, s=shape)
    return (conv.abs() >= threshold).numpy()


def raster_sum(left, right, threshold: Optional[float] = None,
               config: EngineConfig = DEFAULT_CONFIG) -> RasterResult:
    """
    Minkowski sum of two masks. Pixel (r, c) is set iff some left pixel p and right pixel q satisfy
    p + q = (r, c); with a threshold above 1, iff at least that many such pairs exist.
    """
    l = _check(left, 'left')
    r = _check(right, 'right')
    threshold = config.raster_threshold if threshold is None else threshold
    mask = _fft_convolve(l, r, threshold)
    log.debug('raster_sum: %s + %s -> %s, %d pixels set', l.shape, r.shape, mask.shape, int(mask.sum()))
    return RasterResult(mask, (0, 0))


def raster_difference(left, right, threshold: Optional[float] = None,
                      config: EngineConfig = DEFAULT_CONFIG) -> RasterResult:
    """
    Minkowski difference of two masks
    Args:
        left: left mask, shape (hl, wl)
        right: right mask, shape (hr, wr)
        threshold: correlation value at or above which a pixel is set. Default = config.raster_threshold
        config: engine configuration. Default = DEFAULT_CONFIG

    Returns: Pixel (r, c) is set iff some left pixel p and right pixel q satisfy
    p - q = (r, c) - origin, with origin = (hr - 1, wr - 1). The shapes overlap iff the origin
    pixel is set.

    """
    l = _check(left, 'left')
    r = _check(right, 'right')
    threshold = config.raster_threshold if threshold is None else threshold
    mask = _fft_convolve(l, r[::-1, ::-1].copy(), threshold)
    log.debug('raster_difference: %s - %s -> %s, %d pixels set', l.shape, r.shape, mask.shape, int(mask.sum()))
    return RasterResult(mask, (r.shape[0] - 1, r.shape[1] - 1))
