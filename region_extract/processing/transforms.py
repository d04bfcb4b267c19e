#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pixel transforms applied to extracted regions before encoding.

A transform is any callable taking a band-first pixel buffer and returning
the buffer to encode.
"""
from typing import Callable

import numpy as np

from region_extract.core.io import ensure_bands
from region_extract.core.params import PixelTransform

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def rotate(degrees: int) -> PixelTransform:
    """
    Build a transform rotating clockwise by a multiple of 90 degrees.

    Parameters
    ----------
    degrees : int
        0, 90, 180 or 270 (negative values and multiples of 360 are folded).

    Returns
    -------
    callable
        Pixel transform.
    """
    if degrees % 90 != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees}")
    turns = (degrees // 90) % 4

    def _rotate(pixels: np.ndarray) -> np.ndarray:
        if turns == 0:
            return pixels
        # rot90 turns counter-clockwise over the last two axes
        return np.ascontiguousarray(np.rot90(pixels, k=-turns, axes=(-2, -1)))

    return _rotate


def grayscale(pixels: np.ndarray) -> np.ndarray:
    """Collapse RGB(A) to a single luma band, other band counts keep the first band."""
    data = ensure_bands(pixels)
    if data.shape[0] < 3:
        return data[:1]

    luma = np.tensordot(LUMA_WEIGHTS, data[:3].astype(np.float64), axes=1)
    if np.issubdtype(data.dtype, np.integer):
        info = np.iinfo(data.dtype)
        luma = np.clip(np.rint(luma), info.min, info.max)
    return luma.astype(data.dtype)[np.newaxis, :, :]


def chain(*transforms: Callable[[np.ndarray], np.ndarray]) -> PixelTransform:
    """Compose transforms, applied left to right."""
    def _chain(pixels: np.ndarray) -> np.ndarray:
        for transform in transforms:
            pixels = transform(pixels)
        return pixels

    return _chain
