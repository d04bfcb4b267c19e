#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Scaling policy for extracted regions.

Resizes decoded pixel buffers either by a factor or to explicit dimensions.
Requests that would upscale by 3x or more are ignored and the buffer is
returned unchanged, which bounds the memory a single request can allocate.
"""
import math

import numpy as np
from skimage.transform import resize

from region_extract.core.config import MAX_SCALING_FACTOR, MAX_UPSCALE_RATIO
from region_extract.core.io import buffer_size
from region_extract.core.logging_config import get_module_logger
from region_extract.core.params import DecodeParameters

# Initialize logger
logger = get_module_logger(__name__)


def scaled_dimension(size: int, factor: float) -> int:
    """Round ``size * factor`` half up, never below 1."""
    return max(1, int(math.floor(size * factor + 0.5)))


def _resize(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    src_width, src_height = buffer_size(pixels)
    out_shape = pixels.shape[:-2] + (height, width)
    downscaling = width < src_width or height < src_height

    # Interpolation is undefined on bool arrays
    source = pixels.astype(np.float32) if pixels.dtype == np.bool_ else pixels

    resized = resize(
        source,
        out_shape,
        order=1,
        mode="edge",
        preserve_range=True,
        anti_aliasing=downscaling,
    )

    # Keep the source dtype, integers are rounded and clipped into range
    if np.issubdtype(pixels.dtype, np.integer):
        info = np.iinfo(pixels.dtype)
        resized = np.clip(np.rint(resized), info.min, info.max)
    elif pixels.dtype == np.bool_:
        resized = resized >= 0.5

    logger.debug(f"Resized {src_width}x{src_height} to {width}x{height}")
    return resized.astype(pixels.dtype)


def scale(pixels: np.ndarray, factor: float) -> np.ndarray:
    """
    Resize a pixel buffer by a factor.

    Parameters
    ----------
    pixels : np.ndarray
        2D or band-first 3D array.
    factor : float
        Resize factor. Only values in (0, 3) other than 1.0 take effect.

    Returns
    -------
    np.ndarray
        Resized buffer, or the input itself when the factor is ignored.
    """
    if factor == 1.0 or not 0 < factor < MAX_SCALING_FACTOR:
        return pixels

    width, height = buffer_size(pixels)
    return _resize(pixels, scaled_dimension(width, factor), scaled_dimension(height, factor))


def scale_to_size(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Resize a pixel buffer to explicit dimensions.

    Parameters
    ----------
    pixels : np.ndarray
        2D or band-first 3D array.
    width, height : int
        Target size.

    Returns
    -------
    np.ndarray
        Buffer of exactly ``width`` x ``height``, or the input itself when
        either target is not positive or is at least 3x the source size.
    """
    src_width, src_height = buffer_size(pixels)

    if width <= 0 or height <= 0:
        logger.warning(f"Ignoring non-positive target size {width}x{height}")
        return pixels

    if width >= MAX_UPSCALE_RATIO * src_width or height >= MAX_UPSCALE_RATIO * src_height:
        logger.info(f"Ignoring target size {width}x{height}, more than {MAX_UPSCALE_RATIO}x "
                    f"the extracted {src_width}x{src_height}")
        return pixels

    if (width, height) == (src_width, src_height):
        return pixels

    return _resize(pixels, width, height)


def apply_scaling(pixels: np.ndarray, params: DecodeParameters) -> np.ndarray:
    """
    Apply the scaling requested in decode parameters.

    A scaling factor other than 1.0 wins over explicit dimensions.
    """
    if params.scaling_factor != 1.0:
        return scale(pixels, params.scaling_factor)
    if params.scaling_dimensions is not None:
        width, height = params.scaling_dimensions
        return scale_to_size(pixels, width, height)
    return pixels
