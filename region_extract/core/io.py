#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input handling for the region extraction pipeline.

This module defines the decoder contract and a rasterio-backed decoder that
reads a window of a tiled image at a reduced resolution level.
"""
import math
import warnings
from contextlib import contextmanager
from typing import Any, BinaryIO, Iterator, Optional, Tuple, Union

import numpy as np
import rasterio
from rasterio.enums import Resampling
from rasterio.errors import NotGeoreferencedWarning, RasterioIOError
from rasterio.windows import Window

from region_extract.core.exceptions import DecodeError
from region_extract.core.logging_config import get_module_logger
from region_extract.core.params import DecodeParameters, Region

# Initialize logger
logger = get_module_logger(__name__)

SourceHandle = Union[str, BinaryIO]


def ensure_bands(pixels: np.ndarray) -> np.ndarray:
    """
    Return a ``(bands, rows, cols)`` view of a pixel buffer.

    Parameters
    ----------
    pixels : np.ndarray
        2D single band or 3D band-first array.

    Returns
    -------
    np.ndarray
        3D band-first array.
    """
    if pixels.ndim == 2:
        return pixels[np.newaxis, :, :]
    if pixels.ndim != 3:
        raise ValueError(f"Pixel buffer must be 2D or 3D, got shape {pixels.shape}")
    return pixels


def describe_source(source: Any) -> str:
    """Human-readable name of a path or stream, for log messages."""
    if isinstance(source, (str, bytes)):
        return str(source)
    return str(getattr(source, "name", repr(source)))


@contextmanager
def open_image(source: SourceHandle) -> Iterator[rasterio.DatasetReader]:
    """Open an image for reading, without georeferencing warnings."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with rasterio.open(source) as src:
            yield src


def buffer_size(pixels: np.ndarray) -> Tuple[int, int]:
    """Return ``(width, height)`` of a pixel buffer."""
    return pixels.shape[-1], pixels.shape[-2]


class Decoder:
    """
    Turns a compressed source plus region parameters into pixel data.

    Implementations return None when the requested region has no content and
    raise DecodeError when the source is not a readable image.
    """

    def process(self, source: SourceHandle, params: DecodeParameters) -> Optional[np.ndarray]:
        raise NotImplementedError


class RasterioDecoder(Decoder):
    """
    Decoder reading windows through rasterio.

    Resolution levels are served with decimated reads, which GDAL satisfies
    from overviews or JPEG 2000 resolution levels where the driver has them.
    """

    def __init__(self, resampling: Resampling = Resampling.average):
        self.resampling = resampling

    @staticmethod
    def clip_region(region: Optional[Region], width: int, height: int) -> Optional[Window]:
        """
        Clip a region to the image bounds.

        Parameters
        ----------
        region : Region or None
            Requested region, None for the full image.
        width, height : int
            Image dimensions.

        Returns
        -------
        Window or None
            Window inside the image, None if nothing overlaps.
        """
        if region is None:
            return Window(0, 0, width, height)
        if region.is_empty:
            return None

        col_start = max(region.x, 0)
        row_start = max(region.y, 0)
        col_stop = min(region.x + region.width, width)
        row_stop = min(region.y + region.height, height)

        if col_stop <= col_start or row_stop <= row_start:
            return None
        return Window(col_start, row_start, col_stop - col_start, row_stop - row_start)

    def process(self, source: SourceHandle, params: DecodeParameters) -> Optional[np.ndarray]:
        """
        Decode the requested window of a source image.

        Parameters
        ----------
        source : str or file-like
            Path to the image or a binary stream holding it.
        params : DecodeParameters
            Region and resolution level to decode.

        Returns
        -------
        np.ndarray or None
            ``(bands, rows, cols)`` array, None if the region is outside the
            image.
        """
        name = describe_source(source)

        try:
            with open_image(source) as src:
                window = self.clip_region(params.region, src.width, src.height)
                if window is None:
                    logger.info(f"Region {params.region} is outside {name} ({src.width}x{src.height})")
                    return None

                reduction = 2 ** params.level
                out_shape = (
                    src.count,
                    max(1, math.ceil(window.height / reduction)),
                    max(1, math.ceil(window.width / reduction)),
                )
                logger.debug(f"Reading window {window} from {name} at level {params.level}, "
                             f"output shape {out_shape}")

                return src.read(window=window, out_shape=out_shape, resampling=self.resampling)

        except RasterioIOError as e:
            logger.error(f"Unable to decode {name}: {str(e)}")
            raise DecodeError(f"Unable to decode {name}: {e}") from e
