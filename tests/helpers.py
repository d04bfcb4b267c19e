#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test helpers for the region extraction pipeline.

This module provides functions for creating synthetic images, saving them in
the formats under test and reading results back.
"""
import io
import os
import warnings
from typing import Optional, Tuple, Union

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning

from region_extract.formats.writers import WRITER_FACTORIES, available_drivers
from region_extract.formats.base import FormatTag


def create_synthetic_image(
    shape: Tuple[int, int] = (100, 200),
    bands: int = 3,
    dtype: type = np.uint8,
    seed: Optional[int] = None
) -> np.ndarray:
    """
    Create a synthetic band-first image.

    Parameters
    ----------
    shape : tuple, optional
        ``(rows, cols)``, by default (100, 200).
    bands : int, optional
        Number of bands, by default 3.
    dtype : type, optional
        Output data type, by default uint8.
    seed : int, optional
        Random seed for the noise component.

    Returns
    -------
    np.ndarray
        Array of shape ``(bands, rows, cols)``.
    """
    rng = np.random.default_rng(seed)
    rows, cols = shape
    yy, xx = np.mgrid[0:rows, 0:cols]

    # Horizontal, vertical and diagonal gradients plus a little noise
    patterns = [xx / max(cols - 1, 1), yy / max(rows - 1, 1), (xx + yy) / max(rows + cols - 2, 1)]
    top = np.iinfo(dtype).max if np.issubdtype(dtype, np.integer) else 1.0

    image = np.empty((bands, rows, cols), dtype=np.float64)
    for band in range(bands):
        image[band] = patterns[band % len(patterns)] * 0.9 + rng.random((rows, cols)) * 0.1

    return (image * top).astype(dtype)


def save_synthetic_image(output_path: str, image: np.ndarray, driver: str = "GTiff") -> str:
    """
    Save a synthetic image to file.

    GTiff is written directly with rasterio; other formats go through the
    package's writers so that fixtures match what the pipeline produces.
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if driver == "GTiff":
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(
                output_path,
                "w",
                driver="GTiff",
                height=image.shape[1],
                width=image.shape[2],
                count=image.shape[0],
                dtype=image.dtype.name,
            ) as dst:
                dst.write(image)
        return output_path

    tag = {"JP2OpenJPEG": FormatTag.JP2, "PNG": FormatTag.PNG, "JPEG": FormatTag.JPEG}[driver]
    with open(output_path, "wb") as f:
        WRITER_FACTORIES[tag]().write(image, f)
    return output_path


def read_image(source: Union[str, bytes]) -> np.ndarray:
    """Read every band of a file path or encoded bytes."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with rasterio.open(source) as src:
            return src.read()


def has_driver(name: str) -> bool:
    return name in available_drivers()


HAS_JP2 = has_driver("JP2OpenJPEG")
