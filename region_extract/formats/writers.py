#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Format writers backed by rasterio.

Each writer encodes a ``(bands, rows, cols)`` pixel buffer with a GDAL
driver into an in-memory dataset and copies the encoded bytes to the
destination stream. Writers are cheap to create; a new instance is made
for every extraction.
"""
import warnings
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning, RasterioError
from rasterio.io import MemoryFile
from skimage.exposure import rescale_intensity

from region_extract.core.config import WRITER_CONFIG
from region_extract.core.exceptions import FormatIOError
from region_extract.core.io import ensure_bands
from region_extract.core.logging_config import get_module_logger
from region_extract.formats.base import FormatTag, Writer

# Initialize logger
logger = get_module_logger(__name__)


def to_uint8(data: np.ndarray) -> np.ndarray:
    """
    Convert pixel data to 8 bits per sample.

    Unsigned integer data is scaled over its full dtype range, other types
    are stretched between their minimum and maximum.
    """
    if data.dtype == np.uint8:
        return data
    in_range = "dtype" if data.dtype.kind == "u" else "image"
    return rescale_intensity(data, in_range=in_range, out_range=(0, 255)).astype(np.uint8)


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "YES" if value else "NO"
    return str(value)


class RasterioWriter(Writer):
    """
    Base class for writers encoding through a GDAL driver.

    Subclasses set ``tag`` and ``driver`` and may override ``prepare`` to
    coerce band count or data type into what the driver accepts.
    """

    tag: FormatTag = None
    driver: str = None

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        defaults = WRITER_CONFIG.get(self.tag.value, {})
        self.options: Dict[str, Any] = {k.lower(): v for k, v in defaults.items()}
        if options:
            self.set_configuration(options)

    def set_configuration(self, options: Mapping[str, Any]) -> None:
        """
        Merge writer options.

        Keys are case-insensitive GDAL creation options; a value of None
        removes a default.
        """
        for key, value in options.items():
            key = str(key).lower()
            if value is None:
                self.options.pop(key, None)
            else:
                self.options[key] = value

    def creation_options(self) -> Dict[str, str]:
        return {key.upper(): _option_value(value) for key, value in self.options.items()}

    def prepare(self, data: np.ndarray) -> np.ndarray:
        return data

    def encode(self, pixels: np.ndarray) -> bytes:
        """
        Encode a pixel buffer to bytes.

        Parameters
        ----------
        pixels : np.ndarray
            2D or band-first 3D array.

        Returns
        -------
        bytes
            Encoded image.
        """
        data = np.ascontiguousarray(self.prepare(ensure_bands(pixels)))
        count, height, width = data.shape

        profile = {
            "driver": self.driver,
            "width": width,
            "height": height,
            "count": count,
            "dtype": data.dtype.name,
        }
        profile.update(self.creation_options())

        try:
            with warnings.catch_warnings():
                # Extracted regions carry no georeferencing
                warnings.simplefilter("ignore", NotGeoreferencedWarning)
                with MemoryFile() as memfile:
                    with memfile.open(**profile) as dst:
                        dst.write(data)
                    encoded = memfile.read()
        except (RasterioError, TypeError, ValueError) as e:
            logger.error(f"{self.driver} encoding failed for {width}x{height}x{count} "
                         f"{data.dtype.name}: {str(e)}")
            raise FormatIOError(f"{self.driver} encoding failed: {e}") from e

        logger.debug(f"Encoded {width}x{height}x{count} buffer as {self.driver} ({len(encoded)} bytes)")
        return encoded

    def write(self, pixels: np.ndarray, stream: BinaryIO) -> None:
        stream.write(self.encode(pixels))


class JPEGWriter(RasterioWriter):
    """Baseline JPEG, 8-bit grayscale or RGB."""

    tag = FormatTag.JPEG
    driver = "JPEG"

    def prepare(self, data: np.ndarray) -> np.ndarray:
        # Drop alpha: gray+alpha -> gray, RGBA and wider -> RGB
        if data.shape[0] == 2:
            data = data[:1]
        elif data.shape[0] > 3:
            data = data[:3]
        return to_uint8(data)


class PNGWriter(RasterioWriter):
    """PNG, 8 or 16 bits per sample, up to four bands."""

    tag = FormatTag.PNG
    driver = "PNG"

    def prepare(self, data: np.ndarray) -> np.ndarray:
        if data.shape[0] > 4:
            data = data[:3]
        if data.dtype not in (np.uint8, np.uint16):
            data = to_uint8(data)
        return data


class JP2Writer(RasterioWriter):
    """
    JPEG 2000 through OpenJPEG.

    Lossless by default. Setting ``quality`` (a percentage of the
    uncompressed size) switches to irreversible compression.
    """

    tag = FormatTag.JP2
    driver = "JP2OpenJPEG"

    def creation_options(self) -> Dict[str, str]:
        options = super().creation_options()
        if "QUALITY" in options:
            options.pop("REVERSIBLE", None)
        return options

    def prepare(self, data: np.ndarray) -> np.ndarray:
        if data.dtype.kind in "fb":
            data = to_uint8(data)
        return data


class TIFFWriter(RasterioWriter):
    """GeoTIFF driver, any band count and data type."""

    tag = FormatTag.TIFF
    driver = "GTiff"


def available_drivers() -> Dict[str, str]:
    """Return GDAL short driver names mapped to their long names."""
    with rasterio.Env() as env:
        return env.drivers()


WRITER_FACTORIES: Dict[FormatTag, Callable[[], Writer]] = {
    FormatTag.JPEG: JPEGWriter,
    FormatTag.JP2: JP2Writer,
    FormatTag.PNG: PNGWriter,
    FormatTag.TIFF: TIFFWriter,
}
