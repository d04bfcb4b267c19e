#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Format readers backed by rasterio.
"""
from typing import BinaryIO, Callable, Dict, Union

import numpy as np
from rasterio.errors import RasterioIOError

from region_extract.core.exceptions import DecodeError
from region_extract.core.io import describe_source, open_image
from region_extract.core.logging_config import get_module_logger
from region_extract.formats.base import FormatTag, Reader

# Initialize logger
logger = get_module_logger(__name__)


class RasterioReader(Reader):
    """Reads every band of an image any GDAL driver can open."""

    def read(self, source: Union[str, BinaryIO]) -> np.ndarray:
        try:
            with open_image(source) as src:
                data = src.read()
        except RasterioIOError as e:
            logger.error(f"Unable to read {describe_source(source)}: {str(e)}")
            raise DecodeError(f"Unable to read {describe_source(source)}: {e}") from e

        logger.debug(f"Read {data.shape} {data.dtype} from {describe_source(source)}")
        return data


READER_FACTORIES: Dict[FormatTag, Callable[[], Reader]] = {
    tag: RasterioReader for tag in FormatTag
}
