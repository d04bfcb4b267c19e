#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Writer and reader contracts.
"""
from enum import Enum
from typing import Any, BinaryIO, Mapping, Union

import numpy as np


class FormatTag(Enum):
    """Image formats with a built-in writer and reader."""

    JPEG = "jpeg"
    JP2 = "jp2"
    PNG = "png"
    TIFF = "tiff"

    @classmethod
    def from_name(cls, name: str) -> "FormatTag":
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unknown format tag: {name!r} "
                             f"(expected one of {', '.join(t.value for t in cls)})")


class Writer:
    """Serializes a pixel buffer to a binary stream."""

    def set_configuration(self, options: Mapping[str, Any]) -> None:
        """Apply format-specific settings such as compression quality."""
        raise NotImplementedError

    def write(self, pixels: np.ndarray, stream: BinaryIO) -> None:
        raise NotImplementedError


class Reader:
    """Loads a complete image into a pixel buffer."""

    def read(self, source: Union[str, BinaryIO]) -> np.ndarray:
        raise NotImplementedError
