#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decode parameters for region extraction.

This module defines the region of interest and the post-processing settings
that travel with every extraction call.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

PixelBuffer = np.ndarray
PixelTransform = Callable[[np.ndarray], np.ndarray]


def _parse_ints(text: str, count: int, name: str) -> Tuple[int, ...]:
    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) != count:
        raise ValueError(f"{name} must have {count} comma-separated values, got {text!r}")
    try:
        return tuple(int(p) for p in parts)
    except ValueError:
        raise ValueError(f"{name} must contain integers, got {text!r}")


@dataclass(frozen=True)
class Region:
    """Rectangle in full-resolution pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def parse(cls, text: str) -> "Region":
        """Parse an ``"x,y,w,h"`` string."""
        return cls(*_parse_ints(text, 4, "Region"))

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def parse_size(text: str) -> Tuple[int, int]:
    """Parse a ``"width,height"`` string."""
    width, height = _parse_ints(text, 2, "Size")
    return width, height


@dataclass
class DecodeParameters:
    """
    Region, resolution and post-processing settings for one extraction.

    Parameters
    ----------
    region : Region, optional
        Area to decode. None selects the full image.
    level : int
        Number of 2x resolution reductions applied while decoding,
        0 decodes at full resolution.
    scaling_factor : float
        Resize factor applied after decoding. Only factors in (0, 3) other
        than 1.0 have an effect.
    scaling_dimensions : tuple of int, optional
        Explicit ``(width, height)`` to resize to. Ignored when
        ``scaling_factor`` is not 1.0.
    transform : callable, optional
        Function receiving the (possibly scaled) pixel buffer and returning
        the buffer to encode.
    """

    region: Optional[Region] = None
    level: int = 0
    scaling_factor: float = 1.0
    scaling_dimensions: Optional[Tuple[int, int]] = None
    transform: Optional[PixelTransform] = None

    def __post_init__(self):
        if self.level < 0:
            raise ValueError(f"Resolution level must be >= 0, got {self.level}")
        if self.scaling_dimensions is not None:
            if len(self.scaling_dimensions) != 2:
                raise ValueError("Scaling dimensions must be a (width, height) pair")
            self.scaling_dimensions = (int(self.scaling_dimensions[0]), int(self.scaling_dimensions[1]))

    @property
    def needs_scaling(self) -> bool:
        return self.scaling_factor != 1.0 or self.scaling_dimensions is not None
