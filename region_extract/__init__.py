#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Region Extraction Package.

Decodes a sub-region or reduced resolution of a large tiled image, applies
scaling and pixel transforms, and encodes the result as JPEG, JPEG 2000,
PNG or TIFF.
"""

__version__ = "0.1.0"
__author__ = "Region Extract Team"
__email__ = "user@example.com"
