#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Output format modules for region extraction.

This package contains the writer/reader contracts, the rasterio-backed
implementations for JPEG, JPEG 2000, PNG and TIFF, and the format registry
that maps identifiers such as "image/jpeg" to them.
"""
