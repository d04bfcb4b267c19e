#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the format registry and writers.
"""

import unittest
import numpy as np

from region_extract.formats.base import FormatTag, Writer
from region_extract.formats.readers import RasterioReader
from region_extract.formats.registry import FormatRegistry, get_format_suffix
from region_extract.formats.writers import JP2Writer, JPEGWriter, PNGWriter, TIFFWriter, to_uint8


class TestFormatSuffix(unittest.TestCase):
    """Test identifier normalization."""

    def test_mimetype_forms_resolve_to_suffix(self):
        self.assertEqual(get_format_suffix("image/jpeg"), "jpeg")
        self.assertEqual(get_format_suffix("image%2Fjpeg"), "jpeg")
        self.assertEqual(get_format_suffix("jpeg"), "jpeg")

    def test_prefix_is_case_insensitive(self):
        self.assertEqual(get_format_suffix("IMAGE/JPEG"), "JPEG")
        self.assertEqual(get_format_suffix("image%2fjpeg"), "jpeg")
        self.assertEqual(get_format_suffix("Image%2Fpng"), "png")

    def test_suffix_is_idempotent(self):
        for identifier in ("image/png", "image%2Fpng", "png"):
            suffix = get_format_suffix(identifier)
            self.assertEqual(get_format_suffix(suffix), suffix)


class TestFormatRegistry(unittest.TestCase):
    """Test writer and reader lookup."""

    def setUp(self):
        self.registry = FormatRegistry()

    def test_default_table(self):
        self.assertEqual(self.registry.formats, ["jpeg", "jpg", "jp2", "png", "tiff", "tif"])

    def test_default_writers(self):
        expected = {
            "image/jpeg": JPEGWriter,
            "image/jpg": JPEGWriter,
            "image%2Fjp2": JP2Writer,
            "png": PNGWriter,
            "image/tiff": TIFFWriter,
            "tif": TIFFWriter,
        }
        for identifier, cls in expected.items():
            self.assertIsInstance(self.registry.get_writer(identifier), cls, identifier)

    def test_lookup_is_case_insensitive(self):
        self.assertIsInstance(self.registry.get_writer("image/JPEG"), JPEGWriter)
        self.assertIsInstance(self.registry.get_writer("IMAGE/JPEG"), JPEGWriter)
        self.assertIsInstance(self.registry.get_writer("image%2fjpeg"), JPEGWriter)

    def test_each_call_returns_fresh_writer(self):
        first = self.registry.get_writer("image/png")
        second = self.registry.get_writer("image/png")
        self.assertIsNot(first, second)

    def test_unknown_format_returns_none(self):
        with self.assertLogs("region_extract", level="ERROR"):
            self.assertIsNone(self.registry.get_writer("image/bmp"))
        with self.assertLogs("region_extract", level="ERROR"):
            self.assertIsNone(self.registry.get_reader("image/bmp"))

    def test_failing_factory_returns_none(self):
        def broken():
            raise RuntimeError("cannot build")

        self.registry.register_writer("image/broken", broken)
        with self.assertLogs("region_extract", level="ERROR"):
            self.assertIsNone(self.registry.get_writer("broken"))

    def test_options_applied_after_creation(self):
        writer = self.registry.get_writer("image/jpeg", {"QUALITY": 80})
        self.assertEqual(writer.options["quality"], 80)
        # Defaults of other instances are untouched
        self.assertEqual(self.registry.get_writer("image/jpeg").options["quality"], 95)

    def test_rejected_options_return_none(self):
        class StrictWriter(Writer):
            def set_configuration(self, options):
                raise ValueError("unsupported option")

        self.registry.register_writer("strict", StrictWriter)
        with self.assertLogs("region_extract", level="ERROR"):
            self.assertIsNone(self.registry.get_writer("strict", {"quality": 1}))

    def test_register_custom_writer(self):
        class CustomWriter(Writer):
            pass

        self.registry.register_writer("image/x-custom", CustomWriter)
        self.assertIn("x-custom", self.registry.formats)
        self.assertIsInstance(self.registry.get_writer("x-custom"), CustomWriter)

    def test_default_readers(self):
        self.assertIsInstance(self.registry.get_reader("image/jp2"), RasterioReader)

    def test_from_table(self):
        registry = FormatRegistry.from_table({"jpg": "jpeg", "tif": "TIFF"})
        self.assertEqual(registry.formats, ["jpg", "tif"])
        self.assertIsInstance(registry.get_writer("image/tif"), TIFFWriter)
        with self.assertLogs("region_extract", level="ERROR"):
            self.assertIsNone(registry.get_writer("png"))

    def test_from_table_rejects_unknown_tag(self):
        with self.assertRaises(ValueError):
            FormatRegistry.from_table({"gif": "gif"})


class TestWriterConfiguration(unittest.TestCase):
    """Test creation options and pixel preparation of the writers."""

    def test_creation_options(self):
        self.assertEqual(JPEGWriter().creation_options(), {"QUALITY": "95"})
        self.assertEqual(TIFFWriter({"tiled": True}).creation_options(),
                         {"COMPRESS": "LZW", "TILED": "YES"})

    def test_none_removes_default(self):
        writer = TIFFWriter()
        writer.set_configuration({"compress": None})
        self.assertEqual(writer.creation_options(), {})

    def test_jp2_quality_switches_to_lossy(self):
        self.assertEqual(JP2Writer().creation_options(), {"REVERSIBLE": "YES"})
        self.assertEqual(JP2Writer({"quality": 25}).creation_options(), {"QUALITY": "25"})

    def test_jpeg_prepare_drops_alpha_and_converts(self):
        data = np.full((4, 8, 8), 65535, dtype=np.uint16)
        prepared = JPEGWriter().prepare(data)
        self.assertEqual(prepared.shape, (3, 8, 8))
        self.assertEqual(prepared.dtype, np.uint8)
        self.assertTrue(np.all(prepared == 255))

    def test_png_keeps_16_bit(self):
        data = np.zeros((1, 4, 4), dtype=np.uint16)
        self.assertEqual(PNGWriter().prepare(data).dtype, np.uint16)

    def test_to_uint8_stretches_floats(self):
        data = np.array([[[0.0, 0.5, 1.0]]])
        np.testing.assert_array_equal(to_uint8(data), np.array([[[0, 127, 255]]], dtype=np.uint8))

    def test_format_tag_names(self):
        self.assertIs(FormatTag.from_name("JP2"), FormatTag.JP2)
        with self.assertRaises(ValueError):
            FormatTag.from_name("bmp")


if __name__ == '__main__':
    unittest.main()
