#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for pixel transforms and decode parameters.
"""

import unittest
import numpy as np

from region_extract.core.params import DecodeParameters, Region, parse_size
from region_extract.processing.transforms import chain, grayscale, rotate


class TestTransforms(unittest.TestCase):
    """Test the built-in pixel transforms."""

    def setUp(self):
        self.image = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(2, 3, 4)

    def test_rotate_quarter_turn_clockwise(self):
        rotated = rotate(90)(self.image)
        self.assertEqual(rotated.shape, (2, 4, 3))
        # Top-left moves to top-right
        self.assertEqual(rotated[0, 0, -1], self.image[0, 0, 0])
        # Bottom-left moves to top-left
        self.assertEqual(rotated[0, 0, 0], self.image[0, -1, 0])

    def test_rotate_half_turn(self):
        np.testing.assert_array_equal(rotate(180)(self.image), self.image[:, ::-1, ::-1])

    def test_rotate_folds_full_turns(self):
        self.assertIs(rotate(360)(self.image), self.image)
        np.testing.assert_array_equal(rotate(-90)(self.image), rotate(270)(self.image))

    def test_rotate_rejects_other_angles(self):
        with self.assertRaises(ValueError):
            rotate(45)

    def test_grayscale_rgb(self):
        rgb = np.zeros((3, 2, 2), dtype=np.uint8)
        rgb[0] = 255
        gray = grayscale(rgb)
        self.assertEqual(gray.shape, (1, 2, 2))
        self.assertEqual(gray.dtype, np.uint8)
        self.assertTrue(np.all(gray == 76))

    def test_grayscale_single_band_unchanged(self):
        band = np.ones((5, 5), dtype=np.uint16)
        np.testing.assert_array_equal(grayscale(band), band[np.newaxis])

    def test_chain_applies_in_order(self):
        calls = []
        first = lambda p: calls.append("first") or p + 1
        second = lambda p: calls.append("second") or p * 2
        result = chain(first, second)(np.array([1]))
        self.assertEqual(calls, ["first", "second"])
        self.assertEqual(result[0], 4)


class TestDecodeParameters(unittest.TestCase):
    """Test parameter parsing and validation."""

    def test_region_parse(self):
        self.assertEqual(Region.parse("10, 20,30,40"), Region(10, 20, 30, 40))

    def test_region_parse_rejects_bad_input(self):
        for text in ("1,2,3", "a,b,c,d"):
            with self.assertRaises(ValueError):
                Region.parse(text)

    def test_empty_region(self):
        self.assertTrue(Region(0, 0, 0, 10).is_empty)
        self.assertFalse(Region(0, 0, 1, 1).is_empty)

    def test_parse_size(self):
        self.assertEqual(parse_size("300,150"), (300, 150))

    def test_negative_level_rejected(self):
        with self.assertRaises(ValueError):
            DecodeParameters(level=-1)

    def test_needs_scaling(self):
        self.assertFalse(DecodeParameters().needs_scaling)
        self.assertTrue(DecodeParameters(scaling_factor=0.5).needs_scaling)
        self.assertTrue(DecodeParameters(scaling_dimensions=[10, 20]).needs_scaling)
        self.assertEqual(DecodeParameters(scaling_dimensions=[10, 20]).scaling_dimensions, (10, 20))


if __name__ == '__main__':
    unittest.main()
