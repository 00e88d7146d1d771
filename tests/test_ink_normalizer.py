"""Unit tests for ink_normalizer.py.

Covers the registration pipeline:
    - ink detection thresholds (alpha and brightness)
    - bounding box extraction
    - isotropic placement inside the margin
    - zero vector for empty drawings
    - translation and scale tolerance of the resulting vectors
"""

import unittest

import numpy as np

from character_recognizer import cosine_similarity
from ink_normalizer import (
    InvalidRasterError,
    compute_placement,
    has_ink,
    ink_bounding_box,
    ink_mask,
    normalize_to_vector,
    to_rgba,
)
from shapes import blank_raster, draw_shape, filled_l_shape

VECTOR_LENGTH = 32 * 32


def as_grid(vector):
    return np.asarray(vector).reshape(32, 32)


class TestInkDetection(unittest.TestCase):
    """Tests for the per-pixel ink test."""

    def test_white_background_is_not_ink(self):
        self.assertFalse(has_ink(blank_raster(20, 20)))

    def test_faint_alpha_is_not_ink(self):
        raster = blank_raster(5, 5)
        raster[2, 2] = (0, 0, 0, 15)
        self.assertFalse(has_ink(raster))

        raster[2, 2] = (0, 0, 0, 16)
        self.assertTrue(has_ink(raster))

    def test_near_white_is_not_ink(self):
        raster = blank_raster(5, 5)
        raster[1, 1] = (245, 245, 245, 255)
        self.assertFalse(has_ink(raster))

        raster[1, 1] = (244, 244, 244, 255)
        self.assertTrue(has_ink(raster))

    def test_brightness_is_channel_mean(self):
        raster = blank_raster(3, 3)
        # mean (255 + 255 + 200) / 3 = 236.7 < 245
        raster[0, 0] = (255, 255, 200, 255)
        self.assertTrue(ink_mask(raster)[0, 0])

    def test_bounding_box_single_pixel(self):
        raster = blank_raster(20, 10)
        raster[7, 5] = (0, 0, 0, 255)
        self.assertEqual(ink_bounding_box(raster), (5, 7, 5, 7))

    def test_bounding_box_spans_all_ink(self):
        raster = blank_raster(50, 40)
        raster[3, 10] = (0, 0, 0, 255)
        raster[30, 44] = (30, 30, 30, 255)
        self.assertEqual(ink_bounding_box(raster), (10, 3, 44, 30))

    def test_bounding_box_empty(self):
        self.assertIsNone(ink_bounding_box(blank_raster(8, 8)))


class TestRasterCoercion(unittest.TestCase):
    """Tests for to_rgba and its precondition failures."""

    def test_none_raster_rejected(self):
        with self.assertRaises(InvalidRasterError):
            normalize_to_vector(None)

    def test_empty_raster_rejected(self):
        with self.assertRaises(InvalidRasterError):
            to_rgba(np.zeros((0, 5, 4), dtype=np.uint8))

    def test_bad_channel_count_rejected(self):
        with self.assertRaises(InvalidRasterError):
            to_rgba(np.zeros((4, 4, 2), dtype=np.uint8))

    def test_invalid_raster_is_value_error(self):
        self.assertTrue(issubclass(InvalidRasterError, ValueError))

    def test_rgb_and_gray_match_rgba(self):
        rgba = filled_l_shape(blank_raster(60, 60), 10, 10, 2.0)
        rgb = np.ascontiguousarray(rgba[:, :, :3])
        gray = np.ascontiguousarray(rgba[:, :, 0])

        expected = normalize_to_vector(rgba)
        np.testing.assert_allclose(normalize_to_vector(rgb), expected)
        np.testing.assert_allclose(normalize_to_vector(gray), expected)


class TestComputePlacement(unittest.TestCase):
    """Tests for isotropic scale and centering."""

    def test_tall_crop(self):
        self.assertEqual(compute_placement(10, 40), (7, 28, 12, 2))

    def test_wide_crop(self):
        self.assertEqual(compute_placement(40, 10), (28, 7, 2, 12))

    def test_single_pixel_fills_available_square(self):
        self.assertEqual(compute_placement(1, 1), (28, 28, 2, 2))

    def test_minimum_one_unit(self):
        draw_w, draw_h, _, _ = compute_placement(1, 1000)
        self.assertEqual(draw_w, 1)
        self.assertEqual(draw_h, 28)

    def test_never_touches_edges(self):
        for w, h in [(3, 7), (100, 1), (57, 91), (640, 480)]:
            draw_w, draw_h, off_x, off_y = compute_placement(w, h)
            self.assertGreaterEqual(off_x, 2)
            self.assertGreaterEqual(off_y, 2)
            self.assertLessEqual(off_x + draw_w, 30)
            self.assertLessEqual(off_y + draw_h, 30)

    def test_empty_crop_rejected(self):
        with self.assertRaises(ValueError):
            compute_placement(0, 5)


class TestNormalizeToVector(unittest.TestCase):
    """Tests for the full pipeline output."""

    def test_empty_drawing_gives_zero_vector(self):
        for width, height in [(1, 1), (10, 10), (480, 320), (96, 96)]:
            vector = normalize_to_vector(blank_raster(width, height))
            self.assertEqual(vector.shape, (VECTOR_LENGTH,))
            self.assertFalse(vector.any())

    def test_fully_transparent_drawing_gives_zero_vector(self):
        raster = np.zeros((50, 50, 4), dtype=np.uint8)
        self.assertFalse(normalize_to_vector(raster).any())

    def test_length_is_independent_of_source_size(self):
        for width, height in [(7, 300), (300, 7), (33, 33), (1024, 768)]:
            raster = blank_raster(width, height)
            raster[height // 2, width // 2] = (0, 0, 0, 255)
            self.assertEqual(normalize_to_vector(raster).shape, (VECTOR_LENGTH,))

    def test_custom_target_size(self):
        raster = filled_l_shape(blank_raster(80, 80), 5, 5, 3.0)
        self.assertEqual(normalize_to_vector(raster, target_size=16, margin=2).shape, (256,))

    def test_values_in_unit_range(self):
        raster = draw_shape(blank_raster(200, 150), "circle", 30, 20, 100, 9)
        vector = normalize_to_vector(raster)
        self.assertEqual(vector.dtype, np.float32)
        self.assertGreaterEqual(float(vector.min()), 0.0)
        self.assertLessEqual(float(vector.max()), 1.0)

    def test_vector_is_read_only(self):
        vector = normalize_to_vector(blank_raster(10, 10))
        self.assertFalse(vector.flags.writeable)
        with self.assertRaises(ValueError):
            vector[0] = 1.0

    def test_single_pixel_is_scaled_into_margin_box(self):
        raster = blank_raster(40, 40)
        raster[13, 21] = (0, 0, 0, 255)
        grid = as_grid(normalize_to_vector(raster))

        np.testing.assert_allclose(grid[2:30, 2:30], 1.0, atol=1e-6)
        border = grid.copy()
        border[2:30, 2:30] = 0.0
        self.assertFalse(border.any())

    def test_aspect_ratio_is_preserved_and_centered(self):
        raster = blank_raster(100, 100)
        raster[30:70, 50:60] = (0, 0, 0, 255)  # 10 wide, 40 tall
        grid = as_grid(normalize_to_vector(raster))

        np.testing.assert_allclose(grid[2:30, 12:19], 1.0, atol=1e-6)
        outside = grid.copy()
        outside[2:30, 12:19] = 0.0
        self.assertFalse(outside.any())

    def test_transparent_pixels_inside_crop_count_as_background(self):
        raster = np.zeros((100, 100, 4), dtype=np.uint8)  # transparent black
        raster[30:70, 50:60] = (0, 0, 0, 255)
        grid = as_grid(normalize_to_vector(raster))

        np.testing.assert_allclose(grid[2:30, 12:19], 1.0, atol=1e-6)
        self.assertEqual(float(grid[:, :12].max()), 0.0)

    def test_gray_ink_gives_partial_intensity(self):
        raster = blank_raster(20, 20)
        raster[5:15, 5:15] = (102, 102, 102, 255)
        grid = as_grid(normalize_to_vector(raster))
        self.assertAlmostEqual(float(grid[16, 16]), 1.0 - 102 / 255, places=5)


class TestRegistrationInvariance(unittest.TestCase):
    """Same drawing, different position or size, similar vectors."""

    def test_translation_invariance(self):
        a = filled_l_shape(blank_raster(200, 200), 10, 10, 4.0)
        b = filled_l_shape(blank_raster(200, 200), 110, 90, 4.0)

        va, vb = normalize_to_vector(a), normalize_to_vector(b)
        np.testing.assert_allclose(va, vb, atol=1e-6)
        self.assertGreater(cosine_similarity(va, vb), 0.9)

    def test_translation_invariance_of_strokes(self):
        a = draw_shape(blank_raster(300, 300), "triangle", 20, 30, 120, 10)
        b = draw_shape(blank_raster(300, 300), "triangle", 150, 160, 120, 10)
        self.assertGreater(cosine_similarity(normalize_to_vector(a), normalize_to_vector(b)), 0.99)

    def test_scale_invariance(self):
        small = filled_l_shape(blank_raster(300, 300), 20, 20, 2.0)
        large = filled_l_shape(blank_raster(300, 300), 20, 20, 12.0)
        similarity = cosine_similarity(normalize_to_vector(small), normalize_to_vector(large))
        self.assertGreater(similarity, 0.9)

    def test_source_resolution_invariance(self):
        low = filled_l_shape(blank_raster(96, 96), 10, 10, 4.0)
        high = filled_l_shape(blank_raster(960, 720), 100, 100, 30.0)
        similarity = cosine_similarity(normalize_to_vector(low), normalize_to_vector(high))
        self.assertGreater(similarity, 0.9)


if __name__ == "__main__":
    unittest.main()
