"""
Tests for the source/display coordinate mapper.

Tests cover:
- Independent X/Y scale factors
- Round trips between source and display space
- Box mapping
- Preview surface sizing
- Error handling
"""

import random
import unittest

import pytest

from BF_Libs.errors import ValidationError
from BF_Libs.GeometryLib.coordinate_mapper import (
    fit_display_size,
    rect_to_display,
    rect_to_source,
    scale_factors,
    to_display,
    to_source,
)


class TestScaleFactors(unittest.TestCase):
    """Test scale factor computation."""

    def test_uniform_downscale(self):
        """Test a display half the size of the source."""
        self.assertEqual(scale_factors((1000, 600), (500, 300)), (0.5, 0.5))

    def test_independent_axes(self):
        """Test that X and Y scale independently."""
        scale_x, scale_y = scale_factors((1000, 500), (500, 500))

        self.assertEqual(scale_x, 0.5)
        self.assertEqual(scale_y, 1.0)

    def test_rejects_non_positive_sizes(self):
        """Test zero or negative sizes raise ValidationError."""
        with self.assertRaises(ValidationError):
            scale_factors((0, 600), (500, 300))

        with self.assertRaises(ValidationError):
            scale_factors((1000, 600), (500, -1))


class TestPointMapping(unittest.TestCase):
    """Test point mapping between spaces."""

    def test_to_display(self):
        """Test source to display mapping."""
        self.assertEqual(to_display((400, 200), (1000, 600), (500, 300)), (200, 100))

    def test_to_source(self):
        """Test display to source mapping."""
        self.assertEqual(to_source((200, 100), (1000, 600), (500, 300)), (400, 200))

    def test_non_uniform_mapping(self):
        """Test that the mapper does not assume equal scale factors."""
        point = to_display((100, 100), (1000, 500), (500, 500))

        self.assertEqual(point, (50, 100))

    def test_round_trip_random(self):
        """Test to_source(to_display(p)) == p for many sizes."""
        rng = random.Random(1234)
        for _ in range(500):
            source = (rng.randint(1, 5000), rng.randint(1, 5000))
            display = (rng.uniform(1, 1200), rng.uniform(1, 800))
            point = (rng.uniform(-100, source[0] + 100), rng.uniform(-100, source[1] + 100))

            back = to_source(to_display(point, source, display), source, display)

            self.assertAlmostEqual(back[0], point[0], places=6)
            self.assertAlmostEqual(back[1], point[1], places=6)

    def test_reverse_round_trip(self):
        """Test to_display(to_source(p)) == p."""
        point = (123.4, 56.7)
        back = to_display(to_source(point, (1920, 1080), (600, 337.5)), (1920, 1080), (600, 337.5))

        self.assertAlmostEqual(back[0], point[0])
        self.assertAlmostEqual(back[1], point[1])


class TestRectMapping(unittest.TestCase):
    """Test box mapping."""

    def test_rect_to_display(self):
        rect = rect_to_display((400, 200, 200, 100), (1000, 600), (500, 300))

        self.assertEqual(rect, (200, 100, 100, 50))

    def test_rect_round_trip(self):
        source, display = (1234, 987), (600, 400)
        rect = (10.0, 20.0, 300.0, 150.0)

        back = rect_to_source(rect_to_display(rect, source, display), source, display)

        for got, expected in zip(back, rect):
            self.assertAlmostEqual(got, expected)


class TestFitDisplaySize(unittest.TestCase):
    """Test preview surface sizing."""

    def test_wide_source_capped_by_width(self):
        """Test a wide banner fills the width."""
        self.assertEqual(fit_display_size((1200, 400)), (600.0, 200.0))

    def test_tall_source_capped_by_height(self):
        """Test a tall banner is capped by the height."""
        width, height = fit_display_size((1000, 1000))

        self.assertEqual(height, 400.0)
        self.assertEqual(width, 400.0)

    def test_preserves_aspect_ratio(self):
        width, height = fit_display_size((1920, 1080), (600, 400))

        self.assertAlmostEqual(width / height, 1920 / 1080)
        self.assertLessEqual(width, 600)
        self.assertLessEqual(height, 400)

    def test_custom_bounds(self):
        self.assertEqual(fit_display_size((100, 50), (300, 300)), (300.0, 150.0))


@pytest.mark.parametrize("source,display", [
    ((1000, 600), (600, 360)),
    ((640, 480), (600, 450)),
    ((3000, 1000), (600, 200)),
    ((7, 3), (600, 257.142857)),
])
def test_mapping_is_inverse(source, display):
    """Test mapping both ways returns the original point."""
    for point in [(0, 0), (source[0], source[1]), (source[0] / 3, source[1] / 7)]:
        back = to_source(to_display(point, source, display), source, display)
        assert back == pytest.approx(point)
