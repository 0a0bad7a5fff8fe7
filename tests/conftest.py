"""
Pytest configuration and shared fixtures for Banner Frame tests.

This module provides shared banner/photo images and placeholder regions
used across multiple test modules.
"""

import os
from io import BytesIO

import pytest
from PIL import Image

from BF_Libs.GeometryLib.placeholder_region import PlaceholderRegion


def png_bytes(image):
    """Encode a PIL Image as PNG bytes."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def truncated_open_image(size=(64, 64)):
    """
    Open a PNG cut off halfway through its pixel data.

    The header parses, so Image.open succeeds; the pixels fail on load().
    """
    data = png_bytes(Image.frombytes("RGBA", size, os.urandom(size[0] * size[1] * 4)))
    return Image.open(BytesIO(data[: len(data) // 2]))


def quadrant_photo(size=(100, 100)):
    """
    Build a photo split into four solid quadrants.

    Top-left red, top-right green, bottom-left blue, bottom-right yellow.
    """
    width, height = size
    photo = Image.new("RGBA", size, (255, 0, 0, 255))
    photo.paste((0, 255, 0, 255), (width // 2, 0, width, height // 2))
    photo.paste((0, 0, 255, 255), (0, height // 2, width // 2, height))
    photo.paste((255, 255, 0, 255), (width // 2, height // 2, width, height))
    return photo


@pytest.fixture
def banner_image():
    """A 1000x600 solid gray banner."""
    return Image.new("RGBA", (1000, 600), (128, 128, 128, 255))


@pytest.fixture
def banner_bytes(banner_image):
    return png_bytes(banner_image)


@pytest.fixture
def photo_image():
    """A 100x100 solid blue photo."""
    return Image.new("RGBA", (100, 100), (0, 0, 255, 255))


@pytest.fixture
def photo_bytes(photo_image):
    return png_bytes(photo_image)


@pytest.fixture
def circle_region():
    return PlaceholderRegion(x=400, y=200, width=200, height=200, shape="circle")
