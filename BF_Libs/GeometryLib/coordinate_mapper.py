"""
Coordinate mapping between source space and display space.

Source space is the pixel grid of the full-resolution banner. Display space
is the (usually downscaled) surface the operator sees while editing. The X
and Y scale factors are independent; callers that want an undistorted
preview size the surface with `fit_display_size` first.

All functions are pure and keep no state, so they are safe to call from any
number of threads.

Functions:
    scale_factors: Display/source scale factors along X and Y
    to_display: Map a point from source space into display space
    to_source: Map a point from display space back into source space
    rect_to_display: Map an (x, y, width, height) box into display space
    rect_to_source: Map an (x, y, width, height) box into source space
    fit_display_size: Largest aspect-preserving surface inside given bounds
"""

from typing import Tuple

from BF_Libs.constants import DEFAULT_MAX_DISPLAY_WIDTH, DEFAULT_MAX_DISPLAY_HEIGHT
from BF_Libs.errors import ValidationError

Point = Tuple[float, float]
Size = Tuple[float, float]
Rect = Tuple[float, float, float, float]


def _check_size(size: Size, name: str) -> None:
    width, height = size
    if width <= 0 or height <= 0:
        raise ValidationError(f"{name} must be positive, got {width}x{height}")


def scale_factors(source_size: Size, display_size: Size) -> Tuple[float, float]:
    """
    Compute the display/source scale factors.

    Args:
        source_size: (width, height) of the source image
        display_size: (width, height) of the display surface

    Returns:
        (scale_x, scale_y) where display = source * scale

    Raises:
        ValidationError: If either size has a non-positive dimension
    """
    _check_size(source_size, "source_size")
    _check_size(display_size, "display_size")
    return (
        display_size[0] / source_size[0],
        display_size[1] / source_size[1],
    )


def to_display(point: Point, source_size: Size, display_size: Size) -> Point:
    """Map a source-space point to display space."""
    scale_x, scale_y = scale_factors(source_size, display_size)
    return (point[0] * scale_x, point[1] * scale_y)


def to_source(point: Point, source_size: Size, display_size: Size) -> Point:
    """Map a display-space point to source space (inverse of `to_display`)."""
    scale_x, scale_y = scale_factors(source_size, display_size)
    return (point[0] / scale_x, point[1] / scale_y)


def rect_to_display(rect: Rect, source_size: Size, display_size: Size) -> Rect:
    """Map an (x, y, width, height) box from source to display space."""
    scale_x, scale_y = scale_factors(source_size, display_size)
    x, y, width, height = rect
    return (x * scale_x, y * scale_y, width * scale_x, height * scale_y)


def rect_to_source(rect: Rect, source_size: Size, display_size: Size) -> Rect:
    """Map an (x, y, width, height) box from display to source space."""
    scale_x, scale_y = scale_factors(source_size, display_size)
    x, y, width, height = rect
    return (x / scale_x, y / scale_y, width / scale_x, height / scale_y)


def fit_display_size(
    source_size: Size,
    max_size: Size = (DEFAULT_MAX_DISPLAY_WIDTH, DEFAULT_MAX_DISPLAY_HEIGHT),
) -> Size:
    """
    Size a preview surface for the source image.

    The width is tried at the maximum first; if that makes the surface too
    tall, the height is capped instead and the width follows the aspect
    ratio. Small sources are scaled up to fill the bounds.

    Args:
        source_size: (width, height) of the source image
        max_size: (max_width, max_height) of the preview surface

    Returns:
        (width, height) of the preview surface, same aspect ratio as source
    """
    _check_size(source_size, "source_size")
    _check_size(max_size, "max_size")

    max_width, max_height = max_size
    source_width, source_height = source_size

    width = float(max_width)
    height = max_width * source_height / source_width
    if height > max_height:
        height = float(max_height)
        width = max_height * source_width / source_height

    return (width, height)
