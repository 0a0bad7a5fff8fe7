"""
Placeholder region model.

A placeholder region is the box on the banner where a visitor's photo is
composited. It is stored in integer source-space pixels together with a
clip shape. Every operation here is pure: it takes a region and returns a
new one, clamped so the box never leaves the source image and never drops
below the configured minimum size.

Classes:
    PlaceholderRegion: Immutable region value (x, y, width, height, shape)

Functions:
    create_region: Build a region for a source, centered by default
    resize_region: Change width/height, keeping the box inside the source
    move_region: Change the origin, keeping the box inside the source
    set_region_shape: Replace the clip shape
    scale_region: Multiply width/height by a factor
    preset_size_region: Square region sized as a fraction of the source
    center_region: Move the region to the middle of the source
    clamp_region: Bring an arbitrary region back inside the source
    validate_region: Raise ValidationError if any invariant is violated
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple, Union

from BF_Libs.constants import (
    DEFAULT_REGION_FRACTION,
    FIELD_PLACEHOLDER_HEIGHT,
    FIELD_PLACEHOLDER_SHAPE,
    FIELD_PLACEHOLDER_WIDTH,
    FIELD_PLACEHOLDER_X,
    FIELD_PLACEHOLDER_Y,
    MIN_PLACEHOLDER_SIZE,
    PLACEHOLDER_SHAPES,
    SHAPE_CIRCLE,
    SHAPE_RECTANGLE,
)
from BF_Libs.errors import ValidationError

logger = logging.getLogger(__name__)

SourceSize = Tuple[int, int]
BoxLike = Tuple[float, float, float, float]


@dataclass(frozen=True)
class PlaceholderRegion:
    """Clip region in source-space pixels.

    Attributes:
        x: Left edge of the box
        y: Top edge of the box
        width: Box width (>= min size once clamped)
        height: Box height (>= min size once clamped)
        shape: 'rectangle' or 'circle'. A circle is inscribed in the box
               with radius min(width, height) / 2, never stretched.
    """
    x: int
    y: int
    width: int
    height: int
    shape: str = SHAPE_RECTANGLE

    def __post_init__(self):
        """Validate shape and extent."""
        if self.shape not in PLACEHOLDER_SHAPES:
            raise ValidationError(
                f"shape must be one of {PLACEHOLDER_SHAPES}, got {self.shape!r}"
            )
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"region size must be positive, got {self.width}x{self.height}"
            )

    @property
    def center(self) -> Tuple[float, float]:
        """Center of the box in source space (local-space origin)."""
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def clip_radius(self) -> float:
        """Radius of the inscribed circle used for circle clipping."""
        return min(self.width, self.height) / 2.0

    @property
    def is_circle(self) -> bool:
        return self.shape == SHAPE_CIRCLE

    def as_rect(self) -> Tuple[int, int, int, int]:
        """Return (x, y, width, height)."""
        return (self.x, self.y, self.width, self.height)

    def contains(self, point: Tuple[float, float]) -> bool:
        """Check whether a source-space point lies inside the box."""
        px, py = point
        return (
            self.x <= px <= self.x + self.width
            and self.y <= py <= self.y + self.height
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted field layout."""
        return {
            FIELD_PLACEHOLDER_X: self.x,
            FIELD_PLACEHOLDER_Y: self.y,
            FIELD_PLACEHOLDER_WIDTH: self.width,
            FIELD_PLACEHOLDER_HEIGHT: self.height,
            FIELD_PLACEHOLDER_SHAPE: self.shape,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlaceholderRegion":
        """Create from the persisted field layout.

        Raises:
            ValidationError: If a field is missing or not numeric
        """
        try:
            return cls(
                x=_round_px(data[FIELD_PLACEHOLDER_X]),
                y=_round_px(data[FIELD_PLACEHOLDER_Y]),
                width=_round_px(data[FIELD_PLACEHOLDER_WIDTH]),
                height=_round_px(data[FIELD_PLACEHOLDER_HEIGHT]),
                shape=data.get(FIELD_PLACEHOLDER_SHAPE, SHAPE_RECTANGLE),
            )
        except KeyError as e:
            raise ValidationError(f"Placeholder data missing field {e}") from e
        except (TypeError, ValueError) as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"Invalid placeholder data: {e}") from e


def _round_px(value: float) -> int:
    """Round half up to a whole pixel."""
    return int(math.floor(float(value) + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _source_dims(source_size: SourceSize) -> Tuple[int, int]:
    width, height = int(source_size[0]), int(source_size[1])
    if width <= 0 or height <= 0:
        raise ValidationError(f"source size must be positive, got {width}x{height}")
    return width, height


def _clamp_size(requested: float, source_dim: int, min_size: int) -> int:
    # A source smaller than min_size caps the floor at the source itself
    floor = min(min_size, source_dim)
    return int(_clamp(_round_px(requested), floor, source_dim))


def _clamp_origin(requested: float, extent: int, source_dim: int) -> int:
    return int(_clamp(_round_px(requested), 0, max(0, source_dim - extent)))


def resize_region(
    region: PlaceholderRegion,
    new_width: float,
    new_height: float,
    source_size: SourceSize,
    min_size: int = MIN_PLACEHOLDER_SIZE,
) -> PlaceholderRegion:
    """
    Resize a region, keeping it inside the source.

    Each dimension is clamped to [min_size, source dimension]. If the new
    box would overflow with the current origin, the origin is pulled back.

    Args:
        region: Current region
        new_width: Requested width in source pixels
        new_height: Requested height in source pixels
        source_size: (width, height) of the source image
        min_size: Minimum edge length

    Returns:
        New PlaceholderRegion
    """
    source_w, source_h = _source_dims(source_size)
    width = _clamp_size(new_width, source_w, min_size)
    height = _clamp_size(new_height, source_h, min_size)
    x = _clamp_origin(region.x, width, source_w)
    y = _clamp_origin(region.y, height, source_h)
    return replace(region, x=x, y=y, width=width, height=height)


def move_region(
    region: PlaceholderRegion,
    new_x: float,
    new_y: float,
    source_size: SourceSize,
) -> PlaceholderRegion:
    """
    Move a region, keeping it fully inside the source.

    new_x is clamped to [0, source_width - width] and new_y to
    [0, source_height - height].
    """
    source_w, source_h = _source_dims(source_size)
    x = _clamp_origin(new_x, region.width, source_w)
    y = _clamp_origin(new_y, region.height, source_h)
    return replace(region, x=x, y=y)


def set_region_shape(region: PlaceholderRegion, shape: str) -> PlaceholderRegion:
    """Replace the clip shape; geometry is unchanged."""
    return replace(region, shape=shape)


def center_region(region: PlaceholderRegion, source_size: SourceSize) -> PlaceholderRegion:
    """Move the region to the middle of the source."""
    source_w, source_h = _source_dims(source_size)
    return move_region(
        region,
        (source_w - region.width) / 2.0,
        (source_h - region.height) / 2.0,
        source_size,
    )


def create_region(
    source_size: SourceSize,
    initial: Optional[Union[PlaceholderRegion, BoxLike]] = None,
    shape: str = SHAPE_RECTANGLE,
    min_size: int = MIN_PLACEHOLDER_SIZE,
    fraction: float = DEFAULT_REGION_FRACTION,
) -> PlaceholderRegion:
    """
    Create a region for a source image.

    Without an initial box, a square whose side is `fraction` of the smaller
    source dimension is centered in the source. With an initial box (a
    PlaceholderRegion or an (x, y, width, height) tuple) the box is clamped
    into the source.

    Args:
        source_size: (width, height) of the source image
        initial: Optional starting box
        shape: Clip shape (ignored when `initial` is a PlaceholderRegion)
        min_size: Minimum edge length
        fraction: Default side as a fraction of min(source width, height)

    Returns:
        New PlaceholderRegion satisfying all bounds invariants
    """
    source_w, source_h = _source_dims(source_size)

    if initial is None:
        side = min(source_w, source_h) * fraction
        seed = PlaceholderRegion(0, 0, 1, 1, shape)
        region = resize_region(seed, side, side, source_size, min_size)
        return center_region(region, source_size)

    if isinstance(initial, PlaceholderRegion):
        x, y, width, height = initial.as_rect()
        shape = initial.shape
    else:
        x, y, width, height = initial

    width = _clamp_size(width, source_w, min_size)
    height = _clamp_size(height, source_h, min_size)
    region = PlaceholderRegion(0, 0, width, height, shape)
    return move_region(region, x, y, source_size)


def scale_region(
    region: PlaceholderRegion,
    factor: float,
    source_size: SourceSize,
    min_size: int = MIN_PLACEHOLDER_SIZE,
) -> PlaceholderRegion:
    """Multiply width and height by `factor`, then clamp like `resize_region`."""
    if factor <= 0:
        raise ValidationError(f"scale factor must be positive, got {factor}")
    return resize_region(
        region,
        region.width * factor,
        region.height * factor,
        source_size,
        min_size,
    )


def preset_size_region(
    region: PlaceholderRegion,
    fraction: float,
    source_size: SourceSize,
    min_size: int = MIN_PLACEHOLDER_SIZE,
) -> PlaceholderRegion:
    """Make the region a square with side `fraction` of the smaller source side."""
    if not (0.0 < fraction <= 1.0):
        raise ValidationError(f"fraction must be in (0, 1], got {fraction}")
    source_w, source_h = _source_dims(source_size)
    side = min(source_w, source_h) * fraction
    return resize_region(region, side, side, source_size, min_size)


def clamp_region(
    region: PlaceholderRegion,
    source_size: SourceSize,
    min_size: int = MIN_PLACEHOLDER_SIZE,
) -> PlaceholderRegion:
    """Return a region that satisfies every invariant for `source_size`."""
    clamped = resize_region(region, region.width, region.height, source_size, min_size)
    clamped = move_region(clamped, clamped.x, clamped.y, source_size)
    if clamped != region:
        logger.debug(f"Clamped placeholder {region.as_rect()} -> {clamped.as_rect()}")
    return clamped


def validate_region(
    region: PlaceholderRegion,
    source_size: SourceSize,
    min_size: int = MIN_PLACEHOLDER_SIZE,
) -> PlaceholderRegion:
    """
    Check a region against the source bounds and minimum size.

    Returns:
        The region unchanged if it is valid

    Raises:
        ValidationError: Listing every violated invariant
    """
    source_w, source_h = _source_dims(source_size)
    floor_w = min(min_size, source_w)
    floor_h = min(min_size, source_h)

    problems = []
    if region.x < 0:
        problems.append(f"x={region.x} < 0")
    if region.y < 0:
        problems.append(f"y={region.y} < 0")
    if region.x + region.width > source_w:
        problems.append(f"x+width={region.x + region.width} > {source_w}")
    if region.y + region.height > source_h:
        problems.append(f"y+height={region.y + region.height} > {source_h}")
    if region.width < floor_w:
        problems.append(f"width={region.width} < {floor_w}")
    if region.height < floor_h:
        problems.append(f"height={region.height} < {floor_h}")

    if problems:
        raise ValidationError(
            f"Placeholder {region.as_rect()} invalid for source "
            f"{source_w}x{source_h}: " + ", ".join(problems)
        )
    return region
