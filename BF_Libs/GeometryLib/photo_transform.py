"""
Photo transform model and interaction state machine.

The visitor's photo is placed in the placeholder's local space: the origin
is the placeholder center, axes are aligned with the banner. The photo is
rotated, then uniformly scaled about that origin, and finally translated,
so a drag always moves the photo along the screen axes whatever its
rotation or scale.

Threading: a PhotoTransformState has a single owner. Pointer events,
set_scale(), set_rotation() and reset() must all be called from the thread
that drives the pointer events; calling them from another thread requires
external synchronization.

Classes:
    PhotoTransform: Immutable transform value
    PhotoTransformState: Idle/dragging state machine around a PhotoTransform

Functions:
    with_scale: Return a transform with a clamped scale
    with_rotation: Return a transform with a clamped rotation
    drag_offset: Pointer offset from the current translation
    apply_drag: Transform translated to follow the pointer
    photo_contains: Hit-test a local point against the transformed photo
    local_to_source_matrix: 3x3 affine matrix from photo space to source space
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

import numpy as np

from BF_Libs.constants import (
    DEFAULT_PHOTO_SCALE,
    MAX_PHOTO_SCALE,
    MAX_ROTATION_DEGREES,
    MIN_PHOTO_SCALE,
    MIN_ROTATION_DEGREES,
)
from BF_Libs.errors import ValidationError

logger = logging.getLogger(__name__)

LocalPoint = Tuple[float, float]

STATE_IDLE = "idle"
STATE_DRAGGING = "dragging"


@dataclass(frozen=True)
class PhotoTransform:
    """Photo placement in local space.

    Attributes:
        translate_x: Horizontal displacement of the photo center (pixels)
        translate_y: Vertical displacement of the photo center (pixels)
        scale: Uniform scale, 0.5-2.0
        rotation_degrees: Clockwise rotation, -180 to 180
    """
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = DEFAULT_PHOTO_SCALE
    rotation_degrees: float = 0.0

    def __post_init__(self):
        values = (self.translate_x, self.translate_y, self.scale, self.rotation_degrees)
        if not all(math.isfinite(value) for value in values):
            raise ValidationError(f"Photo transform values must be finite, got {values}")
        if not MIN_PHOTO_SCALE <= self.scale <= MAX_PHOTO_SCALE:
            raise ValidationError(
                f"Photo scale must be within [{MIN_PHOTO_SCALE}, {MAX_PHOTO_SCALE}], "
                f"got {self.scale}"
            )
        if not MIN_ROTATION_DEGREES <= self.rotation_degrees <= MAX_ROTATION_DEGREES:
            raise ValidationError(
                f"Photo rotation must be within [{MIN_ROTATION_DEGREES}, "
                f"{MAX_ROTATION_DEGREES}] degrees, got {self.rotation_degrees}"
            )

    @property
    def translate(self) -> LocalPoint:
        return (self.translate_x, self.translate_y)

    def is_identity(self) -> bool:
        return self == PhotoTransform()


def _clamp(value: float, low: float, high: float) -> float:
    value = float(value)
    if math.isnan(value):
        raise ValidationError("Photo transform values must be finite, got nan")
    return max(low, min(high, value))


def with_scale(transform: PhotoTransform, value: float) -> PhotoTransform:
    """Return `transform` with scale clamped to [0.5, 2.0]."""
    return replace(transform, scale=_clamp(value, MIN_PHOTO_SCALE, MAX_PHOTO_SCALE))


def with_rotation(transform: PhotoTransform, degrees: float) -> PhotoTransform:
    """Return `transform` with rotation clamped to [-180, 180] degrees."""
    return replace(
        transform,
        rotation_degrees=_clamp(degrees, MIN_ROTATION_DEGREES, MAX_ROTATION_DEGREES),
    )


def drag_offset(transform: PhotoTransform, pointer: LocalPoint) -> LocalPoint:
    """Offset of the pointer from the photo's current translation."""
    return (pointer[0] - transform.translate_x, pointer[1] - transform.translate_y)


def apply_drag(
    transform: PhotoTransform,
    pointer: LocalPoint,
    offset: LocalPoint,
) -> PhotoTransform:
    """Translate the photo so it keeps `offset` to the pointer. Unbounded."""
    return replace(
        transform,
        translate_x=pointer[0] - offset[0],
        translate_y=pointer[1] - offset[1],
    )


def photo_contains(
    transform: PhotoTransform,
    photo_size: Tuple[float, float],
    pointer: LocalPoint,
) -> bool:
    """
    Hit-test a local-space point against the transformed photo.

    The pointer is carried back through translate, rotation and scale into
    the photo's own frame, where the photo is a box centered on the origin.

    Args:
        transform: Photo transform
        photo_size: (width, height) of the photo before scale and rotation
        pointer: Point in local space

    Returns:
        True if the point lies on the photo (edges included)
    """
    dx = pointer[0] - transform.translate_x
    dy = pointer[1] - transform.translate_y
    theta = math.radians(transform.rotation_degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    px = (cos_t * dx + sin_t * dy) / transform.scale
    py = (-sin_t * dx + cos_t * dy) / transform.scale
    # Tolerance absorbs rounding from the rotation at exact edges
    return (
        abs(px) <= photo_size[0] / 2 + 1e-9
        and abs(py) <= photo_size[1] / 2 + 1e-9
    )


def local_to_source_matrix(
    transform: PhotoTransform,
    center: Tuple[float, float],
) -> np.ndarray:
    """
    Build the forward affine matrix for a photo transform.

    A point p of the unrotated, unscaled photo (centered on the origin) lands
    in source space at:

        q = center + translate + R(rotation) @ (scale * p)

    Args:
        transform: Photo transform
        center: Placeholder center in source space

    Returns:
        3x3 homogeneous matrix mapping local photo points to source space
    """
    theta = math.radians(transform.rotation_degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    rotate = np.array([
        [cos_t, -sin_t, 0.0],
        [sin_t, cos_t, 0.0],
        [0.0, 0.0, 1.0],
    ])
    scale = np.diag([transform.scale, transform.scale, 1.0])
    translate = np.array([
        [1.0, 0.0, center[0] + transform.translate_x],
        [0.0, 1.0, center[1] + transform.translate_y],
        [0.0, 0.0, 1.0],
    ])
    # Rightmost factor is applied first: scale, then rotate, then translate
    return translate @ rotate @ scale


class PhotoTransformState:
    """
    Interaction state machine for the overlay photo.

    States:
        idle: no pointer interaction in progress
        dragging: pointer is down on the photo, moves update the translation

    Pointer coordinates are given in local space (placeholder-center origin).
    When `photo_size` is known, a press only starts a drag if it lands on the
    transformed photo; without it every press while a photo is loaded does.

    Example:
        >>> state = PhotoTransformState()
        >>> state.load_photo(photo)
        >>> state.pointer_down((10, 10))
        >>> state.pointer_move((30, 5))
        >>> state.pointer_up()
        >>> state.transform.translate
        (20.0, -5.0)
    """

    def __init__(
        self,
        transform: Optional[PhotoTransform] = None,
        photo_size: Optional[Tuple[float, float]] = None,
    ):
        self._transform = transform or PhotoTransform()
        self.photo_size = photo_size
        self._state = STATE_IDLE
        self._offset: LocalPoint = (0.0, 0.0)
        self._photo: Optional[Any] = None

    @property
    def transform(self) -> PhotoTransform:
        return self._transform

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state == STATE_DRAGGING

    @property
    def photo(self) -> Optional[Any]:
        return self._photo

    @property
    def has_photo(self) -> bool:
        return self._photo is not None

    def load_photo(self, photo: Any) -> None:
        """Replace the overlay photo. The current transform is kept."""
        self._photo = photo
        self._end_drag()

    def clear_photo(self) -> None:
        """Release the photo and restore the default transform."""
        self._photo = None
        self.reset()

    def pointer_down(self, pointer: LocalPoint) -> bool:
        """
        Start dragging the photo.

        Returns:
            True if a drag started, False if there is no photo to drag or
            the press missed it
        """
        if self._photo is None:
            return False
        if self.photo_size is not None and not photo_contains(
            self._transform, self.photo_size, pointer
        ):
            return False
        self._offset = drag_offset(self._transform, pointer)
        self._state = STATE_DRAGGING
        logger.debug(f"Photo drag started at {pointer}, offset {self._offset}")
        return True

    def pointer_move(self, pointer: LocalPoint) -> bool:
        """
        Follow the pointer while dragging.

        Returns:
            True if the transform changed
        """
        if self._state != STATE_DRAGGING:
            return False
        updated = apply_drag(self._transform, pointer, self._offset)
        if updated == self._transform:
            return False
        self._transform = updated
        return True

    def pointer_up(self) -> None:
        self._end_drag()

    def pointer_leave(self) -> None:
        self._end_drag()

    def set_scale(self, value: float) -> PhotoTransform:
        self._transform = with_scale(self._transform, value)
        return self._transform

    def set_rotation(self, degrees: float) -> PhotoTransform:
        self._transform = with_rotation(self._transform, degrees)
        return self._transform

    def reset(self) -> PhotoTransform:
        """Restore the default transform; the loaded photo is kept."""
        self._end_drag()
        self._transform = PhotoTransform()
        return self._transform

    def snapshot(self) -> PhotoTransform:
        """Return the current transform value for rendering."""
        return self._transform

    def _end_drag(self) -> None:
        if self._state == STATE_DRAGGING:
            logger.debug(f"Photo drag ended at translate {self._transform.translate}")
        self._state = STATE_IDLE
        self._offset = (0.0, 0.0)
