"""
GeometryLib - Pure geometry for the placeholder compositing engine

This module provides coordinate mapping between source and display space,
the placeholder region model and the photo transform state machine.
"""

from BF_Libs.GeometryLib.coordinate_mapper import (
    fit_display_size,
    rect_to_display,
    rect_to_source,
    scale_factors,
    to_display,
    to_source,
)
from BF_Libs.GeometryLib.placeholder_region import (
    PlaceholderRegion,
    center_region,
    clamp_region,
    create_region,
    move_region,
    preset_size_region,
    resize_region,
    scale_region,
    set_region_shape,
    validate_region,
)
from BF_Libs.GeometryLib.photo_transform import (
    STATE_DRAGGING,
    STATE_IDLE,
    PhotoTransform,
    PhotoTransformState,
    apply_drag,
    drag_offset,
    local_to_source_matrix,
    photo_contains,
    with_rotation,
    with_scale,
)

__all__ = [
    "fit_display_size",
    "rect_to_display",
    "rect_to_source",
    "scale_factors",
    "to_display",
    "to_source",
    "PlaceholderRegion",
    "center_region",
    "clamp_region",
    "create_region",
    "move_region",
    "preset_size_region",
    "resize_region",
    "scale_region",
    "set_region_shape",
    "validate_region",
    "STATE_DRAGGING",
    "STATE_IDLE",
    "PhotoTransform",
    "PhotoTransformState",
    "apply_drag",
    "drag_offset",
    "local_to_source_matrix",
    "photo_contains",
    "with_rotation",
    "with_scale",
]
