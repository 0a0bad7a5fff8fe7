"""
Placeholder editor controller.

Lets an operator place the photo placeholder on a banner while looking at a
scaled-down preview. Pointer events arrive in display space; the region is
kept in source space and every edit, dragged or typed, goes through the
same clamping operations of the region model.

The controller has no GUI dependency so it can be driven from tests or from
any toolkit; PlaceholderEditorWindow wraps it in a PyQt5 widget.

Classes:
    PlaceholderEditor: Region editing controller with change listeners
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from BF_Libs.constants import (
    DEFAULT_MAX_DISPLAY_HEIGHT,
    DEFAULT_MAX_DISPLAY_WIDTH,
    FIELD_BANNER_HEIGHT,
    FIELD_BANNER_WIDTH,
    MIN_PLACEHOLDER_SIZE,
)
from BF_Libs.GeometryLib.coordinate_mapper import (
    fit_display_size,
    rect_to_display,
    scale_factors,
    to_source,
)
from BF_Libs.GeometryLib.placeholder_region import (
    PlaceholderRegion,
    create_region,
    move_region,
    preset_size_region,
    resize_region,
    scale_region,
    set_region_shape,
)

logger = logging.getLogger(__name__)

RegionListener = Callable[[PlaceholderRegion], None]
DisplayPoint = Tuple[float, float]


class PlaceholderEditor:
    """
    Interactive editor for a PlaceholderRegion.

    Example:
        >>> editor = PlaceholderEditor(banner, max_display_size=(600, 400))
        >>> editor.add_listener(lambda region: print(region))
        >>> if editor.pointer_down((120, 80)):
        ...     editor.pointer_move((160, 90))
        ...     editor.pointer_up()
        >>> editor.set_width(300)
        >>> saved = editor.to_dict()
    """

    def __init__(
        self,
        source: Any,
        region: Optional[PlaceholderRegion] = None,
        max_display_size: Tuple[float, float] = (
            DEFAULT_MAX_DISPLAY_WIDTH,
            DEFAULT_MAX_DISPLAY_HEIGHT,
        ),
        min_size: int = MIN_PLACEHOLDER_SIZE,
    ):
        """
        Args:
            source: Source image (anything with a `size`) or a (width, height) tuple
            region: Previously saved region, clamped into the source if needed
            max_display_size: Bounds of the preview surface
            min_size: Minimum placeholder edge in source pixels
        """
        size = source.size if hasattr(source, "size") else source
        self.source_size: Tuple[int, int] = (int(size[0]), int(size[1]))
        self.min_size = min_size
        self.display_size = fit_display_size(self.source_size, max_display_size)

        self._region = create_region(self.source_size, initial=region, min_size=min_size)
        self._listeners: List[RegionListener] = []
        self._dragging = False
        self._drag_offset: DisplayPoint = (0.0, 0.0)

        if region is not None and self._region != region:
            logger.warning(
                f"Saved placeholder {region.as_rect()} did not fit "
                f"{self.source_size[0]}x{self.source_size[1]}, "
                f"clamped to {self._region.as_rect()}"
            )

    @property
    def region(self) -> PlaceholderRegion:
        return self._region

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def display_rect(self) -> Tuple[float, float, float, float]:
        """Current region as (x, y, width, height) in display space."""
        return rect_to_display(self._region.as_rect(), self.source_size, self.display_size)

    def hit_test(self, point: DisplayPoint) -> bool:
        """Check whether a display-space point is inside the placeholder box."""
        x, y, width, height = self.display_rect()
        return x <= point[0] <= x + width and y <= point[1] <= y + height

    def set_display_size(self, display_size: Tuple[float, float]) -> None:
        """Change the preview surface size; the region itself is untouched."""
        scale_factors(self.source_size, display_size)
        self.display_size = (float(display_size[0]), float(display_size[1]))

    # Listeners

    def add_listener(self, listener: RegionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: RegionListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    # Pointer interaction (display space)

    def pointer_down(self, point: DisplayPoint) -> bool:
        """
        Begin moving the placeholder if the pointer is inside it.

        Returns:
            True if a move started
        """
        if not self.hit_test(point):
            return False
        x, y, _, _ = self.display_rect()
        self._drag_offset = (point[0] - x, point[1] - y)
        self._dragging = True
        logger.debug(f"Placeholder drag started at display {point}")
        return True

    def pointer_move(self, point: DisplayPoint) -> bool:
        """
        Move the placeholder so it keeps its offset to the pointer.

        Returns:
            True if the region changed
        """
        if not self._dragging:
            return False
        origin = (point[0] - self._drag_offset[0], point[1] - self._drag_offset[1])
        source_x, source_y = to_source(origin, self.source_size, self.display_size)
        return self._set_region(
            move_region(self._region, source_x, source_y, self.source_size)
        )

    def pointer_up(self) -> None:
        if self._dragging:
            logger.debug(f"Placeholder drag committed at {self._region.as_rect()}")
        self._dragging = False

    def pointer_leave(self) -> None:
        self.pointer_up()

    # Typed edits (source space)

    def set_x(self, value: float) -> bool:
        return self._set_region(
            move_region(self._region, value, self._region.y, self.source_size)
        )

    def set_y(self, value: float) -> bool:
        return self._set_region(
            move_region(self._region, self._region.x, value, self.source_size)
        )

    def set_position(self, x: float, y: float) -> bool:
        return self._set_region(move_region(self._region, x, y, self.source_size))

    def set_width(self, value: float) -> bool:
        return self._set_region(resize_region(
            self._region, value, self._region.height, self.source_size, self.min_size
        ))

    def set_height(self, value: float) -> bool:
        return self._set_region(resize_region(
            self._region, self._region.width, value, self.source_size, self.min_size
        ))

    def set_size(self, width: float, height: float) -> bool:
        return self._set_region(resize_region(
            self._region, width, height, self.source_size, self.min_size
        ))

    def set_shape(self, shape: str) -> bool:
        return self._set_region(set_region_shape(self._region, shape))

    def scale_by(self, factor: float) -> bool:
        """Scale the box by `factor` (e.g. 0.8 or 1.2), clamped."""
        return self._set_region(
            scale_region(self._region, factor, self.source_size, self.min_size)
        )

    def apply_preset(self, fraction: float) -> bool:
        """Make the box a square of `fraction` of the smaller source side."""
        return self._set_region(
            preset_size_region(self._region, fraction, self.source_size, self.min_size)
        )

    def reset_to_center(self) -> bool:
        """Restore the default-sized box centered in the source, keeping the shape."""
        return self._set_region(create_region(
            self.source_size, shape=self._region.shape, min_size=self.min_size
        ))

    def to_dict(self) -> Dict[str, Any]:
        """Region plus banner size, in the persisted field layout."""
        data = self._region.to_dict()
        data[FIELD_BANNER_WIDTH] = self.source_size[0]
        data[FIELD_BANNER_HEIGHT] = self.source_size[1]
        return data

    def _set_region(self, region: PlaceholderRegion) -> bool:
        if region == self._region:
            return False
        self._region = region
        for listener in list(self._listeners):
            listener(region)
        return True
