"""
Compositing session.

One session covers one visitor run: a banner and its placeholder are
loaded, the visitor supplies a photo, drags/scales/rotates it, and exports
the composite. The session owns its banner, photo and transform state
exclusively; nothing is shared between sessions.

Exports are never interleaved. A second export requested while one is
still running is rejected with ExportInProgressError. The photo transform
is snapshotted when the export starts, so later drags cannot leak into a
render that is already under way.

Classes:
    CompositingSession: Session state plus export entry points
"""

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Dict, Optional, Tuple, Union

from BF_Libs.constants import MIN_PLACEHOLDER_SIZE
from BF_Libs.errors import CompositingError, ExportInProgressError, ValidationError
from BF_Libs.CompositingLib.compositor import CompositeResult, PlaceholderCompositor
from BF_Libs.CompositingLib.export_sink import ExportSink
from BF_Libs.CompositingLib.image_loader import decode_image
from BF_Libs.GeometryLib.coordinate_mapper import to_source
from BF_Libs.GeometryLib.photo_transform import PhotoTransform, PhotoTransformState
from BF_Libs.GeometryLib.placeholder_region import PlaceholderRegion, clamp_region

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class CompositingSession:
    """
    Banner + placeholder + visitor photo, through to one exported raster.

    Pointer methods take local-space points (origin at the placeholder
    center). The *_display variants accept points on a preview surface and
    convert them through the coordinate mapper first.

    Threading: interaction methods must be called from the thread that
    handles input events. Only export() / submit_export() are guarded.

    Example:
        >>> session = CompositingSession(banner_bytes, campaign_row, title="Meetup")
        >>> session.load_photo(photo_bytes)
        >>> session.set_scale(1.3)
        >>> session.pointer_down((0, 0))
        >>> session.pointer_move((25, -10))
        >>> session.pointer_up()
        >>> path = session.export_to(FileExportSink())
    """

    def __init__(
        self,
        banner: Any,
        region: Union[PlaceholderRegion, Dict[str, Any]],
        title: Optional[str] = None,
        min_size: int = MIN_PLACEHOLDER_SIZE,
    ):
        """
        Args:
            banner: Banner as encoded bytes or a PIL Image
            region: PlaceholderRegion or its persisted dict form
            title: Campaign title, used for export filenames
            min_size: Minimum placeholder edge in banner pixels

        Raises:
            DecodeError: If the banner cannot be decoded
            ValidationError: If the persisted region data is malformed
        """
        self.banner = decode_image(banner, label="banner")
        self.title = title
        self.min_size = min_size

        if isinstance(region, dict):
            region = PlaceholderRegion.from_dict(region)
        self.region = clamp_region(region, self.banner.size, min_size)
        if self.region != region:
            logger.warning(
                f"Placeholder {region.as_rect()} does not fit banner "
                f"{self.banner.width}x{self.banner.height}, using {self.region.as_rect()}"
            )

        # The photo is fitted to the placeholder box, so that box is its hit area
        self.photo_state = PhotoTransformState(photo_size=(self.region.width, self.region.height))
        self._export_lock = threading.Lock()

    @property
    def source_size(self) -> Tuple[int, int]:
        return self.banner.size

    @property
    def transform(self) -> PhotoTransform:
        return self.photo_state.transform

    @property
    def has_photo(self) -> bool:
        return self.photo_state.has_photo

    @property
    def is_exporting(self) -> bool:
        return self._export_lock.locked()

    # Photo

    def load_photo(self, photo: Any) -> None:
        """
        Decode and load the visitor's photo, replacing any previous one.

        Raises:
            DecodeError: If the photo cannot be decoded (previous photo kept)
        """
        decoded = decode_image(photo, label="photo")
        self.photo_state.load_photo(decoded)
        logger.debug(f"Loaded photo {decoded.width}x{decoded.height}")

    def clear_photo(self) -> None:
        self.photo_state.clear_photo()

    # Interaction

    def to_local(self, point: Point) -> Point:
        """Convert a banner-space point to placeholder-local space."""
        cx, cy = self.region.center
        return (point[0] - cx, point[1] - cy)

    def display_to_local(self, point: Point, display_size: Tuple[float, float]) -> Point:
        return self.to_local(to_source(point, self.source_size, display_size))

    def pointer_down(self, point: Point) -> bool:
        return self.photo_state.pointer_down(point)

    def pointer_move(self, point: Point) -> bool:
        return self.photo_state.pointer_move(point)

    def pointer_down_display(self, point: Point, display_size: Tuple[float, float]) -> bool:
        return self.pointer_down(self.display_to_local(point, display_size))

    def pointer_move_display(self, point: Point, display_size: Tuple[float, float]) -> bool:
        return self.pointer_move(self.display_to_local(point, display_size))

    def pointer_up(self) -> None:
        self.photo_state.pointer_up()

    def pointer_leave(self) -> None:
        self.photo_state.pointer_leave()

    def set_scale(self, value: float) -> PhotoTransform:
        return self.photo_state.set_scale(value)

    def set_rotation(self, degrees: float) -> PhotoTransform:
        return self.photo_state.set_rotation(degrees)

    def reset(self) -> PhotoTransform:
        return self.photo_state.reset()

    # Export

    def export(self, output_mode: str = "RGBA") -> CompositeResult:
        """
        Render the composite from the current state.

        Raises:
            ExportInProgressError: If another export is still running
            ValidationError: If no photo has been loaded
            DecodeError, RenderError: If rendering fails (nothing is produced)
        """
        photo, transform = self._begin_export()
        try:
            return self._render(photo, transform, output_mode)
        finally:
            self._export_lock.release()

    def export_to(self, sink: ExportSink, output_mode: str = "RGBA") -> Any:
        """Render the composite and hand it to `sink`; returns the sink's location."""
        photo, transform = self._begin_export()
        try:
            result = self._render(photo, transform, output_mode)
            return sink.export(result, self.title)
        finally:
            self._export_lock.release()

    def submit_export(
        self,
        executor: Executor,
        sink: Optional[ExportSink] = None,
        output_mode: str = "RGBA",
    ) -> Future:
        """
        Run an export on `executor`.

        State is snapshotted before this returns, so the caller may keep
        handling input while the render runs. The future resolves to the
        CompositeResult, or to the sink's location when a sink is given.
        Cancelling the future before it starts releases the session.

        Raises:
            ExportInProgressError: If another export is still running
        """
        photo, transform = self._begin_export()

        def run() -> Any:
            try:
                result = self._render(photo, transform, output_mode)
                if sink is None:
                    return result
                return sink.export(result, self.title)
            finally:
                self._export_lock.release()

        try:
            future = executor.submit(run)
        except Exception:
            self._export_lock.release()
            raise
        # A future cancelled before it started never runs `run`
        future.add_done_callback(self._release_if_cancelled)
        return future

    def _release_if_cancelled(self, future: Future) -> None:
        if future.cancelled():
            logger.debug("Queued export cancelled before it started")
            self._export_lock.release()

    def _begin_export(self) -> Tuple[Any, PhotoTransform]:
        if not self._export_lock.acquire(blocking=False):
            logger.warning("Export requested while another export is running; rejected")
            raise ExportInProgressError("An export is already in progress")

        if not self.photo_state.has_photo:
            self._export_lock.release()
            raise ValidationError("Upload a photo before exporting")

        return self.photo_state.photo, self.photo_state.snapshot()

    def _render(self, photo: Any, transform: PhotoTransform, output_mode: str) -> CompositeResult:
        try:
            return PlaceholderCompositor.render(
                self.banner,
                self.region,
                photo,
                transform,
                output_mode=output_mode,
                min_size=self.min_size,
            )
        except CompositingError as e:
            logger.error(f"Export failed: {e}")
            raise
