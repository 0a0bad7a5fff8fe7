"""
Placeholder Compositor.

Renders a visitor's photo into the placeholder of a banner at full banner
resolution. The steps run in a fixed order; swapping any two of them
changes the picture:

    1. allocate an output raster the size of the banner
    2. draw the banner unscaled at (0, 0)
    3. move the origin to the placeholder center
    4. rotate, then scale, then translate the photo in that local space
    5. clip to the placeholder (rectangle, or inscribed circle) which stays
       fixed while the photo moves underneath it
    6. the photo is first resized to exactly the placeholder box
    7. flatten onto the output

Both images are decoded before any drawing starts, so a DecodeError never
leaves a half-drawn raster behind.

Example:
    >>> result = PlaceholderCompositor.render(
    ...     banner_bytes,
    ...     PlaceholderRegion(400, 200, 200, 200, "circle"),
    ...     photo_bytes,
    ...     PhotoTransform(scale=1.2, rotation_degrees=15),
    ... )
    >>> png_bytes = result.encode("PNG")
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional, Tuple

import numpy as np

from BF_Libs.constants import DEFAULT_JPEG_QUALITY, DEFAULT_OUTPUT_FORMAT, MIN_PLACEHOLDER_SIZE
from BF_Libs.errors import CompositingError, RenderError, ValidationError
from BF_Libs.CompositingLib.image_loader import decode_image
from BF_Libs.GeometryLib.photo_transform import PhotoTransform, local_to_source_matrix
from BF_Libs.GeometryLib.placeholder_region import PlaceholderRegion, validate_region
from BF_Libs.pillow_compat import Image, ImageChops

logger = logging.getLogger(__name__)

OUTPUT_MODES = ("RGBA", "RGB")
TRANSPARENT = (0, 0, 0, 0)


def get_save_kwargs(image_format: str, quality: int = DEFAULT_JPEG_QUALITY) -> Dict[str, Any]:
    """Get PIL Image.save() kwargs for an output format."""
    # PIL uses "JPEG" not "JPG"
    save_format = image_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"

    kwargs: Dict[str, Any] = {"format": save_format}
    if save_format == "JPEG":
        kwargs["quality"] = max(1, min(100, quality))
    return kwargs


def encode_image(
    image: Any,
    image_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """
    Encode a raster to bytes.

    Raises:
        RenderError: If the backend cannot encode the image in this format
    """
    kwargs = get_save_kwargs(image_format, quality)
    # JPEG has no alpha channel
    if image.mode == "RGBA" and kwargs["format"] == "JPEG":
        image = image.convert("RGB")

    buffer = BytesIO()
    try:
        image.save(buffer, **kwargs)
    except (KeyError, OSError, ValueError) as e:
        raise RenderError(f"Failed to encode composite as {kwargs['format']}: {str(e)}") from e
    return buffer.getvalue()


@dataclass(frozen=True)
class CompositeResult:
    """A finished composite.

    Attributes:
        image: PIL Image at exactly the banner size
        region: Placeholder the photo was clipped to
        transform: Photo transform snapshot used for the render
    """
    image: Any
    region: PlaceholderRegion
    transform: PhotoTransform

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def encode(
        self,
        image_format: str = DEFAULT_OUTPUT_FORMAT,
        quality: int = DEFAULT_JPEG_QUALITY,
    ) -> bytes:
        return encode_image(self.image, image_format, quality)


class PlaceholderCompositor:
    """Renders a photo into a banner placeholder."""

    @staticmethod
    def render(
        source_image: Any,
        region: PlaceholderRegion,
        overlay_photo: Any,
        photo_transform: Optional[PhotoTransform] = None,
        output_mode: str = "RGBA",
        min_size: int = MIN_PLACEHOLDER_SIZE,
    ) -> CompositeResult:
        """
        Composite the photo into the placeholder.

        Args:
            source_image: Banner as encoded bytes or a PIL Image
            region: Placeholder in banner pixels
            overlay_photo: Photo as encoded bytes or a PIL Image
            photo_transform: Photo placement (default transform if None)
            output_mode: 'RGBA' or 'RGB'
            min_size: Minimum placeholder edge used when validating the region

        Returns:
            CompositeResult with an image the size of the banner

        Raises:
            DecodeError: If either image cannot be decoded
            ValidationError: If the region does not fit the banner or
                             output_mode or photo_transform is unsupported
            RenderError: If drawing fails
        """
        if output_mode not in OUTPUT_MODES:
            raise ValidationError(f"Unsupported output_mode: {output_mode}")

        if photo_transform is not None and not isinstance(photo_transform, PhotoTransform):
            raise ValidationError(
                f"photo_transform must be a PhotoTransform, got {type(photo_transform).__name__}"
            )
        transform = photo_transform or PhotoTransform()

        # Decode everything up front: all-or-nothing
        banner = decode_image(source_image, label="banner")
        photo = decode_image(overlay_photo, label="photo")
        validate_region(region, banner.size, min_size)

        try:
            output = PlaceholderCompositor._draw(banner, region, photo, transform)
            if output_mode != "RGBA":
                output = output.convert(output_mode)
        except CompositingError:
            raise
        except Exception as e:
            raise RenderError(f"Failed to render composite: {str(e)}") from e

        logger.debug(
            f"Rendered {output.width}x{output.height} composite, "
            f"placeholder {region.as_rect()} {region.shape}, transform {transform}"
        )
        return CompositeResult(image=output, region=region, transform=transform)

    @staticmethod
    def render_bytes(
        source_image: Any,
        region: PlaceholderRegion,
        overlay_photo: Any,
        photo_transform: Optional[PhotoTransform] = None,
        image_format: str = DEFAULT_OUTPUT_FORMAT,
        quality: int = DEFAULT_JPEG_QUALITY,
        output_mode: str = "RGBA",
        min_size: int = MIN_PLACEHOLDER_SIZE,
    ) -> bytes:
        """Render and encode in one call. Arguments as for `render`."""
        result = PlaceholderCompositor.render(
            source_image,
            region,
            overlay_photo,
            photo_transform,
            output_mode=output_mode,
            min_size=min_size,
        )
        return result.encode(image_format, quality)

    @staticmethod
    def _draw(
        banner: Any,
        region: PlaceholderRegion,
        photo: Any,
        transform: PhotoTransform,
    ) -> Any:
        # Steps 1-2
        output = Image.new("RGBA", banner.size, TRANSPARENT)
        output.paste(banner, (0, 0))

        # Step 6 happens in photo space, before the transform
        fitted = photo.resize((region.width, region.height), Image.Resampling.LANCZOS)

        # Steps 3-4
        coefficients = PlaceholderCompositor._inverse_affine(region, transform)
        layer = fitted.transform(
            banner.size,
            Image.Transform.AFFINE,
            data=coefficients,
            resample=Image.Resampling.BILINEAR,
            fillcolor=TRANSPARENT,
        )

        # Step 5
        clip = PlaceholderCompositor.build_clip_mask(region, banner.size)
        layer.putalpha(ImageChops.multiply(layer.getchannel("A"), clip))

        # Step 7
        return Image.alpha_composite(output, layer)

    @staticmethod
    def _inverse_affine(
        region: PlaceholderRegion,
        transform: PhotoTransform,
    ) -> Tuple[float, ...]:
        """
        Coefficients for Image.transform(AFFINE).

        Pillow maps each output pixel back into the input, so the forward
        photo-pixel -> banner-pixel matrix is inverted.
        """
        to_local = np.array([
            [1.0, 0.0, -region.width / 2.0],
            [0.0, 1.0, -region.height / 2.0],
            [0.0, 0.0, 1.0],
        ])
        forward = local_to_source_matrix(transform, region.center) @ to_local
        inverse = np.linalg.inv(forward)
        return tuple(float(v) for v in inverse[:2, :].ravel())

    @staticmethod
    def build_clip_mask(region: PlaceholderRegion, size: Tuple[int, int]) -> Any:
        """
        Build the placeholder clip as an 'L' mask the size of the banner.

        Pixels whose centers fall inside the placeholder are 255, all others
        0. A circle uses radius min(width, height) / 2 about the box center.
        """
        mask = Image.new("L", size, 0)

        if region.is_circle:
            ys, xs = np.mgrid[0:region.height, 0:region.width]
            dx = xs + 0.5 - region.width / 2.0
            dy = ys + 0.5 - region.height / 2.0
            inside = (dx * dx + dy * dy) <= region.clip_radius ** 2
            box = Image.fromarray((inside * 255).astype(np.uint8))
        else:
            box = Image.new("L", (region.width, region.height), 255)

        mask.paste(box, (region.x, region.y))
        return mask


def render_composite(
    source_image: Any,
    region: PlaceholderRegion,
    overlay_photo: Any,
    photo_transform: Optional[PhotoTransform] = None,
    output_mode: str = "RGBA",
) -> CompositeResult:
    """Module-level shortcut for PlaceholderCompositor.render()."""
    return PlaceholderCompositor.render(
        source_image, region, overlay_photo, photo_transform, output_mode
    )
