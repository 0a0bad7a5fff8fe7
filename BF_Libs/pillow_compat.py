"""
Compatibility wrapper around Pillow (which provides the `PIL` namespace).

Loads the Pillow modules used by the compositing engine via importlib and
re-exports them, so the rest of the package imports `Image`, `ImageChops`
and `UnidentifiedImageError` from one place.
"""
from importlib import import_module
from types import ModuleType


def _import(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as e:
        raise ImportError(
            "pillow (PIL) is required: install with 'pip install Pillow'"
        ) from e


_pil = _import("PIL")

Image = _import("PIL.Image")
ImageChops = _import("PIL.ImageChops")

# Raised by Image.open() when the bytes are not a known format
UnidentifiedImageError = getattr(_pil, "UnidentifiedImageError")
