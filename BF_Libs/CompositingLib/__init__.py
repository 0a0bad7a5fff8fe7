"""
CompositingLib - Photo-into-banner compositing

This module provides image decoding, the placeholder compositor, the
per-visitor compositing session and export sinks.
"""

from BF_Libs.CompositingLib.image_loader import decode_image, load_image_file
from BF_Libs.CompositingLib.compositor import (
    CompositeResult,
    PlaceholderCompositor,
    encode_image,
    render_composite,
)
from BF_Libs.CompositingLib.export_sink import (
    ExportSink,
    ExportSinkConfig,
    FileExportSink,
    UploadExportSink,
    poster_filename,
)
from BF_Libs.CompositingLib.compositing_session import CompositingSession

__all__ = [
    "decode_image",
    "load_image_file",
    "CompositeResult",
    "PlaceholderCompositor",
    "encode_image",
    "render_composite",
    "ExportSink",
    "ExportSinkConfig",
    "FileExportSink",
    "UploadExportSink",
    "poster_filename",
    "CompositingSession",
]
