"""
Error kinds raised by the Banner Frame compositing engine.

Classes:
    CompositingError: Base class for all engine errors
    ValidationError: Region geometry, shape or transform value is invalid
    DecodeError: Source or overlay image bytes cannot be decoded
    RenderError: Drawing or encoding backend failed during a render
    ExportInProgressError: An export was requested while another is running
"""


class CompositingError(Exception):
    """Base class for compositing engine errors."""


class ValidationError(CompositingError, ValueError):
    """Placeholder geometry or transform value violates an invariant.

    Interactive edits clamp instead of raising, so this only surfaces from
    explicit validation or from malformed persisted data.
    """


class DecodeError(CompositingError, IOError):
    """Image bytes could not be decoded into a raster."""


class RenderError(CompositingError, RuntimeError):
    """The drawing backend failed while producing a composite."""


class ExportInProgressError(CompositingError):
    """A second export was requested while one is still outstanding."""
