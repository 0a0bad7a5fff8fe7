"""
Constants and configuration values for Banner Frame.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the compositing engine.
"""

# Placeholder shapes
SHAPE_RECTANGLE = "rectangle"
SHAPE_CIRCLE = "circle"
PLACEHOLDER_SHAPES = (SHAPE_RECTANGLE, SHAPE_CIRCLE)

# Placeholder region sizing
MIN_PLACEHOLDER_SIZE = 50
DEFAULT_REGION_FRACTION = 0.3

# Editor scaling controls
SCALE_DOWN_FACTOR = 0.8
SCALE_UP_FACTOR = 1.2
PRESET_SMALL_FRACTION = 0.2
PRESET_MEDIUM_FRACTION = 0.4
PRESET_LARGE_FRACTION = 0.6

# Preview surface bounds (display space)
DEFAULT_MAX_DISPLAY_WIDTH = 600
DEFAULT_MAX_DISPLAY_HEIGHT = 400

# Photo transform limits
MIN_PHOTO_SCALE = 0.5
MAX_PHOTO_SCALE = 2.0
DEFAULT_PHOTO_SCALE = 1.0
MIN_ROTATION_DEGREES = -180.0
MAX_ROTATION_DEGREES = 180.0

# Image decoding
MAX_IMAGE_BYTES = 10 * 1024 * 1024
WORKING_MODE = "RGBA"

# Export
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_JPEG_QUALITY = 95
POSTER_FILE_SUFFIX = "_poster"
DEFAULT_POSTER_TITLE = "banner"
FILENAME_REPLACEMENT_CHAR = "_"

# Persisted placeholder field names
FIELD_PLACEHOLDER_X = "placeholder_x"
FIELD_PLACEHOLDER_Y = "placeholder_y"
FIELD_PLACEHOLDER_WIDTH = "placeholder_width"
FIELD_PLACEHOLDER_HEIGHT = "placeholder_height"
FIELD_PLACEHOLDER_SHAPE = "placeholder_shape"
FIELD_BANNER_WIDTH = "banner_width"
FIELD_BANNER_HEIGHT = "banner_height"
