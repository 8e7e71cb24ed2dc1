"""
Constants and configuration values for Image Render Flow.
Centralizes all magic numbers and option ranges.
"""


class RenderConstants:
    """Ranges and defaults for render options."""

    # Filters (identity values are the defaults)
    GRAYSCALE_MIN = 0.0
    GRAYSCALE_MAX = 1.0
    BLUR_MIN = 0.0
    BLUR_MAX = 30.0
    PERCENT_MIN = 0.0
    PERCENT_MAX = 300.0
    PERCENT_IDENTITY = 100.0

    # Sharpen
    SHARPEN_MIN = 0.0
    SHARPEN_MAX = 3.0

    # Rotation
    RIGHT_ANGLE = 90
    HALF_TURN = 180


class WatermarkConstants:
    """Watermark ranges, defaults and shadow styling."""

    OPACITY_DEFAULT = 0.35
    OPACITY_MIN = 0.0
    OPACITY_MAX = 1.0

    PADDING_DEFAULT = 18.0
    PADDING_MIN = 0.0
    PADDING_MAX = 80.0

    TEXT_SIZE_DEFAULT = 28.0
    TEXT_SIZE_MIN = 8.0
    TEXT_SIZE_MAX = 240.0
    TEXT_COLOR_DEFAULT = "#ffffff"
    TEXT_ROTATE_DEFAULT = -18.0

    IMAGE_SCALE_DEFAULT = 0.25
    IMAGE_SCALE_MIN = 0.05
    IMAGE_SCALE_MAX = 1.0

    # Drop shadow: canvas shadowBlur of 8 is a Gaussian with sigma 4
    SHADOW_BLUR = 8.0
    SHADOW_ALPHA = 0.45


class OutputConstants:
    """Encoder defaults."""

    DEFAULT_MIME = "image/png"
    FALLBACK_MIME = "image/png"
    DEFAULT_QUALITY = 0.85
    QUALITY_MIN = 0.05
    QUALITY_MAX = 1.0
    DEFAULT_BACKGROUND = "#ffffff"

    # Pillow format names per normalized mime type
    PIL_FORMATS = {
        "image/png": "PNG",
        "image/jpeg": "JPEG",
        "image/webp": "WEBP",
        "image/avif": "AVIF",
        "image/bmp": "BMP",
    }
    MIME_ALIASES = {
        "image/jpg": "image/jpeg",
        "image/pjpeg": "image/jpeg",
        "image/x-png": "image/png",
        "image/x-ms-bmp": "image/bmp",
    }
    # Formats without an alpha channel get a solid background fill
    OPAQUE_MIMES = frozenset({"image/jpeg"})
    EXTENSIONS = {
        "image/png": "png",
        "image/jpeg": "jpg",
        "image/webp": "webp",
        "image/avif": "avif",
        "image/bmp": "bmp",
    }


class BatchConstants:
    """Batch processing limits."""

    DEFAULT_MAX_WORKERS = 1
    MAX_WORKERS_LIMIT = 16
    MAX_BATCH_ITEMS = 500
    ZIP_COMPRESSION_LEVEL = 6
    DEFAULT_ITEM_NAME = "image"
