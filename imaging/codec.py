"""
Raster codec: the boundary between encoded image bytes and RGBA rasters.

Decoding and encoding are delegated to Pillow; this module owns mime type
normalization, quality mapping and the single lossless fallback.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from core.constants import OutputConstants
from core.exceptions import DecodeFailure, EncodeFailure
from core.image.converters import ImageConverters
from core.utils.numeric import clamp, parse_number, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class EncodedImage:
    """Compressed output plus the mime type actually produced."""

    data: bytes
    mime_type: str
    width: int
    height: int


class RasterCodec:
    """Pillow backed decoder/encoder."""

    @staticmethod
    def normalize_mime(mime_type: Optional[str]) -> str:
        """
        Normalize a requested output mime type.

        Aliases map to their canonical type; anything unrecognized becomes
        the lossless fallback (image/png).

        Example:
            >>> RasterCodec.normalize_mime("IMAGE/JPG")
            'image/jpeg'
        """
        mime = str(mime_type or "").strip().lower()
        mime = OutputConstants.MIME_ALIASES.get(mime, mime)
        if mime in OutputConstants.PIL_FORMATS:
            return mime
        return OutputConstants.FALLBACK_MIME

    @staticmethod
    def extension_for(mime_type: Optional[str]) -> str:
        """File extension (without dot) for an output mime type."""
        return OutputConstants.EXTENSIONS[RasterCodec.normalize_mime(mime_type)]

    @staticmethod
    def quality_to_pil(quality: float) -> int:
        """Map a 0.05-1 quality to Pillow's 1-100 scale."""
        q = clamp(
            parse_number(quality, OutputConstants.DEFAULT_QUALITY),
            OutputConstants.QUALITY_MIN,
            OutputConstants.QUALITY_MAX,
        )
        return int(clamp(round_half_up(q * 100), 1, 100))

    def decode(self, data: bytes) -> np.ndarray:
        """
        Decode image bytes into an RGBA raster.

        Args:
            data: Encoded image bytes

        Returns:
            RGBA raster with the EXIF orientation applied

        Raises:
            DecodeFailure: If the bytes are empty or not a loadable image
        """
        if not data:
            raise DecodeFailure("Source image is empty")

        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                raster = ImageConverters.pil_to_rgba(image)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise DecodeFailure(f"Unsupported or unrecognized image: {e}")
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeFailure(f"Failed to decode image: {e}")

        if raster.shape[0] < 1 or raster.shape[1] < 1:
            raise DecodeFailure("Decoded image has no pixels")

        return raster

    def _encode_as(self, raster: np.ndarray, mime_type: str, quality: int) -> bytes:
        image = ImageConverters.rgba_to_pil(raster)
        if mime_type in OutputConstants.OPAQUE_MIMES:
            image = image.convert("RGB")

        params = {}
        if mime_type in ("image/jpeg", "image/webp", "image/avif"):
            params["quality"] = quality

        buffer = io.BytesIO()
        image.save(buffer, format=OutputConstants.PIL_FORMATS[mime_type], **params)
        return buffer.getvalue()

    def encode(
        self,
        raster: np.ndarray,
        mime_type: Optional[str] = OutputConstants.DEFAULT_MIME,
        quality: float = OutputConstants.DEFAULT_QUALITY,
    ) -> EncodedImage:
        """
        Encode a raster, retrying once as PNG if the requested type fails.

        Args:
            raster: Final RGBA raster
            mime_type: Requested output mime type (normalized here)
            quality: Quality 0.05-1 for lossy formats

        Returns:
            EncodedImage with the mime type actually produced

        Raises:
            EncodeFailure: If neither the requested type nor PNG produced output
        """
        requested = self.normalize_mime(mime_type)
        pil_quality = self.quality_to_pil(quality)
        height, width = raster.shape[:2]

        attempts = [requested]
        if requested != OutputConstants.FALLBACK_MIME:
            attempts.append(OutputConstants.FALLBACK_MIME)

        last_error = None
        for mime in attempts:
            try:
                data = self._encode_as(raster, mime, pil_quality)
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Encoding as {mime} failed: {e}")
                last_error = e
                continue

            if data:
                if mime != requested:
                    logger.info(f"Fell back to {mime} after {requested} produced no output")
                return EncodedImage(data=data, mime_type=mime, width=width, height=height)
            logger.warning(f"Encoding as {mime} produced no output")

        detail = f": {last_error}" if last_error else ""
        raise EncodeFailure(f"Failed to export image{detail}")
