"""
WebP encoding with Pillow.

Satisfies core.images.normalizer.ImageEncoder. Any decode or encode
problem is raised as ImageEncodingError; the normalizer turns that into a
passthrough of the original bytes.
"""

import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Modes WebP can store directly.
_WEBP_MODES = {"RGB", "RGBA"}


class ImageEncodingError(Exception):
    """Raised when an image cannot be decoded or re-encoded."""
    pass


def _prepare(img: Image.Image) -> Image.Image:
    """Convert palette, greyscale, CMYK etc. to a mode WebP accepts."""
    if img.mode in _WEBP_MODES:
        return img
    has_alpha = (
        img.mode in ("LA", "PA")
        or (img.mode == "P" and "transparency" in img.info)
    )
    return img.convert("RGBA" if has_alpha else "RGB")


class PillowWebPEncoder:
    """Re-encodes raster images as WebP."""

    def encode(self, data: bytes, quality: int) -> bytes:
        try:
            with Image.open(BytesIO(data)) as img:
                buffer = BytesIO()
                if getattr(img, "is_animated", False):
                    # Pillow converts each frame when saving all of them.
                    img.save(buffer, format="WEBP", quality=quality, save_all=True)
                else:
                    _prepare(img).save(buffer, format="WEBP", quality=quality)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageEncodingError(f"WebP conversion failed: {e}") from e

        encoded = buffer.getvalue()
        logger.debug(
            "Encoded image as WebP",
            extra={"input_bytes": len(data), "output_bytes": len(encoded), "quality": quality}
        )
        return encoded
