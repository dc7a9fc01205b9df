"""
Optional WebP re-encoding policy.

The codec itself lives in infrastructure.imaging; this module only decides
whether to call it and what to hand back. Encoding failures are not raised:
the original bytes come back with `failure` set so the caller can log it.
"""

import mimetypes
from dataclasses import dataclass
from typing import Optional, Protocol

from .models import SVG_MIME_TYPE, WEBP_MIME_TYPE

_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}


def extension_for_mime(mime_type: str) -> str:
    """File extension (without dot) for a MIME type, 'bin' if unknown."""
    if mime_type in _EXTENSIONS:
        return _EXTENSIONS[mime_type]
    guessed = mimetypes.guess_extension(mime_type)
    return guessed.lstrip(".") if guessed else "bin"


def mime_for_key(key: str) -> str:
    """MIME type implied by a key's extension."""
    ext = key.rsplit(".", 1)[-1].lower() if "." in key else ""
    if ext in _MIME_TYPES:
        return _MIME_TYPES[ext]
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "application/octet-stream"


class ImageEncoder(Protocol):
    """
    Interface for the raster codec.

    Implementations raise on undecodable input; the normalizer catches
    whatever they raise.
    """

    def encode(self, data: bytes, quality: int) -> bytes:
        """Re-encode image bytes as WebP at the given quality."""
        ...


@dataclass(frozen=True)
class NormalizedImage:
    """Result of normalization: either re-encoded or the untouched input."""
    data: bytes
    mime_type: str
    extension: str
    was_compressed: bool = False
    failure: Optional[str] = None


class ImageNormalizer:
    """Wraps an ImageEncoder with the passthrough and fallback rules."""

    def __init__(self, encoder: ImageEncoder) -> None:
        self._encoder = encoder

    def normalize(
        self,
        data: bytes,
        mime_type: str,
        compress: bool,
        quality: int = 80,
    ) -> NormalizedImage:
        if (
            not compress
            or not mime_type.startswith("image/")
            or mime_type == SVG_MIME_TYPE
        ):
            return self._passthrough(data, mime_type)

        try:
            encoded = self._encoder.encode(data, quality)
        except Exception as e:
            return self._passthrough(data, mime_type, failure=str(e) or type(e).__name__)

        return NormalizedImage(
            data=encoded,
            mime_type=WEBP_MIME_TYPE,
            extension="webp",
            was_compressed=True,
        )

    @staticmethod
    def _passthrough(
        data: bytes,
        mime_type: str,
        failure: Optional[str] = None,
    ) -> NormalizedImage:
        return NormalizedImage(
            data=data,
            mime_type=mime_type,
            extension=extension_for_mime(mime_type),
            failure=failure,
        )
