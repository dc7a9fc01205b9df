"""
Upload, listing and deletion of hosted images.

This is the only place that knows the order of an upload: validate,
normalize, name, store. It depends on an ObjectStore protocol rather than
boto3 so tests can run against the in-memory store.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from .models import (
    ALLOWED_MIME_TYPES,
    CACHE_CONTROL,
    ImageInfo,
    ObjectEntry,
    UploadOptions,
    UploadTarget,
    UploadValidationError,
)
from .naming import generate_object_key, replace_extension
from .normalizer import ImageNormalizer, extension_for_mime, mime_for_key

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """
    Interface for S3-compatible object storage.

    The service never checks whether a key exists; put overwrites and
    delete of a missing key succeeds, as with S3.
    """

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        ...

    async def delete_object(self, key: str) -> None:
        ...

    async def list_objects(self, prefix: str = "", max_keys: int = 100) -> list[ObjectEntry]:
        """Return up to max_keys entries in the store's natural order."""
        ...

    async def create_presigned_put(
        self,
        key: str,
        content_type: str,
        expires_in: int = 3600,
    ) -> str:
        ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ImageService:
    """
    Image hosting operations on top of an ObjectStore.

    Stateless apart from its collaborators, so one instance per request
    is fine.
    """

    def __init__(
        self,
        store: ObjectStore,
        normalizer: ImageNormalizer,
        public_url: str,
        max_file_size: int = 10 * 1024 * 1024,
    ) -> None:
        self._store = store
        self._normalizer = normalizer
        self._public_url = public_url.rstrip("/")
        self._max_file_size = max_file_size

    def public_url_for(self, key: str) -> str:
        return f"{self._public_url}/{key}"

    def check_file_size(self, size: int) -> None:
        if size > self._max_file_size:
            raise UploadValidationError(
                f"File size exceeds limit of {self._max_file_size / 1024 / 1024:g}MB"
            )

    async def upload(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> ImageInfo:
        """
        Validate, optionally compress, and store one image.

        Raises UploadValidationError before touching the store if the file
        is too large or of a type outside the allow-list. Store failures
        propagate unchanged.
        """
        options = options or UploadOptions()

        self.check_file_size(len(data))
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadValidationError("Invalid file type. Only images are allowed.")

        normalized = await asyncio.to_thread(
            self._normalizer.normalize,
            data,
            mime_type,
            options.compress_to_webp,
            options.quality,
        )
        if normalized.failure:
            logger.warning(
                "WebP conversion failed, storing original format",
                extra={"upload_filename": filename, "mime_type": mime_type, "error": normalized.failure},
            )

        key = generate_object_key(
            replace_extension(filename, normalized.extension),
            use_random_name=options.use_hash_name,
        )

        await self._store.put_object(
            key,
            normalized.data,
            content_type=normalized.mime_type,
            cache_control=CACHE_CONTROL,
        )

        logger.info(
            "Image uploaded",
            extra={
                "key": key,
                "size_bytes": len(normalized.data),
                "original_size_bytes": len(data),
                "mime_type": normalized.mime_type,
                "compressed": normalized.was_compressed,
            },
        )

        return ImageInfo(
            key=key,
            url=self.public_url_for(key),
            size=len(normalized.data),
            mime_type=normalized.mime_type,
            uploaded_at=datetime.now(timezone.utc),
        )

    async def list_images(
        self,
        limit: int = 50,
        offset: int = 0,
        prefix: str = "",
    ) -> list[ImageInfo]:
        """
        Return the slice [offset, offset + limit) of the store's listing.

        The store has no offset parameter, so everything up to
        offset + limit is fetched and the head is discarded.
        """
        if limit < 1:
            raise UploadValidationError("limit must be at least 1")
        if offset < 0:
            raise UploadValidationError("offset cannot be negative")

        entries = await self._store.list_objects(prefix=prefix, max_keys=offset + limit)

        return [
            ImageInfo(
                key=entry.key,
                url=self.public_url_for(entry.key),
                size=entry.size,
                mime_type=mime_for_key(entry.key),
                uploaded_at=entry.last_modified or datetime.now(timezone.utc),
            )
            for entry in entries[offset:offset + limit]
        ]

    async def delete_image(self, key: str) -> None:
        if not key:
            raise UploadValidationError("No key provided")

        await self._store.delete_object(key)
        logger.info("Image deleted", extra={"key": key})

    async def delete_images(self, keys: Iterable[str]) -> int:
        """
        Delete several keys one at a time.

        A failing key is logged and skipped; the rest are still attempted.
        Returns how many deletes succeeded.
        """
        deleted = 0
        for key in keys:
            try:
                await self.delete_image(key)
            except Exception as e:
                logger.error(
                    "Failed to delete image",
                    extra={"key": key, "error": str(e)},
                )
                continue
            deleted += 1
        return deleted

    async def create_upload_url(
        self,
        filename: str,
        mime_type: str,
        use_hash_name: bool = False,
        expires_in: int = 3600,
    ) -> UploadTarget:
        """
        Reserve a key and presign a PUT for it.

        The bytes go straight from the client to the bucket, so neither the
        size limit nor compression applies here.
        """
        if not filename:
            raise UploadValidationError("No filename provided")
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadValidationError("Invalid file type. Only images are allowed.")

        key = generate_object_key(
            replace_extension(filename, extension_for_mime(mime_type)),
            use_random_name=use_hash_name,
        )
        upload_url = await self._store.create_presigned_put(
            key,
            content_type=mime_type,
            expires_in=expires_in,
        )

        logger.info("Presigned upload URL issued", extra={"key": key, "expires_in": expires_in})

        return UploadTarget(
            key=key,
            upload_url=upload_url,
            url=self.public_url_for(key),
            expires_in=expires_in,
        )
