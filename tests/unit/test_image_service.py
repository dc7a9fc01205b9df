"""
Unit tests for ImageService against the in-memory store.

No network, no bucket: MockStorageClient records exactly what would have
been written, which is what the size and type guarantees are about.
"""

import re
from datetime import datetime, timezone

import pytest

from src.core.images.models import CACHE_CONTROL, ObjectEntry, UploadOptions, UploadValidationError
from src.core.images.normalizer import ImageNormalizer
from src.core.images.service import ImageService
from src.infrastructure.imaging.encoder import ImageEncodingError
from src.infrastructure.storage.client import MockStorageClient, StorageError


class FakeEncoder:
    def encode(self, data: bytes, quality: int) -> bytes:
        return b"RIFF....WEBP"


class BrokenEncoder:
    def encode(self, data: bytes, quality: int) -> bytes:
        raise ImageEncodingError("truncated file")


class FlakyDeleteStore(MockStorageClient):
    """Fails deletes for one particular key."""

    def __init__(self, bad_key: str) -> None:
        super().__init__()
        self.bad_key = bad_key
        self.attempted: list[str] = []

    async def delete_object(self, key: str) -> None:
        self.attempted.append(key)
        if key == self.bad_key:
            raise StorageError("AccessDenied")
        await super().delete_object(key)


def make_service(store, encoder=None, max_file_size=1024) -> ImageService:
    return ImageService(
        store=store,
        normalizer=ImageNormalizer(encoder or FakeEncoder()),
        public_url="https://cdn.example.com/",
        max_file_size=max_file_size,
    )


async def fill(store: MockStorageClient, keys: list[str]) -> None:
    for key in keys:
        await store.put_object(key, b"x" * 10, content_type="image/png")


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

class TestUploadValidation:
    """Rejected uploads must never reach the store."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1025, 2048, 10_000])
    async def test_oversized_file_is_rejected(self, size):
        """Anything over max_file_size is refused."""
        store = MockStorageClient()
        service = make_service(store, max_file_size=1024)

        with pytest.raises(UploadValidationError, match="File size exceeds"):
            await service.upload(b"x" * size, "big.png", "image/png")

        assert store.objects == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mime", ["text/plain", "image/bmp", "image/tiff", "application/pdf", ""])
    async def test_type_outside_allow_list_is_rejected(self, mime):
        """Only the five image types are accepted."""
        store = MockStorageClient()
        service = make_service(store)

        with pytest.raises(UploadValidationError, match="Invalid file type"):
            await service.upload(b"data", "file.bin", mime)

        assert store.objects == {}

    def test_quality_out_of_range_is_rejected(self):
        """Quality must be between 1 and 100."""
        with pytest.raises(UploadValidationError, match="Quality"):
            UploadOptions(quality=0)
        with pytest.raises(UploadValidationError, match="Quality"):
            UploadOptions(quality=101)


class TestUpload:
    """Tests for successful uploads."""

    @pytest.mark.asyncio
    async def test_uncompressed_upload_stores_original_bytes(self):
        """Without compression the bytes are stored as given."""
        store = MockStorageClient()
        service = make_service(store)

        info = await service.upload(b"\x89PNGdata", "my photo.png", "image/png")

        assert re.fullmatch(r"\d+_my_photo\.png", info.key)
        assert info.url == f"https://cdn.example.com/{info.key}"
        assert info.size == len(b"\x89PNGdata")
        assert info.mime_type == "image/png"
        assert info.uploaded_at.tzinfo is not None

        blob = store.objects[info.key]
        assert blob.data == b"\x89PNGdata"
        assert blob.content_type == "image/png"
        assert blob.cache_control == CACHE_CONTROL

    @pytest.mark.asyncio
    async def test_compressed_upload_changes_extension_and_type(self):
        """Compression switches the key and type to WebP."""
        store = MockStorageClient()
        service = make_service(store)

        info = await service.upload(
            b"jpegbytes", "holiday.jpg", "image/jpeg",
            UploadOptions(compress_to_webp=True, quality=70),
        )

        assert info.key.endswith("_holiday.webp")
        assert info.mime_type == "image/webp"
        assert store.objects[info.key].data == b"RIFF....WEBP"

    @pytest.mark.asyncio
    async def test_hash_name_uses_final_extension(self):
        """Random names take the post-compression extension."""
        store = MockStorageClient()
        service = make_service(store)

        info = await service.upload(
            b"gif", "anim.gif", "image/gif",
            UploadOptions(use_hash_name=True, compress_to_webp=True),
        )

        assert re.fullmatch(r"[0-9a-f]{32}\.webp", info.key)

    @pytest.mark.asyncio
    async def test_encoding_failure_still_uploads_original(self, caplog):
        """A failed conversion falls back to the original."""
        store = MockStorageClient()
        service = make_service(store, encoder=BrokenEncoder())

        info = await service.upload(
            b"broken", "x.png", "image/png", UploadOptions(compress_to_webp=True),
        )

        assert info.mime_type == "image/png"
        assert store.objects[info.key].data == b"broken"
        assert "WebP conversion failed" in caplog.text

    @pytest.mark.asyncio
    async def test_svg_upload_ignores_compression(self):
        """SVG is stored as-is even with compression on."""
        store = MockStorageClient()
        service = make_service(store)
        svg = b"<svg/>"

        info = await service.upload(svg, "logo.svg", "image/svg+xml", UploadOptions(compress_to_webp=True))

        assert info.key.endswith("_logo.svg")
        assert store.objects[info.key].data == svg


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListing:
    """Tests for offset/limit listing."""

    @pytest.mark.asyncio
    async def test_first_page_is_prefix_of_store_order(self):
        """The first page is the head of store order."""
        store = MockStorageClient()
        await fill(store, ["e.png", "a.png", "c.png", "b.png", "d.png"])
        service = make_service(store)

        images = await service.list_images(limit=2, offset=0)

        assert [i.key for i in images] == ["a.png", "b.png"]

    @pytest.mark.asyncio
    async def test_offset_skips_head(self):
        """Offset skips that many entries."""
        store = MockStorageClient()
        await fill(store, ["a.png", "b.png", "c.png", "d.png", "e.png"])
        service = make_service(store)

        images = await service.list_images(limit=2, offset=3)

        assert [i.key for i in images] == ["d.png", "e.png"]

    @pytest.mark.asyncio
    async def test_offset_past_end_is_empty(self):
        """An offset past the end gives an empty page."""
        store = MockStorageClient()
        await fill(store, ["a.png"])
        service = make_service(store)

        assert await service.list_images(limit=10, offset=5) == []

    @pytest.mark.asyncio
    async def test_entries_become_image_info(self):
        """Store entries gain URL and MIME type."""
        modified = datetime(2024, 5, 1, tzinfo=timezone.utc)

        class StaticStore(MockStorageClient):
            async def list_objects(self, prefix="", max_keys=100):
                return [ObjectEntry(key="1_cat.jpg", size=123, last_modified=modified)]

        service = make_service(StaticStore())

        [image] = await service.list_images()

        assert image.url == "https://cdn.example.com/1_cat.jpg"
        assert image.size == 123
        assert image.mime_type == "image/jpeg"
        assert image.uploaded_at == modified

    @pytest.mark.asyncio
    async def test_prefix_filters(self):
        """Only keys under the prefix are listed."""
        store = MockStorageClient()
        await fill(store, ["2024/a.png", "2025/b.png"])
        service = make_service(store)

        images = await service.list_images(prefix="2025/")

        assert [i.key for i in images] == ["2025/b.png"]

    @pytest.mark.asyncio
    async def test_invalid_paging_is_rejected(self):
        """Zero limit and negative offset are refused."""
        service = make_service(MockStorageClient())

        with pytest.raises(UploadValidationError):
            await service.list_images(limit=0)
        with pytest.raises(UploadValidationError):
            await service.list_images(offset=-1)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------

class TestDeletion:
    """Tests for single and batch deletion."""

    @pytest.mark.asyncio
    async def test_delete_removes_object(self):
        """Deleting a key removes it from the store."""
        store = MockStorageClient()
        await fill(store, ["a.png"])
        service = make_service(store)

        await service.delete_image("a.png")

        assert store.objects == {}

    @pytest.mark.asyncio
    async def test_deleting_missing_key_does_not_raise(self):
        """Deleting an absent key is a no-op."""
        service = make_service(MockStorageClient())

        await service.delete_image("never-existed.png")

    @pytest.mark.asyncio
    async def test_empty_key_is_rejected(self):
        """An empty key is a validation error."""
        with pytest.raises(UploadValidationError, match="No key"):
            await make_service(MockStorageClient()).delete_image("")

    @pytest.mark.asyncio
    async def test_batch_delete_continues_past_failures(self):
        """One failing key does not stop the batch."""
        store = FlakyDeleteStore(bad_key="b.png")
        await fill(store, ["a.png", "b.png", "c.png"])
        service = make_service(store)

        deleted = await service.delete_images(["a.png", "b.png", "c.png"])

        assert deleted == 2
        assert store.attempted == ["a.png", "b.png", "c.png"]
        assert list(store.objects) == ["b.png"]


# ---------------------------------------------------------------------------
# Presigned uploads
# ---------------------------------------------------------------------------

class TestPresignedUpload:
    """Tests for presigned upload targets."""

    @pytest.mark.asyncio
    async def test_returns_upload_and_public_urls(self):
        """The target carries both URLs and the expiry."""
        service = make_service(MockStorageClient())

        target = await service.create_upload_url("shot.JPG", "image/jpeg", expires_in=600)

        assert target.key.endswith("_shot.jpeg")
        assert target.upload_url.startswith("mock://storage/")
        assert target.url == f"https://cdn.example.com/{target.key}"
        assert target.expires_in == 600

    @pytest.mark.asyncio
    async def test_rejects_disallowed_type(self):
        """Presigning checks the allow-list too."""
        service = make_service(MockStorageClient())

        with pytest.raises(UploadValidationError):
            await service.create_upload_url("notes.txt", "text/plain")
