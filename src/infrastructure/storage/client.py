"""
Object storage client for hosted images.

Supports Cloudflare R2 (S3-compatible) with mock mode for local development.
Both clients satisfy core.images.service.ObjectStore.

Mock mode stores objects in memory, enabling API testing without
provisioning a bucket.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ...core.images.models import ObjectEntry
from ...core.images.service import ObjectStore

logger = logging.getLogger(__name__)

# ListObjectsV2 never returns more than this many keys per call.
MAX_KEYS_PER_PAGE = 1000


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for R2/S3-compatible storage.

    Constructed explicitly from settings at startup and handed to the
    client; nothing reads credentials from the environment directly.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "auto"  # R2 uses 'auto' for region


class R2StorageClient:
    """
    Cloudflare R2 object storage client.

    Uses boto3 because R2 is S3-compatible. boto3 is synchronous, so each
    call runs in a worker thread to keep the event loop free.
    """

    def __init__(self, config: StorageConfig) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for R2 storage. Install with: pip install boto3"
            )

        self._config = config

        # R2 requires v4 signatures and path-style addressing
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized R2 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        params = {
            'Bucket': self._config.bucket_name,
            'Key': key,
            'Body': data,
            'ContentType': content_type,
        }
        if cache_control:
            params['CacheControl'] = cache_control

        try:
            await asyncio.to_thread(self._s3_client.put_object, **params)
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(str(e)) from e

        logger.debug(
            "Uploaded object",
            extra={"key": key, "size_bytes": len(data), "content_type": content_type}
        )

    async def delete_object(self, key: str) -> None:
        """Delete one key. S3 reports success for keys that don't exist."""
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(str(e)) from e

    async def list_objects(self, prefix: str = "", max_keys: int = 100) -> list[ObjectEntry]:
        """
        List up to max_keys objects in key order.

        Follows continuation tokens, so results are not capped at a single
        page of 1000.
        """
        entries: list[ObjectEntry] = []
        token: Optional[str] = None

        try:
            while len(entries) < max_keys:
                params = {
                    'Bucket': self._config.bucket_name,
                    'Prefix': prefix,
                    'MaxKeys': min(max_keys - len(entries), MAX_KEYS_PER_PAGE),
                }
                if token:
                    params['ContinuationToken'] = token

                response = await asyncio.to_thread(self._s3_client.list_objects_v2, **params)

                for obj in response.get('Contents', []):
                    entries.append(ObjectEntry(
                        key=obj['Key'],
                        size=obj.get('Size', 0),
                        last_modified=obj.get('LastModified'),
                    ))

                if not response.get('IsTruncated'):
                    break
                token = response.get('NextContinuationToken')
                if not token:
                    break
        except Exception as e:
            logger.error(
                "Failed to list objects",
                extra={"prefix": prefix, "error": str(e)}
            )
            raise StorageError(str(e)) from e

        return entries[:max_keys]

    async def create_presigned_put(
        self,
        key: str,
        content_type: str,
        expires_in: int = 3600,
    ) -> str:
        """Presigned URL that lets a client PUT the object directly."""
        try:
            return self._s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                },
                ExpiresIn=expires_in,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass
class StoredBlob:
    data: bytes
    content_type: str
    cache_control: Optional[str] = None
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MockStorageClient:
    """
    In-memory storage for local development.

    Behaves like a bucket for the operations the app uses: listings come
    back in key order and deleting a missing key is not an error.
    Not suitable for production.
    """

    def __init__(self) -> None:
        self.objects: dict[str, StoredBlob] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None,
    ) -> None:
        self.objects[key] = StoredBlob(
            data=data,
            content_type=content_type,
            cache_control=cache_control,
        )
        logger.debug(
            "Stored object in mock storage",
            extra={"key": key, "size_bytes": len(data)}
        )

    async def delete_object(self, key: str) -> None:
        self.objects.pop(key, None)

    async def list_objects(self, prefix: str = "", max_keys: int = 100) -> list[ObjectEntry]:
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        return [
            ObjectEntry(
                key=key,
                size=len(self.objects[key].data),
                last_modified=self.objects[key].last_modified,
            )
            for key in keys[:max_keys]
        ]

    async def create_presigned_put(
        self,
        key: str,
        content_type: str,
        expires_in: int = 3600,
    ) -> str:
        return f"mock://storage/{key}?expires={expires_in}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        ObjectStore implementation (R2 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2StorageClient(config)
