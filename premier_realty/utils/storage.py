"""
Object storage client
The hosted platform exposes its buckets over the S3 protocol; images are public-read
"""

import logging
import secrets
import time
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import (
    STORAGE_ACCESS_KEY_ID,
    STORAGE_BUCKET_NAME,
    STORAGE_ENDPOINT_URL,
    STORAGE_PUBLIC_URL,
    STORAGE_REGION,
    STORAGE_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/avif": "avif",
    "image/svg+xml": "svg",
}

# Folders the admin uploaders write to
IMAGE_FOLDERS = ("blog", "properties", "floor-plans", "hero", "content", "uploads")

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB


class StorageError(Exception):
    """Raised when the storage backend rejects an operation"""


def get_storage_client():
    """Create and return an S3 client for the platform storage endpoint."""
    if not STORAGE_ENDPOINT_URL:
        raise StorageError("Storage endpoint not configured")
    return boto3.client(
        "s3",
        endpoint_url=STORAGE_ENDPOINT_URL,
        aws_access_key_id=STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=STORAGE_SECRET_ACCESS_KEY,
        region_name=STORAGE_REGION,
        config=Config(signature_version="s3v4"),
    )


def build_object_key(folder: str, extension: str) -> str:
    """{folder}/{epoch millis}-{random}.{ext}"""
    return f"{folder}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"


def public_url(key: str) -> str:
    return f"{STORAGE_PUBLIC_URL.rstrip('/')}/{key}"


def upload_image(contents: bytes, content_type: str, folder: str) -> dict:
    """Store an image and return its key and public URL"""
    key = build_object_key(folder, ALLOWED_IMAGE_TYPES[content_type])
    try:
        get_storage_client().put_object(
            Bucket=STORAGE_BUCKET_NAME,
            Key=key,
            Body=contents,
            ContentType=content_type,
            CacheControl="public, max-age=3600",
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to upload {key}: {e}")
        raise StorageError(f"Upload failed: {str(e)}") from e

    logger.info(f"✅ Uploaded image: {key} ({len(contents)} bytes)")
    return {"key": key, "url": public_url(key)}


def list_images(folder: Optional[str] = None, limit: int = 100) -> list[dict]:
    """Images in a folder, newest first"""
    params = {"Bucket": STORAGE_BUCKET_NAME, "MaxKeys": limit}
    if folder:
        params["Prefix"] = f"{folder}/"
    try:
        response = get_storage_client().list_objects_v2(**params)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to list images in {folder or 'bucket'}: {e}")
        raise StorageError(f"List failed: {str(e)}") from e

    objects = sorted(response.get("Contents", []), key=lambda obj: obj["LastModified"], reverse=True)
    return [
        {
            "key": obj["Key"],
            "url": public_url(obj["Key"]),
            "size": obj.get("Size", 0),
            "lastModified": obj["LastModified"].isoformat(),
        }
        for obj in objects
    ]


def delete_image(key: str) -> None:
    try:
        get_storage_client().delete_object(Bucket=STORAGE_BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to delete {key}: {e}")
        raise StorageError(f"Delete failed: {str(e)}") from e
    logger.info(f"🗑️ Deleted image: {key}")
