# utils/s3_utils.py
import boto3
import uuid
import logging
from io import BytesIO
from django.conf import settings

logger = logging.getLogger(__name__)


def _client():
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_S3_REGION_NAME,
    )


def public_url(key):
    return (
        f"https://{settings.AWS_STORAGE_BUCKET_NAME}"
        f".s3.{settings.AWS_S3_REGION_NAME}.amazonaws.com/{key}"
    )


def upload_to_s3(file_obj, prefix="uploads/"):
    """
    Uploads a file-like object or raw bytes to AWS S3.

    Returns a dict with ``key``, ``url``, ``mime_type``, ``file_name`` and
    ``size_bytes`` so the caller can persist a FileBlob row.

    Supports:
    - Django UploadedFile
    - BytesIO
    - raw bytes
    """

    if not file_obj:
        raise ValueError("No file object provided for upload.")

    s3 = _client()

    # -------------------------
    # Normalize input
    # -------------------------
    content_type = "application/octet-stream"
    name = "file"

    # Case 1: raw bytes
    if isinstance(file_obj, (bytes, bytearray)):
        file_obj = BytesIO(file_obj)

    # Case 2: Django UploadedFile
    if getattr(file_obj, "content_type", None):
        content_type = file_obj.content_type

    if getattr(file_obj, "name", None):
        name = file_obj.name

    size = getattr(file_obj, "size", None)
    if size is None and isinstance(file_obj, BytesIO):
        size = file_obj.getbuffer().nbytes

    # Ensure file pointer is at start
    if hasattr(file_obj, "seek"):
        file_obj.seek(0)

    if not hasattr(file_obj, "read"):
        raise ValueError("File object must implement read()")

    key = f"{prefix}{uuid.uuid4()}_{name}"

    # -------------------------
    # Upload
    # -------------------------
    s3.upload_fileobj(
        file_obj,
        settings.AWS_STORAGE_BUCKET_NAME,
        key,
        ExtraArgs={"ContentType": content_type},
    )
    logger.info(f"Uploaded {name} to s3://{settings.AWS_STORAGE_BUCKET_NAME}/{key}")

    return {
        "key": key,
        "url": public_url(key),
        "mime_type": content_type,
        "file_name": name,
        "size_bytes": size or 0,
    }


def delete_from_s3(key):
    """
    Best-effort removal of an object. Returns True when S3 accepted the delete.
    """
    try:
        _client().delete_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=key)
        return True
    except Exception as e:
        logger.warning(f"S3 delete failed for {key}: {e}")
        return False
