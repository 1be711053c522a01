"""Media store: product images kept per product, per color variation.

Keys look like ``products/<product_id>/<color-segment>/<ts>-<i>-<name>``.
The local backend writes them under ``MEDIA_ROOT`` and serves them from
``MEDIA_URL_PREFIX``; the s3 backend puts them in ``S3_BUCKET_NAME`` and
serves them from ``S3_PUBLIC_URL``.
"""
import logging
import os
import re
import shutil
import time
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from storefront.errors import InvalidRequest, UploadFailed
from storefront.services import image_service

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    filename: str
    accepted: bool
    path: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self):
        return {
            "filename": self.filename,
            "accepted": self.accepted,
            "path": self.path,
            "reason": self.reason,
        }


def color_segment(color_name):
    """Lowercase and replace every non-alphanumeric character with '-'."""
    return re.sub(r"[^a-z0-9]", "-", color_name.lower())


def safe_filename(filename):
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "upload")


_last_timestamp = 0


def unique_timestamp():
    """Milliseconds since the epoch, strictly increasing within the process."""
    global _last_timestamp
    _last_timestamp = max(int(time.time() * 1000), _last_timestamp + 1)
    return _last_timestamp


def build_storage_key(product_id, color_name, index, filename, timestamp=None):
    if timestamp is None:
        timestamp = unique_timestamp()
    name = f"{timestamp}-{index}-{safe_filename(filename)}"
    return f"products/{product_id}/{color_segment(color_name)}/{name}"


def save_variation_images(product_id, color_name, files):
    """Store a batch of images for one color variation of a product.

    ``files`` is a sequence of werkzeug ``FileStorage`` objects. Files are
    processed in order; rejected files get a result with a reason and do not
    stop the batch. Any storage error aborts the batch with ``UploadFailed``;
    files already written stay in place.

    Returns:
        list of UploadResult, one per input file, in input order
    """
    if not product_id or not color_name:
        raise InvalidRequest("Product ID and color name are required")
    if not files:
        raise InvalidRequest("No files provided")

    max_size = current_app.config["MAX_UPLOAD_BYTES"]
    results = []
    for index, file in enumerate(files):
        filename = file.filename or "upload"
        data = file.read()
        reason = image_service.check_upload(data, file.mimetype, max_size)
        if reason:
            logger.info("Skipping %s for product %s: %s", filename, product_id, reason)
            results.append(UploadResult(filename=filename, accepted=False, reason=reason))
            continue

        storage_key = build_storage_key(product_id, color_name, index, filename)
        try:
            upload(storage_key, data, content_type=file.mimetype)
        except (OSError, BotoCoreError, ClientError) as e:
            logger.exception("Upload of %s failed", storage_key)
            raise UploadFailed(color_name) from e
        results.append(
            UploadResult(filename=filename, accepted=True, path=get_public_url(storage_key))
        )

    return results


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

def _backend():
    return current_app.config["MEDIA_BACKEND"]


def _local_path(storage_key):
    root = os.path.abspath(current_app.config["MEDIA_ROOT"])
    path = os.path.abspath(os.path.join(root, storage_key))
    if not path.startswith(root + os.sep):
        raise InvalidRequest("Invalid storage key")
    return path


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def upload(storage_key, data, content_type="image/jpeg"):
    """Write bytes to the configured backend."""
    if _backend() == "s3":
        client = _get_client()
        client.put_object(
            Bucket=current_app.config["S3_BUCKET_NAME"],
            Key=storage_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
        return

    path = _local_path(storage_key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(data)


def get_public_url(storage_key):
    """Return the web-accessible path for a storage key."""
    if _backend() == "s3":
        base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    else:
        base = current_app.config["MEDIA_URL_PREFIX"].rstrip("/")
    return f"{base}/{storage_key}"


def delete_product_media(product_id):
    """Delete every stored image of a product."""
    prefix = f"products/{product_id}/"
    if _backend() == "s3":
        client = _get_client()
        bucket = current_app.config["S3_BUCKET_NAME"]
        paginator = client.get_paginator("list_objects_v2")
        deleted = 0
        # each page holds at most 1000 keys, the delete_objects batch limit
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            keys = [obj["Key"] for obj in page.get("Contents", [])]
            if keys:
                client.delete_objects(
                    Bucket=bucket,
                    Delete={"Objects": [{"Key": k} for k in keys]},
                )
                deleted += len(keys)
        return deleted

    directory = _local_path(prefix)
    if not os.path.isdir(directory):
        return 0
    count = sum(len(names) for _, _, names in os.walk(directory))
    shutil.rmtree(directory)
    return count
