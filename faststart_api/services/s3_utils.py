import os
import logging
from urllib.parse import quote
import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from faststart_api.errors import StorageFailure

logger = logging.getLogger(__name__)

_AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

def make_s3_client(region: str | None = None):
    return boto3.client("s3", region_name=region or _AWS_REGION)

def make_s3_key(aspect_ratio: str, filename: str) -> str:
    return f"{aspect_ratio}/{filename}".lstrip("/")

def upload_file(client, bucket: str, local_path: str, key: str, *, content_type: str) -> None:
    extra = {"ContentType": content_type}
    try:
        client.upload_file(local_path, bucket, key, ExtraArgs=extra)
    except (S3UploadFailedError, BotoCoreError, ClientError) as e:
        logger.error("upload of s3://%s/%s failed: %s", bucket, key, e)
        raise StorageFailure(f"Couldn't upload video: {e}")

def public_url(distribution: str, key: str) -> str:
    host = distribution.strip().rstrip("/")
    if "://" in host:
        host = host.split("://", 1)[1]
    return f"https://{host}/{quote(key)}"
