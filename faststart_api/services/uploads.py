# services/uploads.py
import os, logging, secrets
from typing import List

from starlette.datastructures import UploadFile

from faststart_api.errors import BadRequestError

logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE = 1 << 30  # 1 GiB
ALLOWED_MEDIA_TYPE = "video/mp4"
CHUNK_SIZE = 1024 * 1024  # 1MB


def media_type_to_ext(media_type: str) -> str:
    parts = media_type.split("/")
    if len(parts) != 2:
        return ".bin"
    return f".{parts[1]}"

def random_filename(media_type: str) -> str:
    return f"{secrets.token_hex(32)}{media_type_to_ext(media_type)}"


def validate_upload(file: object) -> str:
    """Check presence, size and declared type. Returns the media type."""
    if not isinstance(file, UploadFile):
        raise BadRequestError("Video file missing")
    if file.size is not None and file.size > MAX_UPLOAD_SIZE:
        raise BadRequestError("Video file exceeds the maximum allowed size of 1GB")
    media_type = (file.content_type or "").strip()
    if not media_type:
        raise BadRequestError("Missing Content-Type for video")
    if media_type != ALLOWED_MEDIA_TYPE:
        raise BadRequestError("Invalid file type")
    return media_type


async def stage_upload(file: UploadFile, dest: str) -> int:
    """Stream the upload to dest (no big read() in RAM). Returns bytes written."""
    size = 0
    try:
        with open(dest, "wb") as out:
            while chunk := await file.read(CHUNK_SIZE):
                size += len(chunk)
                if size > MAX_UPLOAD_SIZE:
                    raise BadRequestError("Video file exceeds the maximum allowed size of 1GB")
                out.write(chunk)
    except BaseException:
        _remove(dest)
        raise
    return size


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("couldn't remove temp file %s: %s", path, e)


class TempArtifacts:
    """
    Tracks the request's temp files and deletes them on exit, success or not.
    Deletion is best effort: failures are logged, never raised.
    """

    def __init__(self):
        self.paths: List[str] = []

    def add(self, path: str) -> str:
        self.paths.append(path)
        return path

    def cleanup(self) -> None:
        for path in self.paths:
            _remove(path)
        self.paths.clear()

    def __enter__(self) -> "TempArtifacts":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
