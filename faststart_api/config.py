# config.py
import os, tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from faststart_api.services.ffmpeg_service import FFmpegMediaTool, MediaTool
from faststart_api.services.s3_utils import make_s3_client
from faststart_api.services.video_store import VideoStore


@dataclass
class ApiConfig:
    db: VideoStore
    jwt_secret: str
    s3_client: Any
    s3_bucket: str
    s3_cf_distribution: str
    media: MediaTool
    tmp_dir: str


def _required(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise RuntimeError(f"{name} environment variable is not set")
    return value

def _optional_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else None


def load_config() -> ApiConfig:
    db = VideoStore(os.getenv("DB_PATH", "./faststart.db"))
    db.init_schema()

    tmp_dir = os.getenv("UPLOAD_TMP_DIR", "").strip() or tempfile.gettempdir()
    os.makedirs(tmp_dir, exist_ok=True)

    return ApiConfig(
        db=db,
        jwt_secret=_required("JWT_SECRET"),
        s3_client=make_s3_client(os.getenv("AWS_REGION")),
        s3_bucket=_required("S3_BUCKET"),
        s3_cf_distribution=_required("S3_CF_DISTRIBUTION"),
        media=FFmpegMediaTool(
            timeout=_optional_float("FFMPEG_TIMEOUT"),
            max_concurrency=int(os.getenv("FFMPEG_MAX_CONCURRENCY", "4")),
        ),
        tmp_dir=tmp_dir,
    )


@lru_cache()
def get_config() -> ApiConfig:
    return load_config()
