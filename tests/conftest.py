import os

import pytest
from fastapi.testclient import TestClient

from faststart_api.config import ApiConfig, get_config
from faststart_api.errors import ProcessFailure
from faststart_api.main import app
from faststart_api.services.auth import make_jwt
from faststart_api.services.ffmpeg_service import processed_path_for
from faststart_api.services.video_store import VideoStore

JWT_SECRET = "test-secret"
DISTRIBUTION = "d111111abcdef8.cloudfront.net"
BUCKET = "test-bucket"


class FakeMedia:
    """Stands in for ffprobe/ffmpeg; remux copies the staged bytes."""

    def __init__(self, width=1920, height=1080, fail_probe=False, fail_remux=False):
        self.width = width
        self.height = height
        self.fail_probe = fail_probe
        self.fail_remux = fail_remux
        self.probed = []
        self.remuxed = []

    def probe(self, path):
        assert os.path.exists(path)
        self.probed.append(path)
        if self.fail_probe:
            raise ProcessFailure("Error in reading stream")
        return self.width, self.height

    def remux(self, path):
        self.remuxed.append(path)
        out_path = processed_path_for(path)
        with open(path, "rb") as src, open(out_path, "wb") as dst:
            dst.write(src.read())
        if self.fail_remux:
            raise ProcessFailure("Error in encoding video: moov atom not found")
        return out_path


class FakeS3:
    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    def upload_file(self, local_path, bucket, key, ExtraArgs=None):
        if self.error is not None:
            raise self.error
        with open(local_path, "rb") as f:
            body = f.read()
        self.uploads.append({"path": local_path, "bucket": bucket, "key": key,
                             "extra": ExtraArgs, "body": body})


@pytest.fixture
def store(tmp_path):
    db = VideoStore(tmp_path / "videos.db")
    db.init_schema()
    return db


@pytest.fixture
def staging_dir(tmp_path):
    d = tmp_path / "staging"
    d.mkdir()
    return d


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def cfg(store, staging_dir, media, s3):
    return ApiConfig(
        db=store,
        jwt_secret=JWT_SECRET,
        s3_client=s3,
        s3_bucket=BUCKET,
        s3_cf_distribution=DISTRIBUTION,
        media=media,
        tmp_dir=str(staging_dir),
    )


@pytest.fixture
def client(cfg):
    app.dependency_overrides[get_config] = lambda: cfg
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_header(user_id, secret=JWT_SECRET, expires_in=3600):
    return {"Authorization": f"Bearer {make_jwt(user_id, secret, expires_in)}"}
