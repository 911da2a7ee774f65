from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel

from faststart_api.services.video_store import Video


class VideoOut(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_video(cls, video: Video) -> "VideoOut":
        return cls(**asdict(video))


class ErrorOut(BaseModel):
    error: str
