# services/video_store.py
from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Video:
    id: str
    user_id: str
    title: str = ""
    description: str = ""
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS videos (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    thumbnail_url TEXT,
    video_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class VideoStore:
    """Video metadata in sqlite. Opens a connection per call so it is safe from worker threads."""

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def init_schema(self) -> None:
        with self._connect() as db:
            db.execute(_SCHEMA)

    def create_video(self, user_id: str, title: str = "", description: str = "") -> Video:
        video = Video(id=str(uuid.uuid4()), user_id=str(user_id), title=title, description=description)
        with self._connect() as db:
            db.execute(
                """
                INSERT INTO videos (
                    id, user_id, title, description, thumbnail_url, video_url, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (video.id, video.user_id, video.title, video.description,
                 video.thumbnail_url, video.video_url, video.created_at, video.updated_at),
            )
        return video

    def get_video(self, video_id: str) -> Video | None:
        with self._connect() as db:
            row = db.execute("SELECT * FROM videos WHERE id = ? LIMIT 1", (video_id,)).fetchone()
        if row is None:
            return None
        return Video(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            thumbnail_url=row["thumbnail_url"],
            video_url=row["video_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def update_video(self, video: Video) -> None:
        # last writer wins; there is no row locking between concurrent uploads
        video.updated_at = _now()
        with self._connect() as db:
            db.execute(
                """
                UPDATE videos
                SET title = ?, description = ?, thumbnail_url = ?, video_url = ?, updated_at = ?
                WHERE id = ?
                """,
                (video.title, video.description, video.thumbnail_url,
                 video.video_url, video.updated_at, video.id),
            )
